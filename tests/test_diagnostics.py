"""Tests for the diagnostics module."""
from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from neodojo.constants import Severity
from neodojo.diagnostics import (
    Diagnostic,
    DiagnosticRun,
    DiagnosticSet,
    extract_run,
    parse_severity,
)
from neodojo.errors import DuplicateArtifact, UnresolvedArtifact
from neodojo.locations import Region, RegionDescriptor
from neodojo.sarif import ArtifactRef, SarifArtifact, SarifReport, SarifResult, SarifRun

_TEXT: str = "line1\nline22\nline333\n"


def _artifact(uri: str = "main.c", base_id: str | None = "SRC", text: str = _TEXT) -> SarifArtifact:
    return SarifArtifact(ref=ArtifactRef(uri=uri, base_id=base_id), text=text)


def _result(
    *,
    level: str | None = "error",
    message: str = "test message",
    uri: str = "main.c",
    base_id: str | None = "SRC",
    region: RegionDescriptor | None = None,
) -> SarifResult:
    return SarifResult(
        message=message,
        level=level,
        artifact=ArtifactRef(uri=uri, base_id=base_id),
        region=region if region is not None else RegionDescriptor(start_line=2),
    )


class TestDiagnostic:
    def test_defaults_to_no_location(self) -> None:
        diag = Diagnostic(severity=Severity.NOTE, message="m")
        assert diag.file_id is None
        assert diag.region.is_empty

    def test_frozen(self) -> None:
        diag = Diagnostic(severity=Severity.ERROR, message="m")
        with pytest.raises(FrozenInstanceError):
            diag.message = "changed"  # type: ignore[misc]


class TestParseSeverity:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (None, Severity.ERROR),
            ("error", Severity.ERROR),
            ("warning", Severity.WARNING),
            ("note", Severity.NOTE),
            ("none", Severity.NOTE),
            ("fatal", Severity.NOTE),
        ],
    )
    def test_mapping(self, level: str | None, expected: Severity) -> None:
        assert parse_severity(level) == expected


class TestDiagnosticRun:
    def test_register_assigns_run_scoped_ids(self) -> None:
        run = DiagnosticRun()
        first = run.register(name="a.c", base_id="SRC", content="")
        second = run.register(name="b.c", base_id="SRC", content="")
        assert (first.id, second.id) == (0, 1)

    def test_same_name_in_different_scopes(self) -> None:
        run = DiagnosticRun()
        run.register(name="a.c", base_id="SRC", content="")
        run.register(name="a.c", base_id="BUILD", content="")
        assert len(run.files) == 2

    def test_duplicate_key_rejected(self) -> None:
        run = DiagnosticRun()
        run.register(name="a.c", base_id="SRC", content="x")
        with pytest.raises(DuplicateArtifact):
            run.register(name="a.c", base_id="SRC", content="y")

    def test_lookup_unknown(self) -> None:
        with pytest.raises(UnresolvedArtifact):
            DiagnosticRun().lookup(ref=ArtifactRef(uri="missing.c"))

    def test_sorted_by_severity_then_insertion(self) -> None:
        run = DiagnosticRun()
        run.add(diagnostic=Diagnostic(severity=Severity.ERROR, message="e1"))
        run.add(diagnostic=Diagnostic(severity=Severity.NOTE, message="n1"))
        run.add(diagnostic=Diagnostic(severity=Severity.ERROR, message="e2"))
        run.add(diagnostic=Diagnostic(severity=Severity.WARNING, message="w1"))
        run.add(diagnostic=Diagnostic(severity=Severity.NOTE, message="n2"))
        assert [d.message for d in run.sorted] == ["n1", "n2", "w1", "e1", "e2"]


class TestExtractRun:
    def test_locates_finding(self) -> None:
        run: DiagnosticRun = extract_run(
            SarifRun(artifacts=(_artifact(),), results=(_result(),))
        )
        assert len(run) == 1
        diag = run.diagnostics[0]
        assert diag.severity == Severity.ERROR
        assert diag.file_id == 0
        assert diag.region == Region(start=6, end=12)

    def test_missing_level_is_error(self) -> None:
        run = extract_run(SarifRun(artifacts=(_artifact(),), results=(_result(level=None),)))
        assert run.diagnostics[0].severity == Severity.ERROR

    def test_bad_location_degrades(self) -> None:
        run = extract_run(
            SarifRun(
                artifacts=(_artifact(),),
                results=(_result(region=RegionDescriptor(start_line=99)),),
            )
        )
        assert run.diagnostics[0].region.is_empty

    def test_finding_without_artifact(self) -> None:
        run = extract_run(
            SarifRun(artifacts=(), results=(SarifResult(message="ld failed"),))
        )
        assert run.diagnostics[0].file_id is None

    def test_unresolved_artifact(self) -> None:
        with pytest.raises(UnresolvedArtifact):
            extract_run(SarifRun(artifacts=(_artifact(),), results=(_result(uri="other.c"),)))

    def test_scope_is_part_of_the_key(self) -> None:
        with pytest.raises(UnresolvedArtifact):
            extract_run(SarifRun(artifacts=(_artifact(),), results=(_result(base_id="BUILD"),)))

    def test_duplicate_artifact(self) -> None:
        with pytest.raises(DuplicateArtifact):
            extract_run(SarifRun(artifacts=(_artifact(), _artifact(text="other"))))


class TestDiagnosticSet:
    def test_from_report_skips_only_bad_run(self) -> None:
        good = SarifRun(artifacts=(_artifact(),), results=(_result(),))
        bad = SarifRun(artifacts=(_artifact(),), results=(_result(uri="nope.c"),))
        diagnostics = DiagnosticSet.from_report(SarifReport(runs=(bad, good)))
        assert len(diagnostics.runs) == 1
        assert diagnostics.skipped_runs == 1
        assert len(diagnostics) == 1

    def test_registries_are_per_run(self) -> None:
        # Each run registers the same artifact key without colliding.
        run = SarifRun(artifacts=(_artifact(),), results=(_result(),))
        diagnostics = DiagnosticSet.from_report(SarifReport(runs=(run, run)))
        assert len(diagnostics.runs) == 2
        assert diagnostics.skipped_runs == 0

    def test_merge_appends_without_dedup(self) -> None:
        run = SarifRun(artifacts=(_artifact(),), results=(_result(),))
        first = DiagnosticSet.from_report(SarifReport(runs=(run,)))
        second = DiagnosticSet.from_report(SarifReport(runs=(run,)))
        first.merge(second)
        assert len(first.runs) == 2
        first += second
        assert len(first.runs) == 3

    def test_has_errors(self) -> None:
        run = SarifRun(
            artifacts=(_artifact(),),
            results=(_result(level="warning"), _result(level="error")),
        )
        diagnostics = DiagnosticSet.from_report(SarifReport(runs=(run,)))
        assert diagnostics.has_errors is True
        assert diagnostics.error_count == 1
        assert diagnostics.warning_count == 1

    def test_no_errors(self) -> None:
        run = SarifRun(
            artifacts=(_artifact(),),
            results=(_result(level="warning"), _result(level="note")),
        )
        diagnostics = DiagnosticSet.from_report(SarifReport(runs=(run,)))
        assert diagnostics.has_errors is False
        assert diagnostics.note_count == 1

    def test_add_run(self) -> None:
        run = extract_run(SarifRun(artifacts=(_artifact(),), results=(_result(),)))
        diagnostics = DiagnosticSet()
        diagnostics.add(run=run)
        assert diagnostics.runs == (run,)
        assert diagnostics.error_count == 1

    def test_empty(self) -> None:
        diagnostics = DiagnosticSet()
        assert len(diagnostics) == 0
        assert diagnostics.has_errors is False
        assert list(diagnostics) == []
