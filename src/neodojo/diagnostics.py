"""Diagnostic data model and SARIF extraction for neodojo."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from neodojo.constants import Severity
from neodojo.errors import DuplicateArtifact, UnresolvedArtifact
from neodojo.locations import Region, SourceFile, region_from_descriptor
from neodojo.sarif import ArtifactRef, SarifReport, SarifResult, SarifRun

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single compiler finding. ``file_id`` is only valid in its run."""

    severity: Severity
    message: str
    file_id: int | None = None
    region: Region = field(default_factory=Region)


@dataclass(slots=True)
class DiagnosticRun:
    """One analysis pass: its artifacts and the diagnostics referring to them."""

    _files: list[SourceFile] = field(default_factory=list)
    _keys: dict[tuple[str | None, str], int] = field(default_factory=dict)
    _diagnostics: list[Diagnostic] = field(default_factory=list)

    def register(self, *, name: str, base_id: str | None, content: str) -> SourceFile:
        """Register an artifact; each (base_id, name) key may appear once."""
        key: tuple[str | None, str] = (base_id, name)
        if key in self._keys:
            raise DuplicateArtifact(base_id=base_id, name=name)
        source = SourceFile(
            id=len(self._files), name=name, base_id=base_id, content=content,
        )
        self._files.append(source)
        self._keys[key] = source.id
        return source

    def lookup(self, *, ref: ArtifactRef) -> SourceFile:
        file_id: int | None = self._keys.get(ref.key)
        if file_id is None:
            raise UnresolvedArtifact(base_id=ref.base_id, name=ref.uri)
        return self._files[file_id]

    def file(self, file_id: int) -> SourceFile:
        return self._files[file_id]

    def add(self, *, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    @property
    def files(self) -> tuple[SourceFile, ...]:
        return tuple(self._files)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    @property
    def sorted(self) -> list[Diagnostic]:
        """Diagnostics by ascending severity, insertion order among equals."""
        return sorted(self._diagnostics, key=lambda d: d.severity.rank)

    def __len__(self) -> int:
        return len(self._diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._diagnostics)


@dataclass(slots=True)
class DiagnosticSet:
    """All runs collected so far, in arrival order."""

    _runs: list[DiagnosticRun] = field(default_factory=list)
    skipped_runs: int = 0

    @classmethod
    def from_report(cls, report: SarifReport) -> DiagnosticSet:
        """Extract every run; a run that cannot be extracted is skipped."""
        result = cls()
        for idx, run in enumerate(report.runs):
            try:
                result.add(run=extract_run(run))
            except (UnresolvedArtifact, DuplicateArtifact) as e:
                logger.warning("Skipping run %d: %s", idx, e)
                result.skipped_runs += 1
        return result

    def add(self, *, run: DiagnosticRun) -> None:
        self._runs.append(run)

    def merge(self, other: DiagnosticSet) -> None:
        """Append the runs of ``other``. Runs are not deduplicated."""
        self._runs.extend(other._runs)
        self.skipped_runs += other.skipped_runs

    def __iadd__(self, other: DiagnosticSet) -> DiagnosticSet:
        self.merge(other)
        return self

    @property
    def runs(self) -> tuple[DiagnosticRun, ...]:
        return tuple(self._runs)

    @property
    def has_errors(self) -> bool:
        """Return True if any diagnostic in any run has ERROR severity."""
        return self.error_count > 0

    @property
    def error_count(self) -> int:
        return self._count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return self._count(Severity.WARNING)

    @property
    def note_count(self) -> int:
        return self._count(Severity.NOTE)

    def _count(self, severity: Severity) -> int:
        return sum(1 for run in self._runs for d in run if d.severity == severity)

    def __len__(self) -> int:
        return sum(len(run) for run in self._runs)

    def __iter__(self) -> Iterator[DiagnosticRun]:
        return iter(self._runs)


def parse_severity(level: str | None) -> Severity:
    """Map a SARIF level; absent means error, unknown values mean note."""
    if level is None:
        return Severity.ERROR
    if level == "error":
        return Severity.ERROR
    if level == "warning":
        return Severity.WARNING
    return Severity.NOTE


def extract_run(run: SarifRun) -> DiagnosticRun:
    """Register a run's artifacts and locate each of its findings.

    Raises:
        DuplicateArtifact: If two artifacts share a (uriBaseId, uri) key.
        UnresolvedArtifact: If a finding names an unregistered artifact.
    """
    result = DiagnosticRun()
    for artifact in run.artifacts:
        result.register(
            name=artifact.ref.uri,
            base_id=artifact.ref.base_id,
            content=artifact.text,
        )

    for finding in run.results:
        result.add(diagnostic=_locate(finding=finding, run=result))

    logger.debug(
        "Extracted %d diagnostics over %d artifacts", len(result), len(result.files),
    )
    return result


def _locate(*, finding: SarifResult, run: DiagnosticRun) -> Diagnostic:
    severity: Severity = parse_severity(finding.level)
    if finding.artifact is None:
        return Diagnostic(severity=severity, message=finding.message)

    source: SourceFile = run.lookup(ref=finding.artifact)
    return Diagnostic(
        severity=severity,
        message=finding.message,
        file_id=source.id,
        region=region_from_descriptor(source=source, descriptor=finding.region),
    )
