"""Pipeline orchestration for neodojo.

Nothing here executes a build or a test: the functions read the artifacts
an external orchestrator left behind and run them through the engine.
"""
from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from neodojo.constants import EXIT_ERROR, EXIT_FAILURE, EXIT_SUCCESS
from neodojo.diagnostics import DiagnosticSet
from neodojo.formatters import Formatter, format_summary, get_formatter
from neodojo.fusion import (
    OutcomeStatus,
    ReportOutcome,
    TestOutcome,
    fuse,
    probe_report,
    promote_sanitizer,
)
from neodojo.sanitizer import SanitizerOutcome, scan_log_file
from neodojo.sarif import parse_report
from neodojo.types import NeodojoConfig

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BuildResult:
    diagnostics: DiagnosticSet
    reports_read: int
    exit_code: int


def collect_build_diagnostics(*, lines: Iterable[str]) -> tuple[DiagnosticSet, int]:
    """Merge every SARIF document found in captured compiler stderr.

    Lines that are not SARIF documents are regular compiler output.

    Returns:
        The merged diagnostics and the number of SARIF documents read.
    """
    diagnostics = DiagnosticSet()
    reports: int = 0
    for lineno, line in enumerate(lines, start=1):
        stripped: str = line.strip()
        if not stripped.startswith("{"):
            continue
        try:
            data: Any = json.loads(stripped)
        except json.JSONDecodeError:
            logger.debug("Line %d is not JSON, skipping", lineno)
            continue
        if not isinstance(data, dict) or "runs" not in data:
            logger.debug("Line %d is not a SARIF document, skipping", lineno)
            continue

        diagnostics += DiagnosticSet.from_report(parse_report(data))
        reports += 1
    return diagnostics, reports


def check_build(*, capture: str) -> BuildResult:
    started: float = time.perf_counter()
    diagnostics, reports = collect_build_diagnostics(lines=capture.splitlines())
    logger.info("Found %d SARIF reports with %d diagnostics", reports, len(diagnostics))
    logger.info("Completed in %.3fs", time.perf_counter() - started)
    return BuildResult(
        diagnostics=diagnostics,
        reports_read=reports,
        exit_code=EXIT_FAILURE if diagnostics.has_errors else EXIT_SUCCESS,
    )


def format_build_results(*, result: BuildResult, config: NeodojoConfig) -> str:
    formatter: Formatter = get_formatter(output_format=config.output_format)
    output: str = formatter.format(diagnostics=result.diagnostics, config=config)

    parts: list[str] = []
    if output:
        parts.append(output)
    parts.append(format_summary(diagnostics=result.diagnostics))
    return "\n".join(parts)


def run_tests(
    *,
    results_dir: Path,
    config: NeodojoConfig,
    report_path: Path | None = None,
    sanitizer_log: Path | None = None,
    exit_code: int | None = None,
) -> TestOutcome:
    """Probe the test report and the sanitizer log, then fuse them.

    Raises:
        ReportUnavailable: If the test report cannot be read.
        MalformedReport: If the test report is invalid.
    """
    started: float = time.perf_counter()
    if report_path is None:
        report_path = results_dir / config.results_file
    if sanitizer_log is None:
        sanitizer_log = results_dir / config.sanitizer_log

    sanitizer: SanitizerOutcome = scan_log_file(sanitizer_log)
    report: ReportOutcome = probe_report(report_path, exit_code=exit_code)
    outcome: TestOutcome = fuse(report=report, sanitizer=sanitizer)

    logger.info("Test outcome: %s", outcome.status.value)
    logger.info("Completed in %.3fs", time.perf_counter() - started)
    return outcome


def scan_sanitizer(*, path: Path) -> TestOutcome:
    return promote_sanitizer(scan_log_file(path))


def outcome_exit_code(outcome: TestOutcome) -> int:
    if outcome.status is OutcomeStatus.SUCCESS:
        return EXIT_SUCCESS
    if outcome.status is OutcomeStatus.FAILURE:
        return EXIT_FAILURE
    return EXIT_ERROR
