"""Fusion of the test report probe and the sanitizer probe.

Each test execution is observed twice: through the structured test report
and through the sanitizer log. ``fuse`` combines both into one outcome and
is defined for every pair of probe outcomes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from neodojo.constants import SIGNAL_EXIT_THRESHOLD
from neodojo.errors import ReportUnavailable
from neodojo.results import TestReport, loads_report
from neodojo.sanitizer import SanitizerFailed, SanitizerOutcome, SanitizerPassed

logger: logging.Logger = logging.getLogger(__name__)

CRASH_MESSAGE: str = "program crashed during test"
FAILURE_MESSAGE: str = "test failed"


@dataclass(frozen=True, slots=True)
class ReportPassed:
    report: TestReport


@dataclass(frozen=True, slots=True)
class ReportFailed:
    report: TestReport


@dataclass(frozen=True, slots=True)
class ReportCrashed:
    """The test process crashed or left no readable report."""

    message: str = CRASH_MESSAGE


ReportOutcome = ReportPassed | ReportFailed | ReportCrashed


class OutcomeStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    EXECUTION_ERROR = "execution_error"


@dataclass(frozen=True, slots=True)
class TestOutcome:
    """Final result of one test execution.

    ``report`` is None when a crash left no report to show.
    ``sanitizer_log`` holds the raw log of a failed sanitizer probe so the
    caller can dump it.
    """

    __test__ = False

    status: OutcomeStatus
    report: TestReport | None = None
    message: str = ""
    sanitizer_log: str | None = None


def probe_report(path: Path, *, exit_code: int | None = None) -> ReportOutcome:
    """
    Read the structured test report of one execution.

    Args:
        path: Location of the JSON report.
        exit_code: Exit status of the test command, when the caller knows it.
            A negative value (killed by a signal) or a value above 128 marks
            the execution as crashed.

    Raises:
        ReportUnavailable: If the report file cannot be read.
        MalformedReport: If the report is not valid JSON or has the wrong shape.
    """
    if exit_code is not None and (exit_code < 0 or exit_code > SIGNAL_EXIT_THRESHOLD):
        logger.info("Test command exited with %d, treating as crash", exit_code)
        return ReportCrashed()

    try:
        text: str = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReportUnavailable(f"unable to read test file: {e}", path=path) from e

    if not text.strip():
        # The test binary writes its report on exit; an empty file means it died first.
        logger.info("Test report %s is empty, treating as crash", path)
        return ReportCrashed()

    report: TestReport = loads_report(text, path=path)
    logger.info("Loaded %d test suites from %s", len(report.suites), path)
    if report.has_failed:
        return ReportFailed(report=report)
    return ReportPassed(report=report)


def fuse(*, report: ReportOutcome, sanitizer: SanitizerOutcome) -> TestOutcome:
    """Combine both probes into one outcome.

    A crash outranks any well-formed pass/fail signal and discards the
    sanitizer result. Otherwise the sanitizer suite is appended to the
    report, and either probe failing makes the outcome a failure.
    """
    if isinstance(report, ReportCrashed):
        return TestOutcome(status=OutcomeStatus.EXECUTION_ERROR, message=report.message)

    # Fuse into fresh copies; the probe outcomes stay untouched.
    merged: TestReport = replace(report.report, suites=list(report.report.suites))
    merged.add_suite(replace(sanitizer.suite, cases=list(sanitizer.suite.cases)))

    sanitizer_log: str | None = None
    if isinstance(sanitizer, SanitizerFailed):
        sanitizer_log = sanitizer.log

    if isinstance(report, ReportPassed) and isinstance(sanitizer, SanitizerPassed):
        return TestOutcome(status=OutcomeStatus.SUCCESS, report=merged)

    return TestOutcome(
        status=OutcomeStatus.FAILURE,
        report=merged,
        message=FAILURE_MESSAGE,
        sanitizer_log=sanitizer_log,
    )


def promote_sanitizer(sanitizer: SanitizerOutcome) -> TestOutcome:
    """Outcome of a sanitizer scan on its own, with no test report around it.

    A crash indicator in the log outranks detector findings.
    """
    report: TestReport = TestReport.from_suite(
        replace(sanitizer.suite, cases=list(sanitizer.suite.cases))
    )
    sanitizer_log: str | None = None
    if isinstance(sanitizer, SanitizerFailed):
        sanitizer_log = sanitizer.log

    if report.errors > 0:
        return TestOutcome(
            status=OutcomeStatus.EXECUTION_ERROR,
            report=report,
            message=CRASH_MESSAGE,
            sanitizer_log=sanitizer_log,
        )
    if report.failures > 0:
        return TestOutcome(
            status=OutcomeStatus.FAILURE,
            report=report,
            message=FAILURE_MESSAGE,
            sanitizer_log=sanitizer_log,
        )
    return TestOutcome(status=OutcomeStatus.SUCCESS, report=report)
