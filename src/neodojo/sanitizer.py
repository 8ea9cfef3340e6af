"""Runtime sanitizer log scanning for neodojo.

The log is free text written by the sanitizer runtimes. It is turned into a
synthetic suite with one case per detector, so sanitizer findings can be
reported next to the regular test results.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from neodojo.constants import (
    SANITIZER_CRASH_MARKERS,
    SANITIZER_DETECTORS,
    SANITIZER_SUITE,
)
from neodojo.errors import ReportUnavailable
from neodojo.results import TestCase, TestFailure, TestSuite

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SanitizerPassed:
    suite: TestSuite


@dataclass(frozen=True, slots=True)
class SanitizerFailed:
    """Findings were reported; ``log`` is the raw text to show the user."""

    suite: TestSuite
    log: str


SanitizerOutcome = SanitizerPassed | SanitizerFailed


def find_failure(text: str, *, detector: str) -> str | None:
    """Return the message after ``ERROR: <detector>: `` up to the line end."""
    _, found, rest = text.partition(f"ERROR: {detector}: ")
    if not found:
        return None
    message, newline, _ = rest.partition("\n")
    if not newline:
        return None
    return message


def scan_log(text: str | None) -> SanitizerOutcome:
    """Scan a sanitizer log. A missing log is the same as an empty one."""
    if text is None:
        text = ""

    cases: list[TestCase] = []
    for key, detector in SANITIZER_DETECTORS:
        message: str | None = find_failure(text, detector=detector)
        failures: tuple[TestFailure, ...] = ()
        if message is not None:
            failures = (TestFailure(failure=message),)
        cases.append(TestCase(name=key, classname=SANITIZER_SUITE, failures=failures))

    suite = TestSuite(
        name=SANITIZER_SUITE,
        tests=len(cases),
        failures=sum(1 for case in cases if case.is_failing),
        errors=int(any(marker in text for marker in SANITIZER_CRASH_MARKERS)),
        cases=cases,
    )

    if suite.failures == 0:
        if suite.errors:
            logger.warning("Sanitizer log reports a crash without detector findings")
        return SanitizerPassed(suite=suite)
    logger.info("Sanitizer reported %d failing detector(s)", suite.failures)
    return SanitizerFailed(suite=suite, log=text)


def scan_log_file(path: Path) -> SanitizerOutcome:
    """Scan the log at ``path``; a missing file yields an empty passing suite."""
    try:
        text: str = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.info("No sanitizer log at %s", path)
        return scan_log(None)
    except OSError as e:
        raise ReportUnavailable(f"unable to read sanitizer log: {e}", path=path) from e
    return scan_log(text)
