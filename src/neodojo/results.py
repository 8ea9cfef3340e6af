"""Test report data model for neodojo.

Reports follow the GoogleTest JSON layout: a report holds suites, a suite
holds cases, a case holds failures. Counts are trusted as the producer
wrote them and are never recomputed from the cases.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from neodojo.constants import TestStatus
from neodojo.errors import MalformedReport, ReportUnavailable


@dataclass(frozen=True, slots=True)
class TestFailure:
    """One failure detail of a test case."""

    __test__ = False

    failure: str
    kind: str | None = None

    def message_and_location(self) -> tuple[str | None, str]:
        """Split off the ``file:line`` header GoogleTest puts on the first line."""
        location, sep, message = self.failure.partition("\n")
        if not sep:
            return None, self.failure
        return location, message


@dataclass(frozen=True, slots=True)
class TestCase:
    """A single test and its failures."""

    __test__ = False

    name: str
    classname: str = ""
    status: TestStatus = TestStatus.RUN
    file: str = ""
    line: int = 0
    result: str = ""
    timestamp: str = ""
    time: str = ""
    failures: tuple[TestFailure, ...] = ()

    @property
    def is_failing(self) -> bool:
        return len(self.failures) > 0

    @property
    def qualified_name(self) -> str:
        return f"{self.classname}.{self.name}" if self.classname else self.name


@dataclass(slots=True)
class TestSuite:
    """A group of test cases with producer-supplied counts."""

    __test__ = False

    name: str
    tests: int = 0
    failures: int = 0
    disabled: int = 0
    errors: int = 0
    time: str = ""
    cases: list[TestCase] = field(default_factory=list)


@dataclass(slots=True)
class TestReport:
    """Top-level aggregate of test suites with running totals."""

    __test__ = False

    name: str
    tests: int = 0
    failures: int = 0
    disabled: int = 0
    errors: int = 0
    timestamp: str = ""
    time: str = ""
    suites: list[TestSuite] = field(default_factory=list)

    @classmethod
    def from_suite(cls, suite: TestSuite) -> TestReport:
        """Promote a bare suite to a single-suite report with the same totals."""
        report = cls(name=suite.name, time=suite.time)
        report.add_suite(suite)
        return report

    def add_suite(self, suite: TestSuite) -> None:
        """Add the suite's counts to the totals and take ownership of it."""
        self.tests += suite.tests
        self.failures += suite.failures
        self.disabled += suite.disabled
        self.errors += suite.errors
        self.suites.append(suite)

    @property
    def has_failed(self) -> bool:
        return self.failures > 0 or self.errors > 0

    @property
    def passed(self) -> int:
        return max(self.tests - self.failures, 0)

    @property
    def failing_cases(self) -> list[TestCase]:
        return [case for suite in self.suites for case in suite.cases if case.is_failing]


def load_report(path: Path) -> TestReport:
    """
    Read and parse a test report file.

    Raises:
        ReportUnavailable: If the file cannot be read.
        MalformedReport: If the file is not a valid report.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReportUnavailable(f"unable to read test file: {e}", path=path) from e
    return loads_report(text, path=path)


def loads_report(text: str, *, path: Path | None = None) -> TestReport:
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedReport(f"unable to parse json: {e}", path=path) from e
    return parse_report(data, path=path)


def parse_report(data: Any, *, path: Path | None = None) -> TestReport:
    """Build a TestReport from decoded JSON, validating its shape."""
    reader = _Reader(path=path)
    obj: dict[str, Any] = reader.get_object(data, "report")

    suites: list[TestSuite] = [
        _parse_suite(raw, reader=reader, context=f"testsuites[{idx}]")
        for idx, raw in enumerate(reader.get_list(obj, "testsuites", context="report"))
    ]
    # Totals come from the report itself, not from its suites.
    return TestReport(
        name=reader.get_str(obj, "name", context="report", required=True),
        tests=reader.get_int(obj, "tests", context="report"),
        failures=reader.get_int(obj, "failures", context="report"),
        disabled=reader.get_int(obj, "disabled", context="report"),
        errors=reader.get_int(obj, "errors", context="report"),
        timestamp=reader.get_str(obj, "timestamp", context="report"),
        time=reader.get_str(obj, "time", context="report"),
        suites=suites,
    )


def _parse_suite(data: Any, *, reader: _Reader, context: str) -> TestSuite:
    obj: dict[str, Any] = reader.get_object(data, context)
    return TestSuite(
        name=reader.get_str(obj, "name", context=context, required=True),
        tests=reader.get_int(obj, "tests", context=context),
        failures=reader.get_int(obj, "failures", context=context),
        disabled=reader.get_int(obj, "disabled", context=context),
        errors=reader.get_int(obj, "errors", context=context),
        time=reader.get_str(obj, "time", context=context),
        cases=[
            _parse_case(raw, reader=reader, context=f"{context}.testsuite[{idx}]")
            for idx, raw in enumerate(reader.get_list(obj, "testsuite", context=context))
        ],
    )


def _parse_case(data: Any, *, reader: _Reader, context: str) -> TestCase:
    obj: dict[str, Any] = reader.get_object(data, context)

    raw_status: str = reader.get_str(obj, "status", context=context) or TestStatus.RUN.value
    try:
        status: TestStatus = TestStatus(raw_status)
    except ValueError as e:
        valid: list[str] = [s.value for s in TestStatus]
        raise reader.error(f"{context}.status must be one of {valid}") from e

    failures: list[TestFailure] = []
    for idx, raw in enumerate(reader.get_list(obj, "failures", context=context)):
        failure_ctx: str = f"{context}.failures[{idx}]"
        failure_obj: dict[str, Any] = reader.get_object(raw, failure_ctx)
        kind: Any = failure_obj.get("type")
        if kind is not None and not isinstance(kind, str):
            raise reader.error(f"{failure_ctx}.type must be a string")
        failures.append(TestFailure(
            failure=reader.get_str(failure_obj, "failure", context=failure_ctx, required=True),
            kind=kind,
        ))

    line: Any = obj.get("line", 0)
    if isinstance(line, bool) or not isinstance(line, int):
        raise reader.error(f"{context}.line must be an integer")

    return TestCase(
        name=reader.get_str(obj, "name", context=context, required=True),
        classname=reader.get_str(obj, "classname", context=context),
        status=status,
        file=reader.get_str(obj, "file", context=context),
        line=line,
        result=reader.get_str(obj, "result", context=context),
        timestamp=reader.get_str(obj, "timestamp", context=context),
        time=reader.get_str(obj, "time", context=context),
        failures=tuple(failures),
    )


@dataclass(frozen=True, slots=True)
class _Reader:
    """Typed field access that raises MalformedReport on shape errors."""

    path: Path | None

    def error(self, message: str) -> MalformedReport:
        return MalformedReport(f"invalid test report: {message}", path=self.path)

    def get_object(self, data: Any, context: str) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise self.error(f"{context} must be an object")
        return data

    def get_list(self, data: dict[str, Any], key: str, *, context: str) -> list[Any]:
        value: Any = data.get(key, [])
        if not isinstance(value, list):
            raise self.error(f"{context}.{key} must be a list")
        return value

    def get_int(self, data: dict[str, Any], key: str, *, context: str) -> int:
        value: Any = data.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise self.error(f"{context}.{key} must be a non-negative integer")
        return value

    def get_str(
        self, data: dict[str, Any], key: str, *, context: str, required: bool = False,
    ) -> str:
        value: Any = data.get(key)
        if value is None and not required:
            return ""
        if not isinstance(value, str):
            raise self.error(f"{context}.{key} must be a string")
        return value
