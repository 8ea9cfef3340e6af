"""Rendering of fused test outcomes for neodojo."""
from __future__ import annotations

import textwrap

import click

from neodojo.fusion import OutcomeStatus, TestOutcome
from neodojo.results import TestCase, TestFailure, TestReport


def format_case_line(*, case: TestCase) -> str:
    status: str = (
        click.style("FAILED", fg="red") if case.is_failing else click.style("ok", fg="green")
    )
    return f"test {case.qualified_name} ... {status}"


def format_case_details(*, case: TestCase) -> str:
    """First failure of a case, plus a count of the remaining ones."""
    where: str = f"{case.file}:{case.line}" if case.file else "see logs for details"
    lines: list[str] = [
        f"    {click.style(case.qualified_name, fg='cyan')} "
        + click.style(f"({where})", fg="bright_black", italic=True)
    ]

    first: TestFailure = case.failures[0]
    location, message = first.message_and_location()
    detail: str = textwrap.indent(message, "    ")
    if location is not None:
        detail += " " + click.style(f"({location})", fg="bright_black", italic=True)
    lines.append(detail)

    if len(case.failures) > 1:
        lines.append(click.style(f"    ... and {len(case.failures) - 1} more", fg="magenta"))
    return "\n".join(lines)


def format_report(*, report: TestReport) -> str:
    """Per-case status lines, failure details and the final tally."""
    lines: list[str] = [f"ran {report.tests} tests"]
    for suite in report.suites:
        lines.extend(format_case_line(case=case) for case in suite.cases)
    lines.append("")

    failing: list[TestCase] = report.failing_cases
    if report.failures > 0 and failing:
        lines.append("failures:")
        for case in failing:
            lines.append(format_case_details(case=case))
            lines.append("")
        lines.append("")

    result: str = (
        click.style("FAILED", fg="red") if report.has_failed else click.style("ok", fg="green")
    )
    lines.append(
        f"test result: {result}. {report.passed} passed; {report.failures} failed; "
        f"{report.disabled} ignored; finished in {report.time or 'unknown time'}"
    )
    return "\n".join(lines)


def format_status_line(*, outcome: TestOutcome) -> str | None:
    """``error: ...`` line for unsuccessful outcomes, None on success."""
    if outcome.status is OutcomeStatus.SUCCESS:
        return None
    return click.style("error", fg="red", bold=True) + click.style(":", bold=True) + (
        f" {outcome.message}"
    )


def format_outcome(*, outcome: TestOutcome, dump_sanitizer_log: bool = True) -> str:
    """Full rendering: dumped sanitizer log, report summary and status line."""
    parts: list[str] = []
    if dump_sanitizer_log and outcome.sanitizer_log:
        parts.append(click.style(outcome.sanitizer_log.rstrip("\n"), fg="bright_black"))
    if outcome.report is not None:
        parts.append(format_report(report=outcome.report))
    status: str | None = format_status_line(outcome=outcome)
    if status is not None:
        parts.append(status)
    return "\n".join(parts)
