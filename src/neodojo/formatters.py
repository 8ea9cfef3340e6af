"""Output formatters for neodojo build diagnostics."""
from __future__ import annotations

import json
import threading
from typing import Final, Protocol

import click

from neodojo.constants import OutputFormat, Severity
from neodojo.diagnostics import Diagnostic, DiagnosticRun, DiagnosticSet
from neodojo.locations import SourceFile
from neodojo.types import NeodojoConfig

SEVERITY_COLORS: Final[dict[Severity, str]] = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.NOTE: "cyan",
}

_OUTPUT_LOCK: Final[threading.Lock] = threading.Lock()


def write_output(text: str, *, color: bool | None = None, err: bool = False) -> None:
    """Write one rendered block; concurrent callers never interleave."""
    with _OUTPUT_LOCK:
        click.echo(text, color=color, err=err)


class Formatter(Protocol):
    def format(
        self,
        *,
        diagnostics: DiagnosticSet,
        config: NeodojoConfig,
    ) -> str: ...


class TextFormatter:
    def format(
        self,
        *,
        diagnostics: DiagnosticSet,
        config: NeodojoConfig,
    ) -> str:
        lines: list[str] = []

        for run in diagnostics:
            for diag in run.sorted:
                lines.extend(self._format_one(diag=diag, run=run, config=config))
                lines.append("")

        return "\n".join(lines).rstrip("\n")

    def _format_one(
        self,
        *,
        diag: Diagnostic,
        run: DiagnosticRun,
        config: NeodojoConfig,
    ) -> list[str]:
        fg: str = SEVERITY_COLORS[diag.severity]
        lines: list[str] = [
            click.style(diag.severity.value, fg=fg, bold=True)
            + click.style(f": {diag.message}", bold=True)
        ]
        if diag.file_id is None:
            return lines

        source: SourceFile = run.file(diag.file_id)
        if diag.region.is_empty:
            lines.append(f"  --> {source.name}")
            return lines

        line, column = source.location(diag.region.start)
        lines.append(f"  --> {source.name}:{line}:{column}")

        if config.show_source:
            lines.extend(_excerpt(source=source, diag=diag, fg=fg))
        return lines


def _excerpt(*, source: SourceFile, diag: Diagnostic, fg: str) -> list[str]:
    """Gutter excerpt of every line the region touches, carets underneath."""
    start: int = diag.region.start
    end: int = diag.region.end
    first_line, _ = source.location(start)
    last_line, last_column = source.location(end)
    # A region ending right after a terminator does not touch the next line.
    if end > start and last_column == 1 and last_line > first_line:
        last_line -= 1

    width: int = len(str(last_line))
    gutter: str = " " * width
    lines: list[str] = [f"{gutter} |"]
    for line in range(first_line, last_line + 1):
        line_start, line_end = source.line_span(line)
        lines.append(f"{line:>{width}} | {source.line_text(line)}")

        seg_start: int = min(max(start, line_start), line_end)
        seg_end: int = min(max(end, line_start), line_end)
        pad: int = len(source.text(line_start, seg_start))
        carets: int = len(source.text(seg_start, seg_end))
        if carets == 0:
            if line != first_line:
                continue
            carets = 1
        lines.append(f"{gutter} | {' ' * pad}" + click.style("^" * carets, fg=fg, bold=True))
    return lines


class JsonFormatter:
    def format(
        self,
        *,
        diagnostics: DiagnosticSet,
        config: NeodojoConfig,
    ) -> str:
        items: list[dict[str, object]] = []

        for run_idx, run in enumerate(diagnostics):
            for diag in run.sorted:
                item: dict[str, object] = {
                    "run": run_idx,
                    "severity": diag.severity.value,
                    "message": diag.message,
                    "file": None,
                    "start": diag.region.start,
                    "end": diag.region.end,
                    "line": None,
                    "column": None,
                }
                if diag.file_id is not None:
                    source: SourceFile = run.file(diag.file_id)
                    item["file"] = source.name
                    if not diag.region.is_empty:
                        line, column = source.location(diag.region.start)
                        item.update(line=line, column=column)
                items.append(item)

        return json.dumps(items, indent=2)


def get_formatter(*, output_format: OutputFormat) -> Formatter:
    if output_format == OutputFormat.JSON:
        return JsonFormatter()
    return TextFormatter()


def format_summary(*, diagnostics: DiagnosticSet) -> str:
    error_count: int = diagnostics.error_count
    warning_count: int = diagnostics.warning_count
    note_count: int = diagnostics.note_count

    parts: list[str] = []
    if error_count > 0:
        parts.append(f"{error_count} error{'s' if error_count != 1 else ''}")
    if warning_count > 0:
        parts.append(f"{warning_count} warning{'s' if warning_count != 1 else ''}")
    if note_count > 0:
        parts.append(f"{note_count} note{'s' if note_count != 1 else ''}")

    skipped: str = ""
    skipped_runs: int = diagnostics.skipped_runs
    if skipped_runs > 0:
        skipped = f" ({skipped_runs} unreadable run{'s' if skipped_runs != 1 else ''} skipped)"

    if not parts:
        return f"No issues found.{skipped}"

    return f"Found {', '.join(parts)}.{skipped}"
