"""Command-line interface for neodojo using Click."""
from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import IO, Any, Final

import click
from click.shell_completion import get_completion_class

from neodojo.assignment import Assignment, format_assignment_text, load_assignment
from neodojo.config import load_config
from neodojo.constants import EXIT_ERROR, ColorMode, OutputFormat, __version__
from neodojo.errors import NeodojoError
from neodojo.formatters import write_output
from neodojo.fusion import TestOutcome
from neodojo.reporting import format_outcome
from neodojo.runner import (
    BuildResult,
    check_build,
    format_build_results,
    outcome_exit_code,
    run_tests,
    scan_sanitizer,
)
from neodojo.types import ConfigError, NeodojoConfig

COMPLETION_SHELLS: Final[tuple[str, ...]] = ("bash", "zsh", "fish")


def format_config_text(*, config: NeodojoConfig) -> str:
    """Format configuration as human-readable text."""
    lines: list[str] = [
        "neodojo Configuration",
        "=" * 40,
        "",
        f"Config file: {config.config_path or '(defaults)'}",
        "",
        "Output:",
        f"  Format: {config.output_format.value}",
        f"  Color: {config.color.value}",
        f"  Show source: {config.show_source}",
        f"  Dump sanitizer log: {config.dump_sanitizer_log}",
        "",
        "Files:",
        f"  Test results: {config.results_file}",
        f"  Sanitizer log: {config.sanitizer_log}",
        f"  Assignment: {config.assignment_file}",
    ]
    return "\n".join(lines)


def format_config_json(*, config: NeodojoConfig) -> str:
    """Format configuration as JSON."""
    data: dict[str, Any] = {
        "config_path": str(config.config_path) if config.config_path else None,
        "output_format": config.output_format.value,
        "color": config.color.value,
        "show_source": config.show_source,
        "dump_sanitizer_log": config.dump_sanitizer_log,
        "results_file": config.results_file,
        "sanitizer_log": config.sanitizer_log,
        "assignment_file": config.assignment_file,
    }
    return json.dumps(data, indent=2)


def _fail(ctx: click.Context, error: NeodojoError) -> None:
    click.echo(click.style("error", fg="red", bold=True) + f": {error}", err=True)
    if error.path:
        click.echo(f"  in: {error.path}", err=True)
    ctx.exit(EXIT_ERROR)


def _with_color(cfg: NeodojoConfig, color: str | None) -> NeodojoConfig:
    if color is None:
        return cfg
    return replace(cfg, color=ColorMode(color))


color_option = click.option(
    "--color",
    type=click.Choice(["auto", "always", "never"]),
    default=None,
    help="Color output mode (overrides config)",
)


@click.group()
@click.version_option(version=__version__, prog_name="neodojo")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to pyproject.toml (default: search upward from current directory)",
)
@click.option("--verbose", is_flag=True, help="Show progress and timing")
@click.option("--debug", is_flag=True, help="Show detailed trace")
@click.pass_context
def cli(
    ctx: click.Context,
    *,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
) -> None:
    """neodojo - build diagnostics and test results for Dojo exercises."""
    level: int = (
        logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    )
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    try:
        cfg: NeodojoConfig = load_config(path=config_path)
        ctx.obj["config"] = cfg
    except ConfigError as e:
        _fail(ctx, e)


@cli.command()
@click.option("--validate", is_flag=True, help="Only validate configuration, don't print")
@click.option("--json", "as_json", is_flag=True, help="Output configuration as JSON")
@click.pass_context
def config(ctx: click.Context, *, validate: bool, as_json: bool) -> None:
    """Show or validate configuration."""
    cfg: NeodojoConfig = ctx.obj["config"]

    if validate:
        click.echo(f"Configuration valid: {cfg.config_path or '(defaults)'}")
        return

    if as_json:
        click.echo(format_config_json(config=cfg))
    else:
        click.echo(format_config_text(config=cfg))


@cli.command()
@click.argument("capture", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format (overrides config)",
)
@color_option
@click.option("--show-source/--no-show-source", default=None, help="Show source excerpts")
@click.pass_context
def build(
    ctx: click.Context,
    capture: IO[str],
    *,
    output_format: str | None,
    color: str | None,
    show_source: bool | None,
) -> None:
    """Render diagnostics from captured compiler stderr (SARIF lines)."""
    cfg: NeodojoConfig = _with_color(ctx.obj["config"], color)

    # Apply CLI overrides
    overrides: dict[str, Any] = {}
    if output_format is not None:
        overrides["output_format"] = OutputFormat(output_format)
    if show_source is not None:
        overrides["show_source"] = show_source

    if overrides:
        cfg = replace(cfg, **overrides)

    try:
        result: BuildResult = check_build(capture=capture.read())
    except NeodojoError as e:
        _fail(ctx, e)
        return

    write_output(format_build_results(result=result, config=cfg), color=cfg.color.echo_flag)
    ctx.exit(result.exit_code)


@cli.command()
@click.argument(
    "results_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
)
@click.option(
    "--report",
    "report_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Test report JSON (default: <RESULTS_DIR>/<results_file>)",
)
@click.option(
    "--sanitizer-log",
    "sanitizer_log",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Sanitizer log (default: <RESULTS_DIR>/<sanitizer_log>)",
)
@click.option(
    "--exit-code",
    "exit_code",
    type=int,
    default=None,
    help="Exit status of the test command; signals mark a crash",
)
@color_option
@click.pass_context
def test(
    ctx: click.Context,
    results_dir: Path,
    *,
    report_path: Path | None,
    sanitizer_log: Path | None,
    exit_code: int | None,
    color: str | None,
) -> None:
    """Combine the test report and sanitizer log into one result."""
    cfg: NeodojoConfig = _with_color(ctx.obj["config"], color)

    try:
        outcome: TestOutcome = run_tests(
            results_dir=results_dir,
            config=cfg,
            report_path=report_path,
            sanitizer_log=sanitizer_log,
            exit_code=exit_code,
        )
    except NeodojoError as e:
        _fail(ctx, e)
        return

    write_output(
        format_outcome(outcome=outcome, dump_sanitizer_log=cfg.dump_sanitizer_log),
        color=cfg.color.echo_flag,
    )
    ctx.exit(outcome_exit_code(outcome))


@cli.command()
@click.argument("log", type=click.Path(dir_okay=False, path_type=Path))
@color_option
@click.pass_context
def sanitizer(ctx: click.Context, log: Path, *, color: str | None) -> None:
    """Report the findings of a sanitizer log on its own."""
    cfg: NeodojoConfig = _with_color(ctx.obj["config"], color)

    try:
        outcome: TestOutcome = scan_sanitizer(path=log)
    except NeodojoError as e:
        _fail(ctx, e)
        return

    write_output(
        format_outcome(outcome=outcome, dump_sanitizer_log=cfg.dump_sanitizer_log),
        color=cfg.color.echo_flag,
    )
    ctx.exit(outcome_exit_code(outcome))


@cli.command()
@click.argument("path", type=click.Path(path_type=Path), required=False, default=None)
@click.pass_context
def assignment(ctx: click.Context, path: Path | None) -> None:
    """Validate and show the exercise assignment descriptor."""
    cfg: NeodojoConfig = ctx.obj["config"]

    if path is None:
        path = Path(".")
    if path.is_dir():
        path = path / cfg.assignment_file

    try:
        loaded: Assignment = load_assignment(path)
    except NeodojoError as e:
        _fail(ctx, e)
        return

    click.echo(format_assignment_text(assignment=loaded, path=path))


@cli.command()
@click.argument("shell", type=click.Choice(COMPLETION_SHELLS))
def completion(shell: str) -> None:
    """Print the shell completion script."""
    comp_cls = get_completion_class(shell)
    if comp_cls is None:
        raise click.BadParameter(f"unsupported shell: {shell}")
    comp = comp_cls(cli, {}, "neodojo", "_NEODOJO_COMPLETE")
    click.echo(comp.source())


def main() -> None:
    """Main entry point for neodojo CLI."""
    cli()


if __name__ == "__main__":
    main()
