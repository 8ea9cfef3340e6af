"""Configuration dataclasses for neodojo."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from neodojo.constants import (
    ASSIGNMENT_FILE,
    SANITIZER_LOG_FILE,
    TEST_RESULTS_FILE,
    ColorMode,
    OutputFormat,
)
from neodojo.errors import NeodojoError


@dataclass(frozen=True, slots=True)
class NeodojoConfig:
    """Complete neodojo configuration."""

    config_path: Path | None = None
    output_format: OutputFormat = OutputFormat.TEXT
    color: ColorMode = ColorMode.AUTO
    show_source: bool = True
    dump_sanitizer_log: bool = True
    results_file: str = TEST_RESULTS_FILE
    sanitizer_log: str = SANITIZER_LOG_FILE
    assignment_file: str = ASSIGNMENT_FILE


class ConfigError(NeodojoError):
    """Error during configuration loading or validation."""
