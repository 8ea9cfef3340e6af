"""Configuration loading and validation for neodojo."""
from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from neodojo.constants import (
    ASSIGNMENT_FILE,
    SANITIZER_LOG_FILE,
    TEST_RESULTS_FILE,
    ColorMode,
    OutputFormat,
)
from neodojo.types import ConfigError, NeodojoConfig


class ConfigLoader:
    """Loads and validates neodojo configuration."""

    @staticmethod
    def find_config_file(start_path: Path | None = None) -> Path | None:
        """
        Find pyproject.toml by walking up from start_path.

        Args:
            start_path: Directory to start searching from. Defaults to cwd.

        Returns:
            Path to pyproject.toml if found, None otherwise.
        """
        if start_path is None:
            start_path = Path.cwd()

        start_path = start_path.resolve()

        for directory in [start_path, *start_path.parents]:
            config_path: Path = directory / "pyproject.toml"
            if config_path.is_file():
                return config_path

        return None

    @staticmethod
    def load(path: Path | None = None) -> NeodojoConfig:
        """
        Load configuration from pyproject.toml.

        Args:
            path: Explicit path to pyproject.toml. If None, searches upward.

        Returns:
            Validated NeodojoConfig instance.

        Raises:
            ConfigError: If configuration is invalid.
        """
        if path is None:
            path = ConfigLoader.find_config_file()

        if path is None:
            return NeodojoConfig()

        try:
            with open(path, "rb") as f:
                data: dict[str, Any] = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML: {e}", path=path) from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file: {e}", path=path) from e

        tool_config: dict[str, Any] = data.get("tool", {}).get("neodojo", {})

        return ConfigLoader._parse_config(tool_config, config_path=path)

    @staticmethod
    def _parse_config(
        data: dict[str, Any],
        *,
        config_path: Path | None = None,
    ) -> NeodojoConfig:
        """Parse and validate configuration dictionary."""
        errors: list[str] = []

        # Parse output_format
        output_format: OutputFormat = OutputFormat.TEXT
        if "output_format" in data:
            try:
                output_format = OutputFormat(data["output_format"])
            except ValueError:
                valid: list[str] = [f.value for f in OutputFormat]
                errors.append(f"output_format must be one of {valid}")

        # Parse color
        color: ColorMode = ColorMode.AUTO
        if "color" in data:
            try:
                color = ColorMode(data["color"])
            except ValueError:
                valid = [c.value for c in ColorMode]
                errors.append(f"color must be one of {valid}")

        show_source: bool = ConfigLoader._parse_bool(
            data, "show_source", default=True, errors=errors,
        )
        dump_sanitizer_log: bool = ConfigLoader._parse_bool(
            data, "dump_sanitizer_log", default=True, errors=errors,
        )

        # File names inside the results directory and the workspace
        results_file: str = ConfigLoader._parse_file_name(
            data, "results_file", default=TEST_RESULTS_FILE, errors=errors,
        )
        sanitizer_log: str = ConfigLoader._parse_file_name(
            data, "sanitizer_log", default=SANITIZER_LOG_FILE, errors=errors,
        )
        assignment_file: str = ConfigLoader._parse_file_name(
            data, "assignment_file", default=ASSIGNMENT_FILE, errors=errors,
        )

        if errors:
            error_msg: str = "Configuration errors:\n" + "\n".join(
                f"  - {e}" for e in errors
            )
            raise ConfigError(error_msg, path=config_path)

        return NeodojoConfig(
            config_path=config_path,
            output_format=output_format,
            color=color,
            show_source=show_source,
            dump_sanitizer_log=dump_sanitizer_log,
            results_file=results_file,
            sanitizer_log=sanitizer_log,
            assignment_file=assignment_file,
        )

    @staticmethod
    def _parse_bool(
        data: dict[str, Any], key: str, *, default: bool, errors: list[str],
    ) -> bool:
        value: Any = data.get(key, default)
        if not isinstance(value, bool):
            errors.append(f"{key} must be a boolean")
            return default
        return value

    @staticmethod
    def _parse_file_name(
        data: dict[str, Any], key: str, *, default: str, errors: list[str],
    ) -> str:
        value: Any = data.get(key, default)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{key} must be a non-empty string")
            return default
        return value


def load_config(path: Path | None = None) -> NeodojoConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Optional explicit path to pyproject.toml.

    Returns:
        Validated configuration.
    """
    return ConfigLoader.load(path)
