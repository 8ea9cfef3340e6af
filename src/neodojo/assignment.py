"""Exercise assignment descriptor for neodojo."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from neodojo.errors import AssignmentError


@dataclass(frozen=True, slots=True)
class ImmutableFile:
    """A workspace path the exercise must not modify."""

    path: str
    description: str | None = None
    is_directory: bool | None = None


@dataclass(frozen=True, slots=True)
class AssignmentResult:
    """Where the exercise results are produced."""

    container: str
    volume: str | None = None


@dataclass(frozen=True, slots=True)
class Assignment:
    dojo_assignment_version: int
    version: int
    immutable: tuple[ImmutableFile, ...]
    result: AssignmentResult


def load_assignment(path: Path) -> Assignment:
    """
    Load and validate an assignment descriptor.

    Raises:
        AssignmentError: If the file is missing or malformed.
    """
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise AssignmentError(f"invalid dojo workspace: {e}", path=path) from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AssignmentError(f"invalid assignment JSON: {e}", path=path) from e
    return parse_assignment(data, path=path)


def parse_assignment(data: Any, *, path: Path | None = None) -> Assignment:
    errors: list[str] = []
    if not isinstance(data, dict):
        raise AssignmentError("assignment must be an object", path=path)

    versions: dict[str, int] = {}
    for key in ("dojoAssignmentVersion", "version"):
        value: Any = data.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(f"{key} must be an integer")
            value = 0
        versions[key] = value

    immutable: list[ImmutableFile] = []
    raw_immutable: Any = data.get("immutable", [])
    if not isinstance(raw_immutable, list):
        errors.append("immutable must be a list")
        raw_immutable = []
    for idx, item in enumerate(raw_immutable):
        if not isinstance(item, dict) or not isinstance(item.get("path"), str):
            errors.append(f"immutable[{idx}].path must be a string")
            continue
        description: Any = item.get("description")
        is_directory: Any = item.get("isDirectory")
        if description is not None and not isinstance(description, str):
            errors.append(f"immutable[{idx}].description must be a string")
        if is_directory is not None and not isinstance(is_directory, bool):
            errors.append(f"immutable[{idx}].isDirectory must be a boolean")
        immutable.append(ImmutableFile(
            path=item["path"], description=description, is_directory=is_directory,
        ))

    result: AssignmentResult | None = None
    raw_result: Any = data.get("result")
    if not isinstance(raw_result, dict) or not isinstance(raw_result.get("container"), str):
        errors.append("result.container must be a string")
    else:
        volume: Any = raw_result.get("volume")
        if volume is not None and not isinstance(volume, str):
            errors.append("result.volume must be a string")
        result = AssignmentResult(container=raw_result["container"], volume=volume)

    if errors or result is None:
        raise AssignmentError(
            "Assignment errors:\n" + "\n".join(f"  - {e}" for e in errors), path=path,
        )

    return Assignment(
        dojo_assignment_version=versions["dojoAssignmentVersion"],
        version=versions["version"],
        immutable=tuple(immutable),
        result=result,
    )


def format_assignment_text(*, assignment: Assignment, path: Path) -> str:
    """Format an assignment as human-readable text."""
    lines: list[str] = [
        "Dojo Assignment",
        "=" * 40,
        "",
        f"File: {path}",
        f"Assignment version: {assignment.dojo_assignment_version}",
        f"Version: {assignment.version}",
        "",
        "Result:",
        f"  Container: {assignment.result.container}",
        f"  Volume: {assignment.result.volume or '(none)'}",
        "",
        "Immutable files:",
    ]
    if not assignment.immutable:
        lines.append("  (none)")
    for item in assignment.immutable:
        suffix: str = "/" if item.is_directory else ""
        note: str = f"  # {item.description}" if item.description else ""
        lines.append(f"  {item.path}{suffix}{note}")
    return "\n".join(lines)
