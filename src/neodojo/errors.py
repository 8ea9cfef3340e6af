"""Exception hierarchy for neodojo."""
from __future__ import annotations

from pathlib import Path


class NeodojoError(Exception):
    """Base exception for all neodojo errors."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path: Path | None = path
        super().__init__(message)


class MalformedReport(NeodojoError):
    """A structured report does not parse or does not match its schema."""


class DuplicateArtifact(MalformedReport):
    """An artifact key was registered twice within one run."""

    def __init__(self, *, base_id: str | None, name: str) -> None:
        self.base_id: str | None = base_id
        self.name: str = name
        scope: str = f"{base_id}:" if base_id else ""
        super().__init__(f"artifact registered twice: {scope}{name}")


class UnresolvedArtifact(NeodojoError):
    """A finding references an artifact that its run never registered."""

    def __init__(self, *, base_id: str | None, name: str) -> None:
        self.base_id: str | None = base_id
        self.name: str = name
        scope: str = f"{base_id}:" if base_id else ""
        super().__init__(f"unknown artifact: {scope}{name}")


class LocationNotFound(NeodojoError):
    """A line/column pair does not exist in a source file."""

    def __init__(self, *, line: int, column: int) -> None:
        self.line: int = line
        self.column: int = column
        super().__init__(f"no byte at line {line}, column {column}")


class ReportUnavailable(NeodojoError):
    """An input file that must exist cannot be read."""


class AssignmentError(NeodojoError):
    """The assignment descriptor is missing or invalid."""
