"""Constants and enums for neodojo."""
from __future__ import annotations

from enum import Enum
from typing import Final

__version__: Final[str] = "0.1.0"


class Severity(Enum):
    """Diagnostic severity levels, as reported by the compiler."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"

    @property
    def rank(self) -> int:
        """Sort rank; notes print first and errors last."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.NOTE: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}


class TestStatus(Enum):
    """Whether a test case was executed."""

    __test__ = False

    RUN = "RUN"
    NOTRUN = "NOTRUN"


class OutputFormat(Enum):
    """Output format options for build diagnostics."""

    TEXT = "text"
    JSON = "json"


class ColorMode(Enum):
    """Color output modes."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"

    @property
    def echo_flag(self) -> bool | None:
        """Value for the ``color`` argument of ``click.echo``."""
        if self is ColorMode.ALWAYS:
            return True
        if self is ColorMode.NEVER:
            return False
        return None


TEST_RESULTS_FILE: Final[str] = "test_detail.json"
SANITIZER_LOG_FILE: Final[str] = "memory.txt"
ASSIGNMENT_FILE: Final[str] = "dojo_assignment.json"

SANITIZER_SUITE: Final[str] = "sanitizer"

# (case name, detector name as printed in "ERROR: <detector>: ")
SANITIZER_DETECTORS: Final[tuple[tuple[str, str], ...]] = (
    ("address_sanitizer", "AddressSanitizer"),
    ("undefined_behavior_sanitizer", "UndefinedBehaviorSanitizer"),
    ("leak_sanitizer", "LeakSanitizer"),
)

SANITIZER_CRASH_MARKERS: Final[tuple[str, ...]] = ("DEADLYSIGNAL", "ABORTING")

# Exit codes of the test command.
EXIT_SUCCESS: Final[int] = 0
EXIT_FAILURE: Final[int] = 1
EXIT_ERROR: Final[int] = 2

# Shells accept 128 + signal number as the exit status of a killed process.
SIGNAL_EXIT_THRESHOLD: Final[int] = 128
