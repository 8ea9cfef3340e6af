"""Line/column to byte offset resolution for neodojo.

Analysis tools report positions inconsistently: some give exact byte
offsets, others only textual line/column pairs. Everything here normalizes
to UTF-8 byte offsets into the artifact text. Columns are 1-based and count
Unicode code points.
"""
from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, field

from neodojo.errors import LocationNotFound

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Region:
    """A byte span inside a source file. ``Region()`` means no location."""

    start: int = 0
    end: int = 0

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid region {self.start}..{self.end}")

    @property
    def is_empty(self) -> bool:
        return self.start == 0 and self.end == 0

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class RegionDescriptor:
    """Positional fields of a finding, each of which may be absent."""

    byte_offset: int | None = None
    byte_length: int | None = None
    start_line: int | None = None
    start_column: int | None = None
    end_line: int | None = None
    end_column: int | None = None


@dataclass(frozen=True, slots=True)
class SourceFile:
    """One artifact's text, registered once per run and never mutated."""

    id: int
    name: str
    base_id: str | None
    content: str
    _data: bytes = field(init=False, repr=False, compare=False)
    _lines: tuple[str, ...] = field(init=False, repr=False, compare=False)
    _line_starts: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        lines: list[str] = []
        starts: list[int] = []
        offset: int = 0
        segments: list[str] = self.content.split("\n")
        for idx, raw in enumerate(segments):
            starts.append(offset)
            offset += len(raw.encode("utf-8")) + 1
            terminated: bool = idx < len(segments) - 1
            lines.append(raw[:-1] if terminated and raw.endswith("\r") else raw)

        object.__setattr__(self, "_data", self.content.encode("utf-8"))
        object.__setattr__(self, "_lines", tuple(lines))
        object.__setattr__(self, "_line_starts", tuple(starts))

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line_text(self, line: int) -> str:
        """Text of a 1-based line, without its terminator."""
        if line < 1 or line > self.line_count:
            raise LocationNotFound(line=line, column=1)
        return self._lines[line - 1]

    def line_span(self, line: int) -> tuple[int, int]:
        """Byte range of a 1-based line, terminator excluded."""
        text: str = self.line_text(line)
        start: int = self._line_starts[line - 1]
        return start, start + len(text.encode("utf-8"))

    def text(self, start: int, end: int) -> str:
        """Decode the bytes in ``start..end``, dropping split characters."""
        return self._data[start:end].decode("utf-8", errors="ignore")

    def last_column(self, line: int) -> int:
        """Column of the line terminator (or end of file) on ``line``."""
        return len(self.line_text(line)) + 1

    def resolve(self, line: int, column: int) -> int:
        """Return the byte offset of a 1-based line/column pair.

        Raises:
            LocationNotFound: If the line does not exist or the column lies
                past the end of the line.
        """
        if line < 1 or line > self.line_count:
            raise LocationNotFound(line=line, column=column)
        text: str = self._lines[line - 1]
        if column < 1 or column > len(text) + 1:
            raise LocationNotFound(line=line, column=column)
        return self._line_starts[line - 1] + len(text[: column - 1].encode("utf-8"))

    def location(self, offset: int) -> tuple[int, int]:
        """Return the 1-based line/column containing a byte offset."""
        offset = min(max(offset, 0), len(self._data))
        idx: int = bisect_right(self._line_starts, offset) - 1
        start: int = self._line_starts[idx]
        prefix: str = self._data[start:offset].decode("utf-8", errors="ignore")
        return idx + 1, len(prefix) + 1


def region_from_descriptor(
    *,
    source: SourceFile,
    descriptor: RegionDescriptor,
) -> Region:
    """Build a Region, degrading instead of failing on bad positions."""
    start: int | None = descriptor.byte_offset
    if start is None and descriptor.start_line is not None:
        try:
            start = source.resolve(
                descriptor.start_line,
                descriptor.start_column if descriptor.start_column is not None else 1,
            )
        except LocationNotFound as e:
            logger.debug("%s: start not found (%s), using empty region", source.name, e)
            return Region()

    if start is None or start < 0:
        return Region()

    if descriptor.byte_length is not None:
        return Region(start=start, end=start + max(descriptor.byte_length, 0))

    end_line: int | None = (
        descriptor.end_line if descriptor.end_line is not None else descriptor.start_line
    )
    if end_line is None:
        return Region(start=start, end=start)

    end: int
    try:
        end_column: int = (
            descriptor.end_column
            if descriptor.end_column is not None
            else source.last_column(end_line)
        )
        end = source.resolve(end_line, end_column)
    except LocationNotFound as e:
        logger.debug("%s: end not found (%s), using zero-width region", source.name, e)
        end = start

    return Region(start=start, end=max(start, end))
