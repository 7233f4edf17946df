"""
Text buffer model and line-to-region mapping.

Offsets are indexes into the buffer's str content. A region covers one whole
line without its terminator; "\n", "\r\n" and "\r" all end a line, and a
terminator at the very end of the content does not start another line.
"""

import re
import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

logger = logging.getLogger("vim-simplecov")

_LINE_END = re.compile(r"\r\n|\r|\n")


class Region(NamedTuple):
    start: int
    end: int


class Buffer:
    """Snapshot of the text shown in an editor window."""

    def __init__(self, content: str, filename: str = ""):
        self.content = content
        self.filename = filename
        self._spans = self._split(content)

    @classmethod
    def from_file(cls, filename: str, encoding: str = "utf-8") -> "Buffer":
        """Build a buffer from the file on disk, keeping its line endings."""
        with open(filename, encoding=encoding, newline="") as source:
            return cls(source.read(), filename)

    @staticmethod
    def _split(content: str) -> List[Region]:
        spans = []
        start = 0
        for match in _LINE_END.finditer(content):
            spans.append(Region(start, match.start()))
            start = match.end()
        if start < len(content):
            spans.append(Region(start, len(content)))
        return spans

    @property
    def line_count(self) -> int:
        return len(self._spans)

    def line_span(self, line_number: int) -> Optional[Region]:
        """Region of a 1-based line, or None if the buffer has no such line."""
        if 1 <= line_number <= len(self._spans):
            return self._spans[line_number - 1]
        return None

    def position(self, offset: int) -> Tuple[int, int]:
        """Convert an offset to a 1-based (line, byte column) pair.

        Vim addresses text by byte column, so the column counts UTF-8 bytes.
        Offsets past the last line map to the end of that line.
        """
        if not self._spans:
            return 1, 1
        for line_number, span in enumerate(self._spans, start=1):
            if offset <= span.end:
                break
        start = span.start
        text = self.content[start:max(start, min(offset, span.end))]
        return line_number, len(text.encode("utf-8")) + 1


def lines_to_regions(buffer: Buffer, line_numbers: Iterable[int]) -> List[Region]:
    """Map 1-based line numbers to regions, skipping lines the buffer lacks."""
    regions = []
    for line_number in line_numbers:
        span = buffer.line_span(line_number)
        if span is None:
            logger.debug(
                f"Skipping line {line_number}: {buffer.filename or 'buffer'} "
                f"has {buffer.line_count} lines"
            )
            continue
        regions.append(span)
    return regions


def stale_lines(buffer: Buffer, line_numbers: Iterable[int]) -> List[int]:
    """Line numbers that lines_to_regions would skip."""
    return [n for n in line_numbers if buffer.line_span(n) is None]
