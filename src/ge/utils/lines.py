"""Offset helpers for newline-delimited text."""

from __future__ import annotations

import bisect
from typing import Sequence

__all__ = [
    "comment_start",
    "compute_line_starts",
    "line_index_for_offset",
    "line_bounds",
    "line_text_at",
    "split_lines",
]


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n`` only, keeping a trailing empty segment.

    ``str.splitlines`` also splits on ``\\r`` and unicode separators, which
    would desynchronise line numbers from byte offsets.
    """
    return text.split("\n")


def compute_line_starts(text: str) -> list[int]:
    """Return the offset of the first character of every line."""
    starts = [0]
    position = text.find("\n")
    while position != -1:
        starts.append(position + 1)
        position = text.find("\n", position + 1)
    return starts


def line_index_for_offset(line_starts: Sequence[int], offset: int) -> int:
    """Return the zero-based index of the line containing ``offset``."""
    index = bisect.bisect_right(line_starts, offset) - 1
    return max(index, 0)


def line_bounds(text: str, offset: int) -> tuple[int, int]:
    """Return ``(start, end)`` of the line holding ``offset``, newline excluded."""
    offset = max(0, min(offset, len(text)))
    start = text.rfind("\n", 0, offset) + 1
    end = text.find("\n", offset)
    if end == -1:
        end = len(text)
    return start, end


def line_text_at(text: str, offset: int) -> str:
    """Return the full line of ``text`` that contains ``offset``."""
    start, end = line_bounds(text, offset)
    return text[start:end]


def comment_start(line: str) -> int:
    """Return the index of a ``//`` comment outside string literals, or -1."""
    quote = ""
    index = 0
    while index < len(line):
        char = line[index]
        if quote:
            if char == "\\":
                index += 1
            elif char == quote:
                quote = ""
        elif char in "'\"":
            quote = char
        elif line.startswith("//", index):
            return index
        index += 1
    return -1
