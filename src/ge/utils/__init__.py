"""Small text utilities shared by the parser and serializer."""

from .lines import comment_start, compute_line_starts, line_bounds, line_index_for_offset, line_text_at, split_lines

__all__ = [
    "comment_start",
    "compute_line_starts",
    "line_bounds",
    "line_index_for_offset",
    "line_text_at",
    "split_lines",
]
