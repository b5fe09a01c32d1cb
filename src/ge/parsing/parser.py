"""Source-mapped parser binding recognised entities to exact text ranges."""

from __future__ import annotations

import logging
from typing import Collection, Iterable, Sequence

from ..model.schema import EntityKind
from ..model.source import EntityIndex, MappedEntity, SourceRange
from ..utils.lines import split_lines
from .recognizers import DEFAULT_RECOGNIZERS, Recognizer, RecognizerMatch

LOGGER = logging.getLogger(__name__)

_COMMENT_PREFIXES = ("//", "/*", "*")


class SourceMappedParser:
    """Single forward pass over a build script producing an :class:`EntityIndex`.

    Recognisers are tried in order for every line and the first match wins,
    so a line contributes at most one entity. ``enabled_kinds`` restricts the
    recognisers to the listed entity kinds. Each parse returns a fresh index;
    the parser keeps no state between calls.
    """

    def __init__(
        self,
        recognizers: Iterable[Recognizer] | None = None,
        *,
        skip_comments: bool = True,
        enabled_kinds: Collection[EntityKind] | None = None,
    ) -> None:
        candidates = tuple(recognizers) if recognizers is not None else tuple(DEFAULT_RECOGNIZERS)
        if enabled_kinds is not None:
            candidates = tuple(recognizer for recognizer in candidates if recognizer.kind in enabled_kinds)
        self._recognizers: Sequence[Recognizer] = candidates
        self._skip_comments = skip_comments

    @property
    def recognizers(self) -> Sequence[Recognizer]:
        return self._recognizers

    def parse(self, text: str) -> EntityIndex:
        lines = split_lines(text)
        index = EntityIndex(original_text=text, lines=lines)

        line_start = 0
        for line_number, line in enumerate(lines, start=1):
            if not self._is_skipped(line):
                match = self._recognize(line, line_number)
                if match is not None:
                    self._bind(index, match, line, line_number, line_start)
            line_start += len(line) + 1

        LOGGER.debug(
            "Parsed %d lines: %d dependencies, %d plugins, %d repositories, %d properties, %d tasks",
            len(lines),
            len(index.dependencies),
            len(index.plugins),
            len(index.repositories),
            len(index.properties),
            len(index.tasks),
        )
        return index

    def _is_skipped(self, line: str) -> bool:
        stripped = line.strip()
        if not stripped:
            return True
        return self._skip_comments and stripped.startswith(_COMMENT_PREFIXES)

    def _recognize(self, line: str, line_number: int) -> RecognizerMatch | None:
        for recognizer in self._recognizers:
            match = recognizer.try_match(line, line_number)
            if match is not None:
                return match
        return None

    @staticmethod
    def _bind(
        index: EntityIndex,
        match: RecognizerMatch,
        line: str,
        line_number: int,
        line_start: int,
    ) -> None:
        """Convert a line-relative match into a mapped entity, or drop it."""
        if not 0 <= match.start <= match.end <= len(line):
            message = (
                f"line {line_number}: {match.kind.value} recognizer reported span "
                f"[{match.start}, {match.end}) outside a line of length {len(line)}; entity dropped"
            )
            index.warnings.append(message)
            LOGGER.warning(message)
            return

        source_range = SourceRange.on_line(line_number, line_start, match.start, match.end)
        start, end = source_range.span
        raw_text = index.original_text[start:end]
        if raw_text != match.text:
            message = (
                f"line {line_number}: {match.kind.value} text {match.text!r} does not occur at "
                f"offset {start} (found {raw_text!r}); entity dropped"
            )
            index.warnings.append(message)
            LOGGER.warning(message)
            return

        index.add(MappedEntity(value=match.value, range=source_range, raw_text=raw_text))


def parse(
    text: str,
    *,
    skip_comments: bool = True,
    enabled_kinds: Collection[EntityKind] | None = None,
) -> EntityIndex:
    """Parse ``text`` with the default recognisers."""
    return SourceMappedParser(skip_comments=skip_comments, enabled_kinds=enabled_kinds).parse(text)


__all__ = ["SourceMappedParser", "parse"]
