"""Minimal-diff serializer replaying modifications against the original text."""

from __future__ import annotations

import difflib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Sequence

from ..errors import InvalidRangeError, TextMismatchError
from ..structured import Modification, ModificationKind
from ..utils.lines import line_bounds

LOGGER = logging.getLogger(__name__)
TELEMETRY_LOGGER = logging.getLogger("ge.telemetry")


class DiffType(str, Enum):
    """Classification of a rendered diff line."""

    ADD = "add"
    REMOVE = "remove"


_DIFF_PREFIX = {DiffType.ADD: "+", DiffType.REMOVE: "-"}


@dataclass(slots=True)
class DiffLine:
    """Single human-readable line of a modification diff."""

    type: DiffType
    line_number: int
    content: str
    description: str = ""

    def __str__(self) -> str:
        return f"{_DIFF_PREFIX.get(self.type, ' ')} {self.line_number}: {self.content}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "line_number": self.line_number,
            "content": self.content,
            "description": self.description,
        }


@dataclass(slots=True)
class ValidationIssue:
    """Problem found while validating a modification before applying it."""

    index: int
    code: str
    message: str

    def __str__(self) -> str:
        return f"modification {self.index}: {self.message}"


@dataclass(slots=True)
class ModificationSummary:
    """Aggregate counts over a modification set."""

    total: int = 0
    by_kind: dict[ModificationKind, int] = field(default_factory=dict)
    descriptions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_kind": {kind.value: count for kind, count in self.by_kind.items()},
            "descriptions": list(self.descriptions),
        }


def _emit_event(event: str, **fields: Any) -> None:
    """Log structured telemetry events for modification replay."""
    payload = {"event": event, "timestamp": datetime.now(timezone.utc).isoformat()}
    payload.update(fields)
    TELEMETRY_LOGGER.info(json.dumps(payload, separators=(",", ":"), ensure_ascii=True, default=str))


def _apply_order(modifications: Sequence[Modification]) -> list[Modification]:
    """Order modifications from the highest start offset to the lowest.

    At equal offsets replace/delete run before inserts, and later inserts run
    before earlier ones, so inserted lines keep their submission order.
    """
    indexed = list(enumerate(modifications))
    indexed.sort(
        key=lambda item: (
            item[1].start,
            item[1].kind is not ModificationKind.INSERT,
            item[0],
        ),
        reverse=True,
    )
    return [modification for _, modification in indexed]


class GradleSerializer:
    """Apply, validate, and describe modifications for one original text."""

    def __init__(self, original_text: str) -> None:
        self._original_text = original_text

    @property
    def original_text(self) -> str:
        return self._original_text

    def apply(self, modifications: Iterable[Modification]) -> str:
        """Return the original text with every modification spliced in.

        Raises :class:`InvalidRangeError` or :class:`TextMismatchError` and
        produces no output when any modification cannot be applied.
        """
        pending = list(modifications)
        if not pending:
            return self._original_text

        text = self._original_text
        recovered = 0
        for modification in _apply_order(pending):
            try:
                text, was_recovered = self._apply_one(text, modification)
            except (InvalidRangeError, TextMismatchError) as error:
                _emit_event(
                    "modification_apply_failed",
                    description=modification.description,
                    kind=modification.kind.value,
                    start=modification.start,
                    end=modification.end,
                    error=str(error),
                )
                raise
            recovered += int(was_recovered)

        _emit_event(
            "modifications_applied",
            total=len(pending),
            recovered=recovered,
            original_length=len(self._original_text),
            new_length=len(text),
        )
        return text

    def _apply_one(self, text: str, modification: Modification) -> tuple[str, bool]:
        start, end = modification.start, modification.end
        if start < 0 or end > len(text) or start > end:
            raise InvalidRangeError(
                f"invalid range [{start}, {end}) for {modification.kind.value} on text of length {len(text)}",
                details={"start": start, "end": end, "length": len(text), "description": modification.description},
            )

        expected = modification.old_text if modification.kind is not ModificationKind.INSERT else ""
        actual = text[start:end]
        if actual == expected:
            return text[:start] + modification.new_text + text[end:], False

        line_start, line_end = line_bounds(text, start)
        line = text[line_start:line_end]
        if expected and line.count(expected) == 1:
            relocated = line_start + line.index(expected)
            LOGGER.debug(
                "Relocated %r from offset %d to %d on line %d",
                expected,
                start,
                relocated,
                modification.range.start.line,
            )
            _emit_event(
                "modification_recovered",
                description=modification.description,
                expected_start=start,
                actual_start=relocated,
            )
            return text[:relocated] + modification.new_text + text[relocated + len(expected):], True

        raise TextMismatchError(
            expected,
            actual,
            details={"start": start, "end": end, "description": modification.description},
        )

    def validate(self, modifications: Iterable[Modification]) -> list[ValidationIssue]:
        """Check every modification against the original text and report all problems."""
        issues: list[ValidationIssue] = []
        length = len(self._original_text)
        for index, modification in enumerate(modifications):
            start, end = modification.start, modification.end
            if start < 0:
                issues.append(ValidationIssue(index, "invalid_range", f"invalid start position {start}"))
            if end > length:
                issues.append(
                    ValidationIssue(index, "invalid_range", f"end position {end} exceeds text length {length}")
                )
            if start > end:
                issues.append(
                    ValidationIssue(index, "invalid_range", f"start position {start} > end position {end}")
                )
            if modification.kind is ModificationKind.INSERT:
                continue
            if 0 <= start <= end <= length:
                actual = self._original_text[start:end]
                if actual != modification.old_text:
                    issues.append(
                        ValidationIssue(
                            index,
                            "text_mismatch",
                            f"text mismatch, expected {modification.old_text!r}, got {actual!r}",
                        )
                    )
        return issues

    def diff(self, modifications: Iterable[Modification]) -> list[DiffLine]:
        """Render modifications as diff lines in submission order."""
        lines: list[DiffLine] = []
        for modification in modifications:
            line_number = modification.range.start.line
            if modification.kind is ModificationKind.REPLACE:
                lines.append(DiffLine(DiffType.REMOVE, line_number, modification.old_text, modification.description))
                lines.append(DiffLine(DiffType.ADD, line_number, modification.new_text, modification.description))
            elif modification.kind is ModificationKind.INSERT:
                lines.append(DiffLine(DiffType.ADD, line_number, modification.new_text, modification.description))
            elif modification.kind is ModificationKind.DELETE:
                lines.append(DiffLine(DiffType.REMOVE, line_number, modification.old_text, modification.description))
        return lines

    @staticmethod
    def summarize(modifications: Iterable[Modification]) -> ModificationSummary:
        summary = ModificationSummary()
        for modification in modifications:
            summary.total += 1
            summary.by_kind[modification.kind] = summary.by_kind.get(modification.kind, 0) + 1
            summary.descriptions.append(modification.description)
        return summary

    def unified_diff(
        self,
        new_text: str,
        *,
        fromfile: str = "a/build.gradle",
        tofile: str = "b/build.gradle",
        context: int = 3,
    ) -> str:
        """Return a unified diff between the original text and ``new_text``."""
        return "".join(
            difflib.unified_diff(
                self._original_text.splitlines(keepends=True),
                new_text.splitlines(keepends=True),
                fromfile=fromfile,
                tofile=tofile,
                n=context,
            )
        )


__all__ = [
    "DiffLine",
    "DiffType",
    "GradleSerializer",
    "ModificationSummary",
    "ValidationIssue",
]
