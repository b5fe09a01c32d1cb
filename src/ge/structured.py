"""Typed payloads that describe pending edits to a build script."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .model.source import SourceRange


class ModificationKind(str, Enum):
    """Edit operations understood by the serializer."""

    REPLACE = "replace"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Modification:
    """Range-anchored edit against the original text.

    ``replace`` and ``delete`` ranges cover text that existed in the original
    file and ``old_text`` records it; ``insert`` ranges are zero-length points.
    """

    kind: ModificationKind
    range: SourceRange
    old_text: str
    new_text: str
    description: str = ""

    @property
    def start(self) -> int:
        return self.range.start.start_byte

    @property
    def end(self) -> int:
        return self.range.end.start_byte

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "range": self.range.to_dict(),
            "old_text": self.old_text,
            "new_text": self.new_text,
            "description": self.description,
        }


__all__ = ["Modification", "ModificationKind"]
