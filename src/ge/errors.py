"""Exceptions raised while editing build scripts."""

from __future__ import annotations

from typing import Any, Mapping


class EditError(RuntimeError):
    """Base class for structured-edit failures."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class NotFoundError(EditError):
    """Raised when a selector matches no recognised entity."""


class BlockNotFoundError(EditError):
    """Raised when the block an insertion targets is absent or unterminated."""


class InvalidRangeError(EditError):
    """Raised when a modification's range is out of bounds or inverted."""


class TextMismatchError(EditError):
    """Raised when the text at a modification's range is not what it expects."""

    def __init__(self, expected: str, actual: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(
            f"text mismatch: expected {expected!r}, got {actual!r}",
            details={"expected": expected, "actual": actual, **dict(details or {})},
        )
        self.expected = expected
        self.actual = actual


class ConfigError(EditError):
    """Raised when the settings file cannot be loaded."""


__all__ = [
    "BlockNotFoundError",
    "ConfigError",
    "EditError",
    "InvalidRangeError",
    "NotFoundError",
    "TextMismatchError",
]
