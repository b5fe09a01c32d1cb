"""Structured editing and minimal-diff serialization."""

from .editor import DEFAULT_INDENT, DEFAULT_SCOPE, GradleEditor
from .serializer import DiffLine, DiffType, GradleSerializer, ModificationSummary, ValidationIssue

__all__ = [
    "DEFAULT_INDENT",
    "DEFAULT_SCOPE",
    "DiffLine",
    "DiffType",
    "GradleEditor",
    "GradleSerializer",
    "ModificationSummary",
    "ValidationIssue",
]
