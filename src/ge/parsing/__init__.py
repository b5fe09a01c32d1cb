"""Source-mapped parsing of Gradle build scripts."""

from .parser import SourceMappedParser, parse
from .recognizers import (
    DEFAULT_RECOGNIZERS,
    DependencyRecognizer,
    PluginRecognizer,
    PropertyRecognizer,
    Recognizer,
    RecognizerMatch,
    RepositoryRecognizer,
    TaskRecognizer,
)

__all__ = [
    "DEFAULT_RECOGNIZERS",
    "DependencyRecognizer",
    "PluginRecognizer",
    "PropertyRecognizer",
    "Recognizer",
    "RecognizerMatch",
    "RepositoryRecognizer",
    "SourceMappedParser",
    "TaskRecognizer",
    "parse",
]
