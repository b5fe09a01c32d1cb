"""Line recognisers that turn Gradle declarations into entity records.

Each recogniser inspects a single line and either declines (``None``) or
reports the entity together with the line-relative ``[start, end)`` span of
the text it was derived from. The parser converts that span into absolute
offsets; recognisers never see offsets outside their own line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern, Protocol, Sequence

from ..model.schema import Dependency, EntityKind, Plugin, Property, Repository, Task
from ..utils.lines import comment_start

__all__ = [
    "DEFAULT_RECOGNIZERS",
    "DependencyRecognizer",
    "PluginRecognizer",
    "PropertyRecognizer",
    "Recognizer",
    "RecognizerMatch",
    "RepositoryRecognizer",
    "TaskRecognizer",
    "infer_repository_name",
    "is_quoted_literal",
]


@dataclass(frozen=True, slots=True)
class RecognizerMatch:
    """Successful recognition of one entity on a line."""

    kind: EntityKind
    value: Dependency | Plugin | Repository | Property | Task
    start: int
    end: int
    text: str

    @classmethod
    def from_regex(
        cls,
        kind: EntityKind,
        value: Dependency | Plugin | Repository | Property | Task,
        match: re.Match[str],
    ) -> "RecognizerMatch":
        return cls(kind=kind, value=value, start=match.start(), end=match.end(), text=match.group(0))


class Recognizer(Protocol):
    """Interface shared by every line recogniser."""

    kind: EntityKind

    def try_match(self, line: str, line_number: int) -> RecognizerMatch | None:
        ...


_ASSIGNMENT_RE: Pattern[str] = re.compile(
    r"^(?P<indent>\s*)(?P<key>[A-Za-z_][\w.]*)\s*=(?!=)\s*(?P<value>.*?)\s*$"
)
_RESERVED_PROPERTY_KEYS = frozenset({"url"})
_QUOTED_LITERAL_RE: Pattern[str] = re.compile(r"'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"")


def is_quoted_literal(text: str) -> bool:
    """Return True when ``text`` is exactly one quoted string literal."""
    return bool(_QUOTED_LITERAL_RE.fullmatch(text))


class PropertyRecognizer:
    """Recognise ``key = value`` assignments.

    The recorded span covers the clause from the key to the end of the value
    expression; a trailing ``//`` comment and trailing whitespace stay
    outside it. ``url`` assignments are left to the repository recogniser.
    """

    kind = EntityKind.PROPERTY

    def try_match(self, line: str, line_number: int) -> RecognizerMatch | None:
        match = _ASSIGNMENT_RE.match(line)
        if not match:
            return None
        key = match.group("key")
        if key in _RESERVED_PROPERTY_KEYS:
            return None
        raw_value = match.group("value")
        comment = comment_start(raw_value)
        if comment != -1:
            raw_value = raw_value[:comment].rstrip()
        if not raw_value:
            return None
        value = raw_value[1:-1] if is_quoted_literal(raw_value) else raw_value
        start, end = match.start("key"), match.start("value") + len(raw_value)
        return RecognizerMatch(
            kind=self.kind,
            value=Property(key=key, value=value),
            start=start,
            end=end,
            text=line[start:end],
        )


_COORDINATE_RE: Pattern[str] = re.compile(r"(?P<quote>['\"])(?P<body>[^'\"\s:]+:[^'\"\s]+)(?P=quote)")
_PROJECT_REF_RE: Pattern[str] = re.compile(r"project\(\s*(?:path\s*:\s*)?['\"]:(?P<name>[^'\"]*)['\"]\s*\)")
_SCOPE_RE: Pattern[str] = re.compile(r"^\s*(?P<scope>[A-Za-z_]\w*)\b")
_NON_SCOPE_WORDS = frozenset({"id", "url", "maven", "apply", "group", "version"})


class DependencyRecognizer:
    """Recognise quoted ``group:name[:version]`` literals and project references."""

    kind = EntityKind.DEPENDENCY

    def try_match(self, line: str, line_number: int) -> RecognizerMatch | None:
        scope = self._scope(line)
        for match in _COORDINATE_RE.finditer(line):
            body = match.group("body")
            if "://" in body:
                continue
            parts = body.split(":")
            if len(parts) < 2 or not parts[0] or not parts[1]:
                continue
            version = parts[2] if len(parts) >= 3 else ""
            raw = match.group(0)
            dependency = Dependency(
                group=parts[0],
                name=parts[1],
                version=version,
                scope=scope,
                raw=raw,
            )
            return RecognizerMatch.from_regex(self.kind, dependency, match)

        project = _PROJECT_REF_RE.search(line)
        if project:
            raw = project.group(0)
            dependency = Dependency(name=project.group("name"), scope=scope, raw=raw)
            return RecognizerMatch.from_regex(self.kind, dependency, project)
        return None

    @staticmethod
    def _scope(line: str) -> str:
        match = _SCOPE_RE.match(line)
        if not match:
            return ""
        scope = match.group("scope")
        if scope in _NON_SCOPE_WORDS or scope == "project":
            return ""
        return scope


_PLUGIN_ID_RE: Pattern[str] = re.compile(
    r"\bid\s*\(?\s*(?P<quote>['\"])(?P<id>[^'\"]+)(?P=quote)(?:\s*\))?"
    r"(?:\s+version\s*\(?\s*(?P<vquote>['\"])(?P<version>[^'\"]*)(?P=vquote)(?:\s*\))?)?"
)
_APPLY_PLUGIN_RE: Pattern[str] = re.compile(r"\bapply\s+plugin\s*:\s*(?P<quote>['\"])(?P<id>[^'\"]+)(?P=quote)")


class PluginRecognizer:
    """Recognise ``id 'x' version 'v'`` and ``apply plugin: 'x'`` declarations."""

    kind = EntityKind.PLUGIN

    def try_match(self, line: str, line_number: int) -> RecognizerMatch | None:
        match = _PLUGIN_ID_RE.search(line)
        if match:
            plugin = Plugin(id=match.group("id"), version=match.group("version") or "")
            return RecognizerMatch.from_regex(self.kind, plugin, match)
        match = _APPLY_PLUGIN_RE.search(line)
        if match:
            plugin = Plugin(id=match.group("id"))
            return RecognizerMatch.from_regex(self.kind, plugin, match)
        return None


_WELL_KNOWN_REPOSITORY_RE: Pattern[str] = re.compile(
    r"\b(?P<name>mavenCentral|mavenLocal|google|jcenter|gradlePluginPortal)\(\s*\)"
)
_REPOSITORY_URL_RE: Pattern[str] = re.compile(
    r"\burl\s*(?:=\s*)?(?:uri\(\s*)?(?P<quote>['\"])(?P<url>(?:https?|file)://[^'\"]+)(?P=quote)(?:\s*\))?"
)


def infer_repository_name(url: str) -> str:
    """Use the URL host as a repository name, ``custom-maven`` when absent."""
    parts = url.split("/")
    if len(parts) > 2 and parts[2]:
        return parts[2]
    return "custom-maven"


class RepositoryRecognizer:
    """Recognise well-known repository shortcuts and ``url`` declarations."""

    kind = EntityKind.REPOSITORY

    def try_match(self, line: str, line_number: int) -> RecognizerMatch | None:
        match = _WELL_KNOWN_REPOSITORY_RE.search(line)
        if match:
            repository = Repository(name=match.group("name"))
            return RecognizerMatch.from_regex(self.kind, repository, match)
        match = _REPOSITORY_URL_RE.search(line)
        if match:
            url = match.group("url")
            repository = Repository(name=infer_repository_name(url), url=url)
            return RecognizerMatch.from_regex(self.kind, repository, match)
        return None


_TASK_KEYWORD_RE: Pattern[str] = re.compile(
    r"(?<![\w.])task\s+(?P<name>[A-Za-z_]\w*)(?:\s*\(\s*type\s*:\s*(?P<type>[\w.]+)\s*\))?"
)
_TASK_CALL_RE: Pattern[str] = re.compile(
    r"(?<![\w.])(?:tasks\.(?:register|create)|task)(?:<(?P<generic>[\w.]+)>)?\(\s*"
    r"(?P<quote>['\"])(?P<name>[^'\"]+)(?P=quote)"
    r"(?:\s*,\s*(?P<type>[A-Z][\w.]*)(?:::class(?:\.java)?)?)?\s*\)"
)


class TaskRecognizer:
    """Recognise ``task name``, ``task("name")`` and ``tasks.register("name")`` declarations."""

    kind = EntityKind.TASK

    def try_match(self, line: str, line_number: int) -> RecognizerMatch | None:
        if line.lstrip().startswith("task "):
            match = _TASK_KEYWORD_RE.search(line)
            if match:
                task = Task(name=match.group("name"), type=match.group("type") or "")
                return RecognizerMatch.from_regex(self.kind, task, match)
        match = _TASK_CALL_RE.search(line)
        if match:
            task_type = match.group("generic") or match.group("type") or ""
            task = Task(name=match.group("name"), type=task_type)
            return RecognizerMatch.from_regex(self.kind, task, match)
        return None


DEFAULT_RECOGNIZERS: Sequence[Recognizer] = (
    PropertyRecognizer(),
    DependencyRecognizer(),
    PluginRecognizer(),
    RepositoryRecognizer(),
    TaskRecognizer(),
)
