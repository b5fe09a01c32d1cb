"""Structured editor turning semantic intents into range-anchored modifications."""

from __future__ import annotations

import logging
import re
from typing import Callable, Pattern, Sequence, TypeVar

from ..errors import BlockNotFoundError, EditError, NotFoundError
from ..model.schema import Dependency, Plugin, Property, Repository
from ..model.source import AnyMappedEntity, EntityIndex, MappedEntity, SourcePosition, SourceRange
from ..parsing.recognizers import infer_repository_name, is_quoted_literal
from ..structured import Modification, ModificationKind
from ..utils.lines import comment_start, compute_line_starts, line_index_for_offset
from .serializer import GradleSerializer

LOGGER = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", Dependency, Plugin, Repository, Property)

DEFAULT_INDENT = "    "
DEFAULT_SCOPE = "implementation"
WELL_KNOWN_REPOSITORIES = ("mavenCentral", "mavenLocal", "google", "jcenter", "gradlePluginPortal")

_PLUGIN_VERSION_RE: Pattern[str] = re.compile(
    r"(?P<prefix>\bversion\s*\(?\s*(?P<quote>['\"]))(?P<version>[^'\"]*)(?P=quote)"
)
_PLUGIN_ID_END_RE: Pattern[str] = re.compile(r"\bid\s*\(?\s*(?P<quote>['\"])[^'\"]+(?P=quote)(?:\s*\))?")
_STRING_LITERAL_RE: Pattern[str] = re.compile(r"'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"")


def _code_portion(line: str) -> str:
    """Strip string literals and ``//`` comments so braces can be counted."""
    comment = comment_start(line)
    if comment != -1:
        line = line[:comment]
    return _STRING_LITERAL_RE.sub("", line)


class GradleEditor:
    """Accumulates modifications against one parsed build script.

    Lookups resolve against the entity index produced by the parser. After a
    modification is recorded the matching entity's ``value`` and ``raw_text``
    are updated in memory so later reads in the same session observe the
    pending state; ranges always keep pointing at the original text.

    Not safe for concurrent mutation.
    """

    def __init__(
        self,
        index: EntityIndex,
        *,
        indent: str = DEFAULT_INDENT,
        default_scope: str = DEFAULT_SCOPE,
        quote: str = "'",
    ) -> None:
        self._index = index
        self._indent = indent
        self._default_scope = default_scope
        self._quote = quote
        self._modifications: list[Modification] = []
        self._pending: dict[int, Modification] = {}
        self._originals: dict[int, str] = {}
        self._removed: set[int] = set()
        self._line_starts = compute_line_starts(index.original_text)

    @property
    def index(self) -> EntityIndex:
        return self._index

    @property
    def modifications(self) -> tuple[Modification, ...]:
        return tuple(self._modifications)

    def get_modifications(self) -> tuple[Modification, ...]:
        """Return a read-only snapshot of the pending modifications."""
        return self.modifications

    def clear(self) -> None:
        """Discard pending modifications; in-memory entity values are kept.

        The original text of every edited entity is remembered so later edits
        still anchor against the file as it was parsed.
        """
        self._modifications.clear()
        self._pending.clear()
        self._removed.clear()

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_dependency_version(
        self,
        group: str,
        name: str,
        version: str,
        *,
        scope: str | None = None,
    ) -> None:
        """Set the version of the first ``group:name`` dependency (optionally within ``scope``)."""
        entity = self._select_dependency(group, name, scope)
        current = entity.value.version
        if current == version:
            return

        new_text = self._substitute_dependency_version(entity, version)
        self._record_replace(
            entity,
            new_text,
            f"Update {group}:{name} version from '{current}' to '{version}'",
        )
        entity.value.version = version
        entity.value.raw = new_text

    def update_plugin_version(self, plugin_id: str, version: str) -> None:
        """Set the version of the first plugin declared with ``plugin_id``."""
        entity = self._select(self._index.plugins, lambda plugin: plugin.id == plugin_id, f"plugin {plugin_id}")
        current = entity.value.version
        if current == version:
            return

        new_text = self._substitute_plugin_version(entity, version)
        self._record_replace(
            entity,
            new_text,
            f"Update plugin {plugin_id} version from '{current}' to '{version}'",
        )
        entity.value.version = version

    def update_property(self, key: str, value: str) -> None:
        """Rewrite the ``key = value`` clause of the first property named ``key``."""
        entity = self._select(self._index.properties, lambda prop: prop.key == key, f"property {key}")
        current = entity.value.value
        if current == value:
            return

        new_text = self._render_property(entity, value)
        self._record_replace(
            entity,
            new_text,
            f"Update property {key} from '{current}' to '{value}'",
        )
        entity.value.value = value

    def update_repository_url(self, name: str, url: str) -> None:
        """Point the repository recorded under ``name`` at ``url``."""
        entity = self._select(
            self._index.repositories,
            lambda repository: repository.name == name and bool(repository.url),
            f"repository {name}",
        )
        current = entity.value.url
        if current == url:
            return

        offset = entity.raw_text.find(current)
        new_text = entity.raw_text[:offset] + url + entity.raw_text[offset + len(current):]
        self._record_replace(
            entity,
            new_text,
            f"Update repository {name} url from '{current}' to '{url}'",
        )
        entity.value.url = url

    # ------------------------------------------------------------------
    # Insertions and removals
    # ------------------------------------------------------------------

    def add_dependency(self, group: str, name: str, version: str = "", scope: str | None = None) -> None:
        """Insert a dependency line before the closing brace of ``dependencies { }``."""
        scope = scope or self._default_scope
        coordinate = ":".join(part for part in (group, name, version) if part)
        if self._uses_call_syntax():
            declaration = f'{scope}("{coordinate}")'
        else:
            declaration = f"{scope} {self._quote}{coordinate}{self._quote}"
        description = f"Add dependency {coordinate} with scope {scope}"
        self._insert_into_block("dependencies", declaration, description)

    def add_plugin(self, plugin_id: str, version: str = "") -> None:
        """Insert an ``id`` declaration into the ``plugins { }`` block."""
        if self._uses_call_syntax():
            declaration = f'id("{plugin_id}")'
            if version:
                declaration += f' version "{version}"'
        else:
            quote = self._quote
            declaration = f"id {quote}{plugin_id}{quote}"
            if version:
                declaration += f" version {quote}{version}{quote}"
        description = f"Add plugin {plugin_id}" + (f" version {version}" if version else "")
        self._insert_into_block("plugins", declaration, description)

    def add_repository(self, name_or_url: str) -> None:
        """Insert a well-known repository shortcut or a ``maven { url ... }`` entry."""
        if name_or_url in WELL_KNOWN_REPOSITORIES:
            declaration = f"{name_or_url}()"
            description = f"Add repository {name_or_url}"
        else:
            if self._uses_call_syntax():
                declaration = f'maven {{ url = uri("{name_or_url}") }}'
            else:
                declaration = f"maven {{ url {self._quote}{name_or_url}{self._quote} }}"
            description = f"Add repository {infer_repository_name(name_or_url)} ({name_or_url})"
        self._insert_into_block("repositories", declaration, description)

    def remove_dependency(self, group: str, name: str, *, scope: str | None = None) -> None:
        """Delete the whole line declaring the first matching dependency.

        Raises :class:`EditError` when the line holds other code besides the
        declaration, such as ``dependencies { implementation 'a:b:1' }``.
        """
        entity = self._select_dependency(group, name, scope)
        if not self._owns_line(entity):
            raise EditError(
                f"dependency {group}:{name} shares line {entity.range.start.line} with other code",
                details={"group": group, "name": name, "line": entity.range.start.line},
            )
        text = self._index.original_text
        line_index = entity.range.start.line - 1
        start = self._line_starts[line_index]
        if line_index + 1 < len(self._line_starts):
            end = self._line_starts[line_index + 1]
        else:
            end = len(text)
            if start > 0:
                start -= 1
        modification = Modification(
            kind=ModificationKind.DELETE,
            range=self._range_between(start, end),
            old_text=text[start:end],
            new_text="",
            description=f"Remove dependency {group}:{name}",
        )
        pending = self._pending.pop(id(entity), None)
        if pending is not None:
            self._modifications.remove(pending)
        self._modifications.append(modification)
        self._removed.add(id(entity))

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply(self) -> str:
        """Render the pending modifications against the original text."""
        return GradleSerializer(self._index.original_text).apply(self._modifications)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _select(
        self,
        entities: Sequence[MappedEntity[EntityT]],
        predicate: Callable[[EntityT], bool],
        label: str,
    ) -> MappedEntity[EntityT]:
        for entity in entities:
            if id(entity) in self._removed:
                continue
            if predicate(entity.value):
                return entity
        raise NotFoundError(f"{label} not found", details={"selector": label})

    def _select_dependency(self, group: str, name: str, scope: str | None) -> MappedEntity[Dependency]:
        label = f"dependency {group}:{name}" + (f" ({scope})" if scope else "")
        candidates = [
            entity
            for entity in self._index.find_dependencies(group, name, scope)
            if id(entity) not in self._removed and not entity.value.is_project_reference
        ]
        if not candidates:
            raise NotFoundError(f"{label} not found", details={"group": group, "name": name, "scope": scope})
        if scope is None and len({entity.value.scope for entity in candidates}) > 1:
            first = candidates[0]
            LOGGER.warning(
                "Dependency %s:%s is declared under several scopes (%s); using the %s declaration on line %d",
                group,
                name,
                ", ".join(sorted({entity.value.scope or "<none>" for entity in candidates})),
                first.value.scope or "unscoped",
                first.range.start.line,
            )
        return candidates[0]

    def _record_replace(self, entity: AnyMappedEntity, new_text: str, description: str) -> None:
        """Append a replace modification, folding repeated edits of one entity."""
        key = id(entity)
        old_text = self._originals.setdefault(key, entity.raw_text)
        previous = self._pending.pop(key, None)
        if previous is not None:
            self._modifications.remove(previous)

        entity.raw_text = new_text
        if new_text == old_text:
            return

        modification = Modification(
            kind=ModificationKind.REPLACE,
            range=entity.range,
            old_text=old_text,
            new_text=new_text,
            description=description,
        )
        self._modifications.append(modification)
        self._pending[key] = modification

    @staticmethod
    def _substitute_dependency_version(entity: MappedEntity[Dependency], version: str) -> str:
        raw = entity.raw_text
        dependency = entity.value
        # raw is a quoted literal: <quote>group:name[:version...]<quote>
        version_start = 1 + len(dependency.group) + 1 + len(dependency.name)
        if dependency.version:
            version_start += 1
            version_end = version_start + len(dependency.version)
            return raw[:version_start] + version + raw[version_end:]
        return raw[:version_start] + ":" + version + raw[version_start:]

    def _substitute_plugin_version(self, entity: MappedEntity[Plugin], version: str) -> str:
        raw = entity.raw_text
        match = _PLUGIN_VERSION_RE.search(raw)
        if match:
            return raw[: match.start("version")] + version + raw[match.end("version"):]
        id_match = _PLUGIN_ID_END_RE.search(raw)
        if id_match is None:
            # apply plugin: declarations carry no version clause
            raise NotFoundError(
                f"plugin {entity.value.id} has no versionable declaration",
                details={"plugin": entity.value.id, "raw_text": raw},
            )
        quote = id_match.group("quote")
        return raw[: id_match.end()] + f" version {quote}{version}{quote}" + raw[id_match.end():]

    @staticmethod
    def _render_property(entity: MappedEntity[Property], value: str) -> str:
        raw = entity.raw_text
        _, _, current = raw.partition("=")
        current = current.strip()
        prefix = raw[: len(raw) - len(current)]
        if is_quoted_literal(current):
            quote = current[0]
            return f"{prefix}{quote}{value}{quote}"
        # unquoted expressions such as JavaVersion.VERSION_11 stay unquoted
        return f"{prefix}{value}"

    def _owns_line(self, entity: MappedEntity[Dependency]) -> bool:
        """True when only the scope, a call wrapper and comments surround ``entity`` on its line."""
        line = self._index.line_text(entity.range.start.line)
        local_start = entity.range.start.column - 1
        before = line[:local_start].strip()
        if before.endswith("("):
            before = before[:-1].rstrip()
        after = line[local_start + entity.range.length:]
        comment = comment_start(after)
        if comment != -1:
            after = after[:comment]
        after = after.strip()
        if after.startswith(")"):
            after = after[1:].strip()
        return before in {"", entity.value.scope} and not after

    def _uses_call_syntax(self) -> bool:
        """Detect Kotlin-style ``scope("...")`` declarations in the parsed file."""
        for entity in self._index.dependencies:
            if entity.value.is_project_reference:
                continue
            line = self._index.line_text(entity.range.start.line)
            prefix = line[: entity.range.start.column - 1].rstrip()
            return prefix.endswith("(")
        for entity in self._index.plugins:
            return entity.raw_text.startswith("id(") or entity.raw_text.startswith("id (")
        return False

    def _insert_into_block(self, block: str, declaration: str, description: str) -> None:
        close_line = self._find_block_end(block)
        offset = self._line_starts[close_line]
        modification = Modification(
            kind=ModificationKind.INSERT,
            range=SourceRange.point(line=close_line + 1, column=1, offset=offset),
            old_text="",
            new_text=f"{self._indent}{declaration}\n",
            description=description,
        )
        self._modifications.append(modification)

    def _find_block_end(self, block: str) -> int:
        """Return the zero-based index of the line closing the ``block { }`` region.

        Top-level blocks win over nested ones such as ``buildscript { dependencies { } }``.
        """
        opener = re.compile(rf"(?<![\w.]){re.escape(block)}\s*\{{")
        lines = self._index.lines
        candidates: list[tuple[int, int, int]] = []
        depth = 0
        for number, line in enumerate(lines):
            code = _code_portion(line)
            match = opener.search(code)
            if match:
                candidates.append((number, match.start(), depth + code[: match.start()].count("{")))
            depth += code.count("{") - code.count("}")
        if not candidates:
            raise BlockNotFoundError(f"{block} block not found", details={"block": block})

        start_line, column, _ = next(
            (candidate for candidate in candidates if candidate[2] == 0),
            candidates[0],
        )
        depth = 0
        started = False
        for number in range(start_line, len(lines)):
            code = _code_portion(lines[number])
            if number == start_line:
                code = code[column:]
            for char in code:
                if char == "{":
                    depth += 1
                    started = True
                elif char == "}" and started:
                    depth -= 1
                    if depth == 0:
                        if number == start_line:
                            raise BlockNotFoundError(
                                f"{block} block opens and closes on line {number + 1}",
                                details={"block": block, "line": number + 1},
                            )
                        return number
        raise BlockNotFoundError(
            f"{block} block starting on line {start_line + 1} is not closed",
            details={"block": block, "line": start_line + 1},
        )

    def _range_between(self, start: int, end: int) -> SourceRange:
        start_line = line_index_for_offset(self._line_starts, start)
        end_line = line_index_for_offset(self._line_starts, end)
        return SourceRange(
            start=SourcePosition(
                line=start_line + 1,
                column=start - self._line_starts[start_line] + 1,
                start_byte=start,
                end_byte=end,
                length=end - start,
            ),
            end=SourcePosition(
                line=end_line + 1,
                column=end - self._line_starts[end_line] + 1,
                start_byte=end,
                end_byte=end,
                length=0,
            ),
        )


__all__ = ["DEFAULT_INDENT", "DEFAULT_SCOPE", "GradleEditor", "WELL_KNOWN_REPOSITORIES"]
