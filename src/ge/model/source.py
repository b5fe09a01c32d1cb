"""Source positions and the position-mapped entity index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, TypeVar, Union

from .schema import Dependency, EntityKind, Plugin, ProjectSummary, Property, Repository, Task

T = TypeVar("T", Dependency, Plugin, Repository, Property, Task)


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """Location of a span boundary in the original text.

    ``line`` and ``column`` are 1-based and only used for display.
    ``start_byte`` and ``end_byte`` are 0-based character indexes into the
    decoded ``str``, not UTF-8 byte offsets; they differ from byte positions
    once a file contains non-ASCII text.
    """

    line: int
    column: int
    start_byte: int
    end_byte: int
    length: int = 0

    def __post_init__(self) -> None:
        if self.line < 1 or self.column < 1:
            raise ValueError(f"line/column must be >= 1, got {self.line}/{self.column}")
        if self.start_byte < 0:
            raise ValueError(f"start_byte must be >= 0, got {self.start_byte}")
        if self.end_byte < self.start_byte:
            raise ValueError(f"end_byte must be >= start_byte, got {self.end_byte} < {self.start_byte}")
        if self.length != self.end_byte - self.start_byte:
            raise ValueError(
                f"length must equal end_byte - start_byte, got {self.length} != {self.end_byte - self.start_byte}"
            )

    def __str__(self) -> str:
        return f"line {self.line}, col {self.column}"

    def to_dict(self) -> dict[str, int]:
        return {
            "line": self.line,
            "column": self.column,
            "start_byte": self.start_byte,
            "end_byte": self.end_byte,
            "length": self.length,
        }


@dataclass(frozen=True, slots=True)
class SourceRange:
    """Half-open span ``[start.start_byte, end.start_byte)`` of the original text."""

    start: SourcePosition
    end: SourcePosition

    def __post_init__(self) -> None:
        if self.start.start_byte > self.end.start_byte:
            raise ValueError(
                f"range start {self.start.start_byte} is after range end {self.end.start_byte}"
            )

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"

    @property
    def span(self) -> tuple[int, int]:
        return self.start.start_byte, self.end.start_byte

    @property
    def length(self) -> int:
        return self.end.start_byte - self.start.start_byte

    @property
    def is_point(self) -> bool:
        return self.length == 0

    @classmethod
    def on_line(cls, line: int, line_start: int, local_start: int, local_end: int) -> "SourceRange":
        """Build a single-line range from line-relative offsets."""
        start_byte = line_start + local_start
        end_byte = line_start + local_end
        return cls(
            start=SourcePosition(
                line=line,
                column=local_start + 1,
                start_byte=start_byte,
                end_byte=end_byte,
                length=end_byte - start_byte,
            ),
            end=SourcePosition(
                line=line,
                column=max(local_end, 1),
                start_byte=end_byte,
                end_byte=end_byte,
                length=0,
            ),
        )

    @classmethod
    def point(cls, line: int, column: int, offset: int) -> "SourceRange":
        """Zero-length range used to anchor insertions."""
        position = SourcePosition(line=line, column=column, start_byte=offset, end_byte=offset, length=0)
        return cls(start=position, end=position)

    def contains(self, line: int, column: int) -> bool:
        if line < self.start.line or line > self.end.line:
            return False
        if line == self.start.line and column < self.start.column:
            return False
        if line == self.end.line and column > self.end.column:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(slots=True)
class MappedEntity(Generic[T]):
    """Recognised entity bound to the exact text it was derived from."""

    value: T
    range: SourceRange
    raw_text: str

    @property
    def kind(self) -> EntityKind:
        return _KIND_BY_TYPE[type(self.value)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": self.value.model_dump(),
            "range": self.range.to_dict(),
            "raw_text": self.raw_text,
        }


_KIND_BY_TYPE: dict[type, EntityKind] = {
    Dependency: EntityKind.DEPENDENCY,
    Plugin: EntityKind.PLUGIN,
    Repository: EntityKind.REPOSITORY,
    Property: EntityKind.PROPERTY,
    Task: EntityKind.TASK,
}

_SUMMARY_FIELDS = {
    "group": "group",
    "version": "version",
    "description": "description",
    "sourceCompatibility": "source_compatibility",
    "targetCompatibility": "target_compatibility",
}

AnyMappedEntity = Union[
    MappedEntity[Dependency],
    MappedEntity[Plugin],
    MappedEntity[Repository],
    MappedEntity[Property],
    MappedEntity[Task],
]


@dataclass(slots=True)
class EntityIndex:
    """Flat, document-ordered index of every entity found in one parse."""

    original_text: str
    lines: list[str]
    dependencies: list[MappedEntity[Dependency]] = field(default_factory=list)
    plugins: list[MappedEntity[Plugin]] = field(default_factory=list)
    repositories: list[MappedEntity[Repository]] = field(default_factory=list)
    properties: list[MappedEntity[Property]] = field(default_factory=list)
    tasks: list[MappedEntity[Task]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add(self, entity: AnyMappedEntity) -> None:
        kind = entity.kind
        if kind is EntityKind.DEPENDENCY:
            self.dependencies.append(entity)  # type: ignore[arg-type]
        elif kind is EntityKind.PLUGIN:
            self.plugins.append(entity)  # type: ignore[arg-type]
        elif kind is EntityKind.REPOSITORY:
            self.repositories.append(entity)  # type: ignore[arg-type]
        elif kind is EntityKind.TASK:
            self.tasks.append(entity)  # type: ignore[arg-type]
        else:
            self.properties.append(entity)  # type: ignore[arg-type]

    def entities(self) -> Iterator[AnyMappedEntity]:
        """Yield every entity in document order."""
        merged: list[AnyMappedEntity] = [
            *self.dependencies,
            *self.plugins,
            *self.repositories,
            *self.properties,
            *self.tasks,
        ]
        yield from sorted(merged, key=lambda entity: entity.range.start.start_byte)

    def line_text(self, line_number: int) -> str:
        if line_number < 1 or line_number > len(self.lines):
            return ""
        return self.lines[line_number - 1]

    def text_for(self, source_range: SourceRange) -> str:
        start, end = source_range.span
        if start < 0 or end > len(self.original_text):
            return ""
        return self.original_text[start:end]

    def find_dependencies(
        self,
        group: str,
        name: str,
        scope: str | None = None,
    ) -> list[MappedEntity[Dependency]]:
        return [
            entity
            for entity in self.dependencies
            if entity.value.group == group
            and entity.value.name == name
            and (scope is None or entity.value.scope == scope)
        ]

    def find_plugin(self, plugin_id: str) -> MappedEntity[Plugin] | None:
        return next((entity for entity in self.plugins if entity.value.id == plugin_id), None)

    def find_property(self, key: str) -> MappedEntity[Property] | None:
        return next((entity for entity in self.properties if entity.value.key == key), None)

    def find_repository(self, name: str) -> MappedEntity[Repository] | None:
        return next((entity for entity in self.repositories if entity.value.name == name), None)

    def find_task(self, name: str) -> MappedEntity[Task] | None:
        return next((entity for entity in self.tasks if entity.value.name == name), None)

    def project_summary(self) -> ProjectSummary:
        """Collect project coordinates from the properties, first declaration winning."""
        fields: dict[str, str] = {}
        extras: dict[str, str] = {}
        for entity in self.properties:
            key, value = entity.value.key, entity.value.value
            field_name = _SUMMARY_FIELDS.get(key)
            target = fields if field_name else extras
            target.setdefault(field_name or key, value)
        return ProjectSummary(**fields, properties=extras)

    def dependency_at(self, line: int, column: int) -> MappedEntity[Dependency] | None:
        return next((entity for entity in self.dependencies if entity.range.contains(line, column)), None)

    def plugin_at(self, line: int, column: int) -> MappedEntity[Plugin] | None:
        return next((entity for entity in self.plugins if entity.range.contains(line, column)), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dependencies": [entity.to_dict() for entity in self.dependencies],
            "plugins": [entity.to_dict() for entity in self.plugins],
            "repositories": [entity.to_dict() for entity in self.repositories],
            "properties": [entity.to_dict() for entity in self.properties],
            "tasks": [entity.to_dict() for entity in self.tasks],
            "warnings": list(self.warnings),
        }


__all__ = [
    "AnyMappedEntity",
    "EntityIndex",
    "MappedEntity",
    "SourcePosition",
    "SourceRange",
]
