"""Entity records and source-position types."""

from .schema import Dependency, EntityKind, Plugin, ProjectSummary, Property, RecordModel, Repository, Task
from .source import AnyMappedEntity, EntityIndex, MappedEntity, SourcePosition, SourceRange

__all__ = [
    "AnyMappedEntity",
    "Dependency",
    "EntityIndex",
    "EntityKind",
    "MappedEntity",
    "Plugin",
    "ProjectSummary",
    "Property",
    "RecordModel",
    "Repository",
    "SourcePosition",
    "SourceRange",
    "Task",
]
