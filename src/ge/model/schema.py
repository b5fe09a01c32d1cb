"""Typed records for the entities recognised in a Gradle build script."""

from __future__ import annotations

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling."""

    model_config = ConfigDict(extra="forbid", frozen=False)


class EntityKind(str, Enum):
    """Kinds of declarations the parser can bind to source ranges."""

    PROPERTY = "property"
    DEPENDENCY = "dependency"
    PLUGIN = "plugin"
    REPOSITORY = "repository"
    TASK = "task"


class Dependency(RecordModel):
    """Single dependency declaration such as ``implementation 'g:n:v'``."""

    group: str = ""
    name: str
    version: str = ""
    scope: str = ""
    raw: str = ""

    @property
    def coordinate(self) -> str:
        parts = [self.group, self.name]
        if self.version:
            parts.append(self.version)
        return ":".join(parts)

    @property
    def is_project_reference(self) -> bool:
        return not self.group and self.raw.startswith("project(")


class Plugin(RecordModel):
    """Plugin applied through ``plugins { id ... }`` or ``apply plugin:``."""

    id: str
    version: str = ""
    apply: bool = True


class Repository(RecordModel):
    """Artifact repository declaration."""

    name: str
    type: str = "maven"
    url: str = ""


class Property(RecordModel):
    """Top-level ``key = value`` assignment."""

    key: str
    value: str = ""


class Task(RecordModel):
    """Task declared with ``task name``, ``task("name")`` or ``tasks.register("name")``."""

    name: str
    type: str = ""


class ProjectSummary(RecordModel):
    """Project coordinates and Java compatibility read from top-level properties."""

    group: str = ""
    version: str = ""
    description: str = ""
    source_compatibility: str = ""
    target_compatibility: str = ""
    properties: Dict[str, str] = Field(default_factory=dict)


__all__ = [
    "Dependency",
    "EntityKind",
    "Plugin",
    "ProjectSummary",
    "Property",
    "RecordModel",
    "Repository",
    "Task",
]
