"""File-level convenience operations built on the parser, editor, and serializer."""

from __future__ import annotations

import logging
import os
import tempfile
from collections import OrderedDict
from pathlib import Path
from typing import Iterable

from .config import Settings
from .editing.editor import GradleEditor
from .editing.serializer import GradleSerializer
from .model.schema import Dependency, Plugin
from .model.source import EntityIndex
from .parsing.parser import SourceMappedParser

LOGGER = logging.getLogger(__name__)

_ANDROID_PLUGINS = frozenset({"com.android.application", "com.android.library"})
_KOTLIN_PLUGINS = frozenset({"kotlin", "org.jetbrains.kotlin.jvm", "org.jetbrains.kotlin.android"})
_SPRING_BOOT_PLUGINS = frozenset({"org.springframework.boot"})


def read_text(path: Path | str) -> str:
    """Read a build script without newline translation."""
    with Path(path).open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def write_text(path: Path | str, text: str) -> None:
    """Atomically replace ``path`` with ``text``."""
    target = Path(path)
    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        os.replace(temp_name, target)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


def parse_text(text: str, settings: Settings | None = None) -> EntityIndex:
    settings = settings or Settings()
    parser = SourceMappedParser(
        skip_comments=settings.parser.skip_comments,
        enabled_kinds=settings.parser.enabled_kinds(),
    )
    return parser.parse(text)


def parse_file(path: Path | str, settings: Settings | None = None) -> EntityIndex:
    """Parse the build script at ``path`` with source mapping."""
    index = parse_text(read_text(path), settings)
    LOGGER.debug("Parsed %s with %d warnings", path, len(index.warnings))
    return index


def create_editor(path: Path | str, settings: Settings | None = None) -> GradleEditor:
    """Parse ``path`` and open an editor session over it."""
    settings = settings or Settings()
    index = parse_file(path, settings)
    return GradleEditor(
        index,
        indent=settings.editor.indent,
        default_scope=settings.editor.default_scope,
        quote=settings.editor.quote,
    )


def render(editor: GradleEditor) -> str:
    """Apply an editor's pending modifications to its original text."""
    serializer = GradleSerializer(editor.index.original_text)
    return serializer.apply(editor.get_modifications())


def update_dependency_version(path: Path | str, group: str, name: str, version: str) -> str:
    """Return the contents of ``path`` with one dependency version changed."""
    editor = create_editor(path)
    editor.update_dependency_version(group, name, version)
    return render(editor)


def update_plugin_version(path: Path | str, plugin_id: str, version: str) -> str:
    """Return the contents of ``path`` with one plugin version changed."""
    editor = create_editor(path)
    editor.update_plugin_version(plugin_id, version)
    return render(editor)


def dependencies_by_scope(dependencies: Iterable[Dependency]) -> "OrderedDict[str, list[Dependency]]":
    """Group dependencies by scope, unscoped entries under ``implementation``."""
    grouped: "OrderedDict[str, list[Dependency]]" = OrderedDict()
    for dependency in dependencies:
        grouped.setdefault(dependency.scope or "implementation", []).append(dependency)
    return grouped


def _has_plugin(plugins: Iterable[Plugin], candidates: frozenset[str]) -> bool:
    return any(plugin.id in candidates for plugin in plugins)


def is_android_project(plugins: Iterable[Plugin]) -> bool:
    return _has_plugin(plugins, _ANDROID_PLUGINS)


def is_kotlin_project(plugins: Iterable[Plugin]) -> bool:
    return _has_plugin(plugins, _KOTLIN_PLUGINS)


def is_spring_boot_project(plugins: Iterable[Plugin]) -> bool:
    return _has_plugin(plugins, _SPRING_BOOT_PLUGINS)


__all__ = [
    "create_editor",
    "dependencies_by_scope",
    "is_android_project",
    "is_kotlin_project",
    "is_spring_boot_project",
    "parse_file",
    "parse_text",
    "read_text",
    "render",
    "update_dependency_version",
    "update_plugin_version",
    "write_text",
]
