"""CLI commands for inspecting and editing Gradle build scripts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Optional

import typer

from .api import (
    create_editor,
    dependencies_by_scope,
    is_android_project,
    is_kotlin_project,
    is_spring_boot_project,
    parse_file,
    write_text,
)
from .config import DEFAULT_CONFIG_NAME, Settings, configure_logging, load_settings
from .editing.editor import GradleEditor
from .editing.serializer import GradleSerializer
from .errors import ConfigError, EditError

APP_HELP = "Position-preserving editor for Gradle build scripts."

app = typer.Typer(help=APP_HELP)

_CONFIG_OPTION = typer.Option(
    DEFAULT_CONFIG_NAME,
    "--config",
    "-c",
    help="Path to the editor settings file.",
)
_WRITE_OPTION = typer.Option(
    False,
    "--write/--dry-run",
    help="Persist the edited file instead of printing the diff.",
)


def _load(config: str) -> Settings:
    """Load settings, translating configuration failures into exit codes."""
    try:
        settings = load_settings(Path(config))
    except ConfigError as error:
        typer.echo(str(error))
        raise typer.Exit(code=1) from error
    configure_logging(settings)
    return settings


def _split_coordinate(coordinate: str) -> tuple[str, str, str]:
    parts = coordinate.split(":")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise typer.BadParameter(f"Expected GROUP:NAME[:VERSION], got {coordinate!r}")
    version = parts[2] if len(parts) > 2 else ""
    return parts[0], parts[1], version


def _run_edit(file: Path, config: str, write: bool, action: Callable[[GradleEditor], None]) -> None:
    """Open an editor over ``file``, run ``action`` and report or persist the result."""
    settings = _load(config)
    if not file.exists():
        raise typer.BadParameter(f"Build file not found: {file}")

    editor = create_editor(file, settings)
    try:
        action(editor)
    except EditError as error:
        typer.echo(f"Error: {error}")
        raise typer.Exit(code=1) from error

    modifications = editor.get_modifications()
    if not modifications:
        typer.echo("No changes.")
        return

    serializer = GradleSerializer(editor.index.original_text)
    issues = serializer.validate(modifications)
    if issues:
        typer.echo("Modifications failed validation:")
        for issue in issues:
            typer.echo(f"  - {issue}")
        raise typer.Exit(code=1)

    try:
        new_text = serializer.apply(modifications)
    except EditError as error:
        typer.echo(f"Error: {error}")
        raise typer.Exit(code=1) from error

    if write:
        write_text(file, new_text)
        typer.echo(f"Applied {len(modifications)} modification(s) to {file}.")
        return

    for line in serializer.diff(modifications):
        typer.echo(str(line).rstrip("\n"))
    typer.echo(
        serializer.unified_diff(new_text, fromfile=f"a/{file.name}", tofile=f"b/{file.name}"),
        nl=False,
    )


@app.command()
def parse(
    file: Path = typer.Argument(..., help="Gradle build script to parse."),
    as_json: bool = typer.Option(False, "--json", help="Emit the source-mapped entities as JSON."),
    config: str = _CONFIG_OPTION,
) -> None:
    """List the project summary and the entities declared in FILE."""
    settings = _load(config)
    if not file.exists():
        raise typer.BadParameter(f"Build file not found: {file}")
    index = parse_file(file, settings)

    if as_json:
        typer.echo(json.dumps(index.to_dict(), indent=2))
        return

    plugins = [entity.value for entity in index.plugins]
    flavours = [
        label
        for label, flag in (
            ("android", is_android_project(plugins)),
            ("kotlin", is_kotlin_project(plugins)),
            ("spring-boot", is_spring_boot_project(plugins)),
        )
        if flag
    ]
    typer.echo(f"Project: {', '.join(flavours) if flavours else 'generic'}")
    summary = index.project_summary()
    for label, value in (
        ("Group", summary.group),
        ("Version", summary.version),
        ("Description", summary.description),
        ("Source compatibility", summary.source_compatibility),
        ("Target compatibility", summary.target_compatibility),
    ):
        if value:
            typer.echo(f"{label}: {value}")

    typer.echo(f"Plugins ({len(index.plugins)}):")
    for entity in index.plugins:
        version = f" {entity.value.version}" if entity.value.version else ""
        typer.echo(f"  - {entity.value.id}{version} [{entity.range.start}]")

    typer.echo(f"Dependencies ({len(index.dependencies)}):")
    for scope, dependencies in dependencies_by_scope(entity.value for entity in index.dependencies).items():
        typer.echo(f"  {scope}:")
        for dependency in dependencies:
            typer.echo(f"    - {dependency.coordinate or dependency.raw}")

    typer.echo(f"Repositories ({len(index.repositories)}):")
    for entity in index.repositories:
        url = f" {entity.value.url}" if entity.value.url else ""
        typer.echo(f"  - {entity.value.name}{url}")

    typer.echo(f"Properties ({len(index.properties)}):")
    for entity in index.properties:
        typer.echo(f"  - {entity.value.key} = {entity.value.value}")

    typer.echo(f"Tasks ({len(index.tasks)}):")
    for entity in index.tasks:
        task_type = f" ({entity.value.type})" if entity.value.type else ""
        typer.echo(f"  - {entity.value.name}{task_type}")

    for warning in index.warnings:
        typer.echo(f"Warning: {warning}")


@app.command("set-dependency")
def set_dependency(
    file: Path = typer.Argument(..., help="Gradle build script to edit."),
    coordinate: str = typer.Argument(..., help="Dependency as GROUP:NAME."),
    version: str = typer.Argument(..., help="New version."),
    scope: Optional[str] = typer.Option(None, "--scope", "-s", help="Restrict the match to one configuration."),
    write: bool = _WRITE_OPTION,
    config: str = _CONFIG_OPTION,
) -> None:
    """Change the version of a dependency."""
    group, name, _ = _split_coordinate(coordinate)
    _run_edit(file, config, write, lambda editor: editor.update_dependency_version(group, name, version, scope=scope))


@app.command("set-plugin")
def set_plugin(
    file: Path = typer.Argument(..., help="Gradle build script to edit."),
    plugin_id: str = typer.Argument(..., help="Plugin id."),
    version: str = typer.Argument(..., help="New version."),
    write: bool = _WRITE_OPTION,
    config: str = _CONFIG_OPTION,
) -> None:
    """Change the version of a plugin."""
    _run_edit(file, config, write, lambda editor: editor.update_plugin_version(plugin_id, version))


@app.command("set-property")
def set_property(
    file: Path = typer.Argument(..., help="Gradle build script to edit."),
    key: str = typer.Argument(..., help="Property name."),
    value: str = typer.Argument(..., help="New value."),
    write: bool = _WRITE_OPTION,
    config: str = _CONFIG_OPTION,
) -> None:
    """Change the value of a top-level property assignment."""
    _run_edit(file, config, write, lambda editor: editor.update_property(key, value))


@app.command("add-dependency")
def add_dependency(
    file: Path = typer.Argument(..., help="Gradle build script to edit."),
    coordinate: str = typer.Argument(..., help="Dependency as GROUP:NAME[:VERSION]."),
    scope: Optional[str] = typer.Option(None, "--scope", "-s", help="Configuration to declare it under."),
    write: bool = _WRITE_OPTION,
    config: str = _CONFIG_OPTION,
) -> None:
    """Append a dependency to the dependencies block."""
    group, name, version = _split_coordinate(coordinate)
    _run_edit(file, config, write, lambda editor: editor.add_dependency(group, name, version, scope))


@app.command("remove-dependency")
def remove_dependency(
    file: Path = typer.Argument(..., help="Gradle build script to edit."),
    coordinate: str = typer.Argument(..., help="Dependency as GROUP:NAME."),
    scope: Optional[str] = typer.Option(None, "--scope", "-s", help="Restrict the match to one configuration."),
    write: bool = _WRITE_OPTION,
    config: str = _CONFIG_OPTION,
) -> None:
    """Delete the line declaring a dependency."""
    group, name, _ = _split_coordinate(coordinate)
    _run_edit(file, config, write, lambda editor: editor.remove_dependency(group, name, scope=scope))


if __name__ == "__main__":
    app()
