"""YAML-backed settings for the editor and CLI."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Literal, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .model.schema import EntityKind

DEFAULT_CONFIG_NAME = "ge.yaml"

DEFAULT_CONFIG_TEMPLATE: Dict[str, Any] = {
    "parser": {
        "skip_comments": True,
        "parse_dependencies": True,
        "parse_plugins": True,
        "parse_repositories": True,
        "parse_tasks": True,
    },
    "editor": {
        "indent": "    ",
        "default_scope": "implementation",
        "quote": "'",
    },
    "logging": {
        "level": "WARNING",
    },
}


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ParserSettings(_Section):
    skip_comments: bool = True
    parse_dependencies: bool = True
    parse_plugins: bool = True
    parse_repositories: bool = True
    parse_tasks: bool = True

    def enabled_kinds(self) -> frozenset[EntityKind]:
        """Entity kinds whose recognisers should run; properties are always parsed."""
        toggles = {
            EntityKind.DEPENDENCY: self.parse_dependencies,
            EntityKind.PLUGIN: self.parse_plugins,
            EntityKind.REPOSITORY: self.parse_repositories,
            EntityKind.TASK: self.parse_tasks,
        }
        return frozenset({EntityKind.PROPERTY, *(kind for kind, enabled in toggles.items() if enabled)})


class EditorSettings(_Section):
    indent: str = "    "
    default_scope: str = "implementation"
    quote: Literal["'", '"'] = "'"


class LoggingSettings(_Section):
    level: str = "WARNING"


class Settings(_Section):
    """Typed view over the merged configuration mapping."""

    parser: ParserSettings = Field(default_factory=ParserSettings)
    editor: EditorSettings = Field(default_factory=EditorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _copy_config_template() -> Dict[str, Any]:
    """Return a deep copy of the default configuration template."""
    return copy.deepcopy(DEFAULT_CONFIG_TEMPLATE)


def _merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` onto ``base``."""
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_path: Path | str | None) -> Dict[str, Any]:
    """Load YAML configuration and merge it over the defaults.

    A missing ``config_path`` yields the defaults; a file that exists but
    cannot be parsed raises :class:`ConfigError`.
    """
    config = _copy_config_template()
    if config_path is None:
        return config
    path = Path(config_path)
    if not path.exists():
        return config

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config: {error}", details={"path": path.as_posix()}) from error

    if not isinstance(data, Mapping):
        raise ConfigError("Configuration must be a mapping at the top level.", details={"path": path.as_posix()})

    return _merge(config, data)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load and validate settings from ``config_path``."""
    config = load_config(config_path)
    try:
        return Settings.model_validate(config)
    except ValidationError as error:
        raise ConfigError(f"Invalid configuration: {error}", details={"path": str(config_path)}) from error


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the package loggers."""
    level = logging.getLevelName(settings.logging.level.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown logging level: {settings.logging.level}")
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("ge").setLevel(level)


__all__ = [
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "EditorSettings",
    "LoggingSettings",
    "ParserSettings",
    "Settings",
    "configure_logging",
    "load_config",
    "load_settings",
]
