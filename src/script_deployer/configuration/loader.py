"""Configuration loader service."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    Configuration,
    DeploymentSettings,
    LoggingSettings,
    ScriptsSettings,
    TargetSettings,
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the deployment configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    scripts = _parse_scripts_section(parsed.get("scripts"), path.parent)
    target = _parse_target_section(parsed.get("target"))
    deployment = _parse_deployment_section(parsed.get("deployment"))
    logging_settings = _parse_logging_section(parsed.get("logging"))

    return Configuration(
        path=path,
        scripts=scripts,
        target=target,
        deployment=deployment,
        logging=logging_settings,
    )


def _parse_scripts_section(value: Any, base_path: Path) -> ScriptsSettings:
    section = _require_mapping(value, "scripts")
    directory = _resolve_path(
        base_path, _require_non_empty_string(section.get("directory"), "scripts.directory")
    )
    script_extension = _normalize_extension(
        section.get("script_extension", ".sql"), "scripts.script_extension"
    )
    manifest_extension = _normalize_extension(
        section.get("manifest_extension", ".yaml"), "scripts.manifest_extension"
    )
    if script_extension == manifest_extension:
        raise ConfigurationError(
            "scripts.script_extension and scripts.manifest_extension must differ."
        )
    encoding = _require_non_empty_string(section.get("encoding", "utf-8"), "scripts.encoding")
    return ScriptsSettings(
        directory=directory,
        script_extension=script_extension,
        manifest_extension=manifest_extension,
        encoding=encoding,
    )


def _parse_target_section(value: Any) -> TargetSettings:
    section = _require_mapping(value, "target")
    url = _require_non_empty_string(section.get("url"), "target.url")
    version_table = _require_non_empty_string(
        section.get("version_table", "script_migrations"), "target.version_table"
    )
    if not _TABLE_NAME_PATTERN.match(version_table):
        raise ConfigurationError(
            "target.version_table must contain only letters, digits and underscores."
        )
    echo = _optional_bool(section.get("echo"), "target.echo", default=False)
    return TargetSettings(url=url, version_table=version_table, echo=echo)


def _parse_deployment_section(value: Any) -> DeploymentSettings:
    if value is None:
        return DeploymentSettings(
            insert_migration_script=None, disable_registration_of_migrations=False
        )
    section = _require_mapping(value, "deployment")
    insert_migration_script = _optional_string(
        section.get("insert_migration_script"), "deployment.insert_migration_script"
    )
    disable_registration = _optional_bool(
        section.get("disable_registration_of_migrations"),
        "deployment.disable_registration_of_migrations",
        default=False,
    )
    return DeploymentSettings(
        insert_migration_script=insert_migration_script,
        disable_registration_of_migrations=disable_registration,
    )


def _parse_logging_section(value: Any) -> LoggingSettings:
    if value is None:
        return LoggingSettings(level="INFO")
    section = _require_mapping(value, "logging")
    level = _require_non_empty_string(section.get("level", "INFO"), "logging.level").upper()
    if level not in _LOG_LEVELS:
        raise ConfigurationError(f"logging.level must be one of: {', '.join(_LOG_LEVELS)}.")
    return LoggingSettings(level=level)


def parse_log_level(level: str) -> int:
    """Translate a configured level name into a ``logging`` level number."""
    normalized = level.strip().upper()
    if normalized not in _LOG_LEVELS:
        raise ConfigurationError(f"Unknown log level: {level}")
    return logging.getLevelName(normalized)


def _normalize_extension(value: Any, field_name: str) -> str:
    extension = _require_non_empty_string(value, field_name).lower()
    return extension if extension.startswith(".") else f".{extension}"


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _optional_bool(value: Any, field_name: str, *, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be true or false.")
    return value
