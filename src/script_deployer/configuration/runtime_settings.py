"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ScriptsSettings:
    """Where scripts and their manifests are discovered."""

    directory: Path
    script_extension: str
    manifest_extension: str
    encoding: str


@dataclass(frozen=True)
class TargetSettings:
    """Database connectivity and version table configuration."""

    url: str
    version_table: str
    echo: bool


@dataclass(frozen=True)
class DeploymentSettings:
    """Run-scoped deployment behaviour."""

    insert_migration_script: str | None
    disable_registration_of_migrations: bool


@dataclass(frozen=True)
class LoggingSettings:
    """Log output configuration for the command line."""

    level: str


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path
    scripts: ScriptsSettings
    target: TargetSettings
    deployment: DeploymentSettings
    logging: LoggingSettings
