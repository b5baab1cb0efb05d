"""Configuration loader tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from script_deployer.configuration.loader import (
    ConfigurationError,
    load_configuration,
    parse_log_level,
)


def _write_file(path: Path, contents: str) -> Path:
    path.write_text(contents, encoding="utf-8")
    return path


def test_loads_yaml_configuration_with_defaults(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "deploy.yaml",
        """
scripts:
  directory: migrations
target:
  url: "sqlite+aiosqlite:///app.db"
""",
    )

    configuration = load_configuration(config_path)

    assert configuration.path == config_path
    assert configuration.scripts.directory == (tmp_path / "migrations").resolve()
    assert configuration.scripts.script_extension == ".sql"
    assert configuration.scripts.manifest_extension == ".yaml"
    assert configuration.scripts.encoding == "utf-8"
    assert configuration.target.version_table == "script_migrations"
    assert configuration.target.echo is False
    assert configuration.deployment.insert_migration_script is None
    assert configuration.deployment.disable_registration_of_migrations is False
    assert configuration.logging.level == "INFO"


def test_loads_all_sections(tmp_path: Path) -> None:
    scripts_dir = tmp_path / "abs-scripts"
    config_path = _write_file(
        tmp_path / "deploy.yaml",
        f"""
scripts:
  directory: "{scripts_dir}"
  script_extension: PSQL
  manifest_extension: ".meta"
  encoding: latin-1
target:
  url: "postgresql+asyncpg://deployer:secret@db/app"
  version_table: applied_scripts
  echo: true
deployment:
  insert_migration_script: RegisterMigration
  disable_registration_of_migrations: true
logging:
  level: debug
""",
    )

    configuration = load_configuration(config_path)

    assert configuration.scripts.directory == scripts_dir
    assert configuration.scripts.script_extension == ".psql"
    assert configuration.scripts.manifest_extension == ".meta"
    assert configuration.scripts.encoding == "latin-1"
    assert configuration.target.version_table == "applied_scripts"
    assert configuration.target.echo is True
    assert configuration.deployment.insert_migration_script == "RegisterMigration"
    assert configuration.deployment.disable_registration_of_migrations is True
    assert configuration.logging.level == "DEBUG"


def test_errors_when_configuration_file_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Configuration file not found"):
        load_configuration(tmp_path / "missing.yaml")


def test_errors_when_configuration_root_is_not_mapping(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "deploy.yaml", "- scripts\n- target\n")

    with pytest.raises(ConfigurationError, match="root must be a mapping"):
        load_configuration(config_path)


@pytest.mark.parametrize(
    ("contents", "message"),
    [
        ("target: {url: x}\n", "'scripts' is required"),
        ("scripts: {directory: s}\n", "'target' is required"),
        ("scripts: {directory: ''}\ntarget: {url: x}\n", "scripts.directory must not be empty"),
        ("scripts: {directory: s}\ntarget: {url: 5}\n", "target.url must be a string"),
        (
            "scripts: {directory: s, script_extension: .sql, manifest_extension: sql}\n"
            "target: {url: x}\n",
            "must differ",
        ),
        (
            "scripts: {directory: s}\ntarget: {url: x, version_table: 'drop table'}\n",
            "target.version_table",
        ),
        ("scripts: {directory: s}\ntarget: {url: x, echo: 'yes'}\n", "target.echo"),
        (
            "scripts: {directory: s}\ntarget: {url: x}\n"
            "deployment: {disable_registration_of_migrations: 1}\n",
            "disable_registration_of_migrations must be true or false",
        ),
        (
            "scripts: {directory: s}\ntarget: {url: x}\ndeployment: {insert_migration_script: 3}\n",
            "insert_migration_script must be a string",
        ),
        (
            "scripts: {directory: s}\ntarget: {url: x}\nlogging: {level: TRACE}\n",
            "logging.level must be one of",
        ),
    ],
)
def test_errors_on_invalid_sections(tmp_path: Path, contents: str, message: str) -> None:
    config_path = _write_file(tmp_path / "deploy.yaml", contents)

    with pytest.raises(ConfigurationError, match=message):
        load_configuration(config_path)


def test_parse_log_level_translates_names() -> None:
    assert parse_log_level(" warning ") == logging.WARNING
    assert parse_log_level("DEBUG") == logging.DEBUG

    with pytest.raises(ConfigurationError, match="Unknown log level"):
        parse_log_level("verbose")
