"""SQL target tests against a file-based SQLite database."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from script_deployer.collaborator_contracts.cancellation import CancellationToken
from script_deployer.deployment_run.deployment_service import DeploymentService
from script_deployer.deployment_targets.sql_target import (
    REGISTRATION_SCRIPT_KEY,
    ScriptExecutionError,
    SqlTarget,
    SqlTargetSettings,
    split_batches,
    split_sqlite_statements,
)
from script_deployer.script_model.deployment_outcomes import (
    DeploymentOptions,
    DeployScriptStatus,
)
from script_deployer.script_model.scripts import Script
from script_deployer.script_sources.filesystem_source import FilesystemSource
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

_NO_CANCEL = CancellationToken.none()


def _settings(tmp_path: Path, version_table: str = "script_migrations") -> SqlTargetSettings:
    return SqlTargetSettings(
        url=f"sqlite+aiosqlite:///{tmp_path / 'target.db'}", version_table=version_table
    )


async def _fetch_all(url: str, statement: str) -> list[tuple]:
    engine = create_async_engine(url)
    try:
        async with engine.connect() as connection:
            result = await connection.execute(text(statement))
            return [tuple(row) for row in result]
    finally:
        await engine.dispose()


async def _register(target: SqlTarget, script_key: str, contents_hash: str | None) -> None:
    registration = target.build_registration_script()
    registration.script_parameters["ScriptKey"] = script_key
    registration.script_parameters["ContentsHash"] = contents_hash
    await target.deploy_script(registration, _NO_CANCEL)


def test_split_batches_uses_go_lines_as_separators() -> None:
    content = "CREATE TABLE a (id int);\nGO\n\ngo;\nINSERT INTO a VALUES (1);\n  GO  \n"

    assert split_batches(content) == ["CREATE TABLE a (id int);", "INSERT INTO a VALUES (1);"]


def test_split_batches_keeps_go_inside_statements() -> None:
    assert split_batches("SELECT 'GO' AS word") == ["SELECT 'GO' AS word"]


@pytest.mark.parametrize(
    ("url", "version_table"),
    [("", "script_migrations"), ("sqlite+aiosqlite://", "bad-name"), ("x", "1table")],
)
def test_settings_reject_invalid_values(url: str, version_table: str) -> None:
    with pytest.raises(ValueError):
        SqlTargetSettings(url=url, version_table=version_table)


def test_registration_script_is_a_service_script_targeting_version_table(tmp_path: Path) -> None:
    target = SqlTarget(_settings(tmp_path, version_table="applied_scripts"))

    registration = target.build_registration_script()

    assert registration.script_key == REGISTRATION_SCRIPT_KEY
    assert registration.is_service is True
    assert "INSERT INTO applied_scripts" in (registration.content or "")
    assert set(registration.script_parameters) == {"ScriptKey", "ContentsHash"}


def test_prepare_creates_version_table_and_is_idempotent(tmp_path: Path) -> None:
    settings = _settings(tmp_path)

    async def run() -> None:
        async with SqlTarget(settings) as target:
            await target.prepare_to_deploy(_NO_CANCEL)
            await target.prepare_to_deploy(_NO_CANCEL)

    asyncio.run(run())
    tables = asyncio.run(
        _fetch_all(settings.url, "SELECT name FROM sqlite_master WHERE type = 'table'")
    )

    assert ("script_migrations",) in tables


def test_registered_script_is_reported_case_insensitively(tmp_path: Path) -> None:
    async def run():
        async with SqlTarget(_settings(tmp_path)) as target:
            await target.prepare_to_deploy(_NO_CANCEL)
            missing = await target.get_deployed_info("CreateUsers", _NO_CANCEL)
            await _register(target, "CreateUsers", None)
            found = await target.get_deployed_info("createusers", _NO_CANCEL)
            return missing, found

    missing, found = asyncio.run(run())

    assert missing is None
    assert found is not None
    assert found.script_key == "CreateUsers"
    assert found.contents_hash is None


def test_latest_registration_wins(tmp_path: Path) -> None:
    async def run():
        async with SqlTarget(_settings(tmp_path)) as target:
            await target.prepare_to_deploy(_NO_CANCEL)
            await _register(target, "View", "hash-1")
            await _register(target, "View", "hash-2")
            return await target.get_deployed_info("View", _NO_CANCEL)

    info = asyncio.run(run())

    assert info is not None
    assert info.contents_hash == "hash-2"


def test_deploy_script_runs_every_batch(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    script = Script(
        script_key="users",
        source="users.sql",
        content="CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)\nGO\n"
        "INSERT INTO users (name) VALUES ('alice')",
    )

    async def run() -> None:
        async with SqlTarget(settings) as target:
            await target.deploy_script(script, _NO_CANCEL)

    asyncio.run(run())

    assert asyncio.run(_fetch_all(settings.url, "SELECT name FROM users")) == [("alice",)]


def test_deploy_script_binds_manifest_parameters(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    create = Script(
        script_key="roles", source="roles.sql", content="CREATE TABLE roles (name TEXT)"
    )
    seed = Script(
        script_key="seed_roles",
        source="seed_roles.sql",
        content="INSERT INTO roles (name) VALUES (:Role)",
        script_parameters={"Role": "reporting", "Unused": "x"},
    )

    async def run() -> None:
        async with SqlTarget(settings) as target:
            await target.deploy_script(create, _NO_CANCEL)
            await target.deploy_script(seed, _NO_CANCEL)

    asyncio.run(run())

    assert asyncio.run(_fetch_all(settings.url, "SELECT name FROM roles")) == [("reporting",)]


def test_failed_batch_rolls_back_whole_script(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    create = Script(
        script_key="items", source="items.sql", content="CREATE TABLE items (id INTEGER)"
    )
    broken = Script(
        script_key="broken",
        source="broken.sql",
        content="INSERT INTO items VALUES (1)\nGO\nINSERT INTO missing_table VALUES (1)",
    )

    async def run() -> None:
        async with SqlTarget(settings) as target:
            await target.deploy_script(create, _NO_CANCEL)
            await target.deploy_script(broken, _NO_CANCEL)

    with pytest.raises(ScriptExecutionError, match="Failed to execute script 'broken'"):
        asyncio.run(run())

    assert asyncio.run(_fetch_all(settings.url, "SELECT id FROM items")) == []


def test_script_without_statements_is_rejected(tmp_path: Path) -> None:
    script = Script(script_key="empty", source="empty.sql", content="GO\n")

    async def run() -> None:
        async with SqlTarget(_settings(tmp_path)) as target:
            await target.deploy_script(script, _NO_CANCEL)

    with pytest.raises(ScriptExecutionError, match="has no statements"):
        asyncio.run(run())


def test_split_sqlite_statements_separates_on_semicolons() -> None:
    batch = "CREATE TABLE users (id INTEGER);\n;\nCREATE INDEX ix ON users (id);\nSELECT 1"

    assert split_sqlite_statements(batch) == [
        "CREATE TABLE users (id INTEGER);",
        "CREATE INDEX ix ON users (id);",
        "SELECT 1",
    ]


def test_split_sqlite_statements_keeps_semicolons_in_literals_and_triggers() -> None:
    trigger = (
        "CREATE TRIGGER users_audit AFTER INSERT ON users BEGIN\n"
        "  INSERT INTO audit (note) VALUES ('added; id ' || new.id);\n"
        "END;"
    )
    batch = f"INSERT INTO notes VALUES ('a; b');\n{trigger}"

    assert split_sqlite_statements(batch) == ["INSERT INTO notes VALUES ('a; b');", trigger]


def test_deploy_script_runs_every_statement_of_a_batch(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    script = Script(
        script_key="users",
        source="users.sql",
        content="CREATE TABLE users (id INTEGER);\nCREATE INDEX ix_users_id ON users (id);",
    )

    async def run() -> None:
        async with SqlTarget(settings) as target:
            await target.deploy_script(script, _NO_CANCEL)

    asyncio.run(run())
    indexes = asyncio.run(
        _fetch_all(settings.url, "SELECT name FROM sqlite_master WHERE type = 'index'")
    )

    assert ("ix_users_id",) in indexes


def test_initialize_script_is_registered_and_skipped_on_next_run(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    (tmp_path / "init.sql").write_text("CREATE TABLE settings (k TEXT)", encoding="utf-8")

    async def run():
        async with SqlTarget(settings) as target:
            service = DeploymentService(
                FilesystemSource(tmp_path),
                target,
                DeploymentOptions(insert_migration_script=target.build_registration_script()),
            )
            init = Script(script_key="init", source="init.sql", is_initialize_target=True)
            return await service.deploy([init])

    first = asyncio.run(run())
    second = asyncio.run(run())
    registrations = asyncio.run(
        _fetch_all(settings.url, "SELECT script_key, contents_hash FROM script_migrations")
    )

    assert first.is_success
    assert first.deploy_script_statuses == {"init": DeployScriptStatus.DEPLOYED}
    assert second.is_success
    assert second.deploy_script_statuses == {"init": DeployScriptStatus.ALREADY_DEPLOYED}
    assert registrations == [("init", None)]
