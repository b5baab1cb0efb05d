"""Deployment target for SQL databases reachable through SQLAlchemy's asyncio engine."""

from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import Any

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from script_deployer.collaborator_contracts.cancellation import CancellationToken
from script_deployer.deployment_decision.script_evaluator import (
    CONTENTS_HASH_PARAMETER,
    SCRIPT_KEY_PARAMETER,
)
from script_deployer.script_model.deployment_outcomes import DeployedInfo
from script_deployer.script_model.script_kinds import service_script
from script_deployer.script_model.scripts import Script

_LOGGER = logging.getLogger(__name__)

DEFAULT_VERSION_TABLE = "script_migrations"
REGISTRATION_SCRIPT_KEY = "INSERT_MIGRATION"
REGISTRATION_SCRIPT_SOURCE = "builtin:insert-migration"

_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_BATCH_SEPARATOR = re.compile(r"^[ \t]*GO[ \t]*;?[ \t]*$", re.IGNORECASE | re.MULTILINE)
# Same placeholder syntax SQLAlchemy's text() recognises.
_BIND_PARAMETER = re.compile(r"(?<![:\w\\]):(\w+)(?!:)")


class ScriptExecutionError(Exception):
    """Raised when the database rejects a script."""


@dataclass(frozen=True)
class SqlTargetSettings:
    """Connection and bookkeeping settings for the SQL target."""

    url: str
    version_table: str = DEFAULT_VERSION_TABLE
    echo: bool = False

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValueError("Target URL must not be empty.")
        if not _TABLE_NAME_PATTERN.match(self.version_table):
            raise ValueError(f"Invalid version table name: {self.version_table!r}")


def split_batches(content: str) -> list[str]:
    """Split script text into batches separated by lines holding only ``GO``."""
    return [batch.strip() for batch in _BATCH_SEPARATOR.split(content) if batch.strip()]


class SqlTarget:
    """Executes scripts and records deployments in a version table.

    Every script runs in its own transaction: either all of its batches are
    applied or none are.
    """

    def __init__(self, settings: SqlTargetSettings, *, engine: AsyncEngine | None = None) -> None:
        self._settings = settings
        self._engine = engine
        self._metadata = MetaData()
        self._version_table = Table(
            settings.version_table,
            self._metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("script_key", String(255), nullable=False, index=True),
            Column("contents_hash", String(64), nullable=True),
            Column(
                "deployed_at",
                DateTime(timezone=True),
                nullable=False,
                server_default=func.now(),
            ),
        )

    @property
    def settings(self) -> SqlTargetSettings:
        return self._settings

    def _get_engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(self._settings.url, echo=self._settings.echo)
        return self._engine

    async def __aenter__(self) -> SqlTarget:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.dispose()

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    def build_registration_script(self) -> Script:
        """Return the service script that records one deployment in the version table."""
        content = (
            f"INSERT INTO {self._settings.version_table} (script_key, contents_hash) "
            f"VALUES (:{SCRIPT_KEY_PARAMETER}, :{CONTENTS_HASH_PARAMETER})"
        )
        return service_script(
            script_key=REGISTRATION_SCRIPT_KEY,
            source=REGISTRATION_SCRIPT_SOURCE,
            content=content,
            script_parameters={SCRIPT_KEY_PARAMETER: None, CONTENTS_HASH_PARAMETER: None},
            description="Registers a deployed script in the version table.",
        )

    async def prepare_to_deploy(self, cancellation: CancellationToken) -> None:
        cancellation.raise_if_cancelled()
        _LOGGER.debug("Ensuring version table %s exists", self._settings.version_table)
        async with self._get_engine().begin() as connection:
            await connection.run_sync(self._metadata.create_all)

    async def get_deployed_info(
        self, script_key: str, cancellation: CancellationToken
    ) -> DeployedInfo | None:
        cancellation.raise_if_cancelled()
        table = self._version_table
        statement = (
            select(table.c.script_key, table.c.contents_hash)
            .where(func.lower(table.c.script_key) == script_key.lower())
            .order_by(table.c.id.desc())
            .limit(1)
        )
        async with self._get_engine().connect() as connection:
            row = (await connection.execute(statement)).first()
        if row is None:
            return None
        return DeployedInfo(script_key=row.script_key, contents_hash=row.contents_hash)

    async def deploy_script(self, script: Script, cancellation: CancellationToken) -> None:
        # Once execution starts it is not interrupted; see DESIGN.md.
        batches = split_batches(script.content or "")
        if not batches:
            raise ScriptExecutionError(f"Script '{script.script_key}' has no statements.")
        try:
            async with self._get_engine().begin() as connection:
                dialect_name = connection.dialect.name
                for batch in batches:
                    for statement in _split_for_dialect(batch, dialect_name):
                        if script.script_parameters:
                            await connection.execute(
                                text(statement),
                                _bind_values(statement, script.script_parameters),
                            )
                        else:
                            await connection.exec_driver_sql(statement)
                if script.is_initialize_target:
                    # Initialize scripts skip the registration script; record them here.
                    await connection.execute(
                        self._version_table.insert().values(
                            script_key=script.script_key,
                            contents_hash=script.contents_hash,
                        )
                    )
        except SQLAlchemyError as exc:
            raise ScriptExecutionError(
                f"Failed to execute script '{script.script_key}': {exc}"
            ) from exc
        _LOGGER.debug("Executed %d batch(es) of script %s", len(batches), script.script_key)


def split_sqlite_statements(batch: str) -> list[str]:
    """Split a batch into complete SQLite statements.

    A ``;`` only ends a statement when SQLite considers the text up to it
    complete, so semicolons inside literals and trigger bodies are kept.
    """
    statements: list[str] = []
    start = 0
    for match in re.finditer(";", batch):
        candidate = batch[start : match.end()]
        if not candidate.rstrip(";").strip():
            start = match.end()
            continue
        if sqlite3.complete_statement(candidate):
            statements.append(candidate.strip())
            start = match.end()
    remainder = batch[start:].strip()
    if remainder:
        statements.append(remainder)
    return statements


def _split_for_dialect(batch: str, dialect_name: str) -> list[str]:
    # pysqlite and aiosqlite accept one statement per call.
    if dialect_name == "sqlite":
        return split_sqlite_statements(batch)
    return [batch]


def _bind_values(batch: str, parameters: Mapping[str, str | None]) -> dict[str, Any]:
    referenced = set(_BIND_PARAMETER.findall(batch))
    return {name: value for name, value in parameters.items() if name in referenced}
