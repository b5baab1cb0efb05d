"""Deployment target exports."""

from .sql_target import (
    DEFAULT_VERSION_TABLE,
    REGISTRATION_SCRIPT_KEY,
    ScriptExecutionError,
    SqlTarget,
    SqlTargetSettings,
    split_batches,
    split_sqlite_statements,
)

__all__ = [
    "DEFAULT_VERSION_TABLE",
    "REGISTRATION_SCRIPT_KEY",
    "ScriptExecutionError",
    "SqlTarget",
    "SqlTargetSettings",
    "split_batches",
    "split_sqlite_statements",
]
