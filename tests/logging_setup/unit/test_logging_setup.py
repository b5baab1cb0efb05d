"""Command line logging wiring tests."""

from __future__ import annotations

import logging

import pytest
from script_deployer.configuration.loader import ConfigurationError
from script_deployer.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def _restore_logger_levels():
    loggers = [logging.getLogger("script_deployer"), logging.getLogger("sqlalchemy")]
    levels = [logger.level for logger in loggers]
    yield
    for logger, level in zip(loggers, levels):
        logger.setLevel(level)


def test_configure_logging_sets_package_level_and_quiets_sqlalchemy() -> None:
    configure_logging("warning")

    assert logging.getLogger("script_deployer").level == logging.WARNING
    assert logging.getLogger("sqlalchemy").level == logging.WARNING


def test_debug_level_leaves_sqlalchemy_logger_untouched() -> None:
    logging.getLogger("sqlalchemy").setLevel(logging.NOTSET)

    configure_logging("DEBUG")

    assert logging.getLogger("script_deployer").level == logging.DEBUG
    assert logging.getLogger("sqlalchemy").level == logging.NOTSET


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        configure_logging("chatty")
