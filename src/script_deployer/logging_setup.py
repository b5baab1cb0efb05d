"""Log output wiring for command line runs."""

from __future__ import annotations

import logging
import sys

from script_deployer.configuration.loader import parse_log_level

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Send package logs to stderr at ``level``."""
    numeric_level = parse_log_level(level)
    logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("script_deployer").setLevel(numeric_level)
    if numeric_level > logging.DEBUG:
        logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
