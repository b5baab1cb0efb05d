"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ConfigurationError, load_configuration, parse_log_level
from .runtime_settings import (
    Configuration,
    DeploymentSettings,
    LoggingSettings,
    ScriptsSettings,
    TargetSettings,
)

__all__ = [
    "Configuration",
    "DeploymentSettings",
    "LoggingSettings",
    "ScriptsSettings",
    "TargetSettings",
    "ConfigurationError",
    "load_configuration",
    "parse_log_level",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
