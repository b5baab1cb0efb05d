"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "deploy.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Deployment configuration for script-deployer.
# Replace every <REQUIRED> placeholder before running plan or deploy.
# Remove or fill <OPTIONAL> placeholders only when your setup needs them.

scripts:
  # Directory scanned recursively; relative paths resolve against this file.
  directory: "<REQUIRED>"
  # Every script file needs a manifest with the same name and this extension.
  script_extension: ".sql"
  manifest_extension: ".yaml"
  encoding: "utf-8"

target:
  # SQLAlchemy asyncio URL, e.g. sqlite+aiosqlite:///./app.db
  url: "<REQUIRED>"
  version_table: "script_migrations"
  echo: false

deployment:
  # Key of a service script used to register migrations.
  # Leave unset to use the target's built-in registration script.
  # insert_migration_script: "<OPTIONAL>"
  disable_registration_of_migrations: false

logging:
  level: "INFO"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML deployment configuration template with inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder deployment configuration to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
