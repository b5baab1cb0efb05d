"""Discovery of scripts paired with sidecar YAML manifests."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from script_deployer.script_model.script_kinds import build_script
from script_deployer.script_model.scripts import Script, ScriptDefinitionError

_LOGGER = logging.getLogger(__name__)

DEFAULT_SCRIPT_EXTENSION = ".sql"
DEFAULT_MANIFEST_EXTENSION = ".yaml"

_MANIFEST_FIELDS = frozenset(
    {
        "key",
        "kind",
        "depends_on",
        "order_group",
        "actual_before",
        "can_repeat",
        "description",
        "parameters",
    }
)


class ManifestError(Exception):
    """Raised when a script manifest is missing required data or malformed."""


def discover_scripts(
    directory: Path | str,
    *,
    script_extension: str = DEFAULT_SCRIPT_EXTENSION,
    manifest_extension: str = DEFAULT_MANIFEST_EXTENSION,
) -> list[Script]:
    """Build scripts from every script file that has a sidecar manifest.

    Files are visited in sorted path order. A script file without a manifest is
    skipped with a warning.

    Args:
      directory: Root directory scanned recursively.
      script_extension: Suffix of script files, e.g. ``.sql``.
      manifest_extension: Suffix of manifest files, e.g. ``.yaml``.

    Returns:
      Scripts whose ``source`` is the POSIX path relative to ``directory``.

    Raises:
      ManifestError: If the directory is missing or a manifest is invalid.
    """
    root = Path(directory)
    if not root.is_dir():
        raise ManifestError(f"Scripts directory not found: {root}")
    script_suffix = _normalize_extension(script_extension)
    manifest_suffix = _normalize_extension(manifest_extension)

    scripts: list[Script] = []
    for script_path in sorted(root.rglob(f"*{script_suffix}")):
        if not script_path.is_file():
            continue
        manifest_path = script_path.with_suffix(manifest_suffix)
        if not manifest_path.is_file():
            _LOGGER.warning("Script %s has no manifest, skipping", script_path)
            continue
        locator = script_path.relative_to(root).as_posix()
        scripts.append(load_manifest(manifest_path, locator=locator, default_key=script_path.stem))
    _LOGGER.debug("Discovered %d scripts in %s", len(scripts), root)
    return scripts


def load_manifest(manifest_path: Path, *, locator: str, default_key: str) -> Script:
    """Parse one manifest file into a script."""
    try:
        parsed = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ManifestError(f"Failed to parse manifest {manifest_path}: {exc}") from exc
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ManifestError(f"Manifest root must be a mapping: {manifest_path}")

    unknown = sorted(str(name) for name in set(parsed) - _MANIFEST_FIELDS)
    if unknown:
        raise ManifestError(f"Unknown manifest fields in {manifest_path}: {', '.join(unknown)}")

    try:
        return build_script(
            _optional_string(parsed.get("kind"), "kind", manifest_path),
            script_key=_optional_string(parsed.get("key"), "key", manifest_path) or default_key,
            source=locator,
            depends_on=_optional_string(parsed.get("depends_on"), "depends_on", manifest_path),
            order_group=_integer(parsed.get("order_group", 0), "order_group", manifest_path),
            actual_before=_optional_string(
                parsed.get("actual_before"), "actual_before", manifest_path
            ),
            can_repeat=_boolean(parsed.get("can_repeat", False), "can_repeat", manifest_path),
            description=_optional_string(parsed.get("description"), "description", manifest_path),
            script_parameters=_parameters(parsed.get("parameters"), manifest_path),
        )
    except ScriptDefinitionError as exc:
        raise ManifestError(f"{manifest_path}: {exc}") from exc


def _normalize_extension(extension: str) -> str:
    stripped = extension.strip()
    if not stripped:
        raise ManifestError("File extensions must not be empty.")
    return stripped if stripped.startswith(".") else f".{stripped}"


def _optional_string(value: Any, field_name: str, manifest_path: Path) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ManifestError(f"{manifest_path}: {field_name} must be a string.")
    return value.strip() or None


def _integer(value: Any, field_name: str, manifest_path: Path) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ManifestError(f"{manifest_path}: {field_name} must be an integer.")
    return value


def _boolean(value: Any, field_name: str, manifest_path: Path) -> bool:
    if not isinstance(value, bool):
        raise ManifestError(f"{manifest_path}: {field_name} must be true or false.")
    return value


def _parameters(value: Any, manifest_path: Path) -> dict[str, str | None]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ManifestError(f"{manifest_path}: parameters must be a mapping.")
    parameters: dict[str, str | None] = {}
    for name, raw in value.items():
        if not isinstance(name, str) or not name.strip():
            raise ManifestError(f"{manifest_path}: parameter names must be non-empty strings.")
        parameters[name.strip()] = None if raw is None else str(raw)
    return parameters
