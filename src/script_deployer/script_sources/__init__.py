"""Script source exports."""

from .filesystem_source import FilesystemSource, ScriptSourceError
from .script_manifests import (
    DEFAULT_MANIFEST_EXTENSION,
    DEFAULT_SCRIPT_EXTENSION,
    ManifestError,
    discover_scripts,
    load_manifest,
)

__all__ = [
    "FilesystemSource",
    "ScriptSourceError",
    "DEFAULT_MANIFEST_EXTENSION",
    "DEFAULT_SCRIPT_EXTENSION",
    "ManifestError",
    "discover_scripts",
    "load_manifest",
]
