"""Construction functions for the supported script kinds."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .scripts import Script, ScriptDefinitionError

ScriptFactory = Callable[..., Script]

DEFAULT_SCRIPT_KIND = "migration"


def migration_script(**fields: Any) -> Script:
    """Plain script deployed once."""
    return Script(**fields)


def repeatable_script(**fields: Any) -> Script:
    """Script re-deployed whenever its content hash changes."""
    fields["can_repeat"] = True
    return Script(**fields)


def service_script(**fields: Any) -> Script:
    """Infrastructure script, e.g. the migration registration script."""
    fields["is_service"] = True
    return Script(**fields)


def initialize_script(**fields: Any) -> Script:
    """Bootstrap script registered by the target itself."""
    fields["is_initialize_target"] = True
    return Script(**fields)


SCRIPT_KINDS: dict[str, ScriptFactory] = {
    DEFAULT_SCRIPT_KIND: migration_script,
    "repeatable": repeatable_script,
    "service": service_script,
    "initialize": initialize_script,
}


def register_script_kind(kind: str, factory: ScriptFactory) -> None:
    """Add or replace a script kind constructor."""
    normalized = kind.strip().lower()
    if not normalized:
        raise ScriptDefinitionError("Script kind name must not be empty.")
    SCRIPT_KINDS[normalized] = factory


def build_script(kind: str | None = None, **fields: Any) -> Script:
    """Build a script through the constructor registered for ``kind``."""
    normalized = (kind or DEFAULT_SCRIPT_KIND).strip().lower()
    factory = SCRIPT_KINDS.get(normalized)
    if factory is None:
        known = ", ".join(sorted(SCRIPT_KINDS))
        raise ScriptDefinitionError(f"Unknown script kind '{kind}'. Expected one of: {known}.")
    try:
        return factory(**fields)
    except TypeError as exc:
        raise ScriptDefinitionError(
            f"Invalid fields for script kind '{normalized}': {exc}"
        ) from exc
