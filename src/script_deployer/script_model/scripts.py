"""Script domain entity."""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass, field


class ScriptDefinitionError(ValueError):
    """Raised when a script cannot be constructed from its definition."""


def normalize_script_key(script_key: str) -> str:
    """Return the case-insensitive identity of a script key."""
    return script_key.casefold()


def compute_contents_hash(content: str) -> str:
    """Return the base64-encoded SHA-256 digest of UTF-8 encoded content."""
    digest = hashlib.sha256(content.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


@dataclass(eq=False)
class Script:  # pylint: disable=too-many-instance-attributes
    """One deployable unit.

    Identity fields are set by whoever builds the script. ``content`` and
    ``contents_hash`` are filled in during a deployment run.
    """

    script_key: str
    source: str
    depends_on: str | None = None
    order_group: int = 0
    is_service: bool = False
    actual_before: str | None = None
    can_repeat: bool = False
    is_initialize_target: bool = False
    content: str | None = None
    contents_hash: str | None = None
    script_parameters: dict[str, str | None] = field(default_factory=dict)
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.script_key, str) or not self.script_key.strip():
            raise ScriptDefinitionError("Script key must be a non-empty string.")
        self.script_key = self.script_key.strip()
        self.depends_on = _blank_to_none(self.depends_on)
        self.actual_before = _blank_to_none(self.actual_before)

    @property
    def normalized_key(self) -> str:
        return normalize_script_key(self.script_key)

    def matches_key(self, script_key: str) -> bool:
        return self.normalized_key == normalize_script_key(script_key)

    def materialize(self, content: str) -> None:
        """Store fetched content, hashing it only for repeatable scripts."""
        self.content = content
        if self.can_repeat:
            self.contents_hash = compute_contents_hash(content)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
