"""Script source reading script files below a root directory."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from script_deployer.collaborator_contracts.cancellation import CancellationToken

_LOGGER = logging.getLogger(__name__)


class ScriptSourceError(Exception):
    """Raised when a script locator cannot be served by the source."""


class FilesystemSource:  # pylint: disable=too-few-public-methods
    """Serves script text for locators relative to ``root``."""

    def __init__(self, root: Path | str, *, encoding: str = "utf-8") -> None:
        self._root = Path(root).resolve()
        self._encoding = encoding

    @property
    def root(self) -> Path:
        return self._root

    async def get_script_content(
        self, locator: str, cancellation: CancellationToken
    ) -> str | None:
        cancellation.raise_if_cancelled()
        path = self._resolve_locator(locator)
        return await asyncio.to_thread(self._read_text, path)

    def _resolve_locator(self, locator: str) -> Path:
        if not locator or not locator.strip():
            raise ScriptSourceError("Script locator must not be empty.")
        candidate = (self._root / locator.strip()).resolve()
        if not candidate.is_relative_to(self._root):
            raise ScriptSourceError(f"Script locator escapes the source root: {locator}")
        return candidate

    def _read_text(self, path: Path) -> str | None:
        if not path.is_file():
            _LOGGER.error("Script file not found: %s", path)
            return None
        return path.read_text(encoding=self._encoding)
