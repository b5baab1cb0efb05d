"""Protocols for the script source and deployment target collaborators."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from script_deployer.script_model.deployment_outcomes import DeployedInfo
from script_deployer.script_model.scripts import Script

from .cancellation import CancellationToken


class DeploySource(Protocol):  # pylint: disable=too-few-public-methods
    """Provides script text by locator."""

    async def get_script_content(
        self, locator: str, cancellation: CancellationToken
    ) -> str | None:
        """Return script text, or ``None`` when the locator is unknown.

        Implementations must not raise for "not found" but may propagate I/O
        failures.
        """
        ...


class DeployTarget(Protocol):
    """Managed system that records and executes scripts."""

    async def get_deployed_info(
        self, script_key: str, cancellation: CancellationToken
    ) -> DeployedInfo | None:
        """Return evidence of a successful deployment, ``None`` if never deployed."""
        ...

    async def deploy_script(self, script: Script, cancellation: CancellationToken) -> None:
        """Execute the script content; raise on any execution failure."""
        ...


@runtime_checkable
class PreparableTarget(Protocol):  # pylint: disable=too-few-public-methods
    """Optional target capability invoked once before scripts are evaluated."""

    async def prepare_to_deploy(self, cancellation: CancellationToken) -> None: ...
