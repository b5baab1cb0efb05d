"""Per-script deployment decision logic."""

from __future__ import annotations

import logging

from script_deployer.collaborator_contracts.cancellation import CancellationToken
from script_deployer.collaborator_contracts.contracts import DeploySource, DeployTarget
from script_deployer.script_model.deployment_outcomes import (
    DeployedInfo,
    DeploymentOptions,
    DeployScriptStatus,
)
from script_deployer.script_model.scripts import Script

_LOGGER = logging.getLogger(__name__)

SCRIPT_KEY_PARAMETER = "ScriptKey"
CONTENTS_HASH_PARAMETER = "ContentsHash"


class RegistrationScriptError(Exception):
    """Raised when the migration registration script cannot be executed."""


class ScriptEvaluator:
    """Decides and performs the deployment of one script at a time.

    Checks run in a fixed order and stop at the first one that does not pass:
    actuality, content, already deployed, dependency gate. Passing scripts are
    executed and then registered through the configured registration script.
    """

    def __init__(
        self,
        source: DeploySource,
        target: DeployTarget,
        options: DeploymentOptions,
    ) -> None:
        self._source = source
        self._target = target
        self._options = options

    async def evaluate(
        self, script: Script, cancellation: CancellationToken
    ) -> DeployScriptStatus:
        if await self._is_superseded(script, cancellation):
            _LOGGER.info(
                "Script %s is not actual, %s is already deployed",
                script.script_key,
                script.actual_before,
            )
            return DeployScriptStatus.NOT_ACTUAL

        content = await self._source.get_script_content(script.source, cancellation)
        if not content:
            _LOGGER.error("Script %s has no content at %s", script.script_key, script.source)
            return DeployScriptStatus.WRONG_CONTENT
        script.materialize(content)

        deployed_info = await self._target.get_deployed_info(script.script_key, cancellation)
        if deployed_info is not None and not _needs_redeploy(script, deployed_info):
            _LOGGER.info("Script %s is already deployed", script.script_key)
            return DeployScriptStatus.ALREADY_DEPLOYED

        if script.depends_on:
            dependency = await self._target.get_deployed_info(script.depends_on, cancellation)
            if dependency is None:
                _LOGGER.error(
                    "Dependency %s of script %s is not deployed",
                    script.depends_on,
                    script.script_key,
                )
                return DeployScriptStatus.DEPENDENCY_MISSING

        _LOGGER.info("Deploying script %s", script.script_key)
        await self._target.deploy_script(script, cancellation)
        # Execution and registration form one unit; cancellation is not observed between them.
        await self._register_migration(script, cancellation)
        _LOGGER.info("Script %s deployed", script.script_key)
        return DeployScriptStatus.DEPLOYED

    async def _is_superseded(self, script: Script, cancellation: CancellationToken) -> bool:
        if not script.actual_before:
            return False
        successor = await self._target.get_deployed_info(script.actual_before, cancellation)
        return successor is not None

    async def _register_migration(self, script: Script, cancellation: CancellationToken) -> None:
        if script.is_initialize_target or self._options.disable_registration_of_migrations:
            return

        registration_script = self._options.insert_migration_script
        if registration_script is None:
            _LOGGER.warning(
                "No migration registration script is configured; "
                "registration of migrations is disabled for this run"
            )
            self._options.disable_registration_of_migrations = True
            return

        registration_script.script_parameters[SCRIPT_KEY_PARAMETER] = script.script_key
        registration_script.script_parameters[CONTENTS_HASH_PARAMETER] = script.contents_hash
        if not registration_script.content:
            content = await self._source.get_script_content(
                registration_script.source, cancellation
            )
            if not content:
                raise RegistrationScriptError(
                    f"Migration registration script '{registration_script.script_key}' "
                    "has no content."
                )
            registration_script.materialize(content)

        _LOGGER.debug("Registering migration %s", script.script_key)
        await self._target.deploy_script(registration_script, cancellation)


def _needs_redeploy(script: Script, deployed_info: DeployedInfo) -> bool:
    if not script.can_repeat:
        return False
    current = (script.contents_hash or "").casefold()
    recorded = (deployed_info.contents_hash or "").casefold()
    return current != recorded
