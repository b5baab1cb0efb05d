"""Deployment orchestration service."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from script_deployer.collaborator_contracts.cancellation import CancellationToken
from script_deployer.collaborator_contracts.contracts import (
    DeploySource,
    DeployTarget,
    PreparableTarget,
)
from script_deployer.dependency_resolution.dependency_sorter import sort_scripts
from script_deployer.deployment_decision.script_evaluator import ScriptEvaluator
from script_deployer.script_model.deployment_outcomes import (
    DeploymentOptions,
    DeploymentResult,
    DeployScriptStatus,
)
from script_deployer.script_model.scripts import Script

_LOGGER = logging.getLogger(__name__)

_FAILURE_REASONS = {
    DeployScriptStatus.WRONG_CONTENT: "script content is empty or missing",
    DeployScriptStatus.DEPENDENCY_MISSING: "required dependency is not deployed",
}


class DeploymentService:
    """Runs scripts against a target in dependency order, one at a time."""

    def __init__(
        self,
        source: DeploySource,
        target: DeployTarget,
        options: DeploymentOptions | None = None,
    ) -> None:
        self._source = source
        self._target = target
        self._options = options or DeploymentOptions()

    @property
    def options(self) -> DeploymentOptions:
        return self._options

    async def deploy(
        self,
        scripts: Iterable[Script],
        cancellation: CancellationToken | None = None,
    ) -> DeploymentResult:
        """Deploy ``scripts`` and report the status of every evaluated script.

        The run stops at the first script that ends in a run-ending status.
        Collaborator failures are converted into an error result carrying the
        statuses recorded so far.
        """
        token = cancellation or CancellationToken.none()
        # The registration switch-off applies to this run only.
        evaluator = ScriptEvaluator(self._source, self._target, replace(self._options))
        statuses: dict[str, DeployScriptStatus] = {}
        try:
            _LOGGER.info("Prepare to deploy")
            if isinstance(self._target, PreparableTarget):
                await self._target.prepare_to_deploy(token)
            _LOGGER.debug("Prepare completed")

            ordered_scripts = sort_scripts(scripts)
            if not ordered_scripts:
                _LOGGER.info("No scripts to deploy")
                return DeploymentResult.success(statuses)
            _LOGGER.debug("Found %d scripts to evaluate", len(ordered_scripts))

            for script in ordered_scripts:
                token.raise_if_cancelled()
                status = await evaluator.evaluate(script, token)
                statuses[script.script_key] = status
                if status.is_run_ending:
                    message = (
                        f"Deployment stopped at script '{script.script_key}': "
                        f"{_FAILURE_REASONS[status]}."
                    )
                    _LOGGER.error("%s", message)
                    return DeploymentResult.error(message, statuses)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            _LOGGER.critical("Failed to deploy", exc_info=exc)
            return DeploymentResult.error(str(exc) or type(exc).__name__, statuses)

        _LOGGER.info("Deployment completed")
        return DeploymentResult.success(statuses)
