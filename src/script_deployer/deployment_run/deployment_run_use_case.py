"""Deployment run use-case service."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from script_deployer.collaborator_contracts.cancellation import CancellationToken
from script_deployer.collaborator_contracts.contracts import DeploySource
from script_deployer.configuration import ConfigurationError, load_configuration
from script_deployer.configuration.runtime_settings import (
    Configuration,
    ScriptsSettings,
    TargetSettings,
)
from script_deployer.dependency_resolution.dependency_sorter import (
    CyclicDependencyError,
    DuplicateScriptKeyError,
    sort_scripts,
)
from script_deployer.deployment_targets.sql_target import SqlTarget, SqlTargetSettings
from script_deployer.results_writing import RunMetadata, write_deployment_report
from script_deployer.script_model.deployment_outcomes import DeploymentOptions, DeploymentResult
from script_deployer.script_model.scripts import Script
from script_deployer.script_sources import FilesystemSource, ManifestError, discover_scripts

from .deployment_service import DeploymentService
from .run_contracts import DeploymentRunOutcome, DeploymentRunRequest, RunArtifacts

_LOGGER = logging.getLogger(__name__)

TargetFactory = Callable[[TargetSettings], SqlTarget]
SourceFactory = Callable[[ScriptsSettings], DeploySource]


class DeploymentRunError(Exception):
    """Raised when a deployment run cannot be started."""


def execute_deployment_run(
    request: DeploymentRunRequest,
    *,
    target_factory: TargetFactory | None = None,
    source_factory: SourceFactory | None = None,
    logging_configurator: Callable[[str], None] | None = None,
) -> DeploymentRunOutcome:
    """Resolve the scripts named by the configuration and deploy them.

    Plan-only requests stop after ordering and never contact the target.
    """
    resolved_target_factory = target_factory or _build_sql_target
    resolved_source_factory = source_factory or _build_filesystem_source

    artifacts = _load_run_artifacts(request.config_path)
    if logging_configurator is not None:
        logging_configurator(request.log_level or artifacts.configuration.logging.level)
    ordered_keys = tuple(script.script_key for script in artifacts.ordered_scripts)
    if request.plan_only:
        return DeploymentRunOutcome(
            ordered_keys=ordered_keys, result=None, report_path=None, plan_only=True
        )

    run_start = datetime.now(UTC)
    result = asyncio.run(
        _deploy(
            artifacts,
            target=resolved_target_factory(artifacts.configuration.target),
            source=resolved_source_factory(artifacts.configuration.scripts),
        )
    )
    run_end = datetime.now(UTC)

    report_path = None
    if request.report_path:
        report_path = write_deployment_report(
            result,
            ordered_keys,
            RunMetadata(
                run_start=run_start,
                run_end=run_end,
                config_path=artifacts.configuration.path.resolve(),
                target_url=_masked_url(artifacts.configuration.target.url),
                version_table=artifacts.configuration.target.version_table,
            ),
            request.report_path,
        )
    return DeploymentRunOutcome(
        ordered_keys=ordered_keys,
        result=result,
        report_path=report_path,
        plan_only=False,
    )


def _load_run_artifacts(config_path: str) -> RunArtifacts:
    try:
        configuration = load_configuration(config_path)
        scripts = discover_scripts(
            configuration.scripts.directory,
            script_extension=configuration.scripts.script_extension,
            manifest_extension=configuration.scripts.manifest_extension,
        )
        ordered_scripts = sort_scripts(scripts)
    except (
        ConfigurationError,
        ManifestError,
        CyclicDependencyError,
        DuplicateScriptKeyError,
        OSError,
    ) as exc:
        raise DeploymentRunError(str(exc)) from exc
    _LOGGER.info(
        "Resolved %d of %d scripts for deployment", len(ordered_scripts), len(scripts)
    )
    return RunArtifacts(
        configuration=configuration,
        scripts=tuple(scripts),
        ordered_scripts=tuple(ordered_scripts),
    )


async def _deploy(
    artifacts: RunArtifacts, *, target: SqlTarget, source: DeploySource
) -> DeploymentResult:
    cancellation = CancellationToken()
    loop = asyncio.get_running_loop()
    interrupt_handled = _install_interrupt_handler(loop, cancellation)
    try:
        options = DeploymentOptions(
            insert_migration_script=_select_registration_script(
                artifacts.configuration, artifacts.scripts, target
            ),
            disable_registration_of_migrations=(
                artifacts.configuration.deployment.disable_registration_of_migrations
            ),
        )
        service = DeploymentService(source, target, options)
        return await service.deploy(artifacts.scripts, cancellation)
    finally:
        if interrupt_handled:
            loop.remove_signal_handler(signal.SIGINT)
        await target.dispose()


def _select_registration_script(
    configuration: Configuration, scripts: Sequence[Script], target: SqlTarget
) -> Script:
    configured_key = configuration.deployment.insert_migration_script
    if configured_key is None:
        return target.build_registration_script()
    for script in scripts:
        if script.matches_key(configured_key):
            if not script.is_service:
                raise DeploymentRunError(
                    f"Migration registration script '{configured_key}' must be a service script."
                )
            return script
    raise DeploymentRunError(
        f"Migration registration script '{configured_key}' was not found in "
        f"{configuration.scripts.directory}."
    )


def _install_interrupt_handler(
    loop: asyncio.AbstractEventLoop, cancellation: CancellationToken
) -> bool:
    """Turn Ctrl+C into a cancellation observed between scripts."""
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, cancellation.cancel, "interrupted")
        return True
    return False


def _build_sql_target(settings: TargetSettings) -> SqlTarget:
    try:
        return SqlTarget(
            SqlTargetSettings(
                url=settings.url,
                version_table=settings.version_table,
                echo=settings.echo,
            )
        )
    except ValueError as exc:
        raise DeploymentRunError(str(exc)) from exc


def _build_filesystem_source(settings: ScriptsSettings) -> DeploySource:
    return FilesystemSource(settings.directory, encoding=settings.encoding)


def _masked_url(url: str) -> str:
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return url

