"""Deployment run entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from script_deployer.configuration.runtime_settings import Configuration
from script_deployer.script_model.deployment_outcomes import DeploymentResult
from script_deployer.script_model.scripts import Script


@dataclass(frozen=True)
class DeploymentRunRequest:
    """Input contract for executing one run."""

    config_path: str
    report_path: str | None = None
    plan_only: bool = False
    log_level: str | None = None


@dataclass(frozen=True)
class DeploymentRunOutcome:
    """Output contract for one completed run."""

    ordered_keys: tuple[str, ...]
    result: DeploymentResult | None
    report_path: Path | None
    plan_only: bool

    @property
    def is_success(self) -> bool:
        return self.result is None or self.result.is_success


@dataclass(frozen=True)
class RunArtifacts:
    """Loaded domain artifacts required during run execution."""

    configuration: Configuration
    scripts: tuple[Script, ...]
    ordered_scripts: tuple[Script, ...]
