"""Deployment outcome entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .scripts import Script


class DeployScriptStatus(str, Enum):
    """Outcome of evaluating one script during a run."""

    UNKNOWN = "unknown"
    NOT_ACTUAL = "not_actual"
    WRONG_CONTENT = "wrong_content"
    ALREADY_DEPLOYED = "already_deployed"
    DEPLOYED = "deployed"
    DEPENDENCY_MISSING = "dependency_missing"

    @property
    def is_run_ending(self) -> bool:
        return self in (DeployScriptStatus.WRONG_CONTENT, DeployScriptStatus.DEPENDENCY_MISSING)


@dataclass(frozen=True)
class DeployedInfo:
    """Evidence held by the target that a script key was deployed."""

    script_key: str
    contents_hash: str | None = None


@dataclass
class DeploymentOptions:
    """Run-scoped deployment configuration."""

    insert_migration_script: Script | None = None
    disable_registration_of_migrations: bool = False


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of one deployment run."""

    error_message: str | None = None
    deploy_script_statuses: Mapping[str, DeployScriptStatus] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "deploy_script_statuses",
            MappingProxyType(dict(self.deploy_script_statuses)),
        )

    @property
    def is_success(self) -> bool:
        return not self.error_message

    @staticmethod
    def success(statuses: Mapping[str, DeployScriptStatus]) -> DeploymentResult:
        return DeploymentResult(error_message=None, deploy_script_statuses=statuses)

    @staticmethod
    def error(
        error_message: str, statuses: Mapping[str, DeployScriptStatus] | None = None
    ) -> DeploymentResult:
        return DeploymentResult(
            error_message=error_message or "Deployment failed.",
            deploy_script_statuses=statuses or {},
        )
