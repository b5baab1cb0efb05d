"""Deployment run exports."""

from .deployment_run_use_case import DeploymentRunError, execute_deployment_run
from .deployment_service import DeploymentService
from .run_contracts import DeploymentRunOutcome, DeploymentRunRequest, RunArtifacts

__all__ = [
    "DeploymentService",
    "DeploymentRunRequest",
    "DeploymentRunOutcome",
    "RunArtifacts",
    "DeploymentRunError",
    "execute_deployment_run",
]
