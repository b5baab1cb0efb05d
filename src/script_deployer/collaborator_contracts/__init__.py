"""Collaborator contract exports."""

from .cancellation import CancellationToken, DeploymentCancelledError
from .contracts import DeploySource, DeployTarget, PreparableTarget

__all__ = [
    "CancellationToken",
    "DeploymentCancelledError",
    "DeploySource",
    "DeployTarget",
    "PreparableTarget",
]
