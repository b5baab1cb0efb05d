"""Script model exports."""

from .deployment_outcomes import (
    DeployedInfo,
    DeploymentOptions,
    DeploymentResult,
    DeployScriptStatus,
)
from .script_kinds import SCRIPT_KINDS, build_script, register_script_kind
from .scripts import (
    Script,
    ScriptDefinitionError,
    compute_contents_hash,
    normalize_script_key,
)

__all__ = [
    "Script",
    "ScriptDefinitionError",
    "compute_contents_hash",
    "normalize_script_key",
    "SCRIPT_KINDS",
    "build_script",
    "register_script_kind",
    "DeployScriptStatus",
    "DeployedInfo",
    "DeploymentOptions",
    "DeploymentResult",
]
