"""Deployment decision exports."""

from .script_evaluator import (
    CONTENTS_HASH_PARAMETER,
    SCRIPT_KEY_PARAMETER,
    RegistrationScriptError,
    ScriptEvaluator,
)

__all__ = [
    "CONTENTS_HASH_PARAMETER",
    "SCRIPT_KEY_PARAMETER",
    "RegistrationScriptError",
    "ScriptEvaluator",
]
