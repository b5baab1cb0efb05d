"""Dependency resolution exports."""

from .dependency_sorter import CyclicDependencyError, DuplicateScriptKeyError, sort_scripts

__all__ = [
    "CyclicDependencyError",
    "DuplicateScriptKeyError",
    "sort_scripts",
]
