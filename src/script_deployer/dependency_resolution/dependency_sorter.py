"""Dependency-respecting ordering of deployable scripts."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from script_deployer.script_model.scripts import Script, normalize_script_key

_LOGGER = logging.getLogger(__name__)


class CyclicDependencyError(Exception):
    """Raised when scripts of one order group depend on each other in a cycle."""

    def __init__(self, script_key: str) -> None:
        super().__init__(f"Cyclic dependency detected for script: {script_key}")
        self.script_key = script_key


class DuplicateScriptKeyError(ValueError):
    """Raised when two deployable scripts share the same key."""


class _VisitState(Enum):
    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    DONE = "done"


@dataclass
class _GraphNode:
    """Arena entry for one script key (or a phantom dependency)."""

    script_key: str
    dependents: list[str] = field(default_factory=list)
    state: _VisitState = _VisitState.UNVISITED


def sort_scripts(scripts: Iterable[Script]) -> list[Script]:
    """Order non-service scripts so each one follows the script it depends on.

    Groups are emitted in ascending ``order_group``; dependencies are only
    resolved within a group. The order is stable for a fixed input order.

    Raises:
      CyclicDependencyError: If a group's dependencies contain a cycle.
      DuplicateScriptKeyError: If a key occurs twice (case-insensitively).
    """
    deployable = [script for script in scripts if not script.is_service]
    if not deployable:
        return []
    _ensure_unique_keys(deployable)

    groups: dict[int, list[Script]] = {}
    for script in deployable:
        groups.setdefault(script.order_group, []).append(script)

    all_keys = {script.normalized_key for script in deployable}
    ordered: list[Script] = []
    for order_group in sorted(groups):
        ordered.extend(_sort_group(order_group, groups[order_group], all_keys))
    return ordered


def _ensure_unique_keys(scripts: Sequence[Script]) -> None:
    seen: dict[str, str] = {}
    for script in scripts:
        previous = seen.get(script.normalized_key)
        if previous is not None:
            raise DuplicateScriptKeyError(
                f"Script key '{script.script_key}' is defined more than once "
                f"(conflicts with '{previous}')."
            )
        seen[script.normalized_key] = script.script_key


def _sort_group(order_group: int, scripts: Sequence[Script], all_keys: set[str]) -> list[Script]:
    scripts_by_key = {script.normalized_key: script for script in scripts}
    graph = _build_graph(scripts)
    _log_cross_group_dependencies(order_group, scripts, scripts_by_key, all_keys)

    finished: list[str] = []
    for key, node in graph.items():
        if node.state is _VisitState.DONE:
            continue
        _visit(graph, key, finished)

    return [scripts_by_key[key] for key in reversed(finished) if key in scripts_by_key]


def _build_graph(scripts: Sequence[Script]) -> dict[str, _GraphNode]:
    graph: dict[str, _GraphNode] = {}
    for script in scripts:
        script_key = script.normalized_key
        graph.setdefault(script_key, _GraphNode(script.script_key))
        if not script.depends_on:
            continue
        dependency_key = normalize_script_key(script.depends_on)
        graph.setdefault(dependency_key, _GraphNode(script.depends_on))
        graph[dependency_key].dependents.append(script_key)
    return graph


def _visit(graph: dict[str, _GraphNode], start: str, finished: list[str]) -> None:
    """Depth-first post-order walk from ``start`` using an explicit stack."""
    graph[start].state = _VisitState.IN_PROGRESS
    stack: list[tuple[str, Iterator[str]]] = [(start, iter(graph[start].dependents))]
    while stack:
        key, dependents = stack[-1]
        for dependent_key in dependents:
            node = graph[dependent_key]
            if node.state is _VisitState.IN_PROGRESS:
                raise CyclicDependencyError(node.script_key)
            if node.state is _VisitState.UNVISITED:
                node.state = _VisitState.IN_PROGRESS
                stack.append((dependent_key, iter(node.dependents)))
                break
        else:
            stack.pop()
            graph[key].state = _VisitState.DONE
            finished.append(key)


def _log_cross_group_dependencies(
    order_group: int,
    scripts: Sequence[Script],
    scripts_by_key: dict[str, Script],
    all_keys: set[str],
) -> None:
    for script in scripts:
        if not script.depends_on:
            continue
        dependency_key = normalize_script_key(script.depends_on)
        if dependency_key in scripts_by_key or dependency_key not in all_keys:
            continue
        # Ordering across groups is never enforced; only the runtime gate checks it.
        _LOGGER.debug(
            "Script %s depends on %s from another order group than %s",
            script.script_key,
            script.depends_on,
            order_group,
        )
