"""Graph analysis: dangling selections, cycles, reachability."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from propcollect.core.graph.base import TraversalGraph


def find_dangling_references(graph: TraversalGraph) -> list[tuple[str, str]]:
    """Get ``(spec, selected name)`` pairs whose target is missing. O(V + E)."""
    return [
        (spec.name, selected)
        for spec in graph
        for selected in spec.selected_names
        if selected not in graph
    ]


def find_cycles(graph: TraversalGraph, max_cycles: int = 20) -> list[list[str]]:
    """Find back-edge cycles, e.g. ``['rpToRp']`` for a self-selecting rule."""
    cycles: list[list[str]] = []
    visited: set[str] = set()
    stack: list[str] = []
    stack_set: set[str] = set()

    def dfs(name: str) -> None:
        if len(cycles) >= max_cycles:
            return

        visited.add(name)
        stack.append(name)
        stack_set.add(name)

        for selected in graph.selections(name):
            if selected not in graph:
                continue
            if selected not in visited:
                dfs(selected)
            elif selected in stack_set and len(cycles) < max_cycles:
                idx = stack.index(selected)
                cycles.append(stack[idx:])

        stack.pop()
        stack_set.remove(name)

    for name in graph.names:
        if name not in visited:
            dfs(name)

    return cycles


def reachable_rules(graph: TraversalGraph, entry: str) -> list[str]:
    """Rule names reachable from ``entry`` (inclusive), BFS order."""
    if entry not in graph:
        return []

    seen: set[str] = {entry}
    order: list[str] = []
    queue: deque[str] = deque([entry])

    while queue:
        name = queue.popleft()
        order.append(name)
        for selected in graph.selections(name):
            if selected in graph and selected not in seen:
                seen.add(selected)
                queue.append(selected)

    return order


def unreachable_rules(graph: TraversalGraph, entry: str) -> list[str]:
    """Rule names never applied when walking from ``entry``."""
    reachable = set(reachable_rules(graph, entry))
    return [name for name in graph.names if name not in reachable]
