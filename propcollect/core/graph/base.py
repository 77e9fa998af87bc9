"""TraversalGraph: flat, name-keyed collection of traversal specs."""

from __future__ import annotations

from collections.abc import Iterator

from propcollect.core.models import TraversalSpec


class TraversalGraph:
    """Directed graph of traversal specs.

    Edges are selection names, not object references, so cycles
    (pools nesting pools, folders nesting folders) need no special care.
    Uses a dict keyed by rule name for O(1) lookups; iteration follows
    declaration order.
    """

    __slots__ = ("_specs",)

    def __init__(self, specs: tuple[TraversalSpec, ...] = ()) -> None:
        self._specs: dict[str, TraversalSpec] = {spec.name: spec for spec in specs}

    def get(self, name: str) -> TraversalSpec | None:
        """Get spec by name. O(1)."""
        return self._specs.get(name)

    def selections(self, name: str) -> tuple[str, ...]:
        """Names selected by a spec. O(out-degree)."""
        spec = self._specs.get(name)
        return spec.selected_names if spec else ()

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._specs)

    @property
    def specs(self) -> tuple[TraversalSpec, ...]:
        return tuple(self._specs.values())

    @property
    def num_edges(self) -> int:
        return sum(len(spec.select_set) for spec in self._specs.values())

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[TraversalSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"TraversalGraph(specs={len(self)}, edges={self.num_edges})"
