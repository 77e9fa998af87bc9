"""SelectionSpec registry and traversal graph construction."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from propcollect.core.exceptions import ConfigurationError
from propcollect.core.graph.analysis import find_dangling_references
from propcollect.core.graph.base import TraversalGraph
from propcollect.core.graph.models import TraversalRule
from propcollect.core.graph.rules import TRAVERSAL_RULES
from propcollect.core.models import SelectionSpec, TraversalSpec

logger = logging.getLogger(__name__)


class SelectionRegistry:
    """Collects named traversal rules and resolves selections by name."""

    def __init__(self) -> None:
        self._rules: dict[str, TraversalRule] = {}
        self._selections: dict[str, SelectionSpec] = {}

    def register(self, rule: TraversalRule) -> None:
        """Add a rule. Names must be unique within one graph."""
        if not rule.name:
            raise ConfigurationError("Traversal rule name must not be empty")
        if rule.name in self._rules:
            raise ConfigurationError(f"Duplicate traversal rule name: '{rule.name}'")
        self._rules[rule.name] = rule

    def register_all(self, rules: Iterable[TraversalRule]) -> None:
        for rule in rules:
            self.register(rule)

    def selection(self, name: str) -> SelectionSpec:
        """Get the shared SelectionSpec for a rule name."""
        if name not in self._selections:
            self._selections[name] = SelectionSpec(name=name)
        return self._selections[name]

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def build(self) -> TraversalGraph:
        """Turn the registered rules into traversal specs.

        Raises:
            ConfigurationError: if a rule selects a name that was never registered.
        """
        specs = tuple(
            TraversalSpec(
                name=rule.name,
                type=rule.type,
                path=rule.path,
                skip=False,
                select_set=tuple(self.selection(name) for name in rule.selects),
            )
            for rule in self._rules.values()
        )
        graph = TraversalGraph(specs)

        dangling = find_dangling_references(graph)
        if dangling:
            pairs = ", ".join(f"{name} -> {selected}" for name, selected in dangling)
            raise ConfigurationError(f"Undeclared traversal rule selected: {pairs}")

        logger.debug("Built %r", graph)
        return graph


def build_traversal_graph(rules: Iterable[TraversalRule] = TRAVERSAL_RULES) -> TraversalGraph:
    """Build the full recursive traversal graph from a static rule table."""
    registry = SelectionRegistry()
    registry.register_all(rules)
    return registry.build()
