"""Collector that coordinates query building, retrieval and assembly."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from propcollect.core.assembly import PropertyBranch, assemble_trees
from propcollect.core.graph import TRAVERSAL_RULES, TraversalRule
from propcollect.core.models import FilterSpec, ManagedObjectRef
from propcollect.core.properties import PropertyTable
from propcollect.core.query import build_query

if TYPE_CHECKING:
    from propcollect.transport.base import Retriever

logger = logging.getLogger(__name__)


class InventoryCollector:
    """Collects declared properties for every leaf reachable from a root."""

    def __init__(
        self,
        retriever: Retriever,
        table: PropertyTable,
        rules: Iterable[TraversalRule] = TRAVERSAL_RULES,
    ) -> None:
        self._retriever = retriever
        self._table = table
        self._rules = tuple(rules)

    def build_query(self, root: ManagedObjectRef | None = None) -> FilterSpec:
        """Compose the filter spec. Root defaults to the inventory root folder."""
        if root is None:
            root = self._retriever.root_folder()
        return build_query(root, self._table, self._rules)

    def collect_trees(self, root: ManagedObjectRef | None = None) -> dict[str, PropertyBranch]:
        """Run one query round: build, retrieve, assemble.

        The filter spec is built before any retrieval, so configuration
        errors surface without network activity. Transport errors and
        malformed records propagate unchanged.
        """
        filter_spec = self.build_query(root)
        result = self._retriever.retrieve(filter_spec)
        logger.debug("Retrieved %d records", len(result))
        return assemble_trees(result)

    def collect(self, root: ManagedObjectRef | None = None) -> dict[str, dict[str, Any]]:
        """Run one query round and return plain nested dicts."""
        return {identity: tree.to_python() for identity, tree in self.collect_trees(root).items()}
