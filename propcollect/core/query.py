"""Compose root, traversal graph and property specs into one filter spec."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from propcollect.core.graph import (
    TRAVERSAL_RULES,
    TraversalGraph,
    TraversalRule,
    build_traversal_graph,
)
from propcollect.core.models import FilterSpec, ManagedObjectRef, ObjectSpec, PropertySpec
from propcollect.core.properties import PropertyTable

logger = logging.getLogger(__name__)


def build_object_spec(root: ManagedObjectRef, graph: TraversalGraph) -> ObjectSpec:
    """Root object with every traversal spec attached."""
    return ObjectSpec(obj=root, skip=False, select_set=graph.specs)


def build_filter_spec(
    root: ManagedObjectRef,
    graph: TraversalGraph,
    property_specs: Sequence[PropertySpec],
) -> FilterSpec:
    """Build a self-contained filter spec for one retrieval call."""
    return FilterSpec(
        object_set=(build_object_spec(root, graph),),
        prop_set=tuple(property_specs),
    )


def build_query(
    root: ManagedObjectRef,
    table: PropertyTable,
    rules: Iterable[TraversalRule] = TRAVERSAL_RULES,
) -> FilterSpec:
    """Build graph and property specs from static declarations and compose them.

    Raises:
        ConfigurationError: if the rule table selects an undeclared rule.
    """
    graph = build_traversal_graph(rules)
    spec = build_filter_spec(root, graph, table.property_specs())
    logger.debug(
        "Query from %s: %d traversal specs, leaf types %s",
        root,
        len(graph),
        list(table.leaf_types),
    )
    return spec
