"""
Traversal graph: how to walk the inventory from a root container.

The vSphere inventory is a cyclic containment hierarchy (folders nest
folders, resource pools nest resource pools). It is expressed here as a
flat set of named traversal specs that reference each other by name; the
property collector on the server performs the actual walk.

Data Structures:
    - TraversalRule: static, type-level containment edge declaration
    - TraversalGraph: name-keyed collection of TraversalSpec values

Construction:
    - SelectionRegistry: registers rules, resolves selections by name
    - build_traversal_graph(): build the full recursive graph

Analysis:
    - analysis: dangling selections, cycles, reachability
"""

from propcollect.core.graph.base import TraversalGraph
from propcollect.core.graph.builder import SelectionRegistry, build_traversal_graph
from propcollect.core.graph.models import TraversalRule
from propcollect.core.graph.rules import ROOT_RULE, TRAVERSAL_RULES

__all__ = [
    "ROOT_RULE",
    "TRAVERSAL_RULES",
    "SelectionRegistry",
    "TraversalGraph",
    "TraversalRule",
    "build_traversal_graph",
]
