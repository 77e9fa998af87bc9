"""Rebuild nested per-object property trees from flat result records.

The property collector returns every requested property as a flat
``(dotted path, value)`` pair. This module inverts that: each path is
split on ``.`` and walked into a tree of branches, with the value stored
at the last segment.

Overwrite rules within one record:
    - the same leaf path twice: last write wins
    - a later pair targeting a branch's own path replaces the branch with a leaf
    - a later pair descending through an existing leaf replaces the leaf with a branch

Records are independent: a repeated identity replaces the earlier tree.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from propcollect.core.exceptions import MalformedRecordError
from propcollect.core.models import ObjectContent, RetrievalResult
from propcollect.core.properties import PATH_SEPARATOR, split_path

logger = logging.getLogger(__name__)


@dataclass
class PropertyLeaf:
    """A scalar (or opaque) property value."""

    value: Any

    def to_python(self) -> Any:
        return self.value


@dataclass
class PropertyBranch:
    """A nested field mapping, in first-write order."""

    children: dict[str, PropertyNode] = field(default_factory=dict)

    def ensure_branch(self, key: str) -> PropertyBranch:
        """Get the branch at ``key``, creating it if absent or a leaf."""
        node = self.children.get(key)
        if isinstance(node, PropertyBranch):
            return node
        if isinstance(node, PropertyLeaf):
            logger.debug("Replacing leaf '%s' with a branch", key)
        branch = PropertyBranch()
        self.children[key] = branch
        return branch

    def set_leaf(self, key: str, value: Any) -> None:
        """Store ``value`` at ``key``, replacing any leaf or branch there."""
        if isinstance(self.children.get(key), PropertyBranch):
            logger.debug("Replacing branch '%s' with a leaf", key)
        self.children[key] = PropertyLeaf(value)

    def set_path(self, path: str, value: Any) -> None:
        """Walk ``path`` from this branch and store ``value`` at its end."""
        *parents, last = split_path(path)
        cursor = self
        for segment in parents:
            cursor = cursor.ensure_branch(segment)
        cursor.set_leaf(last, value)

    def flatten(self, prefix: str = "") -> Iterator[tuple[str, Any]]:
        """Yield ``(dotted path, value)`` for every leaf, pre-order."""
        for key, node in self.children.items():
            path = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else key
            if isinstance(node, PropertyBranch):
                yield from node.flatten(path)
            else:
                yield path, node.value

    def to_python(self) -> dict[str, Any]:
        return {key: node.to_python() for key, node in self.children.items()}

    def __len__(self) -> int:
        return len(self.children)


PropertyNode = PropertyLeaf | PropertyBranch


def assemble_object(content: ObjectContent) -> PropertyBranch:
    """Build the property tree of one record."""
    tree = PropertyBranch()
    for prop in content.prop_set:
        tree.set_path(prop.name, prop.val)
    return tree


def assemble_trees(result: RetrievalResult) -> dict[str, PropertyBranch]:
    """Map object identity to its property tree.

    Every record is processed before failing, so all malformed positions
    are reported together.

    Raises:
        MalformedRecordError: if any record has no object identity. No
            partial mapping is returned.
    """
    trees: dict[str, PropertyBranch] = {}
    malformed: list[int] = []

    for position, content in enumerate(result.objects):
        identity = content.identity
        if identity is None:
            malformed.append(position)
            continue
        if identity in trees:
            logger.debug("Identity %s repeated at record %d, replacing", identity, position)
        trees[identity] = assemble_object(content)

    if malformed:
        raise MalformedRecordError(malformed)

    logger.debug("Assembled %d objects", len(trees))
    return trees


def assemble_result(result: RetrievalResult) -> dict[str, dict[str, Any]]:
    """Map object identity to its nested property tree as plain dicts."""
    return {identity: tree.to_python() for identity, tree in assemble_trees(result).items()}
