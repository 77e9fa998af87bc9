"""Data models for traversal rule declarations."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TraversalRule:
    """One static, type-level containment edge.

    ``selects`` names the rules applied to every child found through
    ``path``. A rule may select itself (e.g. folders nesting folders).
    """

    name: str
    type: str
    path: str
    selects: tuple[str, ...] = ()

    def __repr__(self) -> str:
        return f"TraversalRule({self.name}: {self.type}.{self.path} -> {list(self.selects)})"
