"""Data models for property collector queries and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ManagedObjectRef:
    """Reference to one inventory object (type plus moId)."""

    type: str
    value: str

    @classmethod
    def parse(cls, text: str) -> ManagedObjectRef:
        """Parse a ``Type:value`` string, e.g. ``Folder:group-d1``."""
        type_, sep, value = text.partition(":")
        if not sep or not type_ or not value:
            raise ValueError(f"Expected TYPE:VALUE, got '{text}'")
        return cls(type=type_, value=value)

    def __str__(self) -> str:
        return f"{self.type}:{self.value}"


@dataclass(frozen=True)
class SelectionSpec:
    """Named reference to a traversal rule."""

    name: str


@dataclass(frozen=True)
class TraversalSpec:
    """Edge template: follow ``path`` on objects of ``type``, then apply ``select_set``."""

    name: str
    type: str
    path: str
    skip: bool = False
    select_set: tuple[SelectionSpec, ...] = ()

    @property
    def selected_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.select_set)


@dataclass(frozen=True)
class PropertySpec:
    """Dotted property paths to retrieve for one leaf type."""

    type: str
    path_set: tuple[str, ...]
    all: bool = False


@dataclass(frozen=True)
class ObjectSpec:
    """Root object plus the traversal specs to walk from it."""

    obj: ManagedObjectRef
    skip: bool = False
    select_set: tuple[TraversalSpec, ...] = ()


@dataclass(frozen=True)
class FilterSpec:
    """A complete, self-contained retrieval request."""

    object_set: tuple[ObjectSpec, ...]
    prop_set: tuple[PropertySpec, ...]


@dataclass(frozen=True)
class DynamicProperty:
    """One ``(dotted path, value)`` pair of a result record."""

    name: str
    val: Any


@dataclass(frozen=True)
class ObjectContent:
    """One result record: object identity plus its property pairs."""

    obj: ManagedObjectRef | None
    prop_set: tuple[DynamicProperty, ...] = ()

    @property
    def identity(self) -> str | None:
        if self.obj is None or not self.obj.value:
            return None
        return self.obj.value


@dataclass(frozen=True)
class RetrievalResult:
    """Complete response of one retrieval call."""

    objects: tuple[ObjectContent, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.objects)
