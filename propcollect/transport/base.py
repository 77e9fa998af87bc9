"""Protocol for retrieval transports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from propcollect.core.models import FilterSpec, ManagedObjectRef, RetrievalResult


class Retriever(Protocol):
    """Protocol for property collector transports."""

    def root_folder(self) -> ManagedObjectRef:
        """Reference to the inventory's root folder."""
        ...

    def retrieve(self, filter_spec: FilterSpec) -> RetrievalResult:
        """Run one complete retrieval call. Raises TransportError on failure."""
        ...
