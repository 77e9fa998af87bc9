"""
Core module: data models, exceptions, query construction and assembly.

Models (models.py):
    - ManagedObjectRef: Type plus moId of one inventory object
    - SelectionSpec/TraversalSpec: Named traversal rules and references
    - PropertySpec/ObjectSpec/FilterSpec: The composed retrieval request
    - ObjectContent/RetrievalResult: Flat records returned by the service

Exceptions (exceptions.py):
    - PropCollectError: Base exception for all propcollect errors
    - ConfigurationError: Bad rules, property table or settings
    - TransportError: The retrieval call failed
    - MalformedRecordError: A result record has no object identity

Construction and assembly:
    - graph/: Traversal graph builder and analysis
    - properties.py: Validated property spec table
    - query.py: Filter spec composition
    - assembly.py: Flat results to nested per-object trees
    - collector.py: The full query round
"""

from propcollect.core.assembly import assemble_object, assemble_result, assemble_trees
from propcollect.core.collector import InventoryCollector
from propcollect.core.exceptions import (
    ConfigurationError,
    MalformedRecordError,
    PropCollectError,
    TransportError,
)
from propcollect.core.models import (
    DynamicProperty,
    FilterSpec,
    ManagedObjectRef,
    ObjectContent,
    ObjectSpec,
    PropertySpec,
    RetrievalResult,
    SelectionSpec,
    TraversalSpec,
)
from propcollect.core.properties import DEFAULT_PROPERTIES, PropertyTable
from propcollect.core.query import build_filter_spec, build_object_spec, build_query

__all__ = [
    # Models
    "ManagedObjectRef",
    "SelectionSpec",
    "TraversalSpec",
    "PropertySpec",
    "ObjectSpec",
    "FilterSpec",
    "DynamicProperty",
    "ObjectContent",
    "RetrievalResult",
    # Exceptions
    "PropCollectError",
    "ConfigurationError",
    "TransportError",
    "MalformedRecordError",
    # Construction and assembly
    "DEFAULT_PROPERTIES",
    "PropertyTable",
    "build_object_spec",
    "build_filter_spec",
    "build_query",
    "assemble_object",
    "assemble_result",
    "assemble_trees",
    "InventoryCollector",
]
