"""
propcollect: Collect nested vSphere object properties with one query.

propcollect builds a recursive property collector query that walks the
whole inventory from a root folder, then reassembles the flat
``(object, dotted path, value)`` results into nested trees per object:
- Traversal rules are declared once, by type, and reference each other by name
- Property paths per leaf type come from a validated table
- Results map each moId to a nested property tree

Usage:
    from propcollect.config import load_settings
    from propcollect.core import InventoryCollector, PropertyTable
    from propcollect.transport import VSphereRetriever

    with VSphereRetriever(load_settings()) as retriever:
        collector = InventoryCollector(retriever, PropertyTable.default())
        inventory = collector.collect()
"""

__version__ = "0.1.0"
