"""
Transports: run a composed filter spec against an inventory service.

Components:
    - Retriever: Protocol every transport implements
    - VSphereRetriever: live property collector session via pyVmomi
    - ReplayRetriever: serves a saved response document (offline use, tests)

A transport owns serialization, authentication and the network call. It
returns one complete RetrievalResult or raises TransportError.
"""

from propcollect.transport.base import Retriever
from propcollect.transport.replay import ReplayRetriever, parse_response
from propcollect.transport.vsphere import VSphereRetriever

__all__ = [
    "Retriever",
    "ReplayRetriever",
    "VSphereRetriever",
    "parse_response",
]
