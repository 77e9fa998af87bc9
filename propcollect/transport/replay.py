"""Replay a saved property collector response from a JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from propcollect.core.exceptions import TransportError
from propcollect.core.models import (
    DynamicProperty,
    FilterSpec,
    ManagedObjectRef,
    ObjectContent,
    RetrievalResult,
)

logger = logging.getLogger(__name__)

DEFAULT_ROOT = ManagedObjectRef(type="Folder", value="group-d1")


def _parse_ref(raw: Any) -> ManagedObjectRef | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise TransportError(f"Object reference must be a mapping, got {raw!r}")
    value = raw.get("value")
    if value is None:
        return None
    return ManagedObjectRef(type=str(raw.get("type", "")), value=str(value))


def parse_response(data: Any) -> RetrievalResult:
    """Convert a decoded response document into a RetrievalResult.

    Expected shape::

        {"objects": [{"obj": {"type": "VirtualMachine", "value": "vm-10"},
                      "propSet": [{"name": "guest.toolsStatus", "val": "toolsOk"}]}]}
    """
    if not isinstance(data, dict) or not isinstance(data.get("objects", []), list):
        raise TransportError("Response must be a mapping with an 'objects' list")

    objects = []
    for raw in data.get("objects", []):
        if not isinstance(raw, dict):
            raise TransportError(f"Result record must be a mapping, got {raw!r}")
        try:
            prop_set = tuple(
                DynamicProperty(name=p["name"], val=p.get("val")) for p in raw.get("propSet", [])
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise TransportError(f"Malformed propSet entry: {e}") from e
        objects.append(ObjectContent(obj=_parse_ref(raw.get("obj")), prop_set=prop_set))

    return RetrievalResult(objects=tuple(objects))


class ReplayRetriever:
    """Serves one saved response regardless of the filter spec."""

    def __init__(self, path: Path, root: ManagedObjectRef = DEFAULT_ROOT) -> None:
        self._path = path
        self._root = root

    def root_folder(self) -> ManagedObjectRef:
        return self._root

    def retrieve(self, filter_spec: FilterSpec) -> RetrievalResult:
        return self.load()

    def load(self) -> RetrievalResult:
        """Read and parse the saved response."""
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise TransportError(f"Cannot read {self._path}: {e}") from e
        except json.JSONDecodeError as e:
            raise TransportError(f"Invalid JSON in {self._path}: {e}") from e

        result = parse_response(data)
        logger.debug("Replayed %d records from %s", len(result), self._path)
        return result
