"""Live retrieval against vCenter/ESXi through pyVmomi."""

from __future__ import annotations

import http.client
import logging
import ssl
from typing import Any

from pyVim import connect
from pyVmomi import vim, vmodl
from pyVmomi.VmomiSupport import DataObject, ManagedObject

from propcollect.config import Settings
from propcollect.core.exceptions import ConfigurationError, TransportError
from propcollect.core.models import (
    DynamicProperty,
    FilterSpec,
    ManagedObjectRef,
    ObjectContent,
    RetrievalResult,
)

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (vmodl.MethodFault, OSError, http.client.HTTPException)


def managed_type(name: str) -> type:
    """Resolve a managed object type name such as ``VirtualMachine``."""
    type_ = getattr(vim, name, None)
    if type_ is None:
        raise ConfigurationError(f"Unknown managed object type '{name}'")
    return type_


def to_plain(value: Any) -> Any:
    """Convert pyVmomi values into JSON-friendly Python values.

    Managed objects become their moId, data objects become dicts.
    """
    if isinstance(value, ManagedObject):
        return value._moId
    if isinstance(value, DataObject):
        return {prop.name: to_plain(getattr(value, prop.name)) for prop in value._GetPropertyList()}
    if isinstance(value, list):
        return [to_plain(v) for v in value]
    return value


def to_vmodl_filter(filter_spec: FilterSpec, stub: Any) -> vmodl.query.PropertyCollector.FilterSpec:
    """Convert a core FilterSpec into the property collector's own types."""
    pc = vmodl.query.PropertyCollector

    object_set = []
    for object_spec in filter_spec.object_set:
        select_set = [
            pc.TraversalSpec(
                name=spec.name,
                type=managed_type(spec.type),
                path=spec.path,
                skip=spec.skip,
                selectSet=[pc.SelectionSpec(name=s.name) for s in spec.select_set],
            )
            for spec in object_spec.select_set
        ]
        root = managed_type(object_spec.obj.type)(object_spec.obj.value, stub)
        object_set.append(pc.ObjectSpec(obj=root, skip=object_spec.skip, selectSet=select_set))

    prop_set = [
        pc.PropertySpec(type=managed_type(p.type), all=p.all, pathSet=list(p.path_set))
        for p in filter_spec.prop_set
    ]
    return pc.FilterSpec(objectSet=object_set, propSet=prop_set)


def to_object_content(raw: Any) -> ObjectContent:
    """Convert one pyVmomi ObjectContent."""
    obj = raw.obj
    ref = None
    if obj is not None and getattr(obj, "_moId", None):
        ref = ManagedObjectRef(type=obj._wsdlName, value=obj._moId)
    prop_set = tuple(DynamicProperty(name=p.name, val=to_plain(p.val)) for p in raw.propSet or [])
    return ObjectContent(obj=ref, prop_set=prop_set)


def _ssl_context(verify: bool) -> ssl.SSLContext | None:
    if verify:
        return None
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


class VSphereRetriever:
    """Property collector session against one vCenter or ESXi host.

    Use as a context manager; the session is always logged out on exit.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._si: Any = None
        self._content: Any = None

    def connect(self) -> None:
        """Log in and fetch the service content."""
        if not self._settings.verify_ssl:
            logger.warning("SSL certificate verification is disabled for %s", self._settings.host)
        try:
            self._si = connect.SmartConnect(
                host=self._settings.host,
                user=self._settings.user,
                pwd=self._settings.password,
                port=self._settings.port,
                sslContext=_ssl_context(self._settings.verify_ssl),
            )
            self._content = self._si.RetrieveContent()
        except _TRANSPORT_ERRORS as e:
            self._si = None
            raise TransportError(f"Failed to connect to {self._settings.host}: {e}") from e
        logger.info("Connected to %s", self._settings.host)

    def close(self) -> None:
        """Log out, if connected."""
        if self._si is None:
            return
        try:
            connect.Disconnect(self._si)
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to log out from {self._settings.host}: {e}") from e
        finally:
            self._si = None
            self._content = None
        logger.info("Disconnected from %s", self._settings.host)

    def __enter__(self) -> VSphereRetriever:
        self.connect()
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        if exc_type is None:
            self.close()
            return
        # keep the body's error as the one raised
        try:
            self.close()
        except TransportError as e:
            logger.warning("%s", e)

    def _require_content(self) -> Any:
        if self._content is None:
            raise TransportError("Not connected")
        return self._content

    def root_folder(self) -> ManagedObjectRef:
        root = self._require_content().rootFolder
        return ManagedObjectRef(type="Folder", value=root._moId)

    def retrieve(self, filter_spec: FilterSpec) -> RetrievalResult:
        """Retrieve every page of results for ``filter_spec``."""
        content = self._require_content()
        collector = content.propertyCollector
        spec = to_vmodl_filter(filter_spec, self._si._stub)
        options = vmodl.query.PropertyCollector.RetrieveOptions(maxObjects=self._settings.page_size)

        objects: list[ObjectContent] = []
        pages = 0
        try:
            page = collector.RetrievePropertiesEx(specSet=[spec], options=options)
            while page:
                pages += 1
                objects.extend(to_object_content(o) for o in page.objects)
                if not page.token:
                    break
                page = collector.ContinueRetrievePropertiesEx(token=page.token)
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"RetrievePropertiesEx failed: {e}") from e

        logger.debug("Retrieved %d objects in %d pages", len(objects), pages)
        return RetrievalResult(objects=tuple(objects))
