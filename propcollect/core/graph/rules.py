"""Static containment rules for the vSphere inventory."""

from __future__ import annotations

from propcollect.core.graph.models import TraversalRule

ROOT_RULE = "visitFolders"

_RP_CHILDREN = ("rpToRp", "rpToVm")

TRAVERSAL_RULES: tuple[TraversalRule, ...] = (
    TraversalRule("rpToRp", "ResourcePool", "resourcePool", _RP_CHILDREN),
    TraversalRule("rpToVm", "ResourcePool", "vm"),
    TraversalRule("crToRp", "ComputeResource", "resourcePool", _RP_CHILDREN),
    TraversalRule("crToH", "ComputeResource", "host"),
    TraversalRule("dcToHf", "Datacenter", "hostFolder", (ROOT_RULE,)),
    TraversalRule("dcToVmf", "Datacenter", "vmFolder", (ROOT_RULE,)),
    TraversalRule("HToVm", "HostSystem", "vm", (ROOT_RULE,)),
    TraversalRule("dcToDs", "Datacenter", "datastoreFolder", (ROOT_RULE,)),
    TraversalRule("vAppToRp", "VirtualApp", "resourcePool", ("rpToRp", "vAppToRp")),
    TraversalRule("dcToNetf", "Datacenter", "networkFolder", (ROOT_RULE,)),
    # Folder children may be folders, datacenters, compute resources, hosts,
    # resource pools or vApps.
    TraversalRule(
        ROOT_RULE,
        "Folder",
        "childEntity",
        (
            ROOT_RULE,
            "dcToHf",
            "dcToVmf",
            "dcToDs",
            "dcToNetf",
            "crToH",
            "crToRp",
            "HToVm",
            "rpToVm",
            "vAppToRp",
        ),
    ),
)
