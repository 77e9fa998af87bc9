"""MCP server implementation for propcollect."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from propcollect.core.assembly import assemble_result
from propcollect.core.exceptions import PropCollectError
from propcollect.core.models import ManagedObjectRef
from propcollect.core.properties import PropertyTable

server = Server("propcollect")


def _load_table(properties: dict[str, list[str]] | None) -> PropertyTable:
    """Property table from tool arguments, or the built-in default."""
    return PropertyTable(properties) if properties else PropertyTable.default()


_PROPERTIES_SCHEMA = {
    "type": "object",
    "description": (
        "Property paths per leaf type, e.g. "
        '{"VirtualMachine": ["name", "guest.toolsStatus"]}. Defaults to the built-in table.'
    ),
    "additionalProperties": {"type": "array", "items": {"type": "string"}},
}


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="inventory_collect",
            description=(
                "Collect properties of every virtual machine (or other declared leaf type) "
                "reachable from the inventory root. Connection settings come from the "
                "server's environment (VCENTER_HOST, VCENTER_USER, VCENTER_PASSWORD)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "root": {
                        "type": "string",
                        "description": "Root object as TYPE:VALUE (default: root folder)",
                    },
                    "properties": _PROPERTIES_SCHEMA,
                },
            },
        ),
        Tool(
            name="inventory_assemble",
            description=(
                "Assemble a saved property collector response (JSON file) into nested "
                "per-object property trees."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the saved response file",
                    },
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="inventory_traversal",
            description="Show the traversal rules used to walk the inventory.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "inventory_collect":
            result = _handle_collect(arguments.get("root"), arguments.get("properties"))
        elif name == "inventory_assemble":
            result = _handle_assemble(arguments["path"])
        elif name == "inventory_traversal":
            result = _handle_traversal()
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    except (PropCollectError, ValueError, KeyError) as e:
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]


def _handle_collect(root: str | None, properties: dict[str, list[str]] | None) -> dict[str, Any]:
    """Handle inventory_collect tool."""
    from propcollect.config import load_settings
    from propcollect.core.collector import InventoryCollector
    from propcollect.transport import VSphereRetriever

    root_ref = ManagedObjectRef.parse(root) if root else None
    table = _load_table(properties)

    with VSphereRetriever(load_settings()) as retriever:
        mapping = InventoryCollector(retriever, table).collect(root_ref)

    return {"objects": mapping, "count": len(mapping)}


def _handle_assemble(path: str) -> dict[str, Any]:
    """Handle inventory_assemble tool."""
    from propcollect.transport import ReplayRetriever

    mapping = assemble_result(ReplayRetriever(Path(path)).load())
    return {"objects": mapping, "count": len(mapping)}


def _handle_traversal() -> dict[str, Any]:
    """Handle inventory_traversal tool."""
    from propcollect.core.graph import ROOT_RULE, build_traversal_graph
    from propcollect.core.graph.analysis import find_cycles

    traversal = build_traversal_graph()
    return {
        "root": ROOT_RULE,
        "specs": [
            {
                "name": spec.name,
                "type": spec.type,
                "path": spec.path,
                "selectSet": list(spec.selected_names),
            }
            for spec in traversal
        ],
        "cycles": find_cycles(traversal),
    }


async def serve() -> None:
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
