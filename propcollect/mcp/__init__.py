"""
MCP server for propcollect.

Exposes inventory collection to LLMs via the Model Context Protocol.

Tools:
    - inventory_collect: Collect nested properties of every leaf object
    - inventory_assemble: Assemble a saved response file
    - inventory_traversal: Show the traversal rules

Usage:
    Run: propcollect-mcp
"""

import asyncio

from propcollect.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
