"""
ShieldAPI MCP Server
--------------------
Exposes the ShieldAPI tool catalog over MCP (stdio).

Handlers are plain coroutine methods registered on the low-level
mcp Server, so they can be exercised without a transport.
"""

from typing import Any, Dict, List, Optional
import logging

import mcp.server.stdio
from mcp.server import Server
from mcp.types import TextContent, Tool

from api.client import ShieldApiClient
from tools.executor import ToolDispatcher
from tools.registry import ToolRegistry, create_shield_registry

SERVER_NAME = "ShieldAPI"
SERVER_VERSION = "1.0.2"

logger = logging.getLogger("shieldapi.server")


class ShieldMCPServer:
    """MCP front end: list_tools returns the catalog, call_tool dispatches."""

    def __init__(
        self,
        client: ShieldApiClient,
        registry: Optional[ToolRegistry] = None,
    ):
        self.client = client
        self.registry = registry or create_shield_registry()
        self.dispatcher = ToolDispatcher(self.registry, client)
        self.server = Server(SERVER_NAME, version=SERVER_VERSION)
        self._register_handlers()

    def _register_handlers(self) -> None:
        self.server.list_tools()(self.list_tools)
        self.server.call_tool()(self.call_tool)

    async def list_tools(self) -> List[Tool]:
        return self.registry.to_mcp_tools()

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        # Exceptions propagate; the SDK reports them as isError results
        return await self.dispatcher.dispatch(name, arguments or {})

    async def run(self) -> None:
        """Serve over stdio until the client disconnects."""
        logger.info(
            f"ShieldAPI MCP server running ({self.client.mode.name} mode)",
            extra={"mode": self.client.mode.value},
        )
        try:
            async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.client.aclose()
