"""
Tool Dispatcher
---------------
Routes an MCP tool call to the ShieldAPI client.

Ordinary tools map their single parameter 1:1 onto the query string.
full_scan is the one exception: its 'target' is classified first and the
resulting key (email / ip / url / domain) is what gets sent.

Errors are logged and re-raised unchanged; the MCP SDK surfaces them
to the calling agent.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from mcp.types import TextContent

from api.client import ShieldApiClient
from core.classifier import classify_target
from core.errors import ErrorHandler, ToolArgumentError, UnknownToolError
from infra.logging import InvocationContext, log_invocation_end

from .formatter import format_result
from .registry import FULL_SCAN_TOOL, ToolDefinition, ToolRegistry


@dataclass(frozen=True)
class InvocationRequest:
    """One inbound tool call."""
    tool_name: str
    arguments: Dict[str, Any]


class ToolDispatcher:
    """
    Dispatches tool calls.

    Rules:
    - Unknown tool names and bad arguments fail before any network I/O
    - Exactly one ShieldAPI call per dispatch
    - No error is ever turned into a result
    """

    def __init__(
        self,
        registry: ToolRegistry,
        client: ShieldApiClient,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.registry = registry
        self.client = client
        self.error_handler = error_handler or ErrorHandler()
        self._logger = logging.getLogger("shieldapi.tools.dispatcher")

    def resolve(self, request: InvocationRequest) -> ToolDefinition:
        """Look up and validate a call without executing it."""
        tool = self.registry.get(request.tool_name)
        if tool is None:
            raise UnknownToolError(request.tool_name)

        valid, error = tool.validate_args(request.arguments)
        if not valid:
            raise ToolArgumentError(request.tool_name, error or "invalid arguments")

        return tool

    def build_params(self, tool: ToolDefinition, arguments: Dict[str, Any]) -> Dict[str, str]:
        """Map validated arguments onto ShieldAPI query parameters."""
        value = arguments[tool.parameter_name]
        if tool.name == FULL_SCAN_TOOL:
            return classify_target(value)
        return {tool.parameter_name: value}

    async def dispatch(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> List[TextContent]:
        """Execute one tool call and return the formatted reply."""
        request = InvocationRequest(tool_name=tool_name, arguments=dict(arguments or {}))
        start_time = datetime.now()

        with InvocationContext():
            try:
                tool = self.resolve(request)
                params = self.build_params(tool, request.arguments)
                self._logger.info(
                    f"Dispatching {tool.name} -> /api/{tool.endpoint} ({', '.join(params)})",
                    extra={"tool_name": tool.name, "endpoint": tool.endpoint},
                )

                data = await self.client.invoke(tool.endpoint, params)
            except Exception as e:
                message = self.error_handler.handle(e, tool_name=tool_name)
                log_invocation_end(tool_name, success=False, elapsed_ms=_elapsed_ms(start_time), error=message)
                raise

            log_invocation_end(tool_name, success=True, elapsed_ms=_elapsed_ms(start_time))
            return format_result(data)


def _elapsed_ms(start_time: datetime) -> float:
    return (datetime.now() - start_time).total_seconds() * 1000
