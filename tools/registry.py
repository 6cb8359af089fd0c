"""
Tool Registry
-------------
The fixed ShieldAPI tool catalog.

Each tool takes exactly one string parameter and maps to one
/api/{endpoint}. The table is static: built once at startup and
never mutated.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import logging

from mcp.types import Tool as MCPTool

FULL_SCAN_TOOL = "full_scan"


@dataclass(frozen=True)
class ToolDefinition:
    """Immutable description of one ShieldAPI tool."""
    name: str
    description: str
    parameter_name: str
    parameter_description: str
    endpoint: str

    def to_json_schema(self) -> Dict[str, Any]:
        """JSON Schema for the tool's single string parameter."""
        return {
            "type": "object",
            "properties": {
                self.parameter_name: {
                    "type": "string",
                    "description": self.parameter_description,
                }
            },
            "required": [self.parameter_name],
            "additionalProperties": False,
        }

    def to_mcp_tool(self) -> MCPTool:
        return MCPTool(
            name=self.name,
            description=self.description,
            inputSchema=self.to_json_schema(),
        )

    def validate_args(self, args: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
        """
        Validate arguments against the declared parameter.
        Returns (is_valid, error_message).
        """
        if self.parameter_name not in args:
            return False, f"Missing required parameter: {self.parameter_name}"

        if not isinstance(args[self.parameter_name], str):
            return False, f"Invalid type for {self.parameter_name}: expected string"

        for arg_name in args:
            if arg_name != self.parameter_name:
                return False, f"Unknown parameter: {arg_name}"

        return True, None

    def __repr__(self) -> str:
        return f"ToolDefinition(name={self.name}, endpoint={self.endpoint})"


SHIELD_TOOLS: Tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="check_url",
        description="Check a URL for malware, phishing, and other threats. Uses URLhaus + heuristic analysis.",
        parameter_name="url",
        parameter_description="The URL to check (e.g. https://example.com)",
        endpoint="check-url",
    ),
    ToolDefinition(
        name="check_password",
        description="Check if a password hash (SHA-1) has been exposed in known data breaches via HIBP.",
        parameter_name="hash",
        parameter_description="SHA-1 hash of the password (40 hex chars)",
        endpoint="check-password",
    ),
    ToolDefinition(
        name="check_password_range",
        description="Look up a SHA-1 hash prefix in the HIBP k-Anonymity database.",
        parameter_name="prefix",
        parameter_description="First 5 characters of the SHA-1 password hash",
        endpoint="check-password-range",
    ),
    ToolDefinition(
        name="check_domain",
        description="Check domain reputation: DNS records, blacklists (Spamhaus, SpamCop, SORBS), SPF/DMARC, SSL.",
        parameter_name="domain",
        parameter_description="Domain name to check (e.g. example.com)",
        endpoint="check-domain",
    ),
    ToolDefinition(
        name="check_ip",
        description="Check IP reputation: blacklists, Tor exit node detection, reverse DNS.",
        parameter_name="ip",
        parameter_description="IPv4 address to check (e.g. 8.8.8.8)",
        endpoint="check-ip",
    ),
    ToolDefinition(
        name="check_email",
        description="Check if an email address has been exposed in known data breaches via HIBP.",
        parameter_name="email",
        parameter_description="Email address to check",
        endpoint="check-email",
    ),
    ToolDefinition(
        name=FULL_SCAN_TOOL,
        description="Run all security checks on a target (URL, domain, IP, or email). Most comprehensive scan.",
        parameter_name="target",
        parameter_description="Target to scan: URL, domain, IP address, or email",
        endpoint="full-scan",
    ),
)


class ToolRegistry:
    """
    Name -> ToolDefinition lookup.

    The set of names is closed once the server starts listing tools.
    """

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}
        self._logger = logging.getLogger("shieldapi.tools.registry")

    def register(self, tool: ToolDefinition) -> None:
        """Register a tool. Names must be unique."""
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")

        self._tools[tool.name] = tool
        self._logger.debug(f"Registered tool: {tool.name} -> /api/{tool.endpoint}")

    def get(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> List[ToolDefinition]:
        """List all registered tools in registration order."""
        return list(self._tools.values())

    def to_mcp_tools(self) -> List[MCPTool]:
        """All tools in MCP list_tools format."""
        return [tool.to_mcp_tool() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools


def create_shield_registry() -> ToolRegistry:
    """Create the registry holding the full ShieldAPI catalog."""
    registry = ToolRegistry()
    for tool in SHIELD_TOOLS:
        registry.register(tool)
    return registry
