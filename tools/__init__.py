# Tools module - ShieldAPI tool catalog and dispatch
# Each tool: name, one string parameter, one /api/{endpoint}

from .registry import ToolRegistry, ToolDefinition, SHIELD_TOOLS, FULL_SCAN_TOOL, create_shield_registry
from .executor import ToolDispatcher, InvocationRequest
from .formatter import format_result

__all__ = [
    "ToolRegistry",
    "ToolDefinition",
    "SHIELD_TOOLS",
    "FULL_SCAN_TOOL",
    "create_shield_registry",
    "ToolDispatcher",
    "InvocationRequest",
    "format_result",
]
