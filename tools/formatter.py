"""Wraps ShieldAPI JSON into the MCP text-content reply."""

from typing import Any, List
import json

from mcp.types import TextContent


def format_result(data: Any) -> List[TextContent]:
    """Serialize any JSON value (object, array, null, number, string) as indented text."""
    return [TextContent(type="text", text=json.dumps(data, indent=2, ensure_ascii=False))]
