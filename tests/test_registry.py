"""
Tool Registry Tests
-------------------
The static ShieldAPI catalog and its MCP schemas.
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from tools.registry import (
    FULL_SCAN_TOOL, SHIELD_TOOLS, ToolDefinition, ToolRegistry, create_shield_registry
)

EXPECTED_CATALOG = {
    "check_url": ("url", "check-url"),
    "check_password": ("hash", "check-password"),
    "check_password_range": ("prefix", "check-password-range"),
    "check_domain": ("domain", "check-domain"),
    "check_ip": ("ip", "check-ip"),
    "check_email": ("email", "check-email"),
    "full_scan": ("target", "full-scan"),
}


class TestCatalog:

    def test_seven_tools(self):
        assert len(SHIELD_TOOLS) == 7
        assert len(create_shield_registry()) == 7

    def test_names_unique(self):
        names = [tool.name for tool in SHIELD_TOOLS]
        assert len(names) == len(set(names))

    @pytest.mark.parametrize("name,expected", EXPECTED_CATALOG.items())
    def test_parameter_and_endpoint(self, name, expected):
        tool = create_shield_registry().get(name)

        assert tool is not None
        assert (tool.parameter_name, tool.endpoint) == expected
        assert tool.description
        assert tool.parameter_description

    def test_full_scan_constant(self):
        assert FULL_SCAN_TOOL in create_shield_registry()

    def test_definitions_are_immutable(self):
        with pytest.raises(AttributeError):
            SHIELD_TOOLS[0].endpoint = "elsewhere"


class TestSchemas:

    def test_json_schema_single_required_string(self):
        schema = create_shield_registry().get("check_ip").to_json_schema()

        assert schema["type"] == "object"
        assert schema["required"] == ["ip"]
        assert schema["properties"]["ip"]["type"] == "string"
        assert schema["properties"]["ip"]["description"] == "IPv4 address to check (e.g. 8.8.8.8)"
        assert schema["additionalProperties"] is False

    def test_mcp_tools(self):
        tools = create_shield_registry().to_mcp_tools()

        assert [t.name for t in tools] == list(EXPECTED_CATALOG)
        full_scan = tools[-1]
        assert full_scan.inputSchema["required"] == ["target"]
        assert "Most comprehensive scan" in full_scan.description


class TestValidateArgs:

    def setup_method(self):
        self.tool = create_shield_registry().get("check_url")

    def test_valid(self):
        assert self.tool.validate_args({"url": "https://example.com"}) == (True, None)

    def test_missing(self):
        valid, error = self.tool.validate_args({})
        assert not valid
        assert "Missing required parameter: url" in error

    def test_wrong_type(self):
        valid, error = self.tool.validate_args({"url": 42})
        assert not valid
        assert "expected string" in error

    def test_unknown_parameter(self):
        valid, error = self.tool.validate_args({"url": "x", "depth": "2"})
        assert not valid
        assert "Unknown parameter: depth" in error

    def test_empty_string_is_valid(self):
        assert self.tool.validate_args({"url": ""}) == (True, None)


class TestRegistry:

    def test_duplicate_registration_rejected(self):
        registry = ToolRegistry()
        tool = ToolDefinition("t", "d", "p", "pd", "e")
        registry.register(tool)

        with pytest.raises(ValueError):
            registry.register(tool)

    def test_unknown_lookup_returns_none(self):
        assert create_shield_registry().get("delete_everything") is None

    def test_list_preserves_order(self):
        registry = create_shield_registry()
        assert registry.list_tools() == list(SHIELD_TOOLS)
