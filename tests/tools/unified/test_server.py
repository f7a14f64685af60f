"""Tests for server assembly: tool registration and spec resources."""

import json
import logging

import pytest
from factories import decision_data

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import SpecNotFoundError
from spec_mcp.resources.guides import GUIDE_URI, GUIDES, guide_markdown
from spec_mcp.resources.specs import SCHEMA_URI, SPEC_URI, entity_schema_json, spec_yaml
from spec_mcp.server import create_server


@pytest.fixture
def test_config(specs_dir):
    return ServerConfig(
        server_name="spec-mcp-test",
        specs_dir=specs_dir,
        log_level="WARNING",
        structured_logging=False,
    )


@pytest.fixture(autouse=True)
def _restore_package_logger():
    yield
    package_logger = logging.getLogger("spec_mcp")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def mcp_server(test_config):
    return create_server(test_config)


class TestServerCreation:
    def test_server_has_name(self, mcp_server, test_config):
        assert mcp_server.name == test_config.server_name

    def test_all_tools_registered(self, mcp_server):
        tools = mcp_server._tool_manager._tools
        assert set(tools) == {"spec", "item", "task", "draft", "validate"}
        for tool_name, tool in tools.items():
            assert callable(tool.fn), f"Tool {tool_name} should have callable function"

    def test_tool_schemas_expose_action(self, mcp_server):
        for tool in mcp_server._tool_manager._tools.values():
            assert "action" in tool.parameters["properties"]
            assert "action" in tool.parameters["required"]

    def test_disabled_tools_are_skipped(self, test_config):
        test_config.disabled_tools = ["draft", "Validate"]
        tools = create_server(test_config)._tool_manager._tools
        assert set(tools) == {"spec", "item", "task"}

    def test_resource_templates_registered(self, mcp_server):
        templates = mcp_server._resource_manager._templates
        assert SCHEMA_URI in templates
        assert SPEC_URI in templates
        assert GUIDE_URI in templates


class TestToolCalls:
    def test_spec_tool_round_trip(self, mcp_server, specs_dir):
        spec_tool = mcp_server._tool_manager._tools["spec"].fn

        created = spec_tool(action="create", type="decision", data=decision_data())
        listed = spec_tool(action="list")

        assert created["success"] is True
        assert listed["data"]["count"] == 1
        assert (specs_dir / "decisions" / "dec-001-use-postgresql.yml").exists()

    def test_tool_reports_unknown_action(self, mcp_server):
        result = mcp_server._tool_manager._tools["task"].fn(action="pause")
        assert result["success"] is False
        assert "Allowed actions" in result["error"]

    def test_request_id_is_tool_correlation_id(self, mcp_server):
        result = mcp_server._tool_manager._tools["validate"].fn(action="warnings")
        assert result["meta"]["request_id"].startswith("tool_")


class TestResources:
    def test_entity_schema(self):
        schema = json.loads(entity_schema_json("plan"))
        assert "tasks" in schema["properties"]

    def test_unknown_entity_type(self):
        with pytest.raises(ValueError, match="Unknown entity type 'epic'"):
            entity_schema_json("epic")

    def test_spec_yaml(self, test_config, specs_dir):
        path = specs_dir / "decisions" / "dec-001-use-postgresql.yml"
        path.parent.mkdir(exist_ok=True)
        path.write_text("name: Use PostgreSQL\n")

        assert spec_yaml(test_config, "dec-001") == "name: Use PostgreSQL\n"

    def test_spec_yaml_missing(self, test_config):
        with pytest.raises(SpecNotFoundError):
            spec_yaml(test_config, "dec-001")

    @pytest.mark.parametrize("name", sorted(GUIDES))
    def test_guides_are_packaged(self, name):
        assert guide_markdown(name).startswith("# ")

    def test_guide_links_point_at_known_guides(self):
        for name in GUIDES:
            for line in guide_markdown(name).splitlines():
                if "spec-mcp://guide/" in line:
                    assert line.split("spec-mcp://guide/")[1].rstrip("`") in GUIDES

    def test_unknown_guide(self):
        with pytest.raises(ValueError, match="Unknown guide 'getting-started'"):
            guide_markdown("getting-started")
