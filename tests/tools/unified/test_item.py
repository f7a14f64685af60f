"""Tests for the unified item tool: versioned and plain array edits."""

import pytest
from factories import component_data, decision_data, plan_data

from spec_mcp.tools.unified.item import _dispatch_item_action
from spec_mcp.tools.unified.spec import _dispatch_spec_action


def item_call(config, action, **payload):
    return _dispatch_item_action(action=action, payload=payload, config=config)


@pytest.fixture
def plan_config(server_config):
    """Config whose specs dir holds pln-001-auth-flow with tsk-001 and tsk-002."""
    _dispatch_spec_action(action="create", payload={"type": "plan", "data": plan_data()}, config=server_config)
    return server_config


class TestAdd:
    def test_add_assigns_next_id(self, plan_config):
        result = item_call(plan_config, "add", spec_id="pln-001", field="tasks", data={"task": "Write the API docs"})

        assert result["success"] is True
        assert result["data"]["spec_id"] == "pln-001-auth-flow"
        assert result["data"]["item"]["id"] == "tsk-003"
        assert result["data"]["item"]["priority"] == "medium"

    def test_add_invalid_item(self, plan_config):
        result = item_call(plan_config, "add", spec_id="pln-001", field="tasks", data={"task": "Docs"})
        assert result["success"] is False
        assert result["data"]["error_code"] == "VALIDATION_ERROR"
        lookup = item_call(plan_config, "get", spec_id="pln-001", field="tasks", item_id="tsk-003")
        assert lookup["data"]["error_code"] == "ITEM_NOT_FOUND"

    def test_add_with_supersede_id(self, plan_config):
        result = item_call(
            plan_config, "add", spec_id="pln-001", field="tasks", data={"priority": "high"}, supersede_id="tsk-001"
        )
        assert result["data"]["superseded_id"] == "tsk-001"
        assert result["data"]["changed_fields"] == ["priority"]
        assert result["data"]["item"]["task"] == "Create the user model and migrations"

    def test_unknown_field(self, plan_config):
        result = item_call(plan_config, "add", spec_id="pln-001", field="owners", data={"name": "x"})
        assert result["success"] is False
        assert result["data"]["error_code"] == "VALIDATION_ERROR"
        assert result["data"]["details"]["field"] == "owners"

    def test_field_without_ids_is_rejected(self, server_config):
        _dispatch_spec_action(action="create", payload={"type": "component", "data": component_data()}, config=server_config)
        result = item_call(server_config, "add", spec_id="cmp-001", field="tech_stack", data={"name": "python"})
        assert result["success"] is False
        assert "add-simple" in result["error"]

    def test_missing_spec(self, server_config):
        result = item_call(server_config, "add", spec_id="pln-404", field="tasks", data={"task": "Write the API docs"})
        assert result["data"]["error_code"] == "SPEC_NOT_FOUND"


class TestSupersede:
    def test_supersede(self, plan_config):
        result = item_call(
            plan_config, "supersede", spec_id="pln-001", field="tasks", item_id="tsk-001", data={"priority": "high"}
        )

        data = result["data"]
        assert data["new_item"]["id"] == "tsk-003"
        assert data["new_item"]["supersedes"] == "tsk-001"
        assert data["old_item"]["superseded_by"] == "tsk-003"
        assert data["changed_fields"] == ["priority"]
        assert "warnings" not in result["meta"]

    def test_dependents_follow_the_new_version(self, plan_config):
        item_call(plan_config, "supersede", spec_id="pln-001", field="tasks", item_id="tsk-001", data={"priority": "high"})
        result = item_call(plan_config, "get", spec_id="pln-001", field="tasks", item_id="tsk-002")
        assert result["data"]["item"]["depends_on"] == ["tsk-003"]

    def test_identical_version_warns(self, plan_config):
        result = item_call(
            plan_config, "supersede", spec_id="pln-001", field="tasks", item_id="tsk-001", data={"priority": "medium"}
        )
        assert result["success"] is True
        assert result["meta"]["warnings"] == ["No fields changed; the new version is identical"]

    def test_supersede_twice(self, plan_config):
        item_call(plan_config, "supersede", spec_id="pln-001", field="tasks", item_id="tsk-001", data={"priority": "high"})
        result = item_call(
            plan_config, "supersede", spec_id="pln-001", field="tasks", item_id="tsk-001", data={"priority": "low"}
        )
        assert result["data"]["error_code"] == "ALREADY_SUPERSEDED"
        assert result["data"]["details"]["superseded_by"] == "tsk-003"

    def test_supersede_requires_changes(self, plan_config):
        result = item_call(plan_config, "supersede", spec_id="pln-001", field="tasks", item_id="tsk-001", data={})
        assert result["data"]["details"]["field"] == "data"


class TestGetHistoryRemove:
    def test_get_reports_active_flag(self, plan_config):
        item_call(plan_config, "supersede", spec_id="pln-001", field="tasks", item_id="tsk-001", data={"priority": "high"})
        assert item_call(plan_config, "get", spec_id="pln-001", field="tasks", item_id="tsk-001")["data"]["active"] is False
        assert item_call(plan_config, "get", spec_id="pln-001", field="tasks", item_id="tsk-003")["data"]["active"] is True

    def test_history(self, plan_config):
        item_call(plan_config, "supersede", spec_id="pln-001", field="tasks", item_id="tsk-001", data={"priority": "high"})
        result = item_call(plan_config, "history", spec_id="pln-001", field="tasks", item_id="tsk-003")
        assert [v["id"] for v in result["data"]["versions"]] == ["tsk-001", "tsk-003"]
        assert result["data"]["current_id"] == "tsk-003"
        assert result["data"]["count"] == 2

    def test_get_missing_item(self, plan_config):
        result = item_call(plan_config, "get", spec_id="pln-001", field="tasks", item_id="tsk-404")
        assert result["data"]["error_code"] == "ITEM_NOT_FOUND"

    def test_remove(self, plan_config):
        result = item_call(plan_config, "remove", spec_id="pln-001", field="tasks", item_id="tsk-002")
        assert result["data"]["removed"]["id"] == "tsk-002"
        assert item_call(plan_config, "get", spec_id="pln-001", field="tasks", item_id="tsk-002")["success"] is False


class TestSimpleArrays:
    @pytest.fixture
    def component_config(self, server_config):
        _dispatch_spec_action(action="create", payload={"type": "component", "data": component_data()}, config=server_config)
        return server_config

    def test_add_and_remove_simple(self, component_config):
        added = item_call(component_config, "add-simple", spec_id="cmp-001", field="tech_stack", value="python")
        assert added["data"] == {"spec_id": "cmp-001", "field": "tech_stack", "item": "python", "index": 0}

        removed = item_call(component_config, "remove_simple", spec_id="cmp-001", field="tech_stack", index=0)
        assert removed["data"]["removed"] == "python"

    def test_add_simple_object_via_data(self, server_config):
        _dispatch_spec_action(action="create", payload={"type": "decision", "data": decision_data()}, config=server_config)
        result = item_call(
            server_config,
            "add-simple",
            spec_id="dec-001",
            field="consequences",
            data={"type": "risk", "description": "Operations team must learn PostgreSQL tuning"},
        )
        assert result["success"] is True
        assert result["data"]["item"]["type"] == "risk"

    def test_add_simple_requires_value(self, component_config):
        result = item_call(component_config, "add-simple", spec_id="cmp-001", field="tech_stack")
        assert result["data"]["details"]["field"] == "value"

    def test_remove_simple_out_of_range(self, component_config):
        result = item_call(component_config, "remove-simple", spec_id="cmp-001", field="tech_stack", index=3)
        assert result["data"]["error_code"] == "ITEM_NOT_FOUND"

    def test_negative_index(self, component_config):
        result = item_call(component_config, "remove-simple", spec_id="cmp-001", field="tech_stack", index=-1)
        assert result["data"]["details"]["field"] == "index"

    def test_id_field_is_rejected(self, plan_config):
        result = item_call(plan_config, "add-simple", spec_id="pln-001", field="tasks", value="Write the API docs")
        assert result["success"] is False
        assert "use add, supersede or remove" in result["error"]
