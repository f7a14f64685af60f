"""Tests for the unified spec tool: CRUD, listing and queries."""

import logging
from unittest.mock import patch

import pytest
from factories import decision_data, plan_data

from spec_mcp.tools.unified.spec import _dispatch_spec_action


def spec_call(config, action, **payload):
    return _dispatch_spec_action(action=action, payload=payload, config=config)


class TestSpecDispatchExceptionHandling:
    """Tests for _dispatch_spec_action exception handling."""

    def test_dispatch_catches_exceptions(self, mock_config):
        with patch("spec_mcp.tools.unified.spec._SPEC_ROUTER") as mock_router:
            mock_router.allowed_actions.return_value = ["get"]
            mock_router.dispatch.side_effect = RuntimeError("Disk vanished")

            result = spec_call(mock_config, "get")

        assert result["success"] is False
        assert "Disk vanished" in result["error"]
        assert result["data"]["error_type"] == "internal"
        assert result["data"]["details"]["error_type"] == "RuntimeError"

    def test_unknown_action(self, mock_config):
        result = spec_call(mock_config, "rename")
        assert result["success"] is False
        assert result["data"]["error_code"] == "VALIDATION_ERROR"
        assert "next-number" in result["data"]["remediation"]


class TestCreateAndGet:
    def test_create(self, server_config, specs_dir):
        result = spec_call(server_config, "create", type="plan", data=plan_data())

        assert result["success"] is True
        assert result["data"]["spec_id"] == "pln-001-auth-flow"
        assert result["data"]["spec"]["number"] == 1
        assert (specs_dir / "plans" / "pln-001-auth-flow.yml").exists()
        assert result["meta"]["version"] == "response-v2"
        assert result["meta"]["request_id"]

    def test_create_reports_broken_references_as_warnings(self, server_config):
        result = spec_call(server_config, "create", type="plan", data=plan_data(milestones=["mls-003"]))
        assert result["success"] is True
        assert result["meta"]["warnings"] == ["Plan references non-existent milestone 'mls-003'"]

    def test_create_invalid_data(self, server_config):
        result = spec_call(server_config, "create", type="decision", data={"name": "Short"})
        assert result["success"] is False
        assert result["data"]["error_code"] == "VALIDATION_ERROR"

    def test_create_unknown_type(self, server_config):
        result = spec_call(server_config, "create", type="epic", data=plan_data())
        assert result["success"] is False
        assert result["data"]["details"]["field"] == "type"

    def test_create_requires_data(self, server_config):
        result = spec_call(server_config, "create", type="plan")
        assert result["data"]["error_code"] == "MISSING_REQUIRED"

    @pytest.mark.parametrize("spec_id", ["pln-001", "pln-001-auth-flow", "pln-1"])
    def test_get_by_any_id_form(self, server_config, spec_id):
        spec_call(server_config, "create", type="plan", data=plan_data())
        result = spec_call(server_config, "get", spec_id=spec_id)
        assert result["success"] is True
        assert result["data"]["spec"]["name"] == "Auth Flow"
        assert result["data"]["path"].endswith("pln-001-auth-flow.yml")

    def test_get_missing(self, server_config):
        result = spec_call(server_config, "get", spec_id="pln-042")
        assert result["success"] is False
        assert result["data"]["error_code"] == "SPEC_NOT_FOUND"
        assert result["data"]["error_type"] == "not_found"

    def test_get_invalid_id(self, server_config):
        result = spec_call(server_config, "get", spec_id="plan-one")
        assert result["data"]["error_code"] == "INVALID_ENTITY_ID"


class TestUpdateAndDelete:
    def test_update(self, server_config):
        spec_call(server_config, "create", type="plan", data=plan_data())
        result = spec_call(server_config, "update", spec_id="pln-001", updates={"priority": "critical"})
        assert result["success"] is True
        assert result["data"]["spec"]["priority"] == "critical"

    def test_update_ignores_immutable_fields(self, server_config):
        spec_call(server_config, "create", type="plan", data=plan_data())
        result = spec_call(server_config, "update", spec_id="pln-001", updates={"number": 7, "name": "Login Flow"})
        assert result["data"]["spec"]["number"] == 1
        assert result["meta"]["warnings"][0] == "Immutable fields ignored: number"

    def test_update_empty(self, server_config):
        result = spec_call(server_config, "update", spec_id="pln-001", updates={})
        assert result["success"] is False
        assert result["data"]["details"]["field"] == "updates"

    def test_delete(self, server_config):
        spec_call(server_config, "create", type="decision", data=decision_data())
        assert spec_call(server_config, "delete", spec_id="dec-001")["data"] == {
            "spec_id": "dec-001",
            "deleted": True,
        }
        assert spec_call(server_config, "delete", spec_id="dec-001")["data"]["error_code"] == "SPEC_NOT_FOUND"

    def test_mutations_are_audited(self, server_config, caplog):
        caplog.set_level(logging.INFO, logger="spec_mcp.audit")

        spec_call(server_config, "create", type="plan", data=plan_data())
        spec_call(server_config, "update", spec_id="pln-001", updates={"priority": "high"})
        spec_call(server_config, "delete", spec_id="pln-001")

        events = [r.audit for r in caplog.records if getattr(r, "audit", None)]
        changes = [(e["event_type"], e["details"]["spec_id"]) for e in events if e["event_type"] != "tool_invocation"]
        assert changes == [
            ("spec_created", "pln-001-auth-flow"),
            ("spec_updated", "pln-001-auth-flow"),
            ("spec_deleted", "pln-001"),
        ]


class TestListQueryNextNumber:
    @pytest.fixture
    def populated(self, server_config):
        spec_call(server_config, "create", type="plan", data=plan_data("Auth Flow", priority="high"))
        spec_call(server_config, "create", type="plan", data=plan_data("Billing", priority="low", tasks=[]))
        spec_call(server_config, "create", type="decision", data=decision_data())
        return server_config

    def test_list_all(self, populated):
        result = spec_call(populated, "list")
        assert result["data"]["count"] == 3
        assert set(result["data"]["specs"][0]) <= {"id", "type", "number", "slug", "name", "priority", "updated_at"}

    def test_list_by_type_reports_invalid_files(self, populated, specs_dir):
        (specs_dir / "plans" / "pln-009-broken.yml").write_text("name: Broken\n")
        result = spec_call(populated, "list", type="plan")
        assert result["data"]["count"] == 2
        assert result["meta"]["warnings"] == ["Skipped invalid file pln-009-broken.yml: Schema validation failed"]

    def test_query_with_pagination(self, populated):
        result = spec_call(populated, "query", types=["plan"], sort_by="priority", limit=1)
        assert [item["name"] for item in result["data"]["items"]] == ["Auth Flow"]
        assert result["data"]["total"] == 2
        assert result["meta"]["pagination"] == {"offset": 0, "limit": 1, "total": 2, "has_more": True}

    def test_query_rejects_unknown_values(self, populated):
        result = spec_call(populated, "query", task_status=["paused"])
        assert result["success"] is False
        assert result["data"]["details"]["field"] == "task_status"

    def test_query_rejects_unknown_sort(self, populated):
        result = spec_call(populated, "query", sort_by="size")
        assert result["data"]["details"]["field"] == "sort_by"

    def test_next_number(self, populated):
        result = spec_call(populated, "next-number", type="plan")
        assert result["data"] == {"type": "plan", "next_number": 3, "next_id": "pln-003"}

    def test_next_number_alias(self, populated):
        assert spec_call(populated, "next_number", type="milestone")["data"]["next_id"] == "mls-001"


class TestSpecsDirResolution:
    def test_missing_dir_without_auto_create(self, mock_config, tmp_path):
        mock_config.specs_dir = tmp_path / "nowhere"
        mock_config.auto_create_folders = False
        result = spec_call(mock_config, "list")
        assert result["success"] is False
        assert result["data"]["error_code"] == "NOT_FOUND"

    def test_path_override(self, server_config, tmp_path):
        other = tmp_path / "other-specs"
        spec_call(server_config, "create", type="decision", data=decision_data(), path=str(other))
        assert (other / "decisions" / "dec-001-use-postgresql.yml").exists()
        assert spec_call(server_config, "list")["data"]["count"] == 0
