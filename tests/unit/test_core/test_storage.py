"""Tests for YAML storage, counters and the SpecManager facade."""

from datetime import datetime, timezone

import pytest
import yaml
from factories import component_data, decision_data, make_task, plan_data

from spec_mcp.core.errors import (
    DuplicateEntityError,
    InvalidEntityIdError,
    SpecNotFoundError,
    SpecValidationError,
    StorageError,
)
from spec_mcp.core.storage import COUNTERS_FILE, FileManager, SpecManager, entity_to_dict


class TestFileManager:
    def test_round_trip(self, specs_dir):
        files = FileManager(specs_dir)
        files.write_yaml("plans/pln-001-a.yml", {"name": "A", "tasks": []})
        assert files.read_yaml("plans/pln-001-a.yml") == {"name": "A", "tasks": []}

    def test_missing_file_is_none(self, specs_dir):
        assert FileManager(specs_dir).read_yaml("plans/none.yml") is None

    def test_malformed_yaml(self, specs_dir):
        (specs_dir / "bad.yml").write_text("name: [unclosed\n")
        with pytest.raises(StorageError) as exc_info:
            FileManager(specs_dir).read_yaml("bad.yml")
        assert "Malformed YAML" in str(exc_info.value)

    def test_non_mapping_document(self, specs_dir):
        (specs_dir / "list.yml").write_text("- a\n- b\n")
        with pytest.raises(StorageError):
            FileManager(specs_dir).read_yaml("list.yml")

    def test_no_auto_create(self, specs_dir):
        files = FileManager(specs_dir, auto_create_folders=False)
        with pytest.raises(StorageError) as exc_info:
            files.write_yaml("plans/pln-001-a.yml", {})
        assert exc_info.value.reason == "auto_create_folders is disabled"

    def test_ensure_structure(self, tmp_path):
        files = FileManager(tmp_path / "fresh")
        files.ensure_structure()
        assert (tmp_path / "fresh" / "requirements" / "business").is_dir()
        assert (tmp_path / "fresh" / "milestones").is_dir()


class TestCounters:
    def test_numbers_are_sequential(self, specs):
        assert specs.get_next_number("plan") == 1
        assert specs.get_next_number("plan") == 2
        assert specs.get_next_number("decision") == 1

    def test_peek_does_not_allocate(self, specs):
        assert specs.peek_next_number("plan") == 1
        assert specs.peek_next_number("plan") == 1

    def test_counters_persist_in_specs_yml(self, specs, specs_dir):
        specs.get_next_number("business-requirement")
        data = yaml.safe_load((specs_dir / COUNTERS_FILE).read_text())
        assert data["counters"]["business_requirements"] == 1

    def test_counter_never_reuses_numbers_on_disk(self, specs, specs_dir):
        """A file written by hand bumps the counter past its number."""
        (specs_dir / "plans").mkdir()
        (specs_dir / "plans" / "pln-007-manual.yml").write_text("name: manual\n")
        assert specs.get_next_number("plan") == 8


class TestCreate:
    def test_create_assigns_number_and_slug(self, specs, specs_dir):
        plan = specs.create("plan", plan_data())
        assert plan.number == 1
        assert plan.slug == "auth-flow"
        assert (specs_dir / "plans" / "pln-001-auth-flow.yml").exists()

    def test_type_is_forced(self, specs):
        component = specs.create("component", component_data(type="plan"))
        assert component.type == "component"

    def test_explicit_number(self, specs):
        assert specs.create("decision", decision_data(), number=5).number == 5

    def test_duplicate_number(self, specs):
        specs.create("decision", decision_data(), number=2)
        with pytest.raises(DuplicateEntityError):
            specs.create("decision", decision_data(name="Other"), number=2)

    def test_invalid_data(self, specs):
        with pytest.raises(SpecValidationError) as exc_info:
            specs.create("plan", {"name": "No description"})
        assert any(error.startswith("description") for error in exc_info.value.errors)


class TestGetAndUpdate:
    def test_get_by_short_and_full_id(self, specs):
        specs.create("plan", plan_data())
        assert specs.get_entity("pln-001").name == "Auth Flow"
        assert specs.get_entity("pln-001-auth-flow").number == 1
        assert specs.get_entity("pln-002") is None

    def test_require_missing(self, specs):
        with pytest.raises(SpecNotFoundError):
            specs.require_entity("pln-009")

    def test_invalid_id(self, specs):
        with pytest.raises(InvalidEntityIdError):
            specs.get_entity("not-an-id")

    def test_update_merges_fields(self, specs):
        specs.create("plan", plan_data())
        updated = specs.update("pln-001", {"priority": "high"})
        assert updated.priority == "high"
        assert len(updated.tasks) == 2

    def test_update_keeps_immutable_fields(self, specs):
        created = specs.create("plan", plan_data())
        updated = specs.update("pln-001", {"number": 9, "type": "decision", "created_at": "2000-01-01T00:00:00Z"})
        assert updated.number == 1
        assert updated.type == "plan"
        assert updated.created_at == created.created_at
        assert updated.updated_at >= created.updated_at

    def test_new_slug_renames_file(self, specs, specs_dir):
        specs.create("plan", plan_data())
        specs.update("pln-001", {"slug": "login-flow"})
        assert (specs_dir / "plans" / "pln-001-login-flow.yml").exists()
        assert not (specs_dir / "plans" / "pln-001-auth-flow.yml").exists()

    def test_update_validates(self, specs):
        specs.create("plan", plan_data())
        with pytest.raises(SpecValidationError):
            specs.update("pln-001", {"tasks": [make_task("tsk-001", "short")]})

    def test_delete(self, specs):
        specs.create("plan", plan_data())
        assert specs.delete("pln-001") is True
        assert specs.delete("pln-001") is False


class TestListAndWarnings:
    def test_invalid_files_are_skipped_with_warning(self, specs, specs_dir):
        specs.create("plan", plan_data())
        (specs_dir / "plans" / "pln-002-broken.yml").write_text("name: Broken\n")

        entities = specs.list_all(["plan"])

        assert [e.number for e in entities] == [1]
        warnings = specs.get_all_validation_warnings()
        assert len(warnings) == 1
        assert warnings[0]["file_name"] == "pln-002-broken.yml"
        assert warnings[0]["error"] == "Schema validation failed"

    def test_clear_warnings(self, specs, specs_dir):
        (specs_dir / "plans").mkdir()
        (specs_dir / "plans" / "pln-001-broken.yml").write_text("- not a mapping\n")
        specs.list_all()
        specs.clear_validation_warnings()
        assert specs.get_all_validation_warnings() == []

    def test_entity_to_dict_adds_id(self, specs):
        data = entity_to_dict(specs.create("decision", decision_data()))
        assert data["id"] == "dec-001-use-postgresql"
        assert data["type"] == "decision"


class TestQuery:
    @pytest.fixture
    def populated(self, specs):
        specs.create("plan", plan_data("Auth Flow", priority="high"))
        specs.create("plan", plan_data("Billing", priority="low", tasks=[]))
        specs.create("decision", decision_data(priority="critical"))
        started = specs.get_entity("pln-001")
        started.tasks[0].status.started_at = started.tasks[0].status.created_at
        specs.save(started)
        return specs

    def test_filter_by_type(self, populated):
        result = populated.query(types="plan")
        assert result["total"] == 2
        assert {item["id"] for item in result["items"]} == {"pln-001-auth-flow", "pln-002-billing"}

    def test_search_matches_name(self, populated):
        result = populated.query(search="BILL")
        assert [item["name"] for item in result["items"]] == ["Billing"]

    def test_has_tasks(self, populated):
        assert populated.query(has_tasks=False, types=["plan"])["total"] == 1

    def test_task_status_filter(self, populated):
        result = populated.query(task_status=["in-progress"])
        assert [item["id"] for item in result["items"]] == ["pln-001-auth-flow"]

    def test_sort_by_priority(self, populated):
        result = populated.query(sort_by="priority")
        assert [item["priority"] for item in result["items"]] == ["critical", "high", "low"]

    def test_pagination(self, populated):
        result = populated.query(sort_by="name", limit=2)
        assert result["total"] == 3
        assert result["has_more"] is True
        assert len(populated.query(sort_by="name", limit=2, offset=2)["items"]) == 1

    def test_ids_filter(self, populated):
        result = populated.query(ids=["pln-002", "dec-001", "pln-404"])
        assert result["total"] == 2

    def test_invalid_sort_field(self, populated):
        with pytest.raises(ValueError):
            populated.query(sort_by="size")

    def test_sort_by_created_at_with_naive_timestamp(self, specs, specs_dir):
        specs.create("plan", plan_data())
        (specs_dir / "plans" / "pln-002-beta.yml").write_text(
            "type: plan\n"
            "number: 2\n"
            "slug: beta\n"
            "name: Beta\n"
            "description: Written by hand without an offset\n"
            "created_at: 2024-01-01T10:00:00\n"
            "updated_at: 2024-01-01T10:00:00\n"
        )

        result = specs.query(sort_by="created_at")

        assert [item["id"] for item in result["items"]] == ["pln-002-beta", "pln-001-auth-flow"]
        assert specs.get_entity("pln-002").created_at == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)
