"""Tests for the pydantic entity and item models."""

import pytest
from factories import business_requirement_data, component_data, decision_data, plan_data
from pydantic import ValidationError

from spec_mcp.core.schemas import (
    BusinessRequirement,
    Component,
    Decision,
    Milestone,
    Plan,
    Task,
    array_field,
    array_field_names,
    format_validation_errors,
    item_json_schema,
    model_for,
)


def _entity(entity_type, data, number=1, slug="sample"):
    return {"type": entity_type, "number": number, "slug": slug, **data}


class TestSpecBase:
    def test_priority_defaults_to_medium(self):
        plan = Plan.model_validate(_entity("plan", plan_data()))
        assert plan.priority == "medium"
        assert plan.created_at is not None

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            Plan.model_validate(_entity("plan", plan_data(owner="alice")))

    def test_slug_is_normalized(self):
        plan = Plan.model_validate(_entity("plan", plan_data(), slug="-auth--flow-"))
        assert plan.slug == "auth-flow"

    def test_invalid_slug(self):
        with pytest.raises(ValidationError):
            Plan.model_validate(_entity("plan", plan_data(), slug="Auth Flow"))

    def test_model_for(self):
        assert model_for("decision") is Decision
        with pytest.raises(ValueError):
            model_for("epic")


class TestEntityModels:
    def test_business_requirement_needs_criteria(self):
        data = business_requirement_data(criteria=[])
        with pytest.raises(ValidationError):
            BusinessRequirement.model_validate(_entity("business-requirement", data))

    def test_plan_criteria_reference(self):
        plan = Plan.model_validate(
            _entity("plan", plan_data(criteria={"requirement": "prd-001-api-security", "criteria": "crt-002"}))
        )
        assert plan.criteria.requirement == "prd-001-api-security"

    def test_plan_depends_on_must_be_plan_ids(self):
        with pytest.raises(ValidationError):
            Plan.model_validate(_entity("plan", plan_data(depends_on=["cmp-001"])))

    def test_decision_text_bounds(self):
        with pytest.raises(ValidationError):
            Decision.model_validate(_entity("decision", decision_data(decision="Too short")))

    def test_decision_status_default(self):
        decision = Decision.model_validate(_entity("decision", decision_data()))
        assert decision.decision_status == "proposed"

    def test_component_type_choices(self):
        with pytest.raises(ValidationError):
            Component.model_validate(_entity("component", component_data(component_type="daemon")))

    def test_component_dev_port_range(self):
        with pytest.raises(ValidationError):
            Component.model_validate(_entity("component", component_data(dev_port=70000)))

    def test_milestone_optional_fields(self):
        milestone = Milestone.model_validate(
            _entity("milestone", {"name": "Beta", "description": "First public beta", "target_date": "2026-12-01"})
        )
        assert str(milestone.target_date) == "2026-12-01"
        assert milestone.status.completed_at is None


class TestItemModels:
    def test_task_text_length(self):
        with pytest.raises(ValidationError):
            Task.model_validate({"id": "tsk-001", "task": "short"})

    def test_task_id_pattern(self):
        with pytest.raises(ValidationError):
            Task.model_validate({"id": "task-1", "task": "Create the user model"})

    def test_consideration_length(self):
        with pytest.raises(ValidationError) as exc_info:
            Task.model_validate({"id": "tsk-001", "task": "Create the user model", "considerations": ["tiny"]})
        assert "between 10 and 100 characters" in str(exc_info.value)

    def test_reference_discriminator(self):
        plan = Plan.model_validate(
            _entity(
                "plan",
                plan_data(
                    references=[
                        {"type": "url", "name": "RFC", "description": "OAuth spec", "url": "https://example.com/rfc"}
                    ]
                ),
            )
        )
        assert plan.references[0].url == "https://example.com/rfc"

    def test_url_reference_must_be_absolute(self):
        with pytest.raises(ValidationError):
            Plan.model_validate(
                _entity(
                    "plan",
                    plan_data(references=[{"type": "url", "name": "RFC", "description": "OAuth", "url": "rfc.txt"}]),
                )
            )

    def test_format_validation_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            Task.model_validate({"id": "tsk-001"})
        assert format_validation_errors(exc_info.value) == ["task: Field required"]


class TestArrayFields:
    def test_plan_array_fields(self):
        names = array_field_names("plan")
        assert {"tasks", "flows", "test_cases", "api_contracts", "data_models", "references"} <= set(names)

    def test_id_bearing_field(self):
        spec = array_field("plan", "tasks")
        assert spec.has_ids
        assert spec.prefix == "tsk"
        assert spec.supersedable

    def test_plain_string_field(self):
        spec = array_field("component", "tech_stack")
        assert not spec.has_ids
        assert spec.validate_item("python") == "python"
        with pytest.raises(ValueError):
            spec.validate_item("   ")

    def test_unknown_field(self):
        assert array_field("milestone", "tasks") is None

    def test_validate_item_drops_none(self):
        spec = array_field("plan", "tasks")
        item = spec.validate_item({"id": "tsk-001", "task": "Create the user model"})
        assert "supersedes" not in item
        assert item["status"]["notes"] == []

    def test_item_json_schema(self):
        assert item_json_schema(array_field("decision", "alternatives")) == {"type": "string", "minLength": 1}
        assert "properties" in item_json_schema(array_field("decision", "consequences"))
