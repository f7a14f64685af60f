"""Pydantic models for spec entities and their array items."""

from spec_mcp.core.schemas.common import (
    Reference,
    ScopeItem,
    SpecModel,
    SupersessionMixin,
    format_validation_errors,
    utc_now,
    utc_now_iso,
)
from spec_mcp.core.schemas.entities import (
    ENTITY_MODELS,
    BusinessRequirement,
    Component,
    Constitution,
    Decision,
    Milestone,
    Plan,
    PlanCriteria,
    SpecBase,
    TechnicalRequirement,
    model_for,
)
from spec_mcp.core.schemas.fields import ARRAY_FIELDS, ArrayField, array_field, array_field_names, item_json_schema
from spec_mcp.core.schemas.items import (
    ApiContract,
    Article,
    BlockedEntry,
    BusinessValue,
    CompletionStatus,
    Consequence,
    Constraint,
    Criteria,
    DataModel,
    Deployment,
    Flow,
    FlowStep,
    Stakeholder,
    Task,
    TaskFile,
    TestCase,
    UserStory,
)

__all__ = [
    "ARRAY_FIELDS",
    "ENTITY_MODELS",
    "ApiContract",
    "ArrayField",
    "Article",
    "BlockedEntry",
    "BusinessRequirement",
    "BusinessValue",
    "CompletionStatus",
    "Component",
    "Consequence",
    "Constitution",
    "Constraint",
    "Criteria",
    "DataModel",
    "Decision",
    "Deployment",
    "Flow",
    "FlowStep",
    "Milestone",
    "Plan",
    "PlanCriteria",
    "Reference",
    "ScopeItem",
    "SpecBase",
    "SpecModel",
    "Stakeholder",
    "SupersessionMixin",
    "Task",
    "TaskFile",
    "TechnicalRequirement",
    "TestCase",
    "UserStory",
    "array_field",
    "array_field_names",
    "format_validation_errors",
    "item_json_schema",
    "model_for",
]
