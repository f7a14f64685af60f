"""Top-level spec entity models, one per entity type."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Dict, List, Literal, Optional, Type

from pydantic import Field, field_validator

from spec_mcp.core.entity_types import EntityType
from spec_mcp.core.schemas.common import (
    ComponentRef,
    CriteriaId,
    DecisionRef,
    MilestoneRef,
    PlanRef,
    Priority,
    Reference,
    RequirementRef,
    ScopeItem,
    SpecModel,
    utc_now,
)
from spec_mcp.core.schemas.items import (
    ApiContract,
    Article,
    BusinessValue,
    CompletionStatus,
    Consequence,
    Constraint,
    Criteria,
    DataModel,
    Deployment,
    Flow,
    Stakeholder,
    Task,
    TestCase,
    UserStory,
)
from spec_mcp.core.slug import SLUG_PATTERN


class SpecBase(SpecModel):
    """Fields shared by every persisted entity."""

    type: str
    number: int = Field(..., ge=0, description="Sequential number, unique per entity type")
    slug: str = Field(..., min_length=1, description="URL-friendly identifier used in the file name")
    name: str = Field(..., min_length=1, description="Display name")
    description: str = Field(..., min_length=1, description="Concise description of the entity")
    priority: Priority = "medium"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        # Hand-written files may omit the offset; those are read as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_validator("slug", mode="before")
    @classmethod
    def normalize_slug(cls, v):
        if not isinstance(v, str):
            return v
        slug = v.strip().strip("-")
        while "--" in slug:
            slug = slug.replace("--", "-")
        if not SLUG_PATTERN.match(slug):
            raise ValueError("slug must contain only lowercase letters, numbers, and hyphens")
        return slug


class BusinessRequirement(SpecBase):
    type: Literal["business-requirement"] = "business-requirement"
    business_value: List[BusinessValue] = Field(..., min_length=1)
    stakeholders: List[Stakeholder] = Field(default_factory=list)
    user_stories: List[UserStory] = Field(..., min_length=1)
    criteria: List[Criteria] = Field(..., min_length=1)
    references: List[Reference] = Field(default_factory=list)


class TechnicalRequirement(SpecBase):
    type: Literal["technical-requirement"] = "technical-requirement"
    technical_context: str = Field(..., min_length=1)
    implementation_approach: Optional[str] = None
    technical_dependencies: List[Reference] = Field(default_factory=list)
    constraints: List[Constraint] = Field(default_factory=list)
    implementation_notes: Optional[str] = None
    criteria: List[Criteria] = Field(..., min_length=1)
    references: List[Reference] = Field(default_factory=list)


class PlanCriteria(SpecModel):
    """The requirement criterion a plan fulfils."""

    requirement: RequirementRef
    criteria: CriteriaId


class Plan(SpecBase):
    type: Literal["plan"] = "plan"
    criteria: Optional[PlanCriteria] = None
    scope: List[ScopeItem] = Field(default_factory=list)
    depends_on: List[PlanRef] = Field(default_factory=list)
    milestones: List[MilestoneRef] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    flows: List[Flow] = Field(default_factory=list)
    test_cases: List[TestCase] = Field(default_factory=list)
    api_contracts: List[ApiContract] = Field(default_factory=list)
    data_models: List[DataModel] = Field(default_factory=list)
    references: List[Reference] = Field(default_factory=list)


class Decision(SpecBase):
    type: Literal["decision"] = "decision"
    decision: str = Field(..., min_length=20, max_length=500)
    context: str = Field(..., min_length=20, max_length=1000)
    decision_status: Literal["proposed", "accepted", "deprecated", "superseded"] = "proposed"
    alternatives: List[str] = Field(default_factory=list)
    supersedes: Optional[DecisionRef] = None
    references: List[Reference] = Field(default_factory=list)
    consequences: List[Consequence] = Field(default_factory=list)


class Component(SpecBase):
    type: Literal["component"] = "component"
    component_type: Literal["app", "service", "library"]
    folder: str = "."
    tech_stack: List[str] = Field(default_factory=list)
    deployments: List[Deployment] = Field(default_factory=list)
    scope: List[ScopeItem] = Field(default_factory=list)
    depends_on: List[ComponentRef] = Field(default_factory=list)
    external_dependencies: List[str] = Field(default_factory=list)
    dev_port: Optional[int] = Field(None, ge=1, le=65535)
    notes: Optional[str] = None
    references: List[Reference] = Field(default_factory=list)


class Constitution(SpecBase):
    type: Literal["constitution"] = "constitution"
    articles: List[Article] = Field(..., min_length=1)


class Milestone(SpecBase):
    type: Literal["milestone"] = "milestone"
    target_date: Optional[date] = None
    status: CompletionStatus = Field(default_factory=CompletionStatus)
    references: List[Reference] = Field(default_factory=list)


ENTITY_MODELS: Dict[EntityType, Type[SpecBase]] = {
    EntityType.BUSINESS_REQUIREMENT: BusinessRequirement,
    EntityType.TECHNICAL_REQUIREMENT: TechnicalRequirement,
    EntityType.PLAN: Plan,
    EntityType.COMPONENT: Component,
    EntityType.DECISION: Decision,
    EntityType.CONSTITUTION: Constitution,
    EntityType.MILESTONE: Milestone,
}


def model_for(entity_type: "EntityType | str") -> Type[SpecBase]:
    """Return the pydantic model class for an entity type value."""
    return ENTITY_MODELS[EntityType(entity_type)]
