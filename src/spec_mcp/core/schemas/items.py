"""Array item models nested inside spec entities.

Items with an ``id`` field (tasks, criteria, flows, test cases, API
contracts, data models) carry the supersession triple so edits produce a new
version instead of rewriting history.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from spec_mcp.core.schemas.common import (
    ApiContractId,
    ArticleId,
    CriteriaId,
    DataModelId,
    FlowId,
    FlowStepId,
    Priority,
    Reference,
    SpecModel,
    SupersessionMixin,
    TaskFileId,
    TaskId,
    TestCaseId,
    utc_now,
    validate_email,
)


# ---------------------------------------------------------------------------
# Requirement items
# ---------------------------------------------------------------------------


class Criteria(SupersessionMixin):
    """Acceptance criterion of a business or technical requirement."""

    id: CriteriaId = Field(..., description="Unique identifier for the criterion")
    description: str = Field(..., min_length=1, description="Testable statement of the criterion")
    rationale: str = Field(..., min_length=1, description="Why this criterion matters")


class BusinessValue(SpecModel):
    type: Literal["revenue", "cost-savings", "customer-satisfaction", "other"]
    value: str = Field(..., min_length=1, description="The business value, ROI, or benefit this delivers")


StakeholderRole = Literal[
    "product-owner",
    "business-analyst",
    "project-manager",
    "customer",
    "end-user",
    "executive",
    "developer",
    "other",
]


class Stakeholder(SpecModel):
    role: StakeholderRole
    interest: str = Field(..., min_length=10, description="Stakeholder's interest")
    name: str = Field(..., min_length=3, description="Name of the stakeholder")
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v)


class UserStory(SpecModel):
    role: str = Field(..., min_length=3, description="The role of the user")
    feature: str = Field(..., min_length=10, description="The feature the user wants")
    benefit: str = Field(..., min_length=10, description="The benefit the user expects")


class Constraint(SpecModel):
    type: Literal["performance", "security", "scalability", "compatibility", "infrastructure", "other"]
    description: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Plan items
# ---------------------------------------------------------------------------


class TaskFile(SpecModel):
    id: TaskFileId
    path: str = Field(..., pattern=r"^[\w\-./]+$", description="Relative path from the project root")
    action: Literal["create", "modify", "delete"]
    action_description: Optional[str] = None
    applied: bool = False


class CompletionStatus(SpecModel):
    """Lifecycle timestamps of a task or milestone; the latest one set decides its state."""

    created_at: datetime = Field(default_factory=utc_now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    notes: List[str] = Field(default_factory=list)


class BlockedEntry(SpecModel):
    reason: str = Field(..., min_length=10)
    blocked_by: List[TaskId] = Field(default_factory=list, description="Tasks that must finish first")
    external_dependency: Optional[str] = None
    blocked_at: datetime = Field(default_factory=utc_now)
    resolved_at: Optional[datetime] = None


class Task(SupersessionMixin):
    id: TaskId
    priority: Priority = "medium"
    depends_on: List[TaskId] = Field(default_factory=list, description="Task IDs this task depends on")
    task: str = Field(..., min_length=10, max_length=300, description="What needs to be done")
    considerations: List[str] = Field(default_factory=list)
    references: List[Reference] = Field(default_factory=list)
    files: List[TaskFile] = Field(default_factory=list)
    status: CompletionStatus = Field(default_factory=CompletionStatus)
    blocked: List[BlockedEntry] = Field(default_factory=list)

    @field_validator("considerations")
    @classmethod
    def check_considerations(cls, v: List[str]) -> List[str]:
        for item in v:
            if not 10 <= len(item) <= 100:
                raise ValueError("each consideration must be between 10 and 100 characters")
        return v


class FlowStep(SpecModel):
    id: FlowStepId
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    next_steps: List[FlowStepId] = Field(default_factory=list)


class Flow(SupersessionMixin):
    id: FlowId
    type: str = Field(..., description="Type of flow, e.g. user, system, data")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    steps: List[FlowStep] = Field(..., min_length=1)


class TestCase(SupersessionMixin):
    __test__ = False  # keep pytest from collecting this model

    id: TestCaseId
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    steps: List[str] = Field(default_factory=list)
    expected_result: str = Field(..., min_length=1)
    implemented: bool = False
    passing: bool = False


class ApiContractExample(SpecModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    language: Optional[str] = None


class ApiContract(SupersessionMixin):
    id: ApiContractId
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    contract_type: str = Field(..., min_length=1, description="rest, graphql, grpc, library, cli, ...")
    specification: str = Field(..., description="Contract body (OpenAPI, GraphQL SDL, type signatures, ...)")
    examples: List[ApiContractExample] = Field(default_factory=list)


class DataModelField(SpecModel):
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    constraints: List[str] = Field(default_factory=list)


class DataModelRelationship(SpecModel):
    name: str = Field(..., min_length=1)
    target_model: str = Field(..., min_length=1)
    relationship_type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class DataModelExample(SpecModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    data: str = Field(..., min_length=1)
    format: Optional[str] = None


class DataModel(SupersessionMixin):
    id: DataModelId
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    format: str = Field(..., min_length=1, description="json-schema, sql, typescript, protobuf, ...")
    # "schema" shadows a BaseModel attribute, so the field is stored under an alias
    schema_: str = Field(..., min_length=1, alias="schema", description="The model definition")
    fields: List[DataModelField] = Field(default_factory=list)
    relationships: List[DataModelRelationship] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    indexes: List[str] = Field(default_factory=list)
    examples: List[DataModelExample] = Field(default_factory=list)

    model_config = {"extra": "forbid", "populate_by_name": True}


# ---------------------------------------------------------------------------
# Decision, component and constitution items
# ---------------------------------------------------------------------------


class Consequence(SpecModel):
    type: Literal["positive", "negative", "risk"]
    description: str = Field(..., min_length=10, max_length=300)
    mitigation: Optional[str] = Field(None, min_length=10, max_length=300)


class Deployment(SpecModel):
    platform: str = Field(..., min_length=1, description="AWS ECS, Vercel, Kubernetes, npm, ...")
    url: Optional[str] = None
    build_command: Optional[str] = None
    deploy_command: Optional[str] = None
    environment_vars: List[str] = Field(default_factory=list)
    secrets: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class Article(SpecModel):
    id: ArticleId
    title: str = Field(..., min_length=1)
    principle: str = Field(..., min_length=1)
    rationale: str = Field(..., min_length=1)
    examples: List[str] = Field(default_factory=list)
    exceptions: List[str] = Field(default_factory=list)
    status: Literal["needs-review", "active", "archived"] = "needs-review"
