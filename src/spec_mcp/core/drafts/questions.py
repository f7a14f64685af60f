"""Guided question sets for drafting each entity type.

Every entity type has a list of main questions and, for its list-valued
fields, a collection question ("list the tasks, comma-separated") followed
by per-item questions asked once for every listed value.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from spec_mcp.core.entity_types import EntityType


@dataclass(frozen=True)
class QuestionTemplate:
    id: str
    question: str
    optional: bool = False


@dataclass(frozen=True)
class ArrayDrafterConfig:
    """Collection question plus the questions asked for each item."""

    field: str
    question: QuestionTemplate
    item_questions: Tuple[QuestionTemplate, ...]


@dataclass(frozen=True)
class DrafterConfig:
    entity_type: EntityType
    questions: Tuple[QuestionTemplate, ...]
    arrays: Tuple[ArrayDrafterConfig, ...] = field(default_factory=tuple)


Q = QuestionTemplate


def _array(field_name: str, question: QuestionTemplate, *item_questions: QuestionTemplate) -> ArrayDrafterConfig:
    return ArrayDrafterConfig(field=field_name, question=question, item_questions=tuple(item_questions))


_RESEARCH = "Research relevant documentation or prior art and record the findings (or 'none')."

_CRITERIA = _array(
    "criteria",
    Q("q-criteria", "List the acceptance criteria that define 'done' (comma-separated)."),
    Q("cr-q-001", "Describe this criterion so it is specific and testable, and explain why it matters."),
    Q("cr-q-002", _RESEARCH, optional=True),
)

DRAFTER_CONFIGS: Dict[EntityType, DrafterConfig] = {
    EntityType.BUSINESS_REQUIREMENT: DrafterConfig(
        EntityType.BUSINESS_REQUIREMENT,
        (
            Q("q-001", "What problem or opportunity does this address? Give a short name for it."),
            Q("q-002", "What is the desired outcome for the business and its users?"),
            Q("q-003", "Key constraints or dependencies?", optional=True),
            Q("q-004", "Related technical requirements? (PRD IDs comma-separated, or 'none')", optional=True),
            Q("q-005", _RESEARCH, optional=True),
        ),
        (
            _array(
                "business_value",
                Q("q-business-value", "List the business values delivered (comma-separated)."),
                Q("bv-q-001", "Type? (revenue, cost-savings, customer-satisfaction, other)"),
                Q("bv-q-002", "Quantify the impact, with metrics where possible."),
            ),
            _array(
                "stakeholders",
                Q("q-stakeholders", "List the key stakeholders (comma-separated)."),
                Q("sh-q-001", "Role, name, interest or concern, and email (optional)."),
            ),
            _array(
                "user_stories",
                Q("q-user-stories", "List the user stories (comma-separated)."),
                Q("us-q-001", "As a [role]..."),
                Q("us-q-002", "I want to [capability]..."),
                Q("us-q-003", "So that [benefit]..."),
            ),
            _CRITERIA,
        ),
    ),
    EntityType.TECHNICAL_REQUIREMENT: DrafterConfig(
        EntityType.TECHNICAL_REQUIREMENT,
        (
            Q("q-001", "What is this technical requirement and what must it accomplish?"),
            Q("q-002", "Why is it needed? What problem does it solve?"),
            Q("q-003", "What is the high-level technical approach?", optional=True),
            Q("q-004", "Which business requirement drives this? (BRD ID, or explain)", optional=True),
            Q("q-005", _RESEARCH, optional=True),
        ),
        (
            _array(
                "constraints",
                Q("q-constraints", "List the technical constraints (comma-separated)."),
                Q("cn-q-001", "Type? (performance, security, scalability, compatibility, infrastructure, other)"),
                Q("cn-q-002", "Describe the constraint in measurable terms and why it exists."),
            ),
            _CRITERIA,
        ),
    ),
    EntityType.PLAN: DrafterConfig(
        EntityType.PLAN,
        (
            Q("q-001", "What does this plan accomplish? Describe the goal and approach."),
            Q("q-002", "Which requirement criterion does it fulfil? (e.g. prd-001-slug/crt-001, or 'none')", optional=True),
            Q("q-003", "Which plans must be finished first? (PLN IDs comma-separated, or 'none')", optional=True),
            Q("q-004", _RESEARCH, optional=True),
        ),
        (
            _array(
                "tasks",
                Q("q-tasks", "List the implementation tasks (comma-separated)."),
                Q("tk-q-001", "Describe the task details, dependencies and considerations."),
                Q("tk-q-002", "Priority? (critical, high, medium, low, nice-to-have)"),
            ),
            _array(
                "test_cases",
                Q("q-test-cases", "List the test cases (comma-separated)."),
                Q("tc-q-001", "Test scenario, steps and expected result."),
            ),
            _array(
                "flows",
                Q("q-flows", "List the key user or system flows (comma-separated)."),
                Q("fl-q-001", "Type and ordered steps of this flow."),
            ),
            _array(
                "api_contracts",
                Q("q-api-contracts", "List the API contracts (comma-separated, or 'none')."),
                Q("ac-q-001", "Contract type, description and specification."),
            ),
            _array(
                "data_models",
                Q("q-data-models", "List the data models (comma-separated, or 'none')."),
                Q("dm-q-001", "Model description, format and schema."),
            ),
        ),
    ),
    EntityType.DECISION: DrafterConfig(
        EntityType.DECISION,
        (
            Q("q-001", "What problem is being decided, and what was decided?"),
            Q("q-002", "Rationale and alternatives considered?"),
            Q("q-003", "Does this supersede a previous decision? (DEC ID, or 'none')", optional=True),
            Q("q-004", "Components affected? (CMP IDs comma-separated, 'all', or 'none')", optional=True),
            Q("q-005", "Requirements that drove this? (BRD/PRD IDs comma-separated, or 'none')", optional=True),
            Q("q-006", _RESEARCH, optional=True),
        ),
        (
            _array(
                "consequences",
                Q("q-consequences", "List the key consequences (comma-separated)."),
                Q("cq-q-001", "Type? (positive, negative, risk)"),
                Q("cq-q-002", "Describe it specifically; quantify when possible."),
                Q("cq-q-003", "How will you mitigate it? (negative or risk only)", optional=True),
            ),
        ),
    ),
    EntityType.COMPONENT: DrafterConfig(
        EntityType.COMPONENT,
        (
            Q("q-001", "What is the name of this component?"),
            Q("q-002", "Describe what this component does."),
            Q("q-003", "What type of component is this? (app, service, library)"),
            Q("q-004", "Which folder holds it, and what is its tech stack?"),
            Q("q-005", "What is the dev server port?", optional=True),
            Q("q-006", "Any additional notes about this component?", optional=True),
        ),
        (
            _array(
                "deployments",
                Q("q-deployments", "List the deployment targets (comma-separated)."),
                Q("dp-q-001", "Which platform, and what is the production URL (if any)?"),
                Q("dp-q-002", "Build and deploy commands?", optional=True),
                Q("dp-q-003", "Required environment variables and secrets (comma-separated)?", optional=True),
            ),
        ),
    ),
    EntityType.CONSTITUTION: DrafterConfig(
        EntityType.CONSTITUTION,
        (
            Q("q-001", "What is this constitution's purpose and context?"),
            Q("q-002", "Why does it exist? What problem does it solve?"),
            Q("q-003", "Which key areas must it address?", optional=True),
        ),
        (
            _array(
                "articles",
                Q("q-articles", "List the article titles (comma-separated)."),
                Q("ar-q-001", "State the principle as a clear, actionable guideline."),
                Q("ar-q-002", "Why does this principle exist?"),
                Q("ar-q-003", "Give 2-3 scenarios where it guided a decision.", optional=True),
                Q("ar-q-004", "When should it NOT apply?", optional=True),
            ),
        ),
    ),
    EntityType.MILESTONE: DrafterConfig(
        EntityType.MILESTONE,
        (
            Q("q-001", "Milestone name and description?"),
            Q("q-002", "Target completion date? (ISO 8601 date, or 'none')", optional=True),
            Q("q-003", "Related plans, requirements or decisions? (IDs comma-separated, or 'none')", optional=True),
        ),
    ),
}


def drafter_config(entity_type: "EntityType | str") -> DrafterConfig:
    return DRAFTER_CONFIGS[EntityType(entity_type)]


def array_fields(entity_type: "EntityType | str") -> List[str]:
    return [a.field for a in drafter_config(entity_type).arrays]
