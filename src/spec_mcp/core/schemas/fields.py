"""Which array fields each entity type exposes to the item tools."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from pydantic import TypeAdapter

from spec_mcp.core.entity_types import EntityType
from spec_mcp.core.schemas.common import Reference, ScopeItem
from spec_mcp.core.schemas.items import (
    ApiContract,
    Article,
    BusinessValue,
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


@dataclass(frozen=True)
class ArrayField:
    """An array field of an entity.

    ``item_type`` is None for plain string arrays. ``prefix`` is set for
    items that carry their own ID; only those can be addressed by ID, and
    only ``supersedable`` ones take part in version chains.
    """

    name: str
    item_type: Any = None
    prefix: Optional[str] = None
    supersedable: bool = False

    @property
    def has_ids(self) -> bool:
        return self.prefix is not None

    def validate_item(self, value: Any) -> Any:
        """Validate one element and return its JSON-ready form."""
        if self.item_type is None:
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"'{self.name}' entries must be non-empty strings")
            return value
        adapter = _adapter(self.item_type)
        return adapter.dump_python(adapter.validate_python(value), mode="json", by_alias=True, exclude_none=True)


_ADAPTERS: Dict[int, TypeAdapter] = {}


def _adapter(item_type: Any) -> TypeAdapter:
    adapter = _ADAPTERS.get(id(item_type))
    if adapter is None:
        adapter = _ADAPTERS[id(item_type)] = TypeAdapter(item_type)
    return adapter


def _f(name: str, item_type: Any = None, prefix: Optional[str] = None, supersedable: bool = False) -> ArrayField:
    return ArrayField(name=name, item_type=item_type, prefix=prefix, supersedable=supersedable)


_REFERENCES = _f("references", Reference)

ARRAY_FIELDS: Dict[EntityType, Dict[str, ArrayField]] = {
    EntityType.BUSINESS_REQUIREMENT: {
        f.name: f
        for f in (
            _f("criteria", Criteria, "crt", True),
            _f("business_value", BusinessValue),
            _f("stakeholders", Stakeholder),
            _f("user_stories", UserStory),
            _REFERENCES,
        )
    },
    EntityType.TECHNICAL_REQUIREMENT: {
        f.name: f
        for f in (
            _f("criteria", Criteria, "crt", True),
            _f("constraints", Constraint),
            _f("technical_dependencies", Reference),
            _REFERENCES,
        )
    },
    EntityType.PLAN: {
        f.name: f
        for f in (
            _f("tasks", Task, "tsk", True),
            _f("flows", Flow, "flw", True),
            _f("test_cases", TestCase, "tst", True),
            _f("api_contracts", ApiContract, "api", True),
            _f("data_models", DataModel, "dat", True),
            _f("scope", ScopeItem),
            _f("depends_on"),
            _f("milestones"),
            _REFERENCES,
        )
    },
    EntityType.DECISION: {
        f.name: f
        for f in (
            _f("consequences", Consequence),
            _f("alternatives"),
            _REFERENCES,
        )
    },
    EntityType.COMPONENT: {
        f.name: f
        for f in (
            _f("deployments", Deployment),
            _f("scope", ScopeItem),
            _f("tech_stack"),
            _f("depends_on"),
            _f("external_dependencies"),
            _REFERENCES,
        )
    },
    EntityType.CONSTITUTION: {
        f.name: f for f in (_f("articles", Article, "art"),)
    },
    EntityType.MILESTONE: {
        f.name: f for f in (_REFERENCES,)
    },
}


def array_field(entity_type: "EntityType | str", name: str) -> Optional[ArrayField]:
    return ARRAY_FIELDS[EntityType(entity_type)].get(name)


def array_field_names(entity_type: "EntityType | str") -> Tuple[str, ...]:
    return tuple(ARRAY_FIELDS[EntityType(entity_type)])


def item_json_schema(spec: ArrayField) -> Dict[str, Any]:
    """JSON Schema of one element of an array field."""
    if spec.item_type is None:
        return {"type": "string", "minLength": 1}
    return _adapter(spec.item_type).json_schema(by_alias=True)
