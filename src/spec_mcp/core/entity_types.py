"""Entity type registry.

One row per spec entity type: its ID prefix, storage folder relative to the
specs root, and the key of its counter in ``specs.yml``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class EntityType(str, Enum):
    """Spec entity types."""

    BUSINESS_REQUIREMENT = "business-requirement"
    TECHNICAL_REQUIREMENT = "technical-requirement"
    PLAN = "plan"
    COMPONENT = "component"
    DECISION = "decision"
    CONSTITUTION = "constitution"
    MILESTONE = "milestone"


@dataclass(frozen=True)
class EntityTypeInfo:
    """Static storage facts for an entity type."""

    entity_type: EntityType
    prefix: str
    folder: str
    counter_key: str
    aliases: Tuple[str, ...] = ()


ENTITY_TYPES: Dict[EntityType, EntityTypeInfo] = {
    EntityType.BUSINESS_REQUIREMENT: EntityTypeInfo(
        EntityType.BUSINESS_REQUIREMENT, "brd", "requirements/business", "business_requirements", ("brq", "breq")
    ),
    EntityType.TECHNICAL_REQUIREMENT: EntityTypeInfo(
        EntityType.TECHNICAL_REQUIREMENT, "prd", "requirements/technical", "tech_requirements", ("trq", "treq")
    ),
    EntityType.PLAN: EntityTypeInfo(EntityType.PLAN, "pln", "plans", "plans"),
    EntityType.COMPONENT: EntityTypeInfo(EntityType.COMPONENT, "cmp", "components", "components"),
    EntityType.DECISION: EntityTypeInfo(EntityType.DECISION, "dec", "decisions", "decisions", ("dcs",)),
    EntityType.CONSTITUTION: EntityTypeInfo(EntityType.CONSTITUTION, "con", "constitutions", "constitutions", ("cns",)),
    EntityType.MILESTONE: EntityTypeInfo(EntityType.MILESTONE, "mls", "milestones", "milestones"),
}

_PREFIX_INDEX: Dict[str, EntityType] = {}
for _info in ENTITY_TYPES.values():
    _PREFIX_INDEX[_info.prefix] = _info.entity_type
    for _alias in _info.aliases:
        _PREFIX_INDEX[_alias] = _info.entity_type


def get_info(entity_type: "EntityType | str") -> EntityTypeInfo:
    """Return registry info for an entity type value such as ``"plan"``.

    Raises:
        ValueError: if the type is unknown.
    """
    return ENTITY_TYPES[EntityType(entity_type)]


def type_for_prefix(prefix: str) -> Optional[EntityType]:
    """Resolve an ID prefix (including legacy aliases) to its entity type."""
    return _PREFIX_INDEX.get(prefix.lower())


def canonical_prefix(prefix: str) -> Optional[str]:
    """Map a legacy prefix such as ``brq`` to its canonical form ``brd``."""
    entity_type = type_for_prefix(prefix)
    if entity_type is None:
        return None
    return ENTITY_TYPES[entity_type].prefix


def entity_type_values() -> Tuple[str, ...]:
    return tuple(t.value for t in EntityType)
