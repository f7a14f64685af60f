"""Entity, item, draft and criteria-reference ID helpers.

Entity IDs look like ``pln-002-user-auth`` (prefix, zero-padded number,
slug). The short form ``pln-002`` is accepted wherever an entity is looked
up. Items inside an entity carry short IDs such as ``tsk-001``; plans point at
requirement criteria with ``prd-001-api-security/crt-002``.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from spec_mcp.core.entity_types import ENTITY_TYPES, EntityType, get_info, type_for_prefix

ID_NUMBER_PADDING = 3

ENTITY_ID_WITH_SLUG = re.compile(r"^([a-z]{3,4})-(\d{1,3})-([a-z0-9-]+)$")
ENTITY_ID_SIMPLE = re.compile(r"^([a-z]{3,4})-(\d{1,3})$")
ITEM_ID = re.compile(r"^([a-z]{3,4})-(\d{3})$")
DRAFT_ID = re.compile(r"^([a-z]{3})-draft-(\d{1,3})$")
CRITERIA_REF = re.compile(r"^((?:brd|prd)-\d{1,3}(?:-[a-z0-9-]+)?)/(crt-\d{3})$")

ITEM_PREFIXES = {
    "task": "tsk",
    "criteria": "crt",
    "test-case": "tst",
    "flow": "flw",
    "api-contract": "api",
    "data-model": "dat",
    "user-story": "sto",
    "step": "step",
    "article": "art",
    "file": "file",
}


@dataclass(frozen=True)
class ParsedEntityId:
    """Components of an entity ID."""

    prefix: str
    number: int
    entity_type: EntityType
    slug: Optional[str] = None

    @property
    def short_id(self) -> str:
        return f"{ENTITY_TYPES[self.entity_type].prefix}-{pad_number(self.number)}"


@dataclass(frozen=True)
class ParsedItemId:
    prefix: str
    number: int


@dataclass(frozen=True)
class CriteriaRef:
    """A ``<requirement-id>/<criteria-id>`` pointer."""

    requirement_id: str
    criteria_id: str


def pad_number(number: int) -> str:
    return str(number).zfill(ID_NUMBER_PADDING)


def _strip_extension(value: str) -> str:
    return re.sub(r"\.(yml|yaml)$", "", value)


def parse_entity_id(value: str) -> Optional[ParsedEntityId]:
    """Parse ``pln-001-slug``, ``pln-001``, ``pln-1`` or a file name.

    Returns None when the value does not look like an entity ID or the
    prefix is unknown. Legacy prefixes (``brq``, ``cns`` ...) resolve to
    their current entity type.
    """
    clean = _strip_extension(value.strip())
    slug: Optional[str] = None
    match = ENTITY_ID_WITH_SLUG.match(clean)
    if match:
        prefix, number_str, slug = match.groups()
    else:
        match = ENTITY_ID_SIMPLE.match(clean)
        if not match:
            return None
        prefix, number_str = match.groups()

    entity_type = type_for_prefix(prefix)
    if entity_type is None:
        return None
    return ParsedEntityId(prefix=prefix, number=int(number_str), entity_type=entity_type, slug=slug)


def format_entity_id(entity_type: "EntityType | str", number: int, slug: Optional[str] = None) -> str:
    prefix = get_info(entity_type).prefix
    base = f"{prefix}-{pad_number(number)}"
    return f"{base}-{slug}" if slug else base


def entity_id_of(entity: Mapping[str, Any]) -> str:
    """Build the full ID of an entity record."""
    return format_entity_id(entity["type"], int(entity["number"]), entity.get("slug"))


def entity_type_from_id(value: str) -> Optional[EntityType]:
    parsed = parse_entity_id(value)
    return parsed.entity_type if parsed else None


def parse_item_id(value: str) -> Optional[ParsedItemId]:
    match = ITEM_ID.match(value.strip())
    if not match:
        return None
    prefix, number_str = match.groups()
    return ParsedItemId(prefix=prefix, number=int(number_str))


def format_item_id(prefix: str, number: int) -> str:
    return f"{prefix}-{pad_number(number)}"


def max_item_number(items: Iterable[Mapping[str, Any]], prefix: Optional[str] = None) -> int:
    """Highest numeric suffix among item IDs, 0 when there are none."""
    highest = 0
    for item in items:
        item_id = item.get("id") if isinstance(item, Mapping) else None
        if not isinstance(item_id, str):
            continue
        parsed = parse_item_id(item_id)
        if parsed is None or (prefix and parsed.prefix != prefix):
            continue
        highest = max(highest, parsed.number)
    return highest


def next_item_id(items: Iterable[Mapping[str, Any]], prefix: str) -> str:
    return format_item_id(prefix, max_item_number(items, prefix) + 1)


def parse_draft_id(value: str) -> Optional[ParsedEntityId]:
    """Parse the legacy ``pln-draft-001`` form into its entity components."""
    match = DRAFT_ID.match(value.strip())
    if not match:
        return None
    prefix, number_str = match.groups()
    entity_type = type_for_prefix(prefix)
    if entity_type is None:
        return None
    return ParsedEntityId(prefix=prefix, number=int(number_str), entity_type=entity_type)


def parse_criteria_ref(value: str) -> Optional[CriteriaRef]:
    match = CRITERIA_REF.match(value.strip())
    if not match:
        return None
    return CriteriaRef(requirement_id=match.group(1), criteria_id=match.group(2))


def same_entity(left: str, right: str) -> bool:
    """True when two IDs name the same entity, ignoring slug and padding."""
    a = parse_entity_id(left)
    b = parse_entity_id(right)
    if a is None or b is None:
        return left == right
    return a.entity_type == b.entity_type and a.number == b.number
