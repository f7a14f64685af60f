"""Versioned edits of array items inside an entity.

Items with IDs are never rewritten in place. Superseding ``tsk-002``
appends ``tsk-00N`` (next free number) carrying the merged fields, links
the two through ``supersedes``/``superseded_by`` and repoints references
held by sibling items. All functions work on the JSON form of an entity
and return new mappings; callers persist the result.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from spec_mcp.core.errors import AlreadySupersededError, ItemNotFoundError
from spec_mcp.core.ids import format_item_id, next_item_id
from spec_mcp.core.schemas import utc_now_iso

logger = logging.getLogger(__name__)

REFERENCE_ARRAYS = ("depends_on", "blocked_by", "blocking", "related_to", "tasks", "criteria")
SUPERSESSION_KEYS = ("supersedes", "superseded_by", "superseded_at")


def find_item(items: List[Dict[str, Any]], item_id: str) -> Optional[Dict[str, Any]]:
    for item in items:
        if isinstance(item, dict) and item.get("id") == item_id:
            return item
    return None


def active_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [item for item in items if not (isinstance(item, dict) and item.get("superseded_by"))]


def supersession_chain(items: List[Dict[str, Any]], item_id: str, field: str = "items") -> List[Dict[str, Any]]:
    """Every version of an item, oldest first.

    Raises:
        ItemNotFoundError: if ``item_id`` is not in ``items``.
    """
    by_id = {item["id"]: item for item in items if isinstance(item, dict) and "id" in item}
    if item_id not in by_id:
        raise ItemNotFoundError(item_id, field)

    root = by_id[item_id]
    seen = {root["id"]}
    while root.get("supersedes") in by_id and root["supersedes"] not in seen:
        root = by_id[root["supersedes"]]
        seen.add(root["id"])

    chain = [root]
    visited = {root["id"]}
    current = root
    while current.get("superseded_by") in by_id and current["superseded_by"] not in visited:
        current = by_id[current["superseded_by"]]
        visited.add(current["id"])
        chain.append(current)
    return chain


def normalize_flow_steps(steps: List[Any]) -> List[Any]:
    """Expand plain step names into linked ``step-NNN`` objects."""
    if not steps or not all(isinstance(s, str) for s in steps):
        return steps
    ids = [format_item_id("step", i + 1) for i in range(len(steps))]
    return [
        {"id": ids[i], "name": name, "next_steps": [ids[i + 1]] if i + 1 < len(ids) else []}
        for i, name in enumerate(steps)
    ]


def _prepare(field: str, data: Dict[str, Any]) -> Dict[str, Any]:
    clean = {k: v for k, v in data.items() if k != "id" and k not in SUPERSESSION_KEYS}
    if field == "flows" and isinstance(clean.get("steps"), list):
        clean["steps"] = normalize_flow_steps(clean["steps"])
    return clean


def _rewrite_refs(item: Dict[str, Any], old_id: str, new_id: str) -> None:
    for key in REFERENCE_ARRAYS:
        values = item.get(key)
        if isinstance(values, list):
            item[key] = [new_id if v == old_id else v for v in values]
    for entry in item.get("blocked") or []:
        if isinstance(entry, dict) and isinstance(entry.get("blocked_by"), list):
            entry["blocked_by"] = [new_id if v == old_id else v for v in entry["blocked_by"]]


def _items(entity: Dict[str, Any], field: str) -> List[Any]:
    items = entity.get(field)
    if items is None:
        items = entity[field] = []
    return items


def supersede_item(
    entity: Dict[str, Any],
    field: str,
    item_id: str,
    updates: Dict[str, Any],
    prefix: str,
) -> Dict[str, Any]:
    """Replace an item with a new version.

    Returns:
        ``{"entity", "new_item", "old_item", "changed_fields"}``

    Raises:
        ItemNotFoundError: if the item does not exist.
        AlreadySupersededError: if the item already has a successor.
    """
    result = copy.deepcopy(entity)
    items = _items(result, field)
    old = find_item(items, item_id)
    if old is None:
        raise ItemNotFoundError(item_id, field)
    if old.get("superseded_by"):
        raise AlreadySupersededError(item_id, old["superseded_by"])

    new_id = next_item_id(items, prefix)
    changes = _prepare(field, updates)
    new_item = {**old, **changes, "id": new_id, "supersedes": item_id, "superseded_by": None, "superseded_at": None}
    changed_fields = sorted(k for k, v in changes.items() if old.get(k) != v)

    old["superseded_by"] = new_id
    old["superseded_at"] = utc_now_iso()

    for other in items:
        if isinstance(other, dict) and other is not old:
            _rewrite_refs(other, item_id, new_id)

    items.append(new_item)
    logger.debug("Superseded %s.%s with %s", field, item_id, new_id)
    return {
        "entity": result,
        "new_item": new_item,
        "old_item": copy.deepcopy(old),
        "changed_fields": changed_fields,
    }


def add_item(
    entity: Dict[str, Any],
    field: str,
    data: Dict[str, Any],
    prefix: str,
    supersede_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Append an item with the next free ID, or supersede ``supersede_id``.

    Returns:
        ``{"entity", "item"}`` plus the supersession keys when superseding.
    """
    if supersede_id:
        outcome = supersede_item(entity, field, supersede_id, data, prefix)
        return {**outcome, "item": outcome["new_item"]}

    result = copy.deepcopy(entity)
    items = _items(result, field)
    item = {"id": next_item_id(items, prefix), **_prepare(field, data)}
    items.append(item)
    return {"entity": result, "item": item}


def remove_item(entity: Dict[str, Any], field: str, item_id: str) -> Dict[str, Any]:
    result = copy.deepcopy(entity)
    items = _items(result, field)
    target = find_item(items, item_id)
    if target is None:
        raise ItemNotFoundError(item_id, field)
    items.remove(target)
    return {"entity": result, "item": target}


def add_simple(entity: Dict[str, Any], field: str, value: Any) -> Dict[str, Any]:
    """Append to an array whose elements have no ID."""
    result = copy.deepcopy(entity)
    items = _items(result, field)
    items.append(value)
    return {"entity": result, "item": value, "index": len(items) - 1}


def remove_simple(entity: Dict[str, Any], field: str, index: int) -> Dict[str, Any]:
    result = copy.deepcopy(entity)
    items = _items(result, field)
    if not 0 <= index < len(items):
        raise ItemNotFoundError(str(index), field)
    removed = items.pop(index)
    return {"entity": result, "item": removed, "index": index}
