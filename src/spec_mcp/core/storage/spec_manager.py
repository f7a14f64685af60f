"""Facade over the per-type entity managers."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from spec_mcp.core.entity_types import EntityType, get_info
from spec_mcp.core.errors import InvalidEntityIdError, SpecNotFoundError
from spec_mcp.core.ids import entity_id_of, parse_entity_id
from spec_mcp.core.schemas import SpecBase
from spec_mcp.core.storage.counters import Counters
from spec_mcp.core.storage.entity_manager import EntityManager, dump_entity
from spec_mcp.core.storage.file_manager import FileManager
from spec_mcp.core.tasks import active_tasks, task_state

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3, "nice-to-have": 4}
SORT_FIELDS = ("number", "name", "priority", "created_at", "updated_at")


def entity_to_dict(entity: SpecBase) -> Dict[str, Any]:
    """Serialized entity with its full ID under ``"id"``."""
    data = dump_entity(entity)
    return {"id": entity_id_of(data), **data}


def _as_list(value: Union[None, str, Iterable[str]]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class SpecManager:
    """Entry point for storage: one ``EntityManager`` per entity type."""

    def __init__(self, specs_dir: Union[str, Path], *, auto_create_folders: bool = True) -> None:
        self.files = FileManager(specs_dir, auto_create_folders=auto_create_folders)
        self.counters = Counters(self.files)
        self.business_requirements = EntityManager(EntityType.BUSINESS_REQUIREMENT, self.files, self.counters)
        self.tech_requirements = EntityManager(EntityType.TECHNICAL_REQUIREMENT, self.files, self.counters)
        self.plans = EntityManager(EntityType.PLAN, self.files, self.counters)
        self.components = EntityManager(EntityType.COMPONENT, self.files, self.counters)
        self.decisions = EntityManager(EntityType.DECISION, self.files, self.counters)
        self.constitutions = EntityManager(EntityType.CONSTITUTION, self.files, self.counters)
        self.milestones = EntityManager(EntityType.MILESTONE, self.files, self.counters)
        self._managers: Dict[EntityType, EntityManager] = {
            m.entity_type: m
            for m in (
                self.business_requirements,
                self.tech_requirements,
                self.plans,
                self.components,
                self.decisions,
                self.constitutions,
                self.milestones,
            )
        }

    @property
    def specs_dir(self) -> Path:
        return self.files.specs_dir

    def ensure_structure(self) -> None:
        self.files.ensure_structure()

    def manager_for(self, entity_type: "EntityType | str") -> EntityManager:
        return self._managers[get_info(entity_type).entity_type]

    def managers(self) -> List[EntityManager]:
        return list(self._managers.values())

    def _manager_for_id(self, spec_id: str) -> EntityManager:
        parsed = parse_entity_id(spec_id)
        if parsed is None:
            raise InvalidEntityIdError(spec_id)
        return self._managers[parsed.entity_type]

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_entity(self, spec_id: str) -> Optional[SpecBase]:
        """Load an entity by full or short ID, None when missing or invalid."""
        return self._manager_for_id(spec_id).get(spec_id)

    def require_entity(self, spec_id: str) -> SpecBase:
        entity = self.get_entity(spec_id)
        if entity is None:
            raise SpecNotFoundError(spec_id)
        return entity

    def entity_path(self, spec_id: str) -> Optional[Path]:
        return self._manager_for_id(spec_id).path_of(spec_id)

    def create(self, entity_type: "EntityType | str", data: Dict[str, Any], number: Optional[int] = None) -> SpecBase:
        return self.manager_for(entity_type).create(data, number=number)

    def update(self, spec_id: str, updates: Dict[str, Any]) -> SpecBase:
        return self._manager_for_id(spec_id).update(spec_id, updates)

    def save(self, entity: SpecBase) -> SpecBase:
        return self.manager_for(entity.type).save(entity)

    def delete(self, spec_id: str) -> bool:
        return self._manager_for_id(spec_id).delete(spec_id)

    def get_next_number(self, entity_type: "EntityType | str") -> int:
        return self.counters.next(entity_type)

    def peek_next_number(self, entity_type: "EntityType | str") -> int:
        return self.counters.peek(entity_type)

    def list_all(self, types: Optional[Sequence[str]] = None) -> List[SpecBase]:
        selected = [self.manager_for(t) for t in types] if types else self.managers()
        entities: List[SpecBase] = []
        for manager in selected:
            entities.extend(manager.list())
        return entities

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(
        self,
        *,
        types: Union[None, str, Iterable[str]] = None,
        ids: Union[None, str, Iterable[str]] = None,
        priority: Union[None, str, Iterable[str]] = None,
        task_status: Union[None, str, Iterable[str]] = None,
        search: Optional[str] = None,
        has_tasks: Optional[bool] = None,
        sort_by: str = "number",
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """Filter, sort and page entities across types.

        ``task_status`` keeps plans with at least one active task in one of
        the given states. ``search`` matches name and description,
        case-insensitively.

        Returns:
            ``{"items": [...], "total": int, "has_more": bool}``
        """
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"sort_by must be one of: {', '.join(SORT_FIELDS)}")

        type_filter = _as_list(types)
        id_filter = _as_list(ids)
        priority_filter = set(_as_list(priority))
        status_filter = set(_as_list(task_status))
        needle = search.lower() if search else None

        if id_filter:
            candidates = [e for e in (self.get_entity(i) for i in id_filter) if e is not None]
            if type_filter:
                candidates = [e for e in candidates if e.type in type_filter]
        else:
            candidates = self.list_all(type_filter or None)

        def keep(entity: SpecBase) -> bool:
            if priority_filter and entity.priority not in priority_filter:
                return False
            if needle and needle not in entity.name.lower() and needle not in entity.description.lower():
                return False
            tasks = active_tasks(getattr(entity, "tasks", []) or [])
            if has_tasks is not None and bool(tasks) != has_tasks:
                return False
            if status_filter and not any(task_state(t) in status_filter for t in tasks):
                return False
            return True

        matched = [e for e in candidates if keep(e)]

        if sort_by == "priority":
            matched.sort(key=lambda e: (PRIORITY_ORDER[e.priority], e.type, e.number), reverse=descending)
        elif sort_by == "name":
            matched.sort(key=lambda e: e.name.lower(), reverse=descending)
        else:
            matched.sort(key=lambda e: (getattr(e, sort_by), e.type), reverse=descending)

        total = len(matched)
        offset = max(offset, 0)
        page = matched[offset : offset + limit] if limit is not None else matched[offset:]
        return {
            "items": [entity_to_dict(e) for e in page],
            "total": total,
            "has_more": offset + len(page) < total,
        }

    # ------------------------------------------------------------------
    # Warnings
    # ------------------------------------------------------------------

    def get_all_validation_warnings(self) -> List[Dict[str, Any]]:
        warnings: List[Dict[str, Any]] = []
        for manager in self._managers.values():
            warnings.extend(manager.validation_warnings)
        return warnings

    def clear_validation_warnings(self) -> None:
        for manager in self._managers.values():
            manager.clear_validation_warnings()
