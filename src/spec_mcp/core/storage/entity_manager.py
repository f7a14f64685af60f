"""CRUD for the entities of a single type."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from spec_mcp.core.entity_types import EntityType, get_info
from spec_mcp.core.errors import (
    DuplicateEntityError,
    InvalidEntityIdError,
    SpecNotFoundError,
    SpecValidationError,
    StorageError,
)
from spec_mcp.core.ids import format_entity_id, pad_number, parse_entity_id
from spec_mcp.core.schemas import SpecBase, format_validation_errors, model_for, utc_now
from spec_mcp.core.slug import generate_slug
from spec_mcp.core.storage.counters import Counters
from spec_mcp.core.storage.file_manager import FileManager

logger = logging.getLogger(__name__)

EntityRef = Union[int, str]

DRAFT_SUFFIX = ".draft.yml"
_IMMUTABLE_FIELDS = ("type", "number", "created_at")


def dump_entity(entity: SpecBase) -> Dict[str, Any]:
    """Serialize an entity model to the mapping stored on disk."""
    return entity.model_dump(mode="json", by_alias=True, exclude_none=True)


class EntityManager:
    """Loads, validates and persists entities of one type.

    Files that fail schema validation are skipped by ``get``/``list`` and
    recorded in ``validation_warnings`` instead of raising.
    """

    def __init__(self, entity_type: "EntityType | str", files: FileManager, counters: Counters) -> None:
        self.info = get_info(entity_type)
        self.entity_type = self.info.entity_type
        self.model = model_for(self.entity_type)
        self.files = files
        self.counters = counters
        self._warnings: Dict[str, Dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Paths and numbers
    # ------------------------------------------------------------------

    @property
    def folder(self) -> Path:
        return self.files.resolve(self.info.folder)

    def resolve_number(self, ref: EntityRef) -> int:
        """Turn ``3``, ``"pln-003"`` or ``"pln-003-slug"`` into ``3``.

        Raises:
            InvalidEntityIdError: if the ID is malformed or names another type.
        """
        if isinstance(ref, int):
            return ref
        text = str(ref).strip()
        if text.isdigit():
            return int(text)
        parsed = parse_entity_id(text)
        if parsed is None:
            raise InvalidEntityIdError(text)
        if parsed.entity_type != self.entity_type:
            raise InvalidEntityIdError(text, reason=f"not a {self.entity_type.value} ID")
        return parsed.number

    def path_of(self, ref: EntityRef) -> Optional[Path]:
        """File holding the entity, or None when it does not exist."""
        number = self.resolve_number(ref)
        matches = [
            p
            for p in self.files.list_files(self.info.folder, f"{self.info.prefix}-{pad_number(number)}-*.yml")
            if not p.name.endswith(DRAFT_SUFFIX)
        ]
        return matches[0] if matches else None

    def file_name(self, number: int, slug: str) -> str:
        return f"{self.info.folder}/{format_entity_id(self.entity_type, number, slug)}.yml"

    def draft_path(self, number: int) -> str:
        return f"{self.info.folder}/{self.info.prefix}-{pad_number(number)}{DRAFT_SUFFIX}"

    # ------------------------------------------------------------------
    # Validation warnings
    # ------------------------------------------------------------------

    def _record_warning(self, path: Path, error: str, issues: List[str]) -> None:
        self._warnings[str(path)] = {
            "file_name": path.name,
            "entity_type": self.entity_type.value,
            "file_path": str(path),
            "error": error,
            "issues": issues,
        }
        logger.warning("Skipping invalid %s file %s: %s", self.entity_type.value, path.name, error)

    @property
    def validation_warnings(self) -> List[Dict[str, Any]]:
        return list(self._warnings.values())

    def clear_validation_warnings(self) -> None:
        self._warnings.clear()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def validate(self, data: Dict[str, Any]) -> SpecBase:
        try:
            return self.model.model_validate(data)
        except ValidationError as exc:
            errors = format_validation_errors(exc)
            raise SpecValidationError(f"Invalid {self.entity_type.value} data: {'; '.join(errors)}", errors) from exc

    def _load(self, path: Path) -> Optional[SpecBase]:
        try:
            data = self.files.read_yaml(path)
        except StorageError as exc:
            self._record_warning(path, str(exc), [exc.reason] if exc.reason else [])
            return None
        if data is None:
            return None
        try:
            entity = self.validate(data)
        except SpecValidationError as exc:
            self._record_warning(path, "Schema validation failed", exc.errors)
            return None
        self._warnings.pop(str(path), None)
        return entity

    def get(self, ref: EntityRef) -> Optional[SpecBase]:
        path = self.path_of(ref)
        if path is None:
            return None
        return self._load(path)

    def require(self, ref: EntityRef) -> SpecBase:
        entity = self.get(ref)
        if entity is None:
            raise SpecNotFoundError(str(ref), self.entity_type.value)
        return entity

    def list(self) -> List[SpecBase]:
        entities = []
        for path in self.files.list_files(self.info.folder, f"{self.info.prefix}-*.yml"):
            if path.name.endswith(DRAFT_SUFFIX):
                continue
            entity = self._load(path)
            if entity is not None:
                entities.append(entity)
        return sorted(entities, key=lambda e: e.number)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any], number: Optional[int] = None) -> SpecBase:
        """Validate and write a new entity.

        The number comes from the argument, then ``data["number"]``, then the
        type counter. The slug defaults to one generated from ``name``.

        Raises:
            DuplicateEntityError: if the number is already used.
            SpecValidationError: if the data does not match the schema.
        """
        payload = dict(data)
        payload["type"] = self.entity_type.value
        if number is None:
            number = payload.get("number")
        if number is None:
            number = self.counters.next(self.entity_type)
        payload["number"] = int(number)

        existing = self.path_of(payload["number"])
        if existing is not None:
            raise DuplicateEntityError(self.entity_type.value, payload["number"], str(existing))

        if not payload.get("slug"):
            payload["slug"] = generate_slug(str(payload.get("name", "")))
        now = utc_now()
        payload.setdefault("created_at", now)
        payload.setdefault("updated_at", now)

        entity = self.validate(payload)
        self.files.write_yaml(self.file_name(entity.number, entity.slug), dump_entity(entity))
        logger.info("Created %s", format_entity_id(self.entity_type, entity.number, entity.slug))
        return entity

    def update(self, ref: EntityRef, updates: Dict[str, Any]) -> SpecBase:
        """Merge ``updates`` into an entity and rewrite it.

        ``type``, ``number`` and ``created_at`` are never changed. A new slug
        renames the file.
        """
        path = self.path_of(ref)
        if path is None:
            raise SpecNotFoundError(str(ref), self.entity_type.value)
        current = self.files.read_yaml(path) or {}

        merged = dict(current)
        merged.update({k: v for k, v in updates.items() if k not in _IMMUTABLE_FIELDS})
        return self._rewrite(path, merged)

    def save(self, entity: SpecBase) -> SpecBase:
        """Rewrite an already loaded entity, e.g. after item edits."""
        path = self.path_of(entity.number)
        if path is None:
            raise SpecNotFoundError(format_entity_id(self.entity_type, entity.number), self.entity_type.value)
        return self._rewrite(path, dump_entity(entity))

    def _rewrite(self, path: Path, data: Dict[str, Any]) -> SpecBase:
        data["updated_at"] = utc_now()
        entity = self.validate(data)
        target = self.files.resolve(self.file_name(entity.number, entity.slug))
        self.files.write_yaml(target, dump_entity(entity))
        if target != path:
            self.files.delete(path)
            logger.info("Renamed %s to %s", path.name, target.name)
        return entity

    def delete(self, ref: EntityRef) -> bool:
        path = self.path_of(ref)
        if path is None:
            return False
        self._warnings.pop(str(path), None)
        return self.files.delete(path)

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def save_draft(self, state: Dict[str, Any], number: int) -> Path:
        return self.files.write_yaml(self.draft_path(number), state)

    def load_drafts(self) -> Dict[int, Dict[str, Any]]:
        drafts: Dict[int, Dict[str, Any]] = {}
        for path in self.files.list_files(self.info.folder, f"*{DRAFT_SUFFIX}"):
            parsed = parse_entity_id(path.name[: -len(DRAFT_SUFFIX)])
            if parsed is None or parsed.entity_type != self.entity_type:
                continue
            try:
                state = self.files.read_yaml(path)
            except StorageError as exc:
                self._record_warning(path, str(exc), [])
                continue
            if state:
                drafts[parsed.number] = state
        return drafts

    def delete_draft(self, number: int) -> bool:
        return self.files.delete(self.draft_path(number))
