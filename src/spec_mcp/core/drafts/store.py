"""Draft sessions: in-memory drafters mirrored to ``<prefix>-NNN.draft.yml``."""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from spec_mcp.core.drafts.drafter import EntityDrafter
from spec_mcp.core.drafts.questions import drafter_config
from spec_mcp.core.entity_types import EntityType, get_info
from spec_mcp.core.errors import DraftError, DraftNotFoundError
from spec_mcp.core.ids import format_entity_id, parse_entity_id
from spec_mcp.core.schemas import SpecBase, utc_now_iso
from spec_mcp.core.slug import generate_slug
from spec_mcp.core.storage import SpecManager

logger = logging.getLogger(__name__)


class DraftManager:
    """A drafter bound to an entity type and its reserved number."""

    def __init__(
        self,
        entity_type: "EntityType | str",
        number: Optional[int] = None,
        drafter: Optional[EntityDrafter] = None,
    ) -> None:
        self.entity_type = get_info(entity_type).entity_type
        self.number = number
        self.drafter = drafter or EntityDrafter.for_type(self.entity_type)

    @property
    def draft_id(self) -> Optional[str]:
        return format_entity_id(self.entity_type, self.number) if self.number is not None else None

    def progress(self) -> Dict[str, int]:
        """Answered versus total questions, collection and item questions included."""
        questions = self.drafter.all_questions()
        return {"answered": sum(1 for q in questions if q.answer is not None), "total": len(questions)}

    def status(self) -> Dict[str, Any]:
        main = self.drafter.questions
        current = self.drafter.current_question()
        return {
            "draft_id": self.draft_id,
            "type": self.entity_type.value,
            "stage": "complete" if self.drafter.finalized else "in_progress",
            "progress": {"current": sum(1 for q in main if q.answer is not None), "total": len(main)},
            "current_question": (
                {"id": current.id, "prompt": current.question, "type": "text", "optional": current.optional}
                if current is not None
                else None
            ),
            "partial_draft": {q.id: q.answer for q in main if q.answer is not None},
        }

    def build(self) -> Dict[str, Any]:
        if not self.drafter.finalized:
            raise DraftError("Draft has not been finalized yet")
        return dict(self.drafter.data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "draft_id": self.draft_id,
            "type": self.entity_type.value,
            "number": self.number,
            "updated_at": utc_now_iso(),
            "drafter": self.drafter.to_dict(),
        }

    @classmethod
    def from_dict(cls, state: Dict[str, Any]) -> "DraftManager":
        entity_type = EntityType(state["type"])
        drafter = EntityDrafter.from_dict(drafter_config(entity_type), state.get("drafter") or {})
        return cls(entity_type, state.get("number"), drafter)


class DraftStore:
    """Keeps draft sessions keyed by session ID (``<prefix>-NNN``).

    With ``persist`` enabled every save is written next to the entity files
    and ``load_all`` restores sessions after a restart.
    """

    def __init__(self, specs: SpecManager, *, persist: bool = True) -> None:
        self.specs = specs
        self.persist = persist
        self._drafts: Dict[str, DraftManager] = {}
        self._lock = threading.RLock()

    def has(self, session_id: str) -> bool:
        return session_id in self._drafts

    def get(self, session_id: str) -> Optional[DraftManager]:
        return self._drafts.get(session_id)

    def require(self, session_id: str) -> DraftManager:
        manager = self._drafts.get(session_id)
        if manager is None:
            raise DraftNotFoundError(session_id)
        return manager

    def create(self, session_id: str, entity_type: "EntityType | str", number: Optional[int] = None) -> DraftManager:
        with self._lock:
            if session_id in self._drafts:
                raise DraftError(f"Draft already exists for session: {session_id}")
            manager = DraftManager(entity_type, number)
            self._drafts[session_id] = manager
            return manager

    def start(self, entity_type: "EntityType | str") -> DraftManager:
        """Reserve the next number for the type and open a session for it."""
        with self._lock:
            number = self.specs.get_next_number(entity_type)
            session_id = format_entity_id(entity_type, number)
            manager = self.create(session_id, entity_type, number)
            self.save(session_id)
            logger.info("Started draft %s", session_id)
            return manager

    def save(self, session_id: str) -> Optional[Path]:
        manager = self.require(session_id)
        if manager.number is None:
            manager.number = self.specs.get_next_number(manager.entity_type)
        if not self.persist:
            return None
        return self.specs.manager_for(manager.entity_type).save_draft(manager.to_dict(), manager.number)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._drafts.pop(session_id, None) is not None

    def delete_with_file(self, session_id: str) -> bool:
        with self._lock:
            manager = self._drafts.pop(session_id, None)
            number = manager.number if manager else None
            entity_type = manager.entity_type if manager else None
            if manager is None:
                parsed = parse_entity_id(session_id)
                if parsed is not None:
                    number, entity_type = parsed.number, parsed.entity_type
            removed_file = False
            if number is not None and entity_type is not None:
                removed_file = self.specs.manager_for(entity_type).delete_draft(number)
            return manager is not None or removed_file

    def list(self) -> List[Dict[str, Any]]:
        drafts = []
        for session_id, manager in sorted(self._drafts.items()):
            status = manager.status()
            drafts.append(
                {
                    "draft_id": session_id,
                    "type": manager.entity_type.value,
                    "stage": status["stage"],
                    "progress": manager.progress(),
                }
            )
        return drafts

    def load_all(self) -> int:
        """Restore persisted sessions that are not already in memory."""
        loaded = 0
        with self._lock:
            for entity_manager in self.specs.managers():
                for number, state in entity_manager.load_drafts().items():
                    session_id = format_entity_id(entity_manager.entity_type, number)
                    if session_id in self._drafts:
                        continue
                    try:
                        manager = DraftManager.from_dict({**state, "type": entity_manager.entity_type.value})
                    except (KeyError, TypeError, ValueError) as exc:
                        logger.warning("Skipping unreadable draft %s: %s", session_id, exc)
                        continue
                    manager.number = number
                    self._drafts[session_id] = manager
                    loaded += 1
        if loaded:
            logger.info("Restored %d draft(s) from %s", loaded, self.specs.specs_dir)
        return loaded

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def finalize(self, session_id: str, entity_id: Optional[str], data: Dict[str, Any]) -> Dict[str, Any]:
        """Finalize an array item or the whole entity.

        Items are saved back to the draft. Finalizing ``main`` creates the
        entity with the session's reserved number and removes the draft.

        Returns:
            ``{"entity_id": ..., "item": ...}`` for items, or
            ``{"entity_id": "main", "entity": SpecBase}`` for the entity.
        """
        manager = self.require(session_id)
        drafter = manager.drafter
        if entity_id and entity_id != "main":
            item = drafter.finalize_by_entity_id(entity_id, data)
            self.save(session_id)
            return {"entity_id": entity_id, "item": item}

        payload: Dict[str, Any] = {**drafter.prefilled_array_data(), **data}
        payload["type"] = manager.entity_type.value
        if manager.number is None:
            manager.number = self.specs.get_next_number(manager.entity_type)
        payload["number"] = manager.number
        if not payload.get("slug"):
            payload["slug"] = generate_slug(str(payload.get("name", "")))

        finalized = drafter.finalize(payload)
        entity: SpecBase = self.specs.create(manager.entity_type, finalized, number=manager.number)
        self.delete_with_file(session_id)
        logger.info("Finalized draft %s", session_id)
        return {"entity_id": "main", "entity": entity}


_STORES: Dict[str, DraftStore] = {}
_STORES_LOCK = threading.Lock()


def get_draft_store(specs: SpecManager, *, persist: bool = True) -> DraftStore:
    """Process-wide store for a specs directory, restored from disk on first use."""
    key = str(specs.specs_dir.resolve())
    with _STORES_LOCK:
        store = _STORES.get(key)
        if store is None:
            store = DraftStore(specs, persist=persist)
            if persist:
                store.load_all()
            _STORES[key] = store
        else:
            store.specs = specs
        return store


def reset_draft_stores() -> None:
    with _STORES_LOCK:
        _STORES.clear()
