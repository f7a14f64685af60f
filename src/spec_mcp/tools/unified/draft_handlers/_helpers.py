"""Shared helpers for draft handler modules."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.drafts import DraftManager, DraftStore, get_draft_store
from spec_mcp.core.observability import get_metrics
from spec_mcp.tools.unified.common import (
    build_request_id,
    make_metric_name,
    open_spec_manager,
    resolve_specs_dir,
)

logger = logging.getLogger(__name__)
_metrics = get_metrics()

_ACTION_SUMMARY = {
    "start": "Open a guided draft for an entity type",
    "answer": "Answer the current (or a specific) draft question",
    "skip": "Skip an optional draft question",
    "continue": "Return the next step of a draft",
    "finalize": "Finalize a drafted array item or the whole entity",
    "status": "Show the progress of a draft",
    "list": "List open drafts",
    "delete": "Discard a draft and its file",
}


def _metric_name(action: str) -> str:
    return make_metric_name("unified_tools.draft", action)


def _request_id() -> str:
    return build_request_id("draft")


def _open_store(config: ServerConfig, path: Optional[str]) -> Tuple[Optional[DraftStore], Optional[dict]]:
    specs_dir, err = resolve_specs_dir(config, path)
    if err:
        return None, err
    assert specs_dir is not None
    specs = open_spec_manager(config, specs_dir)
    return get_draft_store(specs, persist=bool(getattr(config, "persist_drafts", True))), None


def _step(manager: DraftManager) -> Dict[str, Any]:
    """Progress plus what the caller should do next."""
    return {
        "draft_id": manager.draft_id,
        "type": manager.entity_type.value,
        "progress": manager.progress(),
        **manager.drafter.continue_context(),
    }
