"""Unified draft router: guided Q&A drafting of new entities."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.naming import canonical_tool
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.draft_handlers._helpers import _ACTION_SUMMARY
from spec_mcp.tools.unified.draft_handlers.handlers_finalize import _handle_finalize
from spec_mcp.tools.unified.draft_handlers.handlers_session import (
    _handle_answer,
    _handle_continue,
    _handle_delete,
    _handle_list,
    _handle_skip,
    _handle_start,
    _handle_status,
)
from spec_mcp.tools.unified.router import ActionDefinition, ActionRouter

logger = logging.getLogger(__name__)

_ACTION_DEFINITIONS = [
    ActionDefinition(name="start", handler=_handle_start, summary=_ACTION_SUMMARY["start"]),
    ActionDefinition(name="answer", handler=_handle_answer, summary=_ACTION_SUMMARY["answer"]),
    ActionDefinition(name="skip", handler=_handle_skip, summary=_ACTION_SUMMARY["skip"]),
    ActionDefinition(name="continue", handler=_handle_continue, summary=_ACTION_SUMMARY["continue"]),
    ActionDefinition(name="finalize", handler=_handle_finalize, summary=_ACTION_SUMMARY["finalize"]),
    ActionDefinition(name="status", handler=_handle_status, summary=_ACTION_SUMMARY["status"]),
    ActionDefinition(name="list", handler=_handle_list, summary=_ACTION_SUMMARY["list"]),
    ActionDefinition(name="delete", handler=_handle_delete, summary=_ACTION_SUMMARY["delete"]),
]

_DRAFT_ROUTER = ActionRouter(tool_name="draft", actions=_ACTION_DEFINITIONS)


def _dispatch_draft_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_DRAFT_ROUTER, "draft", action, config=config, **payload)


def register_unified_draft_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated draft tool."""

    @canonical_tool(mcp, canonical_name="draft")
    def draft(
        action: str,
        type: Optional[str] = None,
        draft_id: Optional[str] = None,
        question_id: Optional[str] = None,
        answer: Optional[str] = None,
        entity_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        path: Optional[str] = None,
    ) -> dict:
        """Draft a new entity step by step (start|answer|skip|continue|finalize|status|list|delete).

        Answer each question in turn; list questions take comma-separated
        values and open per-item questions. When every question is answered,
        finalize each item (entity_id 'tasks[0]', ...) and then the entity
        itself (entity_id 'main').
        """
        payload = {k: v for k, v in locals().items() if k not in ("action", "config")}
        return _dispatch_draft_action(action=action, payload=payload, config=config)

    logger.debug("Registered unified draft tool")


__all__ = [
    "register_unified_draft_tool",
]
