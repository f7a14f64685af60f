"""Unified task router: plan task lifecycle and progress."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.naming import canonical_tool
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.router import ActionDefinition, ActionRouter
from spec_mcp.tools.unified.task_handlers._helpers import _ACTION_SUMMARY
from spec_mcp.tools.unified.task_handlers.handlers_lifecycle import (
    _handle_block,
    _handle_complete,
    _handle_start,
    _handle_unblock,
    _handle_verify,
)
from spec_mcp.tools.unified.task_handlers.handlers_query import (
    _handle_next,
    _handle_progress,
)

logger = logging.getLogger(__name__)

_ACTION_DEFINITIONS = [
    ActionDefinition(name="start", handler=_handle_start, summary=_ACTION_SUMMARY["start"]),
    ActionDefinition(name="complete", handler=_handle_complete, summary=_ACTION_SUMMARY["complete"]),
    ActionDefinition(name="verify", handler=_handle_verify, summary=_ACTION_SUMMARY["verify"]),
    ActionDefinition(name="block", handler=_handle_block, summary=_ACTION_SUMMARY["block"]),
    ActionDefinition(name="unblock", handler=_handle_unblock, summary=_ACTION_SUMMARY["unblock"]),
    ActionDefinition(name="progress", handler=_handle_progress, summary=_ACTION_SUMMARY["progress"]),
    ActionDefinition(name="next", handler=_handle_next, summary=_ACTION_SUMMARY["next"]),
]

_TASK_ROUTER = ActionRouter(tool_name="task", actions=_ACTION_DEFINITIONS)


def _dispatch_task_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_TASK_ROUTER, "task", action, config=config, **payload)


def register_unified_task_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated task tool."""

    @canonical_tool(mcp, canonical_name="task")
    def task(
        action: str,
        spec_id: Optional[str] = None,
        task_id: Optional[str] = None,
        note: Optional[str] = None,
        reason: Optional[str] = None,
        blocked_by: Optional[List[str]] = None,
        external_dependency: Optional[str] = None,
        limit: Optional[int] = None,
        path: Optional[str] = None,
    ) -> dict:
        """Drive plan tasks (start|complete|verify|block|unblock|progress|next).

        Tasks move not-started -> in-progress -> completed -> verified. A
        task cannot start while a dependency is unfinished or a blocker is
        unresolved.
        """
        payload = {k: v for k, v in locals().items() if k not in ("action", "config")}
        return _dispatch_task_action(action=action, payload=payload, config=config)

    logger.debug("Registered unified task tool")


__all__ = [
    "register_unified_task_tool",
]
