"""Unified spec router: entity CRUD and queries."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.naming import canonical_tool
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.router import ActionDefinition, ActionRouter
from spec_mcp.tools.unified.spec_handlers._helpers import _ACTION_SUMMARY
from spec_mcp.tools.unified.spec_handlers.handlers_crud import (
    _handle_create,
    _handle_delete,
    _handle_get,
    _handle_update,
)
from spec_mcp.tools.unified.spec_handlers.handlers_query import (
    _handle_list,
    _handle_next_number,
    _handle_query,
)

logger = logging.getLogger(__name__)

_SPEC_ROUTER = ActionRouter(
    tool_name="spec",
    actions=[
        ActionDefinition(name="get", handler=_handle_get, summary=_ACTION_SUMMARY["get"]),
        ActionDefinition(name="create", handler=_handle_create, summary=_ACTION_SUMMARY["create"]),
        ActionDefinition(name="update", handler=_handle_update, summary=_ACTION_SUMMARY["update"]),
        ActionDefinition(name="delete", handler=_handle_delete, summary=_ACTION_SUMMARY["delete"]),
        ActionDefinition(name="list", handler=_handle_list, summary=_ACTION_SUMMARY["list"]),
        ActionDefinition(name="query", handler=_handle_query, summary=_ACTION_SUMMARY["query"]),
        ActionDefinition(
            name="next-number",
            handler=_handle_next_number,
            summary=_ACTION_SUMMARY["next-number"],
            aliases=("next_number",),
        ),
    ],
)


def _dispatch_spec_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_SPEC_ROUTER, "spec", action, config=config, **payload)


def register_unified_spec_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated spec tool."""

    @canonical_tool(mcp, canonical_name="spec")
    def spec(
        action: str,
        spec_id: Optional[str] = None,
        type: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        updates: Optional[Dict[str, Any]] = None,
        types: Optional[List[str]] = None,
        ids: Optional[List[str]] = None,
        priority: Optional[List[str]] = None,
        task_status: Optional[List[str]] = None,
        search: Optional[str] = None,
        has_tasks: Optional[bool] = None,
        sort_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        path: Optional[str] = None,
    ) -> dict:
        """Manage spec entities (get|create|update|delete|list|query|next-number).

        Entity types: business-requirement, technical-requirement, plan,
        component, decision, constitution, milestone. IDs may be given in
        full (pln-001-auth-flow) or short (pln-001) form.
        """
        payload = {k: v for k, v in locals().items() if k not in ("action", "config")}
        return _dispatch_spec_action(action=action, payload=payload, config=config)

    logger.debug("Registered unified spec tool")


__all__ = [
    "register_unified_spec_tool",
]
