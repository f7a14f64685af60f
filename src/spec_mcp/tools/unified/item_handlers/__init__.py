"""Unified item router: versioned edits of array items inside an entity."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.naming import canonical_tool
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.item_handlers._helpers import _ACTION_SUMMARY
from spec_mcp.tools.unified.item_handlers.handlers_items import (
    _handle_add,
    _handle_get,
    _handle_history,
    _handle_remove,
    _handle_supersede,
)
from spec_mcp.tools.unified.item_handlers.handlers_simple import (
    _handle_add_simple,
    _handle_remove_simple,
)
from spec_mcp.tools.unified.router import ActionDefinition, ActionRouter

logger = logging.getLogger(__name__)

_ACTION_DEFINITIONS = [
    ActionDefinition(name="add", handler=_handle_add, summary=_ACTION_SUMMARY["add"]),
    ActionDefinition(name="supersede", handler=_handle_supersede, summary=_ACTION_SUMMARY["supersede"]),
    ActionDefinition(name="remove", handler=_handle_remove, summary=_ACTION_SUMMARY["remove"]),
    ActionDefinition(name="get", handler=_handle_get, summary=_ACTION_SUMMARY["get"]),
    ActionDefinition(name="history", handler=_handle_history, summary=_ACTION_SUMMARY["history"]),
    ActionDefinition(
        name="add-simple", handler=_handle_add_simple, summary=_ACTION_SUMMARY["add-simple"], aliases=("add_simple",)
    ),
    ActionDefinition(
        name="remove-simple",
        handler=_handle_remove_simple,
        summary=_ACTION_SUMMARY["remove-simple"],
        aliases=("remove_simple",),
    ),
]

_ITEM_ROUTER = ActionRouter(tool_name="item", actions=_ACTION_DEFINITIONS)


def _dispatch_item_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_ITEM_ROUTER, "item", action, config=config, **payload)


def register_unified_item_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated item tool."""

    @canonical_tool(mcp, canonical_name="item")
    def item(
        action: str,
        spec_id: Optional[str] = None,
        field: Optional[str] = None,
        item_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        supersede_id: Optional[str] = None,
        value: Optional[Any] = None,
        index: Optional[int] = None,
        path: Optional[str] = None,
    ) -> dict:
        """Edit array items of an entity (add|supersede|remove|get|history|add-simple|remove-simple).

        Items with IDs (tasks, criteria, flows, test_cases, api_contracts,
        data_models, articles) are versioned: supersede appends a new item
        and links it to the old one. Arrays without IDs (references, scope,
        tech_stack, consequences, ...) use add-simple and remove-simple.
        """
        payload = {k: v for k, v in locals().items() if k not in ("action", "config")}
        return _dispatch_item_action(action=action, payload=payload, config=config)

    logger.debug("Registered unified item tool")


__all__ = [
    "register_unified_item_tool",
]
