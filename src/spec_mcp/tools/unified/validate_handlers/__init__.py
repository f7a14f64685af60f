"""Unified validate router: schema, reference and file checks."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.naming import canonical_tool
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.router import ActionDefinition, ActionRouter
from spec_mcp.tools.unified.validate_handlers._helpers import _ACTION_SUMMARY
from spec_mcp.tools.unified.validate_handlers.handlers_entity import _handle_all, _handle_entity
from spec_mcp.tools.unified.validate_handlers.handlers_references import (
    _handle_references,
    _handle_suggest,
    _handle_warnings,
)

logger = logging.getLogger(__name__)

_ACTION_DEFINITIONS = [
    ActionDefinition(name="entity", handler=_handle_entity, summary=_ACTION_SUMMARY["entity"]),
    ActionDefinition(name="all", handler=_handle_all, summary=_ACTION_SUMMARY["all"]),
    ActionDefinition(name="references", handler=_handle_references, summary=_ACTION_SUMMARY["references"]),
    ActionDefinition(name="warnings", handler=_handle_warnings, summary=_ACTION_SUMMARY["warnings"]),
    ActionDefinition(name="suggest", handler=_handle_suggest, summary=_ACTION_SUMMARY["suggest"]),
]

_VALIDATE_ROUTER = ActionRouter(tool_name="validate", actions=_ACTION_DEFINITIONS)


def _dispatch_validate_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_VALIDATE_ROUTER, "validate", action, config=config, **payload)


def register_unified_validate_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated validate tool."""

    @canonical_tool(mcp, canonical_name="validate")
    def validate(
        action: str,
        spec_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        type: Optional[str] = None,
        references: Optional[bool] = None,
        check_cycles: Optional[bool] = None,
        check_orphans: Optional[bool] = None,
        broken_id: Optional[str] = None,
        path: Optional[str] = None,
    ) -> dict:
        """Validate specs (entity|all|references|warnings|suggest).

        Validation findings are returned as data with a ``valid`` flag;
        only bad parameters or missing entities produce error responses.
        """
        payload = {k: v for k, v in locals().items() if k not in ("action", "config")}
        return _dispatch_validate_action(action=action, payload=payload, config=config)

    logger.debug("Registered unified validate tool")


__all__ = [
    "register_unified_validate_tool",
]
