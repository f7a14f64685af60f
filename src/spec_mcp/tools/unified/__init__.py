"""Unified action-router tools.

Each tool is a single MCP tool taking an ``action`` argument; the
per-tool handler packages hold the action implementations.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

from mcp.server.fastmcp import FastMCP

from spec_mcp.config.server import ServerConfig
from spec_mcp.tools.unified.draft import register_unified_draft_tool
from spec_mcp.tools.unified.item import register_unified_item_tool
from spec_mcp.tools.unified.spec import register_unified_spec_tool
from spec_mcp.tools.unified.task import register_unified_task_tool
from spec_mcp.tools.unified.validate import register_unified_validate_tool

logger = logging.getLogger(__name__)

_TOOL_REGISTRARS: Dict[str, Callable[[FastMCP, ServerConfig], None]] = {
    "spec": register_unified_spec_tool,
    "item": register_unified_item_tool,
    "task": register_unified_task_tool,
    "draft": register_unified_draft_tool,
    "validate": register_unified_validate_tool,
}


def register_unified_tools(mcp: FastMCP, config: ServerConfig) -> List[str]:
    """Register every unified tool not listed in ``config.disabled_tools``.

    Returns:
        Names of the registered tools, in registration order.
    """
    disabled = {name.strip().lower() for name in config.disabled_tools}
    unknown = sorted(disabled - set(_TOOL_REGISTRARS))
    if unknown:
        logger.warning("Ignoring unknown disabled tools: %s", ", ".join(unknown))

    registered: List[str] = []
    for name, register in _TOOL_REGISTRARS.items():
        if name in disabled:
            logger.info("Tool '%s' disabled by configuration", name)
            continue
        register(mcp, config)
        registered.append(name)
    return registered


__all__ = [
    "register_unified_tools",
]
