"""Unified item router. Handler logic lives in ``item_handlers``.

The dispatch function is defined here so tests can patch
``item._ITEM_ROUTER`` and have it take effect.
"""

from __future__ import annotations

from typing import Any, Dict

from spec_mcp.config.server import ServerConfig
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.item_handlers import (  # noqa: F401
    _ITEM_ROUTER,
    register_unified_item_tool,
)


def _dispatch_item_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_ITEM_ROUTER, "item", action, config=config, **payload)


__all__ = [
    "register_unified_item_tool",
]
