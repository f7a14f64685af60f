"""Unified draft router. Handler logic lives in ``draft_handlers``.

The dispatch function is defined here so tests can patch
``draft._DRAFT_ROUTER`` and have it take effect.
"""

from __future__ import annotations

from typing import Any, Dict

from spec_mcp.config.server import ServerConfig
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.draft_handlers import (  # noqa: F401
    _DRAFT_ROUTER,
    register_unified_draft_tool,
)


def _dispatch_draft_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_DRAFT_ROUTER, "draft", action, config=config, **payload)


__all__ = [
    "register_unified_draft_tool",
]
