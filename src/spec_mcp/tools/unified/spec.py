"""Unified spec router. Handler logic lives in ``spec_handlers``.

The dispatch function is defined here so tests can patch
``spec._SPEC_ROUTER`` and have it take effect.
"""

from __future__ import annotations

from typing import Any, Dict

from spec_mcp.config.server import ServerConfig
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.spec_handlers import (  # noqa: F401
    _SPEC_ROUTER,
    register_unified_spec_tool,
)


def _dispatch_spec_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_SPEC_ROUTER, "spec", action, config=config, **payload)


__all__ = [
    "register_unified_spec_tool",
]
