"""Unified validate router. Handler logic lives in ``validate_handlers``.

The dispatch function is defined here so tests can patch
``validate._VALIDATE_ROUTER`` and have it take effect.
"""

from __future__ import annotations

from typing import Any, Dict

from spec_mcp.config.server import ServerConfig
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.validate_handlers import (  # noqa: F401
    _VALIDATE_ROUTER,
    register_unified_validate_tool,
)


def _dispatch_validate_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_VALIDATE_ROUTER, "validate", action, config=config, **payload)


__all__ = [
    "register_unified_validate_tool",
]
