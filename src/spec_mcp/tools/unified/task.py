"""Unified task router. Handler logic lives in ``task_handlers``.

The dispatch function is defined here so tests can patch
``task._TASK_ROUTER`` and have it take effect.
"""

from __future__ import annotations

from typing import Any, Dict

from spec_mcp.config.server import ServerConfig
from spec_mcp.tools.unified.common import dispatch_with_standard_errors
from spec_mcp.tools.unified.task_handlers import (  # noqa: F401
    _TASK_ROUTER,
    register_unified_task_tool,
)


def _dispatch_task_action(*, action: str, payload: Dict[str, Any], config: ServerConfig) -> dict:
    return dispatch_with_standard_errors(_TASK_ROUTER, "task", action, config=config, **payload)


__all__ = [
    "register_unified_task_tool",
]
