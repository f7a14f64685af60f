"""Shared helpers for unified tool routers.

Consolidates per-router boilerplate (request IDs, metric names, validation
errors, specs-dir resolution, dispatch error handling) into parameterised
functions that each router calls with its own tool name.

Imports only from ``spec_mcp.core`` and the standard library.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from spec_mcp.core.context import (
    generate_correlation_id,
    get_correlation_id,
)
from spec_mcp.core.errors import SpecMcpError, error_to_response
from spec_mcp.core.errors.execution import ActionRouterError
from spec_mcp.core.responses.builders import error_response
from spec_mcp.core.responses.errors_generic import not_found_error
from spec_mcp.core.responses.types import (
    ErrorCode,
    ErrorType,
)
from spec_mcp.core.storage import SpecManager
from spec_mcp.tools.unified.router import ActionRouter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 1. Request ID
# ---------------------------------------------------------------------------


def build_request_id(tool_name: str) -> str:
    """Return an existing correlation ID or generate one with *tool_name* prefix."""
    return get_correlation_id() or generate_correlation_id(prefix=tool_name)


# ---------------------------------------------------------------------------
# 2. Metric name
# ---------------------------------------------------------------------------


def make_metric_name(prefix: str, action: str) -> str:
    """Build a dot-separated metric key, normalising hyphens to underscores.

    Examples::

        make_metric_name("unified_tools.item", "add-simple") -> "unified_tools.item.add_simple"
        make_metric_name("unified_tools.spec", "get")        -> "unified_tools.spec.get"
    """
    return f"{prefix}.{action.replace('-', '_')}"


# ---------------------------------------------------------------------------
# 3. Specs-dir resolution
# ---------------------------------------------------------------------------


def resolve_specs_dir(
    config: Any,
    path: Optional[str] = None,
) -> Tuple[Optional[Path], Optional[dict]]:
    """Resolve the specs directory from *config* and an optional override.

    Returns ``(specs_dir, None)`` on success or ``(None, error_dict)`` on
    failure so callers can short-circuit with a ready-made error envelope.
    """
    if path:
        specs_dir = Path(path).expanduser()
    else:
        candidate = getattr(config, "specs_dir", None)
        if isinstance(candidate, Path):
            specs_dir = candidate
        elif isinstance(candidate, str) and candidate.strip():
            specs_dir = Path(candidate)
        else:
            specs_dir = Path("./specs")

    auto_create = bool(getattr(config, "auto_create_folders", True))
    if not specs_dir.is_dir() and not auto_create:
        return None, asdict(
            not_found_error(
                "Specs directory",
                str(specs_dir),
                remediation="Set SPEC_MCP_SPECS_DIR or enable auto_create_folders",
            )
        )

    return specs_dir, None


def open_spec_manager(config: Any, specs_dir: Path) -> SpecManager:
    return SpecManager(specs_dir, auto_create_folders=bool(getattr(config, "auto_create_folders", True)))


def domain_error_response(exc: SpecMcpError, *, request_id: Optional[str] = None) -> dict:
    """Envelope for a domain error raised inside a handler."""
    response = error_to_response(exc, request_id=request_id)
    if response is not None:
        return response
    return asdict(
        error_response(
            str(exc),
            error_code=ErrorCode.OPERATION_FAILED,
            error_type=ErrorType.CONFLICT,
            details=exc.details or None,
            request_id=request_id,
        )
    )


# ---------------------------------------------------------------------------
# 4. Dispatch with standard errors
# ---------------------------------------------------------------------------


def dispatch_with_standard_errors(
    router: ActionRouter,
    tool_name: str,
    action: str,
    /,
    *,
    request_id: Optional[str] = None,
    include_details_in_router_error: bool = False,
    **kwargs: Any,
) -> dict:
    """Dispatch *action* through *router*, converting exceptions to envelopes.

    Unknown actions produce a VALIDATION_ERROR listing the allowed actions.
    Domain errors that escape a handler are mapped through
    ``error_to_response``; anything else becomes INTERNAL_ERROR.
    """
    allowed = router.allowed_actions()
    action_lower = action.lower() if action else ""

    if not any(a.lower() == action_lower for a in router.allowed_actions(include_aliases=True)):
        rid = request_id or build_request_id(tool_name)
        allowed_str = ", ".join(sorted(allowed))
        details: Optional[Dict[str, Any]] = None
        if include_details_in_router_error:
            details = {"action": action, "allowed_actions": list(allowed)}
        return asdict(
            error_response(
                f"Unsupported {tool_name} action '{action}'. Allowed actions: {allowed_str}",
                error_code=ErrorCode.VALIDATION_ERROR,
                error_type=ErrorType.VALIDATION,
                remediation=f"Use one of: {allowed_str}",
                request_id=rid,
                details=details,
            )
        )

    try:
        return router.dispatch(action=action, **kwargs)
    except ActionRouterError as exc:
        rid = request_id or build_request_id(tool_name)
        allowed_str = ", ".join(exc.allowed_actions)
        details = None
        if include_details_in_router_error:
            details = {"action": action, "allowed_actions": list(exc.allowed_actions)}
        return asdict(
            error_response(
                f"Unsupported {tool_name} action '{action}'. Allowed actions: {allowed_str}",
                error_code=ErrorCode.VALIDATION_ERROR,
                error_type=ErrorType.VALIDATION,
                remediation=f"Use one of: {allowed_str}",
                request_id=rid,
                details=details,
            )
        )
    except Exception as exc:
        mapped = error_to_response(exc, request_id=request_id or build_request_id(tool_name))
        if mapped is not None:
            logger.warning("%s action '%s' failed: %s", tool_name.capitalize(), action, exc)
            return mapped
        logger.exception(
            "%s action '%s' failed with unexpected error: %s",
            tool_name.capitalize(),
            action,
            exc,
        )
        error_msg = str(exc) if str(exc) else exc.__class__.__name__
        return asdict(
            error_response(
                f"{tool_name.capitalize()} action '{action}' failed: {error_msg}",
                error_code=ErrorCode.INTERNAL_ERROR,
                error_type=ErrorType.INTERNAL,
                remediation="Check configuration and logs for details.",
                details={"action": action, "error_type": exc.__class__.__name__},
            )
        )


# ---------------------------------------------------------------------------
# 5. Validation error factory
# ---------------------------------------------------------------------------


def make_validation_error_fn(
    tool_name: str,
    *,
    include_request_id: bool = True,
    default_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
) -> Callable[..., dict]:
    """Return a validation-error builder pre-bound to *tool_name*.

    The returned callable has the signature::

        validation_error(
            *,
            field: str,
            action: str,
            message: str,
            request_id: str | None = None,
            code: ErrorCode = ErrorCode.VALIDATION_ERROR,
            remediation: str | None = None,
        ) -> dict
    """

    def _validation_error(
        *,
        field: str,
        action: str,
        message: str,
        request_id: Optional[str] = None,
        code: ErrorCode = default_code,
        remediation: Optional[str] = None,
    ) -> dict:
        effective_remediation = remediation or f"Provide a valid '{field}' value"
        rid = request_id
        if rid is None and include_request_id:
            rid = build_request_id(tool_name)
        return asdict(
            error_response(
                f"Invalid field '{field}' for {tool_name}.{action}: {message}",
                error_code=code,
                error_type=ErrorType.VALIDATION,
                remediation=effective_remediation,
                details={"field": field, "action": f"{tool_name}.{action}"},
                request_id=rid,
            )
        )

    return _validation_error
