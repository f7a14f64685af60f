"""MCP tool and resource decorators with observability.

@mcp_tool and @mcp_resource add timing, metrics and audit entries around
FastMCP handlers.
"""

import asyncio
import functools
import time
from typing import Any, Callable, Optional, TypeVar

from spec_mcp.core.context import (
    generate_correlation_id,
    get_correlation_id,
    sync_request_context,
)
from spec_mcp.core.observability.audit import _audit
from spec_mcp.core.observability.metrics import _metrics

T = TypeVar("T")


def _record_tool_outcome(
    name: str,
    corr_id: str,
    success: bool,
    duration_ms: float,
    error_msg: Optional[str],
    emit_metrics: bool,
    audit: bool,
    action: Optional[str],
) -> None:
    if emit_metrics:
        labels = {"tool": name, "status": "success" if success else "error"}
        if action:
            labels["action"] = action
        _metrics.counter("tool.invocations", labels=labels)
        _metrics.timer("tool.latency", duration_ms, labels={"tool": name})

    if audit:
        _audit.tool_invocation(
            tool_name=name,
            success=success,
            duration_ms=round(duration_ms, 2),
            error=error_msg,
            action=action,
            correlation_id=corr_id,
        )


def mcp_tool(
    tool_name: Optional[str] = None, emit_metrics: bool = True, audit: bool = True
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for MCP tool handlers with observability.

    Automatically:
    - Establishes a correlation ID for the invocation
    - Emits latency and status metrics
    - Creates audit log entries

    Args:
        tool_name: Override tool name (defaults to function name)
        emit_metrics: Whether to emit metrics
        audit: Whether to create audit log entries
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = tool_name or func.__name__

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            corr_id = get_correlation_id() or generate_correlation_id(prefix="tool")
            with sync_request_context(correlation_id=corr_id):
                start = time.perf_counter()
                success = True
                error_msg = None
                try:
                    return await func(*args, **kwargs)  # type: ignore[misc]
                except Exception as e:
                    success = False
                    error_msg = str(e)
                    raise
                finally:
                    duration_ms = (time.perf_counter() - start) * 1000
                    action = kwargs.get("action") if isinstance(kwargs.get("action"), str) else None
                    _record_tool_outcome(name, corr_id, success, duration_ms, error_msg, emit_metrics, audit, action)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            corr_id = get_correlation_id() or generate_correlation_id(prefix="tool")
            with sync_request_context(correlation_id=corr_id):
                start = time.perf_counter()
                success = True
                error_msg = None
                try:
                    result = func(*args, **kwargs)
                    # Router tools report failures in the envelope rather than raising
                    if isinstance(result, dict) and result.get("success") is False:
                        success = False
                        error_msg = result.get("error")
                    return result
                except Exception as e:
                    success = False
                    error_msg = str(e)
                    raise
                finally:
                    duration_ms = (time.perf_counter() - start) * 1000
                    action = kwargs.get("action") if isinstance(kwargs.get("action"), str) else None
                    _record_tool_outcome(name, corr_id, success, duration_ms, error_msg, emit_metrics, audit, action)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper

    return decorator


def mcp_resource(
    resource_type: Optional[str] = None, emit_metrics: bool = True, audit: bool = True
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for MCP resource handlers with observability.

    Args:
        resource_type: Type of resource (e.g., "schema", "spec")
        emit_metrics: Whether to emit metrics
        audit: Whether to create audit log entries
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        rtype = resource_type or "resource"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.perf_counter()
            success = True
            error_msg = None
            resource_id = kwargs.get("spec_id") or kwargs.get("entity_type") or kwargs.get("name") or "unknown"

            try:
                return func(*args, **kwargs)
            except Exception as e:
                success = False
                error_msg = str(e)
                raise
            finally:
                duration_ms = (time.perf_counter() - start) * 1000

                if emit_metrics:
                    labels = {
                        "resource_type": rtype,
                        "status": "success" if success else "error",
                    }
                    _metrics.counter("resource.access", labels=labels)
                    _metrics.timer("resource.latency", duration_ms, labels={"resource_type": rtype})

                if audit:
                    _audit.resource_access(
                        resource_type=rtype,
                        resource_id=str(resource_id),
                        action="read",
                        success=success,
                        duration_ms=round(duration_ms, 2),
                        error=error_msg,
                    )

        return wrapper

    return decorator
