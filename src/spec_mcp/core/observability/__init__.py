"""
Observability utilities for spec-mcp.

Provides metrics collection and audit logging for MCP tools and resources.

FastMCP integration:

    from mcp.server.fastmcp import FastMCP
    from spec_mcp.core.observability import mcp_tool, audit_log

    mcp = FastMCP("spec-mcp")

    @mcp.tool()
    @mcp_tool(tool_name="spec")
    def spec(action: str, spec_id: str | None = None) -> dict:
        audit_log("tool_invocation", tool="spec", action=action)
        ...
"""

from spec_mcp.core.observability.audit import (
    AuditEvent,
    AuditEventType,
    AuditLogger,
    audit_log,
    get_audit_logger,
)
from spec_mcp.core.observability.decorators import (
    mcp_resource,
    mcp_tool,
)
from spec_mcp.core.observability.metrics import (
    Metric,
    MetricsCollector,
    MetricType,
    get_metrics,
)

__all__ = [
    # Metrics
    "Metric",
    "MetricType",
    "MetricsCollector",
    "get_metrics",
    # Audit
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
    "audit_log",
    "get_audit_logger",
    # Decorators
    "mcp_resource",
    "mcp_tool",
]
