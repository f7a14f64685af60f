"""MCP tool registration for spec-mcp."""

from spec_mcp.tools.unified import register_unified_tools

__all__ = ["register_unified_tools"]
