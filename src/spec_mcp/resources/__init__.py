"""MCP resources exposed by spec-mcp."""

from spec_mcp.resources.guides import register_guide_resources
from spec_mcp.resources.specs import register_spec_resources

__all__ = ["register_guide_resources", "register_spec_resources"]
