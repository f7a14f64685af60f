"""spec-mcp: an MCP server for structured, versioned software specs."""

from spec_mcp.config.server import _PACKAGE_VERSION

__version__ = _PACKAGE_VERSION

__all__ = ["__version__"]
