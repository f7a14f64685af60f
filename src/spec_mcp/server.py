"""spec-mcp MCP server.

Builds a FastMCP instance with the unified tools and spec resources, and
runs it over stdio.
"""

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from spec_mcp.config.server import ServerConfig, get_config
from spec_mcp.resources import register_guide_resources, register_spec_resources
from spec_mcp.tools.unified import register_unified_tools

logger = logging.getLogger(__name__)


def create_server(config: Optional[ServerConfig] = None) -> FastMCP:
    """
    Create and configure the MCP server.

    Args:
        config: Server configuration (uses the global config if None)

    Returns:
        Configured FastMCP server instance
    """
    if config is None:
        config = get_config()

    config.setup_logging()
    for warning in config.startup_warnings:
        logger.warning(warning)

    mcp = FastMCP(name=config.server_name)

    tools = register_unified_tools(mcp, config)
    register_spec_resources(mcp, config)
    register_guide_resources(mcp)

    logger.info(
        "Server %s %s ready (specs_dir=%s, tools=%s)",
        config.server_name,
        config.server_version,
        config.get_specs_dir(),
        ",".join(tools),
    )
    return mcp


def main() -> None:
    """Run the server over stdio."""
    mcp = create_server()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
