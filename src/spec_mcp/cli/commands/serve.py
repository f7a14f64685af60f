"""Serve command: run the MCP server over stdio."""

import click

from spec_mcp.cli.logging import cli_command
from spec_mcp.cli.registry import get_context
from spec_mcp.server import create_server


@click.command("serve")
@click.pass_context
@cli_command("serve")
def serve_cmd(ctx: click.Context) -> None:
    """Run the spec-mcp MCP server over stdio."""
    create_server(get_context(ctx).config).run(transport="stdio")
