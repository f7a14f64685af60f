"""spec-mcp CLI entry point."""

from pathlib import Path
from typing import Optional

import click

from spec_mcp.cli.commands import drafts, schema_cmd, serve_cmd, specs, validate_cmd
from spec_mcp.cli.logging import configure_cli_logging
from spec_mcp.cli.registry import CLIContext, set_context
from spec_mcp.config.server import ServerConfig, _PACKAGE_VERSION


@click.group("spec-mcp")
@click.option(
    "--specs-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="SPEC_MCP_SPECS_DIR",
    help="Specs directory (defaults to ./specs).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log to stderr.")
@click.version_option(_PACKAGE_VERSION, prog_name="spec-mcp")
@click.pass_context
def cli(ctx: click.Context, specs_dir: Optional[Path], verbose: bool) -> None:
    """Manage structured specs (BRDs, PRDs, plans, decisions, ...) from the shell."""
    configure_cli_logging(verbose)
    set_context(ctx, CLIContext(config=ServerConfig.from_env(), specs_dir=specs_dir))


cli.add_command(specs)
cli.add_command(drafts)
cli.add_command(validate_cmd)
cli.add_command(schema_cmd)
cli.add_command(serve_cmd)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
