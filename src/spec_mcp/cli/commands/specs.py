"""Spec commands: list, get, delete, next-number."""

from typing import Optional

import click

from spec_mcp.cli.logging import cli_command, get_cli_logger
from spec_mcp.cli.output import emit_response
from spec_mcp.cli.registry import get_context
from spec_mcp.tools.unified.spec import _dispatch_spec_action

logger = get_cli_logger()


def _run(ctx: click.Context, action: str, **payload) -> None:
    cli_ctx = get_context(ctx)
    emit_response(_dispatch_spec_action(action=action, payload=payload, config=cli_ctx.config))


@click.group("specs")
def specs() -> None:
    """Read and manage stored specs."""
    pass


@specs.command("list")
@click.option("--type", "entity_type", help="Only list one entity type (brd, prd, plan, ...).")
@click.pass_context
@cli_command("specs-list")
def list_cmd(ctx: click.Context, entity_type: Optional[str]) -> None:
    """List stored specs."""
    _run(ctx, "list", type=entity_type)


@specs.command("get")
@click.argument("spec_id")
@click.pass_context
@cli_command("specs-get")
def get_cmd(ctx: click.Context, spec_id: str) -> None:
    """Show SPEC_ID (full ID like pln-001-auth or short ID like pln-001)."""
    _run(ctx, "get", spec_id=spec_id)


@specs.command("delete")
@click.argument("spec_id")
@click.confirmation_option(prompt="Delete this spec file?")
@click.pass_context
@cli_command("specs-delete")
def delete_cmd(ctx: click.Context, spec_id: str) -> None:
    """Delete the file of SPEC_ID."""
    logger.info("Deleting %s", spec_id)
    _run(ctx, "delete", spec_id=spec_id)


@specs.command("next-number")
@click.argument("entity_type")
@click.pass_context
@cli_command("specs-next-number")
def next_number_cmd(ctx: click.Context, entity_type: str) -> None:
    """Preview the next free number for ENTITY_TYPE."""
    _run(ctx, "next-number", type=entity_type)
