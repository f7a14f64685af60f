"""Draft commands: list, delete."""

import click

from spec_mcp.cli.logging import cli_command
from spec_mcp.cli.output import emit_response
from spec_mcp.cli.registry import get_context
from spec_mcp.tools.unified.draft import _dispatch_draft_action


@click.group("drafts")
def drafts() -> None:
    """Inspect and discard in-progress drafts."""
    pass


@drafts.command("list")
@click.pass_context
@cli_command("drafts-list")
def list_cmd(ctx: click.Context) -> None:
    """List open drafts with their progress."""
    config = get_context(ctx).config
    emit_response(_dispatch_draft_action(action="list", payload={}, config=config))


@drafts.command("delete")
@click.argument("draft_id")
@click.pass_context
@cli_command("drafts-delete")
def delete_cmd(ctx: click.Context, draft_id: str) -> None:
    """Discard DRAFT_ID (e.g. pln-004) and its draft file."""
    config = get_context(ctx).config
    emit_response(_dispatch_draft_action(action="delete", payload={"draft_id": draft_id}, config=config))
