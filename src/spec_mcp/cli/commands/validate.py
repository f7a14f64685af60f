"""Validate command."""

import sys
import time
from typing import Optional

import click

from spec_mcp.cli.logging import cli_command
from spec_mcp.cli.output import emit_response
from spec_mcp.cli.registry import get_context
from spec_mcp.tools.unified.validate import _dispatch_validate_action


@click.command("validate")
@click.option("--type", "entity_type", help="Only validate one entity type.")
@click.option("--id", "spec_id", help="Validate a single spec.")
@click.option(
    "--references/--no-references",
    default=True,
    show_default=True,
    help="Also check cross-entity references.",
)
@click.pass_context
@cli_command("validate")
def validate_cmd(
    ctx: click.Context,
    entity_type: Optional[str],
    spec_id: Optional[str],
    references: bool,
) -> None:
    """Validate stored specs.

    Exits with status 1 when the request fails or any spec is invalid.

    Examples:

        spec-mcp validate

        spec-mcp validate --id pln-001 --no-references
    """
    config = get_context(ctx).config
    start_time = time.perf_counter()
    if spec_id:
        response = _dispatch_validate_action(
            action="entity",
            payload={"spec_id": spec_id, "references": references},
            config=config,
        )
    else:
        response = _dispatch_validate_action(
            action="all",
            payload={"type": entity_type, "references": references},
            config=config,
        )

    response["meta"].setdefault("telemetry", {})["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
    emit_response(response)
    if not response["data"].get("valid", False):
        sys.exit(1)
