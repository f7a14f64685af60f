"""Schema command: print the JSON Schema of an entity type."""

import json

import click

from spec_mcp.cli.logging import cli_command
from spec_mcp.cli.output import emit_error, emit_success
from spec_mcp.core.entity_types import entity_type_values
from spec_mcp.resources.specs import entity_schema_json


@click.command("schema")
@click.argument("entity_type")
@cli_command("schema")
def schema_cmd(entity_type: str) -> None:
    """Print the JSON Schema for ENTITY_TYPE."""
    if entity_type not in entity_type_values():
        emit_error(
            f"Unknown entity type: {entity_type}",
            code="VALIDATION_ERROR",
            error_type="validation",
            remediation=f"Use one of: {', '.join(entity_type_values())}",
            details={"entity_type": entity_type},
        )
    emit_success({"type": entity_type, "schema": json.loads(entity_schema_json(entity_type))})
