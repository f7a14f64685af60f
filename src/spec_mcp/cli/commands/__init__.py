"""CLI command groups.

The CLI is organized into domain groups (``specs``, ``drafts``) plus a few
top-level commands.
"""

from spec_mcp.cli.commands.drafts import drafts
from spec_mcp.cli.commands.schema import schema_cmd
from spec_mcp.cli.commands.serve import serve_cmd
from spec_mcp.cli.commands.specs import specs
from spec_mcp.cli.commands.validate import validate_cmd

__all__ = [
    "drafts",
    "schema_cmd",
    "serve_cmd",
    "specs",
    "validate_cmd",
]
