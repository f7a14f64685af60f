"""JSON envelope output for CLI commands."""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, NoReturn, Optional

import click

from spec_mcp.core.responses import error_response, success_response


def _echo(payload: Mapping[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def emit_success(
    data: Mapping[str, Any],
    *,
    warnings: Optional[List[str]] = None,
    telemetry: Optional[Dict[str, Any]] = None,
) -> None:
    _echo(asdict(success_response(data=data, warnings=warnings, telemetry=telemetry)))


def emit_error(
    message: str,
    *,
    code: str,
    error_type: str,
    remediation: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> NoReturn:
    """Print an error envelope and exit with status 1."""
    _echo(
        asdict(
            error_response(
                message,
                error_code=code,
                error_type=error_type,
                remediation=remediation,
                details=details,
            )
        )
    )
    sys.exit(1)


def emit_response(response: Mapping[str, Any]) -> None:
    """Print an envelope produced by a tool handler, exiting 1 on failure."""
    _echo(response)
    if not response.get("success"):
        sys.exit(1)
