"""Reference handlers: references, warnings, suggest."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.responses import success_response
from spec_mcp.core.validation import ReferenceValidationOptions, ReferenceValidator
from spec_mcp.tools.unified.param_schema import Bool, Str, validate_payload
from spec_mcp.tools.unified.validate_handlers._helpers import (
    _metric_name,
    _metrics,
    _open_specs,
    _request_id,
)

_REFERENCES_SCHEMA = {
    "check_cycles": Bool(default=True),
    "check_orphans": Bool(default=True),
    "path": Str(),
}

_WARNINGS_SCHEMA = {
    "path": Str(),
}

_SUGGEST_SCHEMA = {
    "broken_id": Str(required=True, remediation="Pass the unresolved reference, e.g. pln-004-api"),
    "path": Str(),
}


def _handle_references(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "references"

    err = validate_payload(payload, _REFERENCES_SCHEMA, tool_name="validate", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    validator = ReferenceValidator(specs)
    options = ReferenceValidationOptions(
        check_cycles=payload["check_cycles"],
        check_orphans=payload["check_orphans"],
    )
    result = validator.validate_all_references(options)
    broken = validator.find_broken_references()

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    _metrics.gauge(_metric_name(action) + ".broken", len(broken))
    return asdict(
        success_response(
            data={
                "valid": result.valid,
                "errors": result.errors,
                "warnings": result.warnings,
                "broken_references": [b.to_dict() for b in broken],
            },
            request_id=request_id,
        )
    )


def _handle_warnings(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "warnings"

    err = validate_payload(payload, _WARNINGS_SCHEMA, tool_name="validate", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    specs.clear_validation_warnings()
    specs.list_all()
    file_warnings = specs.get_all_validation_warnings()

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={"warnings": file_warnings, "count": len(file_warnings)},
            request_id=request_id,
        )
    )


def _handle_suggest(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "suggest"

    err = validate_payload(payload, _SUGGEST_SCHEMA, tool_name="validate", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    broken_id = payload["broken_id"]
    suggestions = ReferenceValidator(specs).suggest_reference_fixes(broken_id)

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={"broken_id": broken_id, "suggestions": suggestions},
            warnings=None if suggestions else [f"No existing ID resembles '{broken_id}'"],
            request_id=request_id,
        )
    )
