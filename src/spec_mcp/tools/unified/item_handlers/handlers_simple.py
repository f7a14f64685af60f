"""Handlers for arrays whose elements have no ID: add-simple, remove-simple."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import SpecMcpError
from spec_mcp.core.observability import audit_log
from spec_mcp.core.responses import success_response
from spec_mcp.core.supersession import add_simple, remove_simple
from spec_mcp.tools.unified.common import domain_error_response
from spec_mcp.tools.unified.item_handlers._helpers import (
    _check_item,
    _load_field,
    _metric_name,
    _metrics,
    _open_specs,
    _request_id,
    _validation_error,
    _write_field,
)
from spec_mcp.tools.unified.param_schema import Num, Str, validate_payload

_TARGET = {
    "spec_id": Str(required=True, remediation="Pass an entity ID such as cmp-001"),
    "field": Str(required=True, remediation="Pass an array field such as tech_stack or references"),
    "path": Str(),
}

_REMOVE_SIMPLE_SCHEMA = {
    **_TARGET,
    "index": Num(required=True, integer_only=True, min_val=0, remediation="Pass the zero-based position"),
}


def _id_field_error(field: str, action: str, request_id: str) -> dict:
    return _validation_error(
        field="field",
        action=action,
        message=f"'{field}' items carry IDs; use add, supersede or remove",
        request_id=request_id,
    )


def _handle_add_simple(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "add-simple"

    err = validate_payload(payload, _TARGET, tool_name="item", action=action, request_id=request_id)
    if err:
        return err
    value = payload.get("value")
    if value is None:
        value = payload.get("data")
    if value is None:
        return _validation_error(
            field="value",
            action=action,
            message="Provide the value to append",
            request_id=request_id,
        )

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    field = payload["field"]
    audit_log("tool_invocation", tool="item", action=action, spec_id=spec_id, field=field)

    metric_key = _metric_name(action)
    try:
        _, data, spec = _load_field(specs, spec_id, field)
        if spec.has_ids:
            return _id_field_error(field, action, request_id)
        outcome = add_simple(data, field, _check_item(spec, value))
        _write_field(specs, spec_id, field, outcome["entity"][field])
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(metric_key, labels={"status": "success"})
    return asdict(
        success_response(
            data={"spec_id": spec_id, "field": field, "item": outcome["item"], "index": outcome["index"]},
            request_id=request_id,
        )
    )


def _handle_remove_simple(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "remove-simple"

    err = validate_payload(payload, _REMOVE_SIMPLE_SCHEMA, tool_name="item", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    field = payload["field"]
    index = payload["index"]
    audit_log("tool_invocation", tool="item", action=action, spec_id=spec_id, field=field, index=index)

    metric_key = _metric_name(action)
    try:
        _, data, spec = _load_field(specs, spec_id, field)
        if spec.has_ids:
            return _id_field_error(field, action, request_id)
        outcome = remove_simple(data, field, index)
        _write_field(specs, spec_id, field, outcome["entity"][field])
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(metric_key, labels={"status": "success"})
    return asdict(
        success_response(
            data={"spec_id": spec_id, "field": field, "removed": outcome["item"], "index": index},
            request_id=request_id,
        )
    )
