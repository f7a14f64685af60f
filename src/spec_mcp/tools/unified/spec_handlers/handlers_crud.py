"""Entity CRUD action handlers: get, create, update, delete."""

from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import SpecMcpError, SpecNotFoundError
from spec_mcp.core.observability import audit_log
from spec_mcp.core.responses import success_response
from spec_mcp.core.storage import entity_to_dict
from spec_mcp.tools.unified.common import domain_error_response
from spec_mcp.tools.unified.param_schema import Dict_, Str, validate_payload
from spec_mcp.tools.unified.spec_handlers._helpers import (
    _ENTITY_TYPES,
    _metric_name,
    _metrics,
    _open_specs,
    _reference_warnings,
    _request_id,
    logger,
)

_SPEC_ID = Str(required=True, remediation="Pass an entity ID such as pln-001 or pln-001-auth-flow")

_GET_SCHEMA = {
    "spec_id": _SPEC_ID,
    "path": Str(),
}

_CREATE_SCHEMA = {
    "type": Str(required=True, choices=_ENTITY_TYPES),
    "data": Dict_(required=True, non_empty=True, remediation="Pass the entity fields as an object"),
    "path": Str(),
}

_UPDATE_SCHEMA = {
    "spec_id": _SPEC_ID,
    "updates": Dict_(required=True, non_empty=True, remediation="Pass the fields to change as an object"),
    "path": Str(),
}

_DELETE_SCHEMA = _GET_SCHEMA


def _handle_get(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "get"

    err = validate_payload(payload, _GET_SCHEMA, tool_name="spec", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    metric_key = _metric_name(action)
    try:
        entity = specs.require_entity(spec_id)
        path = specs.entity_path(spec_id)
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(metric_key, labels={"status": "success"})
    return asdict(
        success_response(
            data={"spec": entity_to_dict(entity), "path": str(path)},
            request_id=request_id,
        )
    )


def _handle_create(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "create"

    err = validate_payload(payload, _CREATE_SCHEMA, tool_name="spec", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    entity_type = payload["type"]
    audit_log("tool_invocation", tool="spec", action=action, entity_type=entity_type)

    metric_key = _metric_name(action)
    start_time = time.perf_counter()
    try:
        entity = specs.create(entity_type, payload["data"])
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    _metrics.timer(metric_key + ".duration_ms", elapsed_ms)
    _metrics.counter(metric_key, labels={"status": "success"})

    data = entity_to_dict(entity)
    logger.info("Created %s via spec tool", data["id"])
    audit_log("spec_created", spec_id=data["id"], entity_type=entity_type)
    return asdict(
        success_response(
            data={"spec_id": data["id"], "spec": data, "path": str(specs.entity_path(data["id"]))},
            warnings=_reference_warnings(specs, entity) or None,
            request_id=request_id,
        )
    )


def _handle_update(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "update"

    err = validate_payload(payload, _UPDATE_SCHEMA, tool_name="spec", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    updates = payload["updates"]
    ignored = sorted(k for k in updates if k in ("type", "number", "created_at"))
    audit_log("tool_invocation", tool="spec", action=action, spec_id=spec_id, fields=sorted(updates))

    metric_key = _metric_name(action)
    start_time = time.perf_counter()
    try:
        entity = specs.update(spec_id, updates)
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    _metrics.timer(metric_key + ".duration_ms", elapsed_ms)
    _metrics.counter(metric_key, labels={"status": "success"})

    warnings = _reference_warnings(specs, entity)
    if ignored:
        warnings.insert(0, f"Immutable fields ignored: {', '.join(ignored)}")
    data = entity_to_dict(entity)
    audit_log("spec_updated", spec_id=data["id"], fields=sorted(updates))
    return asdict(
        success_response(
            data={"spec_id": data["id"], "spec": data},
            warnings=warnings or None,
            request_id=request_id,
        )
    )


def _handle_delete(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "delete"

    err = validate_payload(payload, _DELETE_SCHEMA, tool_name="spec", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    audit_log("tool_invocation", tool="spec", action=action, spec_id=spec_id)

    metric_key = _metric_name(action)
    try:
        if not specs.delete(spec_id):
            raise SpecNotFoundError(spec_id)
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(metric_key, labels={"status": "success"})
    audit_log("spec_deleted", spec_id=spec_id)
    return asdict(success_response(data={"spec_id": spec_id, "deleted": True}, request_id=request_id))
