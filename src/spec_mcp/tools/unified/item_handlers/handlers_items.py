"""Handlers for items that carry their own ID: add, supersede, remove, get, history."""

from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any, Dict, List

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import ItemNotFoundError, SpecMcpError
from spec_mcp.core.observability import audit_log
from spec_mcp.core.responses import success_response
from spec_mcp.core.storage import entity_to_dict
from spec_mcp.core.supersession import add_item, find_item, remove_item, supersede_item, supersession_chain
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
    logger,
)
from spec_mcp.tools.unified.param_schema import Dict_, Str, validate_payload

_TARGET = {
    "spec_id": Str(required=True, remediation="Pass an entity ID such as pln-001"),
    "field": Str(required=True, remediation="Pass an array field such as tasks or criteria"),
    "path": Str(),
}

_ADD_SCHEMA = {
    **_TARGET,
    "data": Dict_(required=True, remediation="Pass the item fields as an object"),
    "supersede_id": Str(),
}

_SUPERSEDE_SCHEMA = {
    **_TARGET,
    "item_id": Str(required=True, remediation="Pass the ID of the item to replace, e.g. tsk-002"),
    "data": Dict_(required=True, non_empty=True, remediation="Pass the fields that change"),
}

_ITEM_SCHEMA = {
    **_TARGET,
    "item_id": Str(required=True, remediation="Pass an item ID such as tsk-001"),
}


def _requires_ids(spec, action: str, request_id: str):
    if spec.has_ids:
        return None
    return _validation_error(
        field="field",
        action=action,
        message=f"'{spec.name}' items have no IDs; use add-simple or remove-simple",
        request_id=request_id,
    )


def _normalize_new_item(spec, items: List[Any], item: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the appended item and store its normalised form."""
    normalized = _check_item(spec, item)
    items[items.index(item)] = normalized
    return normalized


def _handle_add(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "add"

    err = validate_payload(payload, _ADD_SCHEMA, tool_name="item", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    field = payload["field"]
    supersede_id = payload.get("supersede_id")
    audit_log("tool_invocation", tool="item", action=action, spec_id=spec_id, field=field, supersede_id=supersede_id)

    metric_key = _metric_name(action)
    start_time = time.perf_counter()
    try:
        _, data, spec = _load_field(specs, spec_id, field)
        err = _requires_ids(spec, action, request_id)
        if err:
            return err
        if supersede_id and not spec.supersedable:
            return _validation_error(
                field="supersede_id",
                action=action,
                message=f"'{field}' items do not support supersession",
                request_id=request_id,
            )
        outcome = add_item(data, field, payload["data"], spec.prefix, supersede_id=supersede_id)
        updated = outcome["entity"]
        item = _normalize_new_item(spec, updated[field], outcome["item"])
        entity = _write_field(specs, spec_id, field, updated[field])
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    _metrics.timer(metric_key + ".duration_ms", elapsed_ms)
    _metrics.counter(metric_key, labels={"status": "success"})

    result: Dict[str, Any] = {"spec_id": entity_to_dict(entity)["id"], "field": field, "item": item}
    if supersede_id:
        result["superseded_id"] = supersede_id
        result["changed_fields"] = outcome["changed_fields"]
    logger.info("Added %s to %s.%s", item["id"], spec_id, field)
    return asdict(success_response(data=result, request_id=request_id))


def _handle_supersede(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "supersede"

    err = validate_payload(payload, _SUPERSEDE_SCHEMA, tool_name="item", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    field = payload["field"]
    item_id = payload["item_id"]
    audit_log("tool_invocation", tool="item", action=action, spec_id=spec_id, field=field, item_id=item_id)

    metric_key = _metric_name(action)
    start_time = time.perf_counter()
    try:
        _, data, spec = _load_field(specs, spec_id, field)
        if not spec.supersedable:
            return _validation_error(
                field="field",
                action=action,
                message=f"'{field}' items do not support supersession",
                request_id=request_id,
            )
        outcome = supersede_item(data, field, item_id, payload["data"], spec.prefix)
        updated = outcome["entity"]
        new_item = _normalize_new_item(spec, updated[field], outcome["new_item"])
        _write_field(specs, spec_id, field, updated[field])
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    _metrics.timer(metric_key + ".duration_ms", elapsed_ms)
    _metrics.counter(metric_key, labels={"status": "success"})

    return asdict(
        success_response(
            data={
                "spec_id": spec_id,
                "field": field,
                "new_item": new_item,
                "old_item": outcome["old_item"],
                "changed_fields": outcome["changed_fields"],
            },
            warnings=None if outcome["changed_fields"] else ["No fields changed; the new version is identical"],
            request_id=request_id,
        )
    )


def _handle_remove(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "remove"

    err = validate_payload(payload, _ITEM_SCHEMA, tool_name="item", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    field = payload["field"]
    item_id = payload["item_id"]
    audit_log("tool_invocation", tool="item", action=action, spec_id=spec_id, field=field, item_id=item_id)

    metric_key = _metric_name(action)
    try:
        _, data, spec = _load_field(specs, spec_id, field)
        err = _requires_ids(spec, action, request_id)
        if err:
            return err
        outcome = remove_item(data, field, item_id)
        _write_field(specs, spec_id, field, outcome["entity"][field])
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(metric_key, labels={"status": "success"})
    return asdict(
        success_response(
            data={"spec_id": spec_id, "field": field, "removed": outcome["item"]},
            request_id=request_id,
        )
    )


def _handle_get(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "get"

    err = validate_payload(payload, _ITEM_SCHEMA, tool_name="item", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    field = payload["field"]
    item_id = payload["item_id"]
    try:
        _, data, spec = _load_field(specs, spec_id, field)
        item = find_item(data.get(field) or [], item_id)
        if item is None:
            raise ItemNotFoundError(item_id, field, spec_id)
    except SpecMcpError as exc:
        _metrics.counter(_metric_name(action), labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={"spec_id": spec_id, "field": field, "item": item, "active": not item.get("superseded_by")},
            request_id=request_id,
        )
    )


def _handle_history(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "history"

    err = validate_payload(payload, _ITEM_SCHEMA, tool_name="item", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    field = payload["field"]
    try:
        _, data, _spec = _load_field(specs, spec_id, field)
        chain = supersession_chain(data.get(field) or [], payload["item_id"], field)
    except SpecMcpError as exc:
        _metrics.counter(_metric_name(action), labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={
                "spec_id": spec_id,
                "field": field,
                "versions": chain,
                "current_id": chain[-1]["id"],
                "count": len(chain),
            },
            request_id=request_id,
        )
    )
