"""Read-only listing handlers: list, query, next-number."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.ids import format_entity_id
from spec_mcp.core.responses import success_response
from spec_mcp.core.storage.spec_manager import SORT_FIELDS
from spec_mcp.core.tasks import TASK_STATES
from spec_mcp.tools.unified.param_schema import Bool, List_, Num, Str, validate_payload
from spec_mcp.tools.unified.spec_handlers._helpers import (
    _ENTITY_TYPES,
    _metric_name,
    _metrics,
    _open_specs,
    _request_id,
    _summary,
    _validation_error,
)

_PRIORITIES = ("critical", "high", "medium", "low", "nice-to-have")

_LIST_SCHEMA = {
    "type": Str(choices=_ENTITY_TYPES),
    "path": Str(),
}

_QUERY_SCHEMA = {
    "types": List_(strings_only=True),
    "ids": List_(strings_only=True),
    "priority": List_(strings_only=True),
    "task_status": List_(strings_only=True),
    "search": Str(),
    "has_tasks": Bool(),
    "sort_by": Str(choices=frozenset(SORT_FIELDS)),
    "descending": Bool(default=False),
    "limit": Num(integer_only=True, min_val=1, max_val=500),
    "offset": Num(integer_only=True, min_val=0),
    "path": Str(),
}

_NEXT_NUMBER_SCHEMA = {
    "type": Str(required=True, choices=_ENTITY_TYPES),
    "path": Str(),
}


def _handle_list(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "list"

    err = validate_payload(payload, _LIST_SCHEMA, tool_name="spec", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    entity_type = payload.get("type")
    entities = specs.list_all([entity_type] if entity_type else None)
    warnings = [f"Skipped invalid file {w['file_name']}: {w['error']}" for w in specs.get_all_validation_warnings()]

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={"specs": [_summary(e) for e in entities], "count": len(entities)},
            warnings=warnings or None,
            request_id=request_id,
        )
    )


def _handle_query(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "query"

    err = validate_payload(payload, _QUERY_SCHEMA, tool_name="spec", action=action, request_id=request_id)
    if err:
        return err

    for field, allowed in (
        ("types", _ENTITY_TYPES),
        ("priority", _PRIORITIES),
        ("task_status", TASK_STATES),
    ):
        unknown = [v for v in payload.get(field) or [] if v not in allowed]
        if unknown:
            return _validation_error(
                field=field,
                action=action,
                message=f"Unknown value(s) {', '.join(unknown)}. Allowed: {', '.join(sorted(allowed))}",
                request_id=request_id,
            )

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    offset = payload.get("offset") or 0
    limit = payload.get("limit")
    result = specs.query(
        types=payload.get("types"),
        ids=payload.get("ids"),
        priority=payload.get("priority"),
        task_status=payload.get("task_status"),
        search=payload.get("search"),
        has_tasks=payload.get("has_tasks"),
        sort_by=payload.get("sort_by") or "number",
        descending=payload["descending"],
        limit=limit,
        offset=offset,
    )

    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={"items": result["items"], "total": result["total"]},
            pagination={
                "offset": offset,
                "limit": limit,
                "total": result["total"],
                "has_more": result["has_more"],
            },
            request_id=request_id,
        )
    )


def _handle_next_number(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "next-number"

    err = validate_payload(payload, _NEXT_NUMBER_SCHEMA, tool_name="spec", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    entity_type = payload["type"]
    number = specs.peek_next_number(entity_type)
    _metrics.counter(_metric_name(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={"type": entity_type, "next_number": number, "next_id": format_entity_id(entity_type, number)},
            request_id=request_id,
        )
    )
