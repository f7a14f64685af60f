"""Read-only task handlers: progress, next."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import SpecMcpError
from spec_mcp.core.responses import success_response
from spec_mcp.core.tasks import NOT_STARTED, active_tasks, can_start_task, next_tasks, plan_progress, task_state
from spec_mcp.tools.unified.common import domain_error_response
from spec_mcp.tools.unified.param_schema import Num, Str, validate_payload
from spec_mcp.tools.unified.task_handlers._helpers import (
    _load_plan,
    _metric,
    _metrics,
    _open_specs,
    _request_id,
    _task_payload,
)

_PROGRESS_SCHEMA = {
    "spec_id": Str(required=True, remediation="Pass a plan ID such as pln-001"),
    "path": Str(),
}

_NEXT_SCHEMA = {
    **_PROGRESS_SCHEMA,
    "limit": Num(integer_only=True, min_val=1, max_val=100),
}


def _handle_progress(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "progress"

    err = validate_payload(payload, _PROGRESS_SCHEMA, tool_name="task", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    try:
        plan = _load_plan(specs, spec_id)
    except SpecMcpError as exc:
        _metrics.counter(_metric(action), labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    progress = plan_progress(plan)
    _metrics.counter(_metric(action), labels={"status": "success"})
    _metrics.gauge("task.progress_percentage", progress["percentage"], labels={"spec_id": spec_id})
    return asdict(
        success_response(
            data={
                "spec_id": spec_id,
                "progress": progress,
                "tasks": [{"id": t.id, "state": task_state(t)} for t in active_tasks(plan.tasks)],
            },
            request_id=request_id,
        )
    )


def _handle_next(*, config: ServerConfig, **payload: Any) -> dict:
    request_id = _request_id()
    action = "next"

    err = validate_payload(payload, _NEXT_SCHEMA, tool_name="task", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    try:
        plan = _load_plan(specs, spec_id)
    except SpecMcpError as exc:
        _metrics.counter(_metric(action), labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    ready = next_tasks(plan)
    limit = payload.get("limit")
    if limit is not None:
        ready = ready[:limit]

    warnings = []
    if not ready:
        tasks = active_tasks(plan.tasks)
        held = [f"{t.id}: {can_start_task(t, tasks)[1]}" for t in tasks if task_state(t) == NOT_STARTED]
        if held:
            warnings.append("No task can be started; " + "; ".join(held))

    _metrics.counter(_metric(action), labels={"status": "success"})
    return asdict(
        success_response(
            data={
                "spec_id": spec_id,
                "tasks": [_task_payload(t, plan) for t in ready],
                "count": len(ready),
            },
            warnings=warnings or None,
            request_id=request_id,
        )
    )
