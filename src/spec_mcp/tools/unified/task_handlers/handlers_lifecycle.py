"""Lifecycle action handlers: start, complete, verify, block, unblock."""

from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any, Callable, Dict, Mapping

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import SpecMcpError
from spec_mcp.core.observability import audit_log
from spec_mcp.core.responses import success_response
from spec_mcp.core.schemas import Plan, Task
from spec_mcp.core.tasks import (
    block_task,
    complete_task,
    start_task,
    task_state,
    unblock_task,
    verify_task,
)
from spec_mcp.tools.unified.common import domain_error_response
from spec_mcp.tools.unified.param_schema import FieldSchema, List_, Str, validate_payload
from spec_mcp.tools.unified.task_handlers._helpers import (
    _find_task,
    _load_plan,
    _metric,
    _metrics,
    _open_specs,
    _request_id,
    _task_payload,
    logger,
)

_TASK_TARGET = {
    "spec_id": Str(required=True, remediation="Pass a plan ID such as pln-001"),
    "task_id": Str(required=True, remediation="Pass a task ID such as tsk-001"),
    "note": Str(max_length=2000),
    "path": Str(),
}

_BLOCK_SCHEMA = {
    **_TASK_TARGET,
    "reason": Str(required=True, remediation="Describe what blocks the task"),
    "blocked_by": List_(strings_only=True),
    "external_dependency": Str(),
}

# Mutates the task in place; receives the task, its plan and the payload.
_Transition = Callable[[Task, Plan, Dict[str, Any]], Task]


def _run_transition(
    *,
    config: ServerConfig,
    action: str,
    schema: Mapping[str, FieldSchema],
    transition: _Transition,
    payload: Dict[str, Any],
) -> dict:
    request_id = _request_id()

    err = validate_payload(payload, schema, tool_name="task", action=action, request_id=request_id)
    if err:
        return err

    specs, specs_err = _open_specs(config, payload.get("path"))
    if specs_err:
        return specs_err
    assert specs is not None

    spec_id = payload["spec_id"]
    task_id = payload["task_id"]
    audit_log("tool_invocation", tool="task", action=action, spec_id=spec_id, task_id=task_id)

    metric_key = _metric(action)
    start_time = time.perf_counter()
    try:
        plan = _load_plan(specs, spec_id)
        task = _find_task(plan, spec_id, task_id)
        previous = task_state(task)
        transition(task, plan, payload)
        plan = specs.save(plan)
        task = _find_task(plan, spec_id, task_id)
    except SpecMcpError as exc:
        _metrics.counter(metric_key, labels={"status": "error"})
        return domain_error_response(exc, request_id=request_id)

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    _metrics.timer(metric_key + ".duration_ms", elapsed_ms)
    _metrics.counter(metric_key, labels={"status": "success"})
    logger.info("Task %s/%s: %s -> %s", spec_id, task_id, previous, task_state(task))

    return asdict(
        success_response(
            data={
                "spec_id": spec_id,
                "task_id": task_id,
                "previous_state": previous,
                "state": task_state(task),
                "task": _task_payload(task, plan),
            },
            request_id=request_id,
        )
    )


def _handle_start(*, config: ServerConfig, **payload: Any) -> dict:
    return _run_transition(
        config=config,
        action="start",
        schema=_TASK_TARGET,
        transition=lambda task, plan, p: start_task(task, plan.tasks, p.get("note")),
        payload=payload,
    )


def _handle_complete(*, config: ServerConfig, **payload: Any) -> dict:
    return _run_transition(
        config=config,
        action="complete",
        schema=_TASK_TARGET,
        transition=lambda task, plan, p: complete_task(task, plan.tasks, p.get("note")),
        payload=payload,
    )


def _handle_verify(*, config: ServerConfig, **payload: Any) -> dict:
    return _run_transition(
        config=config,
        action="verify",
        schema=_TASK_TARGET,
        transition=lambda task, plan, p: verify_task(task, p.get("note")),
        payload=payload,
    )


def _handle_block(*, config: ServerConfig, **payload: Any) -> dict:
    return _run_transition(
        config=config,
        action="block",
        schema=_BLOCK_SCHEMA,
        transition=lambda task, plan, p: block_task(
            task, p["reason"], p.get("blocked_by"), p.get("external_dependency")
        ),
        payload=payload,
    )


def _handle_unblock(*, config: ServerConfig, **payload: Any) -> dict:
    return _run_transition(
        config=config,
        action="unblock",
        schema=_TASK_TARGET,
        transition=lambda task, plan, p: unblock_task(task, p.get("note")),
        payload=payload,
    )
