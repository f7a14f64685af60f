"""Shared helpers for task handler modules."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from spec_mcp.config.server import ServerConfig
from spec_mcp.core.errors import AlreadySupersededError, ItemNotFoundError, SpecValidationError
from spec_mcp.core.observability import get_metrics
from spec_mcp.core.schemas import Plan, Task
from spec_mcp.core.storage import SpecManager
from spec_mcp.core.tasks import is_task_blocked, task_state
from spec_mcp.tools.unified.common import (
    build_request_id,
    make_metric_name,
    make_validation_error_fn,
    open_spec_manager,
    resolve_specs_dir,
)

logger = logging.getLogger(__name__)
_metrics = get_metrics()

_ACTION_SUMMARY = {
    "start": "Mark a task in progress once its dependencies are done",
    "complete": "Mark a task completed",
    "verify": "Mark a completed task verified",
    "block": "Record a blocker on a task",
    "unblock": "Resolve the open blockers of a task",
    "progress": "Summarize task states for a plan",
    "next": "List tasks that can be started now, by priority",
}


def _metric(action: str) -> str:
    return make_metric_name("unified_tools.task", action)


def _request_id() -> str:
    return build_request_id("task")


_validation_error = make_validation_error_fn("task")


def _open_specs(config: ServerConfig, path: Optional[str]) -> Tuple[Optional[SpecManager], Optional[dict]]:
    specs_dir, err = resolve_specs_dir(config, path)
    if err:
        return None, err
    assert specs_dir is not None
    return open_spec_manager(config, specs_dir), None


def _load_plan(specs: SpecManager, spec_id: str) -> Plan:
    entity = specs.require_entity(spec_id)
    if not isinstance(entity, Plan):
        raise SpecValidationError(
            f"'{spec_id}' is a {entity.type}; tasks live in plans",
            [f"spec_id: expected a plan ID, got {entity.type}"],
        )
    return entity


def _find_task(plan: Plan, spec_id: str, task_id: str) -> Task:
    """The active task with ``task_id``.

    Raises:
        ItemNotFoundError: if the plan has no such task.
        AlreadySupersededError: if the task was replaced by a newer version.
    """
    for task in plan.tasks:
        if task.id == task_id:
            if task.superseded_by:
                raise AlreadySupersededError(task_id, task.superseded_by)
            return task
    raise ItemNotFoundError(task_id, "tasks", spec_id)


def _task_payload(task: Task, plan: Plan) -> Dict[str, Any]:
    data = task.model_dump(mode="json", by_alias=True, exclude_none=True)
    data["state"] = task_state(task)
    data["is_blocked"] = is_task_blocked(task, plan.tasks)
    return data
