"""Task lifecycle rules for plans.

A task's state is derived from its status timestamps:

    not-started -> in-progress -> completed -> verified

Dependencies (``depends_on``) only hold a task back when the referenced
task exists in the plan; dangling IDs are reported by the reference
validator instead.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from spec_mcp.core.errors import InvalidStateTransitionError, SpecValidationError, TaskBlockedError
from spec_mcp.core.schemas import BlockedEntry, Plan, Task, format_validation_errors, utc_now

logger = logging.getLogger(__name__)

NOT_STARTED = "not-started"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"
VERIFIED = "verified"
TASK_STATES = (NOT_STARTED, IN_PROGRESS, COMPLETED, VERIFIED)
DONE_STATES = (COMPLETED, VERIFIED)


def task_state(task: Task) -> str:
    status = task.status
    if status.verified_at:
        return VERIFIED
    if status.completed_at:
        return COMPLETED
    if status.started_at:
        return IN_PROGRESS
    return NOT_STARTED


def active_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Tasks that have not been superseded."""
    return [t for t in tasks if not t.superseded_by]


def _index(tasks: Iterable[Task]) -> Dict[str, Task]:
    return {t.id: t for t in tasks}


def unresolved_blocks(task: Task) -> List[BlockedEntry]:
    return [entry for entry in task.blocked if entry.resolved_at is None]


def get_blocking_tasks(task: Task, all_tasks: Sequence[Task]) -> List[str]:
    """IDs of existing dependencies that are not completed or verified."""
    by_id = _index(all_tasks)
    return [
        dep_id
        for dep_id in task.depends_on
        if dep_id in by_id and task_state(by_id[dep_id]) not in DONE_STATES
    ]


def is_task_blocked(task: Task, all_tasks: Sequence[Task]) -> bool:
    return bool(unresolved_blocks(task)) or bool(get_blocking_tasks(task, all_tasks))


def can_start_task(task: Task, all_tasks: Sequence[Task]) -> Tuple[bool, Optional[str]]:
    state = task_state(task)
    if state != NOT_STARTED:
        return False, f"Task is already {state}"
    blocks = unresolved_blocks(task)
    if blocks:
        return False, f"Task is blocked: {blocks[-1].reason}"
    blocking = get_blocking_tasks(task, all_tasks)
    if blocking:
        return False, f"Depends on uncompleted tasks: {', '.join(blocking)}"
    return True, None


def can_complete_task(task: Task, all_tasks: Sequence[Task]) -> Tuple[bool, Optional[str]]:
    state = task_state(task)
    if state in DONE_STATES:
        return False, f"Task is already {state}"
    blocking = get_blocking_tasks(task, all_tasks)
    if blocking:
        return False, f"Depends on uncompleted tasks: {', '.join(blocking)}"
    return True, None


def _note(task: Task, text: Optional[str], default: str) -> None:
    stamp = utc_now().isoformat().replace("+00:00", "Z")
    task.status.notes.append(f"[{stamp}] {text or default}")


def start_task(task: Task, all_tasks: Sequence[Task], note: Optional[str] = None) -> Task:
    """Mark a task in progress.

    Raises:
        InvalidStateTransitionError: if the task was already started.
        TaskBlockedError: if it is blocked or has unfinished dependencies.
    """
    state = task_state(task)
    if state != NOT_STARTED:
        raise InvalidStateTransitionError(task.id, state, IN_PROGRESS, reason=f"Task is already {state}")
    ok, reason = can_start_task(task, all_tasks)
    if not ok:
        raise TaskBlockedError(task.id, get_blocking_tasks(task, all_tasks), reason or "blocked")
    task.status.started_at = utc_now()
    _note(task, note, "Started")
    logger.debug("Started task %s", task.id)
    return task


def complete_task(task: Task, all_tasks: Sequence[Task], note: Optional[str] = None) -> Task:
    """Mark a task completed; a task that was never started is started too."""
    state = task_state(task)
    if state in DONE_STATES:
        raise InvalidStateTransitionError(task.id, state, COMPLETED, reason=f"Task is already {state}")
    ok, reason = can_complete_task(task, all_tasks)
    if not ok:
        raise TaskBlockedError(task.id, get_blocking_tasks(task, all_tasks), reason or "blocked")
    now = utc_now()
    if task.status.started_at is None:
        task.status.started_at = now
    task.status.completed_at = now
    _note(task, note, "Completed")
    return task


def verify_task(task: Task, note: Optional[str] = None) -> Task:
    state = task_state(task)
    if state != COMPLETED:
        raise InvalidStateTransitionError(task.id, state, VERIFIED, reason="Only completed tasks can be verified")
    task.status.verified_at = utc_now()
    _note(task, note, "Verified")
    return task


def block_task(
    task: Task,
    reason: str,
    blocked_by: Optional[List[str]] = None,
    external_dependency: Optional[str] = None,
) -> Task:
    if task_state(task) in DONE_STATES:
        raise InvalidStateTransitionError(task.id, task_state(task), "blocked", reason="Finished tasks cannot be blocked")
    try:
        entry = BlockedEntry(reason=reason, blocked_by=blocked_by or [], external_dependency=external_dependency)
    except ValidationError as exc:
        errors = format_validation_errors(exc)
        raise SpecValidationError(f"Invalid blocker for {task.id}: {'; '.join(errors)}", errors) from exc
    task.blocked.append(entry)
    _note(task, None, f"Blocked: {reason}")
    return task


def unblock_task(task: Task, note: Optional[str] = None) -> Task:
    """Resolve every open block on the task."""
    open_blocks = unresolved_blocks(task)
    if not open_blocks:
        raise InvalidStateTransitionError(task.id, task_state(task), "unblocked", reason="Task is not blocked")
    now = utc_now()
    for entry in open_blocks:
        entry.resolved_at = now
    _note(task, note, "Unblocked")
    return task


def plan_progress(plan: Plan) -> Dict[str, int]:
    tasks = active_tasks(plan.tasks)
    counts = {state: 0 for state in TASK_STATES}
    for task in tasks:
        counts[task_state(task)] += 1
    total = len(tasks)
    done = counts[COMPLETED] + counts[VERIFIED]
    return {
        "total": total,
        "not_started": counts[NOT_STARTED],
        "in_progress": counts[IN_PROGRESS],
        "completed": counts[COMPLETED],
        "verified": counts[VERIFIED],
        "blocked": sum(1 for t in tasks if task_state(t) not in DONE_STATES and is_task_blocked(t, tasks)),
        "percentage": round(done / total * 100) if total else 0,
    }


def next_tasks(plan: Plan) -> List[Task]:
    """Active tasks that can be started right now, highest priority first."""
    order = {"critical": 0, "high": 1, "medium": 2, "low": 3, "nice-to-have": 4}
    tasks = active_tasks(plan.tasks)
    ready = [t for t in tasks if can_start_task(t, tasks)[0]]
    return sorted(ready, key=lambda t: (order[t.priority], t.id))
