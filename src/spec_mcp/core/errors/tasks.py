"""Task workflow error classes."""

from typing import List, Optional

from spec_mcp.core.errors.spec import SpecMcpError


class TaskError(SpecMcpError):
    """Base class for task workflow errors."""


class InvalidStateTransitionError(TaskError):
    """Raised when a task status change is not allowed from its current state."""

    def __init__(self, task_id: str, current_state: str, target_state: str, reason: Optional[str] = None) -> None:
        self.task_id = task_id
        self.current_state = current_state
        self.target_state = target_state
        self.reason = reason
        message = f"Cannot move task {task_id} from {current_state} to {target_state}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            details={"task_id": task_id, "current_state": current_state, "target_state": target_state},
        )


class TaskBlockedError(TaskError):
    """Raised when starting a task whose dependencies are not done."""

    def __init__(self, task_id: str, blocking: List[str], reason: str) -> None:
        self.task_id = task_id
        self.blocking = list(blocking)
        super().__init__(
            f"Cannot start task {task_id}: {reason}",
            details={"task_id": task_id, "blocking_tasks": self.blocking},
        )
