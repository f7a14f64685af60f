"""Error-to-ErrorCode mapping registry.

Maps exception types to (ErrorCode, ErrorType) tuples so tool handlers and
CLI commands produce the same envelope for the same failure.

Usage:
    from spec_mcp.core.errors.base import error_to_response

    try:
        do_something()
    except Exception as e:
        result = error_to_response(e)
        if result is not None:
            return result
        raise  # Unknown error, re-raise
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, Optional, Tuple, Type

from spec_mcp.core.errors.drafts import DraftError, DraftNotFoundError, DraftValidationError
from spec_mcp.core.errors.execution import ActionRouterError
from spec_mcp.core.errors.items import AlreadySupersededError, ItemNotFoundError, UnsupportedFieldError
from spec_mcp.core.errors.spec import (
    DuplicateEntityError,
    InvalidEntityIdError,
    SpecNotFoundError,
    SpecValidationError,
)
from spec_mcp.core.errors.storage import StorageError
from spec_mcp.core.errors.tasks import InvalidStateTransitionError, TaskBlockedError
from spec_mcp.core.responses.types import (
    ErrorCode,
    ErrorType,
)

ERROR_MAPPINGS: Dict[Type[Exception], Tuple[ErrorCode, ErrorType]] = {
    # --- Spec errors ---
    SpecNotFoundError: (ErrorCode.SPEC_NOT_FOUND, ErrorType.NOT_FOUND),
    DuplicateEntityError: (ErrorCode.DUPLICATE_ENTRY, ErrorType.CONFLICT),
    InvalidEntityIdError: (ErrorCode.INVALID_ENTITY_ID, ErrorType.VALIDATION),
    SpecValidationError: (ErrorCode.VALIDATION_ERROR, ErrorType.VALIDATION),
    # --- Storage errors ---
    StorageError: (ErrorCode.STORAGE_ERROR, ErrorType.INTERNAL),
    # --- Item errors ---
    ItemNotFoundError: (ErrorCode.ITEM_NOT_FOUND, ErrorType.NOT_FOUND),
    AlreadySupersededError: (ErrorCode.ALREADY_SUPERSEDED, ErrorType.CONFLICT),
    UnsupportedFieldError: (ErrorCode.VALIDATION_ERROR, ErrorType.VALIDATION),
    # --- Task errors ---
    InvalidStateTransitionError: (ErrorCode.INVALID_STATE_TRANSITION, ErrorType.CONFLICT),
    TaskBlockedError: (ErrorCode.TASK_BLOCKED, ErrorType.CONFLICT),
    # --- Draft errors ---
    DraftError: (ErrorCode.DRAFT_INCOMPLETE, ErrorType.CONFLICT),
    DraftNotFoundError: (ErrorCode.DRAFT_NOT_FOUND, ErrorType.NOT_FOUND),
    DraftValidationError: (ErrorCode.VALIDATION_ERROR, ErrorType.VALIDATION),
    # --- Execution errors ---
    ActionRouterError: (ErrorCode.VALIDATION_ERROR, ErrorType.VALIDATION),
}


def error_to_response(exc: Exception, *, request_id: Optional[str] = None) -> Optional[dict]:
    """Convert a known exception to a standard error_response dict, or None if unknown.

    Looks up the exception's *exact* type in ERROR_MAPPINGS. Domain errors
    contribute their ``details`` mapping to the response.

    Args:
        exc: The exception to convert.
        request_id: Correlation identifier for the response meta.

    Returns:
        A dict suitable for an MCP tool response, or None if the exception
        type is not registered in ERROR_MAPPINGS.
    """
    mapping = ERROR_MAPPINGS.get(type(exc))
    if mapping is None:
        return None

    from spec_mcp.core.responses.builders import error_response

    code, error_type = mapping
    details = getattr(exc, "details", None)
    return asdict(
        error_response(
            str(exc),
            error_code=code,
            error_type=error_type,
            details=details if isinstance(details, dict) and details else None,
            request_id=request_id,
        )
    )
