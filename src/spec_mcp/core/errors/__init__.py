"""Unified error hierarchy for spec-mcp.

Exception classes live in domain-specific modules within this package; this
__init__.py re-exports everything for convenient access.

Usage:
    from spec_mcp.core.errors import SpecNotFoundError, error_to_response
"""

from spec_mcp.core.errors.base import ERROR_MAPPINGS, error_to_response

# --- Draft errors ---
from spec_mcp.core.errors.drafts import (
    DraftError,
    DraftNotFoundError,
    DraftValidationError,
)

# --- Execution errors ---
from spec_mcp.core.errors.execution import ActionRouterError

# --- Item errors ---
from spec_mcp.core.errors.items import (
    AlreadySupersededError,
    ItemError,
    ItemNotFoundError,
    UnsupportedFieldError,
)

# --- Spec errors ---
from spec_mcp.core.errors.spec import (
    DuplicateEntityError,
    InvalidEntityIdError,
    SpecError,
    SpecMcpError,
    SpecNotFoundError,
    SpecValidationError,
)

# --- Storage errors ---
from spec_mcp.core.errors.storage import StorageError

# --- Task errors ---
from spec_mcp.core.errors.tasks import (
    InvalidStateTransitionError,
    TaskBlockedError,
    TaskError,
)

__all__ = [
    # Base / Registry
    "ERROR_MAPPINGS",
    "error_to_response",
    # Spec errors
    "SpecMcpError",
    "SpecError",
    "SpecNotFoundError",
    "DuplicateEntityError",
    "InvalidEntityIdError",
    "SpecValidationError",
    # Storage errors
    "StorageError",
    # Item errors
    "ItemError",
    "ItemNotFoundError",
    "AlreadySupersededError",
    "UnsupportedFieldError",
    # Task errors
    "TaskError",
    "InvalidStateTransitionError",
    "TaskBlockedError",
    # Draft errors
    "DraftError",
    "DraftNotFoundError",
    "DraftValidationError",
    # Execution errors
    "ActionRouterError",
]
