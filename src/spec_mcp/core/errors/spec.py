"""Spec entity error classes.

``SpecMcpError`` is the root of every domain exception raised by the
storage, supersession, task and draft layers.
"""

from typing import Any, Dict, List, Optional


class SpecMcpError(Exception):
    """Base class for spec-mcp domain errors.

    Attributes:
        details: Machine-readable context copied into error responses.
    """

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details = details or {}


class SpecError(SpecMcpError):
    """Base class for errors about persisted spec entities."""


class SpecNotFoundError(SpecError):
    """Raised when a spec ID does not resolve to an entity file."""

    def __init__(self, spec_id: str, entity_type: Optional[str] = None) -> None:
        self.spec_id = spec_id
        self.entity_type = entity_type
        label = entity_type or "Spec"
        super().__init__(f"{label} '{spec_id}' not found", details={"spec_id": spec_id})


class DuplicateEntityError(SpecError):
    """Raised when creating an entity whose number is already taken."""

    def __init__(self, entity_type: str, number: int, existing_path: str) -> None:
        self.entity_type = entity_type
        self.number = number
        self.existing_path = existing_path
        super().__init__(
            f"{entity_type} number {number} already exists at {existing_path}",
            details={"entity_type": entity_type, "number": number, "path": existing_path},
        )


class InvalidEntityIdError(SpecError):
    """Raised when an ID string does not follow the ``<prefix>-NNN-<slug>`` convention."""

    def __init__(self, value: str, reason: str = "expected format '<prefix>-NNN-<slug>'") -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid ID '{value}': {reason}", details={"value": value})


class SpecValidationError(SpecError):
    """Raised when entity data fails schema validation.

    Attributes:
        errors: Flattened ``"path: message"`` strings.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message, details={"errors": self.errors})
