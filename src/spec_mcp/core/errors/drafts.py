"""Draft workflow error classes."""

from typing import List, Optional

from spec_mcp.core.errors.spec import SpecMcpError


class DraftError(SpecMcpError):
    """Raised when a draft operation is not valid in the draft's current stage."""


class DraftNotFoundError(DraftError):
    """Raised when a draft session ID is unknown."""

    def __init__(self, draft_id: str) -> None:
        self.draft_id = draft_id
        super().__init__(f"Draft '{draft_id}' not found", details={"draft_id": draft_id})


class DraftValidationError(DraftError):
    """Raised when finalize data does not satisfy the entity or item schema."""

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message, details={"errors": self.errors})
