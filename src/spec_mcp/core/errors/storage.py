"""Storage error classes."""

from typing import Optional

from spec_mcp.core.errors.spec import SpecMcpError


class StorageError(SpecMcpError):
    """Raised when a YAML file cannot be read, parsed or written.

    Attributes:
        path: File the operation targeted.
        reason: Underlying failure description.
    """

    def __init__(self, message: str, path: Optional[str] = None, reason: Optional[str] = None) -> None:
        details = {}
        if path:
            details["path"] = path
        if reason:
            details["reason"] = reason
        super().__init__(message, details=details)
        self.path = path
        self.reason = reason
