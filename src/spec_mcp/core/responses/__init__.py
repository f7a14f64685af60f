"""
Standard response contracts for MCP tool operations.

Re-exports the public symbols from the sub-modules so callers can use
``from spec_mcp.core.responses import success_response``.

Sub-modules:
    types           - ErrorCode, ErrorType, ToolResponse, _build_meta
    builders        - success_response, error_response
    errors_generic  - validation_error, not_found_error
"""

# --- Core types ---
from spec_mcp.core.responses.types import (  # noqa: F401
    ErrorCode,
    ErrorType,
    ToolResponse,
    _build_meta,
)

# --- Response builders ---
from spec_mcp.core.responses.builders import (  # noqa: F401
    error_response,
    success_response,
)

# --- Generic error helpers ---
from spec_mcp.core.responses.errors_generic import (  # noqa: F401
    not_found_error,
    validation_error,
)
