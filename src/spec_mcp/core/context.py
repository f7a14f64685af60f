"""Request-scoped context for correlation IDs.

Tool wrappers establish a correlation ID per invocation so responses, audit
events and metric lines emitted during that invocation can be tied together.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Return the correlation ID of the current request, or an empty string."""
    return _correlation_id.get()


def generate_correlation_id(prefix: str = "req") -> str:
    """Generate a new correlation ID such as ``spec_3f2a9c1b4d5e``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@contextmanager
def sync_request_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation ID for the duration of the block."""
    corr_id = correlation_id or generate_correlation_id()
    token = _correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        _correlation_id.reset(token)
