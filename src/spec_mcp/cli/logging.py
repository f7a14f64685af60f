"""CLI logging helpers.

stdout carries the JSON envelope, so log records only reach stderr when
``--verbose`` is given.
"""

import functools
import logging
import time
from typing import Any, Callable, TypeVar

from spec_mcp.cli.output import emit_error, emit_response
from spec_mcp.core.errors import SpecMcpError, error_to_response
from spec_mcp.core.observability import get_metrics

F = TypeVar("F", bound=Callable[..., Any])

_metrics = get_metrics()


def get_cli_logger() -> logging.Logger:
    return logging.getLogger("spec_mcp.cli")


def configure_cli_logging(verbose: bool = False) -> None:
    package_logger = logging.getLogger("spec_mcp")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    if verbose:
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        package_logger.setLevel(logging.DEBUG)
    else:
        handler = logging.NullHandler()
    package_logger.addHandler(handler)


def cli_command(name: str) -> Callable[[F], F]:
    """Time a command and turn uncaught errors into JSON error envelopes."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = get_cli_logger()
            start = time.perf_counter()
            status = "success"
            try:
                return func(*args, **kwargs)
            except SystemExit as exc:
                if exc.code not in (0, None):
                    status = "error"
                raise
            except SpecMcpError as exc:
                status = "error"
                logger.warning("Command %s failed: %s", name, exc)
                mapped = error_to_response(exc)
                if mapped is not None:
                    emit_response(mapped)
                emit_error(str(exc), code="OPERATION_FAILED", error_type="conflict")
            except Exception as exc:
                status = "error"
                logger.exception("Command %s crashed", name)
                emit_error(
                    f"Command '{name}' failed: {exc}",
                    code="INTERNAL_ERROR",
                    error_type="internal",
                    details={"command": name, "error_type": type(exc).__name__},
                )
            finally:
                duration_ms = (time.perf_counter() - start) * 1000
                _metrics.counter("cli.command", labels={"command": name, "status": status})
                logger.debug("Command %s finished in %.1fms (%s)", name, duration_ms, status)

        return wrapper  # type: ignore[return-value]

    return decorator
