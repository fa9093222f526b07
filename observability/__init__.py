"""Observability infrastructure: logging context and optional tracing.

setup_logging / request_context:
    Console + rotating file logging with a per-operation request id.

setup_tracing / trace_operation:
    Optional Logfire spans around memory operations.

Requirements (tracing only):
    pip install logfire

Example:
    >>> from observability import setup_tracing, trace_operation
    >>> setup_tracing(enabled=True, service_name="fable")
    >>> with trace_operation("rehydrate"):
    ...     pass
"""

from observability.logging import setup_logging, request_context
from observability.tracing import setup_tracing, trace_operation, TracingContext

__all__ = [
    "setup_logging",
    "request_context",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
]
