"""Trace context for correlating the log entries of one refresh run."""

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

_trace_id_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "trace_id", default=None
)


def get_current_trace() -> str | None:
    """Return the trace ID of the run in progress, or None outside a run."""
    return _trace_id_context.get()


@contextmanager
def traced(trace_id: str | None = None) -> Iterator[str]:
    """
    Bind a trace ID to the current context for the duration of a block.

    A nested block reuses the enclosing trace unless an explicit ID is given,
    so a custom-date refresh started from a full refresh shares its trace.

    Args:
        trace_id: Explicit trace ID; a UUID4 is generated when omitted

    Yields:
        The trace ID in effect inside the block
    """
    current = _trace_id_context.get()
    effective = trace_id or current or str(uuid.uuid4())
    token = _trace_id_context.set(effective)
    try:
        yield effective
    finally:
        _trace_id_context.reset(token)
