"""Logging configuration with invocation context."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from opentelemetry import trace

from modrun.config import get_settings

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s invocation_id=%(invocation_id)s "
    "trace_id=%(trace_id)s span_id=%(span_id)s %(message)s"
)

_invocation_id: ContextVar[str | None] = ContextVar("invocation_id", default=None)


def get_invocation_id() -> str | None:
    """Return the id of the invocation running in this context, if any."""
    return _invocation_id.get()


@contextmanager
def invocation_context(invocation_id: str) -> Iterator[None]:
    """Tag every record logged inside the block with ``invocation_id``.

    Concurrent invocations each run in their own task, so each sees only
    its own id.
    """
    token = _invocation_id.set(invocation_id)
    try:
        yield
    finally:
        _invocation_id.reset(token)


class InvocationContextFilter(logging.Filter):
    """Attach invocation_id and the active span ids to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context and span_context.is_valid:
            record.trace_id = format(span_context.trace_id, "032x")
            record.span_id = format(span_context.span_id, "016x")
        else:
            record.trace_id = "-"
            record.span_id = "-"
        if not getattr(record, "invocation_id", None):
            record.invocation_id = get_invocation_id() or "-"
        return True


def configure_logging(level: str | None = None) -> None:
    """Configure root logging to include invocation context."""
    settings = get_settings()
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    context_filter = InvocationContextFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(context_filter)
