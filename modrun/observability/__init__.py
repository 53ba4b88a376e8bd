"""Logging and tracing helpers."""

from .logging import configure_logging, get_invocation_id, invocation_context

__all__ = [
    "configure_logging",
    "get_invocation_id",
    "invocation_context",
]
