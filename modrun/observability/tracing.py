"""OpenTelemetry spans around plugin invocations."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from modrun.config import get_settings
from modrun.contract.models import ExecutionReport, InvocationRequest

SPAN_NAME = "modrun.invoke"


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(get_settings().otel_service_name)


@contextmanager
def invocation_span(request: InvocationRequest) -> Iterator[Span]:
    """Open a span covering one invocation.

    Without an SDK tracer provider configured this is a no-op span.
    """
    with get_tracer().start_as_current_span(SPAN_NAME) as span:
        span.set_attribute("modrun.invocation_id", request.invocation_id)
        span.set_attribute("modrun.plugin", str(request.plugin_path))
        span.set_attribute("modrun.param_count", len(request.params))
        yield span


def record_report(span: Span, report: ExecutionReport) -> None:
    """Copy the classified outcome onto ``span``."""
    span.set_attribute("modrun.outcome", report.outcome.kind.value)
    span.set_attribute("modrun.changed", report.outcome.changed)
    if report.exit_code is not None:
        span.set_attribute("modrun.exit_code", report.exit_code)
    if report.outcome.reason is not None:
        span.set_attribute("modrun.violation_reason", report.outcome.reason.value)
        span.set_status(Status(StatusCode.ERROR, report.outcome.reason.value))
