"""Caller-facing entry points: run one invocation or a bounded batch."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from modrun.config import Settings, get_settings
from modrun.observability.logging import invocation_context
from modrun.observability.tracing import invocation_span, record_report

from .classifier import classify
from .encoder import argument_file
from .errors import LaunchError
from .invoker import PluginInvoker
from .models import ExecutionReport, InvocationRequest, Outcome, OutcomeKind, RawOutput, ViolationReason
from .parser import parse_output

logger = logging.getLogger(__name__)


class ContractEngine:
    """Runs plugins under the argument-file / JSON-stdout contract.

    Every invocation is independent: its own argument file, its own child
    process, its own report. A plugin that cannot be launched or that breaks
    the contract produces a ``ContractViolation`` report; only a malformed
    parameter set (``EncodingError``) is raised to the caller, and that
    happens before anything is spawned.
    """

    def __init__(self, settings: Settings | None = None, invoker: PluginInvoker | None = None) -> None:
        self.settings = settings or get_settings()
        self.invoker = invoker or PluginInvoker(
            env_passthrough=self.settings.env_passthrough,
            default_timeout=self.settings.default_timeout_seconds,
        )

    async def run(self, request: InvocationRequest) -> ExecutionReport:
        """Run one plugin invocation and return its report."""

        with invocation_context(request.invocation_id), invocation_span(request) as span:
            report = await self._run(request)
            record_report(span, report)
        return report

    async def run_all(
        self,
        requests: Sequence[InvocationRequest],
        concurrency_limit: int | None = None,
    ) -> list[ExecutionReport]:
        """Run many invocations with at most ``concurrency_limit`` in flight.

        Returns one report per request, in request order; ``report.request``
        is the originating request object.
        """

        limit = concurrency_limit if concurrency_limit is not None else self.settings.max_concurrency
        if limit < 1:
            raise ValueError("Concurrency limit must be at least 1")

        semaphore = asyncio.Semaphore(limit)

        async def _bounded(request: InvocationRequest) -> ExecutionReport:
            async with semaphore:
                return await self.run(request)

        logger.info("plugin_batch_started", extra={"count": len(requests), "concurrency": limit})
        reports = await asyncio.gather(*(_bounded(request) for request in requests))
        logger.info(
            "plugin_batch_completed",
            extra={
                "count": len(reports),
                "failed": sum(1 for r in reports if r.outcome.kind is OutcomeKind.FAILED),
                "violations": sum(
                    1 for r in reports if r.outcome.kind is OutcomeKind.CONTRACT_VIOLATION
                ),
            },
        )
        return list(reports)

    async def _run(self, request: InvocationRequest) -> ExecutionReport:
        started_at = datetime.now(timezone.utc)
        logger.info(
            "plugin_invocation_started",
            extra={"plugin": str(request.plugin_path), "param_count": len(request.params)},
        )

        try:
            with argument_file(request.params, directory=self.settings.temp_dir) as path:
                raw = await self.invoker.invoke(request, path)
        except (LaunchError, OSError) as exc:
            # OSError here means the argument file could not be written.
            logger.error(
                "plugin_launch_failed",
                extra={"plugin": str(request.plugin_path), "error": str(exc)},
            )
            return ExecutionReport(
                request=request,
                outcome=Outcome.violation(ViolationReason.LAUNCH_FAILED, str(exc)),
                raw=RawOutput(),
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
            )

        parsed = None if raw.timed_out else parse_output(raw)
        outcome = classify(raw, parsed)
        report = ExecutionReport(
            request=request,
            outcome=outcome,
            raw=raw,
            record=parsed.record if parsed is not None else None,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )

        if outcome.kind is OutcomeKind.CONTRACT_VIOLATION:
            logger.warning(
                "plugin_contract_violation",
                extra={
                    "plugin": str(request.plugin_path),
                    "reason": outcome.reason.value if outcome.reason else None,
                    "exit_code": raw.exit_code,
                    "detail": outcome.message,
                },
            )
        logger.info(
            "plugin_invocation_completed",
            extra={
                "plugin": str(request.plugin_path),
                "outcome": outcome.kind.value,
                "changed": outcome.changed,
                "exit_code": raw.exit_code,
                "duration_seconds": report.duration_seconds,
            },
        )
        return report


def run_sync(request: InvocationRequest, engine: ContractEngine | None = None) -> ExecutionReport:
    """Blocking wrapper around :meth:`ContractEngine.run`."""
    return asyncio.run((engine or ContractEngine()).run(request))


def run_all_sync(
    requests: Sequence[InvocationRequest],
    concurrency_limit: int | None = None,
    engine: ContractEngine | None = None,
) -> list[ExecutionReport]:
    """Blocking wrapper around :meth:`ContractEngine.run_all`."""
    return asyncio.run((engine or ContractEngine()).run_all(requests, concurrency_limit))
