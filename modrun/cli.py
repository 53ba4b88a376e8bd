"""Command line entrypoint for running plugins."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from modrun.batch import build_requests, load_batch
from modrun.config import get_settings
from modrun.contract import (
    ContractEngine,
    ExecutionReport,
    InvocationRequest,
    ModrunError,
    OutcomeKind,
)
from modrun.observability import configure_logging
from modrun.plugins import build_catalog

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_VIOLATION = 2
EXIT_USAGE = 64

_EXIT_BY_OUTCOME = {
    OutcomeKind.SUCCESS: EXIT_OK,
    OutcomeKind.SUCCESS_NO_CHANGE: EXIT_OK,
    OutcomeKind.FAILED: EXIT_FAILED,
    OutcomeKind.CONTRACT_VIOLATION: EXIT_VIOLATION,
}


def exit_code_for(reports: Sequence[ExecutionReport]) -> int:
    """Worst outcome across ``reports`` mapped to a process exit code."""
    return max((_EXIT_BY_OUTCOME[r.outcome.kind] for r in reports), default=EXIT_OK)


def parse_params(pairs: Sequence[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected name=value, got {pair!r}")
        params[name] = value
    return params


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="modrun", description="Run configuration plugins.")
    parser.add_argument("--log-level", default=None, help="override MODRUN_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="run one plugin and print its report")
    run.add_argument("plugin", help="plugin name or path to executable")
    run.add_argument("params", nargs="*", metavar="name=value")
    run.add_argument("--timeout", type=float, default=None, help="seconds before the plugin is killed")

    batch = sub.add_parser("batch", help="run every invocation listed in a YAML file")
    batch.add_argument("file", type=Path)
    batch.add_argument("--concurrency", type=int, default=None)

    sub.add_parser("list", help="list plugins found on MODRUN_PLUGIN_PATHS")
    return parser


def _print_json(payload) -> None:
    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    settings = get_settings()
    catalog = build_catalog(settings.plugin_dirs)

    if args.command == "list":
        for name in catalog.list_names():
            print(f"{name}\t{catalog.get(name)}")
        return EXIT_OK

    engine = ContractEngine(settings)
    try:
        if args.command == "run":
            request = InvocationRequest(
                plugin_path=catalog.resolve(args.plugin),
                params=parse_params(args.params),
                timeout=args.timeout,
            )
            report = asyncio.run(engine.run(request))
            _print_json(report.to_dict())
            return exit_code_for([report])

        batch = load_batch(args.file)
        requests = build_requests(batch, catalog)
        concurrency = args.concurrency if args.concurrency is not None else batch.concurrency
        reports = asyncio.run(engine.run_all(requests, concurrency))
        _print_json([r.to_dict() for r in reports])
        return exit_code_for(reports)
    except (ModrunError, ValueError) as exc:
        logger.error("cli_usage_error", extra={"error": str(exc)})
        print(f"modrun: {exc}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
