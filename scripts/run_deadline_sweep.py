#!/usr/bin/env python3
"""Deadline sweep: decline overdue invites, open voting, decide at event time.

Runs the same sweep the in-process DeadlineMonitor runs every five
minutes. One-shot by default; ``--loop`` keeps the monitor and the
notification dispatch worker running until interrupted.

Usage:
    python scripts/run_deadline_sweep.py -v
    python scripts/run_deadline_sweep.py --backend postgres
    python scripts/run_deadline_sweep.py --as-of 2026-05-01T19:30:00+00:00
    python scripts/run_deadline_sweep.py --loop --interval 60
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from dataclasses import replace
from datetime import datetime, timezone

import structlog

from dinepick.bootstrap.database import close_database_engine
from dinepick.bootstrap.logging import configure_structlog
from dinepick.bootstrap.planning import (
    PLAN_BACKENDS,
    build_planning_container,
    get_notification_dispatcher,
    get_notification_queue,
    get_plan_config,
    get_plan_repository,
    get_time_authority,
    get_user_directory,
)
from dinepick.infrastructure.adapters.persistence.postgres_plan_repository import (
    PostgresPlanRepository,
)
from dinepick.infrastructure.monitoring.plan_metrics import get_plan_metrics_collector


def parse_as_of(value: str) -> datetime:
    """argparse type for --as-of; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument(
        "--backend",
        choices=PLAN_BACKENDS,
        default=None,
        help="Plan storage backend (default: $DINEPICK_PLAN_BACKEND or memory)",
    )
    parser.add_argument(
        "--as-of",
        type=parse_as_of,
        default=None,
        help="Evaluate deadlines as of this instant instead of now (one-shot only)",
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Keep sweeping on an interval until interrupted",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between sweeps with --loop (default: from config)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


async def run(args: argparse.Namespace) -> int:
    log = structlog.get_logger().bind(script="run_deadline_sweep")
    config = get_plan_config()
    if args.interval is not None:
        config = replace(config, deadline_sweep_interval_seconds=args.interval)

    repository = get_plan_repository()
    if isinstance(repository, PostgresPlanRepository):
        await repository.create_schema()

    container = build_planning_container(
        repository=repository,
        queue=get_notification_queue(),
        dispatcher=get_notification_dispatcher(),
        user_directory=get_user_directory(),
        time_authority=get_time_authority(),
        config=config,
        metrics=get_plan_metrics_collector(),
    )

    try:
        if not args.loop:
            result = await container.deadlines.run_sweep(as_of=args.as_of)
            await container.dispatch_worker.drain()
            print(json.dumps(result.to_dict(), indent=2))
            return 1 if result.failed else 0

        await container.start()
        log.info(
            "deadline_sweep_loop_started",
            interval=container.deadline_monitor.interval_seconds,
        )
        try:
            await asyncio.Event().wait()
        finally:
            await container.stop()
        return 0
    finally:
        await close_database_engine()


def main() -> int:
    args = build_parser().parse_args()
    if args.as_of is not None and args.loop:
        print("--as-of cannot be combined with --loop", file=sys.stderr)
        return 2
    if args.backend is not None:
        os.environ["DINEPICK_PLAN_BACKEND"] = args.backend
    configure_structlog(level="DEBUG" if args.verbose else None)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
