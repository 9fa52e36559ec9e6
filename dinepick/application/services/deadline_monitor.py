"""Deadline monitor background service.

Runs the deadline sweep on a fixed interval (five minutes by default).
Each cycle is independent: a failed cycle is logged and the loop carries
on at the next interval.

Note:
    This service should be started with the application lifecycle
    and stopped when the application shuts down.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional

import structlog

from dinepick.application.ports.time_authority import TimeAuthorityProtocol

if TYPE_CHECKING:
    from dinepick.application.services.deadline_enforcement_service import (
        DeadlineEnforcementService,
        DeadlineSweepResult,
    )

DEFAULT_SWEEP_INTERVAL_SECONDS: float = 300.0


class DeadlineMonitor:
    """Periodic driver for DeadlineEnforcementService.run_sweep.

    Attributes:
        running: Whether the monitor is currently running.
        interval_seconds: Seconds between sweeps.

    Example:
        >>> monitor = DeadlineMonitor(enforcement_service, time_authority)
        >>> await monitor.start()
        >>> # ... application runs ...
        >>> await monitor.stop()
    """

    def __init__(
        self,
        enforcement_service: "DeadlineEnforcementService",
        time_authority: TimeAuthorityProtocol,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._enforcement = enforcement_service
        self._time = time_authority
        self._interval = interval_seconds
        self._running: bool = False
        self._task: Optional[asyncio.Task[None]] = None
        self._cycles: int = 0
        self._log = structlog.get_logger().bind(service="deadline_monitor")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def cycles(self) -> int:
        """Completed sweep cycles since construction."""
        return self._cycles

    async def start(self) -> None:
        """Start the sweep loop. Calling start twice is a no-op."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        self._log.info("deadline_monitor_started", interval=self._interval)

    async def stop(self) -> None:
        """Stop the sweep loop and wait for it to finish."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._log.info("deadline_monitor_stopped", cycles=self._cycles)

    async def _run_loop(self) -> None:
        while self._running:
            try:
                started = self._time.monotonic()
                await self.run_once()
                elapsed = self._time.monotonic() - started

                # Sleep for remainder of interval
                await asyncio.sleep(max(0.0, self._interval - elapsed))

            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log.error("deadline_sweep_cycle_failed", error=str(e))
                await asyncio.sleep(self._interval)

    async def run_once(self) -> "DeadlineSweepResult":
        """Run a single sweep (also used by the one-shot script and tests)."""
        result = await self._enforcement.run_sweep()
        self._cycles += 1
        self._log.debug(
            "deadline_sweep_cycle_complete",
            examined=result.examined,
            failed=result.failed,
        )
        return result
