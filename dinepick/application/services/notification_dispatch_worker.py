"""Notification dispatch worker.

Drains the notification queue and delivers each request through the
dispatcher port. A request with one recipient goes through ``notify``;
more than one goes through ``notify_many`` as a single batch.

Delivery failures are logged and counted, never re-raised: by the time a
notification is queued, the state change it describes is already
committed.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from dinepick.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from dinepick.application.ports.notification_queue import NotificationQueueProtocol
from dinepick.domain.models.notification import NotificationRequest
from dinepick.infrastructure.monitoring.plan_metrics import PlanMetricsCollector


class NotificationDispatchWorker:
    """Background worker delivering queued notifications.

    Attributes:
        running: Whether the worker loop is active.
        delivered: Requests delivered since construction.
        failed: Requests whose delivery raised.
    """

    def __init__(
        self,
        queue: NotificationQueueProtocol,
        dispatcher: NotificationDispatcherProtocol,
        metrics: PlanMetricsCollector | None = None,
        interval_seconds: float = 1.0,
        batch_size: int = 100,
    ) -> None:
        self._queue = queue
        self._dispatcher = dispatcher
        self._metrics = metrics
        self._interval = interval_seconds
        self._batch_size = batch_size
        self._running: bool = False
        self._task: Optional[asyncio.Task[None]] = None
        self.delivered: int = 0
        self.failed: int = 0
        self._log = structlog.get_logger().bind(service="notification_dispatch_worker")

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the drain loop. Calling start twice is a no-op."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        self._log.info("notification_worker_started", interval=self._interval)

    async def stop(self) -> None:
        """Stop the loop, then deliver whatever is still queued."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        remaining = await self.drain()
        self._log.info(
            "notification_worker_stopped",
            delivered=self.delivered,
            failed=self.failed,
            flushed_on_stop=remaining,
        )

    async def _run_loop(self) -> None:
        while self._running:
            try:
                processed = await self.drain_once()
                if processed == 0:
                    await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log.error("notification_drain_failed", error=str(e))
                await asyncio.sleep(self._interval)

    async def drain_once(self) -> int:
        """Deliver one batch. Returns the number of requests processed."""
        batch = await self._queue.dequeue_batch(self._batch_size)
        for request in batch:
            await self._deliver(request)
        if batch and self._metrics is not None:
            self._metrics.set_queue_depth(await self._queue.pending_count())
        return len(batch)

    async def drain(self) -> int:
        """Deliver until the queue is empty. Returns requests processed."""
        total = 0
        while True:
            processed = await self.drain_once()
            if processed == 0:
                return total
            total += processed

    async def _deliver(self, request: NotificationRequest) -> None:
        kind = request.kind.value
        try:
            if request.is_batch:
                await self._dispatcher.notify_many(
                    list(request.user_ids), kind, request.title, request.body, dict(request.data)
                )
            else:
                await self._dispatcher.notify(
                    request.user_ids[0], kind, request.title, request.body, dict(request.data)
                )
        except Exception as e:
            self.failed += 1
            self._log.error(
                "notification_delivery_failed",
                kind=kind,
                plan_id=request.data.get("plan_id"),
                recipients=len(request.user_ids),
                error=str(e),
            )
            if self._metrics is not None:
                self._metrics.record_notification(kind, "failed")
            return

        self.delivered += 1
        if self._metrics is not None:
            self._metrics.record_notification(kind, "delivered")
