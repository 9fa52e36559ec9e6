"""Notification outbox.

Services publish through the outbox only after their save succeeded.
Enqueue failures are logged and swallowed: a notification problem never
rolls back or fails an already-committed state change.
"""

from __future__ import annotations

from collections.abc import Iterable

from dinepick.application.ports.notification_queue import NotificationQueueProtocol
from dinepick.application.services.base import LoggingMixin
from dinepick.domain.models.notification import NotificationRequest
from dinepick.infrastructure.monitoring.plan_metrics import PlanMetricsCollector


class NotificationOutbox(LoggingMixin):
    """Hands committed notifications to the notification queue."""

    def __init__(
        self,
        queue: NotificationQueueProtocol,
        metrics: PlanMetricsCollector | None = None,
    ) -> None:
        self._queue = queue
        self._metrics = metrics
        self._init_logger(component="notifications")

    async def publish(self, requests: Iterable[NotificationRequest]) -> int:
        """Enqueue requests, returning how many were accepted."""
        accepted = 0
        for request in requests:
            try:
                await self._queue.enqueue(request)
            except Exception as exc:
                self._log_operation(
                    "publish",
                    kind=request.kind.value,
                    plan_id=request.data.get("plan_id"),
                ).error("notification_enqueue_failed", error=str(exc))
                continue
            accepted += 1

        if accepted and self._metrics is not None:
            self._metrics.set_queue_depth(await self._queue.pending_count())
        return accepted
