"""Unit tests for NotificationOutbox."""

from unittest.mock import AsyncMock
from uuid import uuid4

from dinepick.application.services.notification_outbox import NotificationOutbox
from dinepick.domain.models.notification import NotificationKind, NotificationRequest
from dinepick.infrastructure.adapters.messaging.in_memory_notification_queue import (
    InMemoryNotificationQueue,
)
from dinepick.infrastructure.monitoring.plan_metrics import PlanMetricsCollector
from tests.helpers.metrics import sample_total


def make_request(kind: NotificationKind = NotificationKind.PLAN_INVITE) -> NotificationRequest:
    return NotificationRequest(
        user_ids=(uuid4(),), kind=kind, title="t", body="b", data={"plan_id": "p"}
    )


class TestNotificationOutbox:
    async def test_publish_enqueues_in_order(
        self, notification_queue: InMemoryNotificationQueue
    ) -> None:
        first = make_request(NotificationKind.PLAN_INVITE)
        second = make_request(NotificationKind.VOTING_OPEN)

        accepted = await NotificationOutbox(notification_queue).publish([first, second])

        assert accepted == 2
        assert await notification_queue.dequeue_batch(10) == [first, second]

    async def test_enqueue_failure_is_swallowed(self) -> None:
        queue = AsyncMock()
        queue.enqueue.side_effect = [RuntimeError("queue full"), None]
        queue.pending_count.return_value = 1

        accepted = await NotificationOutbox(queue).publish([make_request(), make_request()])

        assert accepted == 1
        assert queue.enqueue.await_count == 2

    async def test_updates_queue_depth_gauge(
        self,
        notification_queue: InMemoryNotificationQueue,
        metrics: PlanMetricsCollector,
    ) -> None:
        outbox = NotificationOutbox(notification_queue, metrics=metrics)

        await outbox.publish([make_request(), make_request(), make_request()])

        assert sample_total(metrics.get_registry(), "plan_notification_queue_depth") == 3.0

    async def test_empty_publish_is_noop(
        self, notification_queue: InMemoryNotificationQueue
    ) -> None:
        assert await NotificationOutbox(notification_queue).publish([]) == 0
        assert await notification_queue.pending_count() == 0
