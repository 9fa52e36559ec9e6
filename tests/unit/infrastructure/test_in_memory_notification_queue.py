"""Unit tests for InMemoryNotificationQueue."""

from uuid import uuid4

from dinepick.domain.models.notification import NotificationKind, NotificationRequest
from dinepick.infrastructure.adapters.messaging.in_memory_notification_queue import (
    InMemoryNotificationQueue,
)


def request(title: str) -> NotificationRequest:
    return NotificationRequest(
        user_ids=(uuid4(),),
        kind=NotificationKind.VOTING_OPEN,
        title=title,
        body="Pick a place",
        data={"plan_id": "p1"},
    )


async def test_batches_in_fifo_order(notification_queue: InMemoryNotificationQueue) -> None:
    for title in ("a", "b", "c"):
        await notification_queue.enqueue(request(title))

    first = await notification_queue.dequeue_batch(2)
    rest = await notification_queue.dequeue_batch(10)

    assert [r.title for r in first] == ["a", "b"]
    assert [r.title for r in rest] == ["c"]
    assert await notification_queue.pending_count() == 0


async def test_empty_queue_returns_immediately(
    notification_queue: InMemoryNotificationQueue,
) -> None:
    assert await notification_queue.dequeue_batch(5) == []
