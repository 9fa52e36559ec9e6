"""In-process notification queue backed by asyncio.Queue."""

from __future__ import annotations

import asyncio

from dinepick.application.ports.notification_queue import NotificationQueueProtocol
from dinepick.domain.models.notification import NotificationRequest


class InMemoryNotificationQueue(NotificationQueueProtocol):
    """FIFO queue shared by the outbox and the dispatch worker.

    Requests are lost on process exit; deployments that need durability
    plug a broker-backed implementation into the same port.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: asyncio.Queue[NotificationRequest] = asyncio.Queue(maxsize=maxsize)

    async def enqueue(self, request: NotificationRequest) -> None:
        await self._queue.put(request)

    async def dequeue_batch(self, max_items: int) -> list[NotificationRequest]:
        batch: list[NotificationRequest] = []
        while len(batch) < max_items:
            try:
                batch.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                break
        return batch

    async def pending_count(self) -> int:
        return self._queue.qsize()
