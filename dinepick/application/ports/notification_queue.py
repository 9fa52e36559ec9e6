"""Notification queue port.

Buffers NotificationRequest values between the service that produced
them and the worker that delivers them.
"""

from __future__ import annotations

from typing import Protocol

from dinepick.domain.models.notification import NotificationRequest


class NotificationQueueProtocol(Protocol):
    """Protocol for a FIFO notification queue."""

    async def enqueue(self, request: NotificationRequest) -> None:
        """Append a request to the queue."""
        ...

    async def dequeue_batch(self, max_items: int) -> list[NotificationRequest]:
        """Remove and return up to max_items requests in FIFO order.

        Returns an empty list immediately if the queue is empty.
        """
        ...

    async def pending_count(self) -> int:
        """Number of requests waiting for delivery."""
        ...
