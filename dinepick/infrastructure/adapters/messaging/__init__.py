"""Messaging adapters."""

from dinepick.infrastructure.adapters.messaging.in_memory_notification_queue import (
    InMemoryNotificationQueue,
)

__all__ = ["InMemoryNotificationQueue"]
