"""Notification dispatcher stub.

Records every delivery in memory instead of sending it. Can be switched
into a failure mode to exercise the dispatch worker's error handling.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import structlog

from dinepick.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SentNotification:
    """One recorded delivery."""

    user_ids: tuple[UUID, ...]
    kind: str
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict, hash=False)
    batched: bool = False


class NotificationDispatcherStub(NotificationDispatcherProtocol):
    """In-memory dispatcher for development and tests.

    Attributes:
        sent: Deliveries in the order they were made.
        fail_with: If set, every call raises this exception instead.
    """

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []
        self.fail_with: Exception | None = None

    async def notify(
        self,
        user_id: UUID,
        kind: str,
        title: str,
        body: str,
        data: dict[str, Any],
    ) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(SentNotification((user_id,), kind, title, body, dict(data)))
        logger.debug("notification_recorded", kind=kind, recipients=1)

    async def notify_many(
        self,
        user_ids: Sequence[UUID],
        kind: str,
        title: str,
        body: str,
        data: dict[str, Any],
    ) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(
            SentNotification(tuple(user_ids), kind, title, body, dict(data), batched=True)
        )
        logger.debug("notification_recorded", kind=kind, recipients=len(user_ids))

    # Test helpers

    def of_kind(self, kind: str) -> list[SentNotification]:
        """Deliveries of one kind."""
        return [n for n in self.sent if n.kind == kind]

    def recipients_of(self, kind: str) -> list[UUID]:
        """Every recipient of a kind, flattened across deliveries."""
        return [u for n in self.of_kind(kind) for u in n.user_ids]

    def clear(self) -> None:
        self.sent.clear()
        self.fail_with = None
