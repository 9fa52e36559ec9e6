"""Notification dispatcher port.

Delivers user-facing notifications (push, in-app, webhook). The plan core
only ever calls it after a state change has been persisted.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol
from uuid import UUID


class NotificationDispatcherProtocol(Protocol):
    """Port for delivering notifications to users.

    Delivery failures may be raised; the dispatch worker logs and counts
    them, and never lets them reach the state-changing operation.
    """

    async def notify(
        self,
        user_id: UUID,
        kind: str,
        title: str,
        body: str,
        data: dict[str, Any],
    ) -> None:
        """Deliver one notification to one user.

        Args:
            user_id: Recipient.
            kind: Notification kind (e.g. "voting_open").
            title: Short title.
            body: Message body.
            data: Context data, always including plan_id.
        """
        ...

    async def notify_many(
        self,
        user_ids: Sequence[UUID],
        kind: str,
        title: str,
        body: str,
        data: dict[str, Any],
    ) -> None:
        """Deliver the same notification to several users as one batch."""
        ...
