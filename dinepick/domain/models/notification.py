"""Notification request model.

Plan services describe who should hear about a state change as
NotificationRequest values. Delivery happens later, outside the
transaction that produced them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import UUID


class NotificationKind(Enum):
    """Kinds of notifications emitted by the plan core."""

    PLAN_INVITE = "plan_invite"
    GROUP_SWIPE_INVITE = "group_swipe_invite"
    RSVP_RESPONSE = "rsvp_response"
    SWIPE_COMPLETED = "swipe_completed"
    GROUP_SWIPE_RESULT = "group_swipe_result"
    RSVP_DEADLINE_PASSED = "rsvp_deadline_passed"
    RSVP_DEADLINE_MISSED_ORGANIZER = "rsvp_deadline_missed_organizer"
    VOTING_OPEN = "voting_open"
    PLAN_CANCELLED = "plan_cancelled"
    PLAN_AUTO_CANCELLED = "plan_auto_cancelled"
    PARTICIPANT_LEFT = "participant_left"
    ORGANIZER_DELEGATED = "organizer_delegated"
    ORGANIZER_CHANGED = "organizer_changed"


@dataclass(frozen=True, eq=True)
class NotificationRequest:
    """A notification addressed to one or more users.

    A request with a single recipient is delivered with ``notify``;
    more than one recipient goes through ``notify_many`` as one batch.

    Attributes:
        user_ids: Recipients, in delivery order, without duplicates.
        kind: Notification kind.
        title: Short title.
        body: Message body.
        data: Context data (always includes plan_id).
    """

    user_ids: tuple[UUID, ...]
    kind: NotificationKind
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict, hash=False, compare=True)

    @property
    def is_batch(self) -> bool:
        return len(self.user_ids) > 1

    def to_dict(self) -> dict[str, Any]:
        """Serialize for queues and webhook payloads."""
        return {
            "user_ids": [str(u) for u in self.user_ids],
            "kind": self.kind.value,
            "title": self.title,
            "body": self.body,
            "data": dict(self.data),
        }
