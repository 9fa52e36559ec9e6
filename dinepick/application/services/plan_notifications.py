"""Notification composition for plan state changes.

Builds the NotificationRequest values that services hand to the outbox
after a successful save. Recipient sets are computed from the plan as
saved, so they always reflect the final membership.

Name resolution never fails: a directory error or unknown user falls
back to the invite's name snapshot, then to "Someone".
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from dinepick.application.ports.user_directory import UserDirectoryProtocol
from dinepick.application.services.base import LoggingMixin
from dinepick.domain.models.notification import NotificationKind, NotificationRequest
from dinepick.domain.models.plan import (
    InviteStatus,
    Plan,
    PlanInvite,
    PlanKind,
    RestaurantOption,
)

FALLBACK_NAME = "Someone"


def _unique(user_ids: Iterable[UUID]) -> tuple[UUID, ...]:
    return tuple(dict.fromkeys(user_ids))


class PlanNotificationComposer(LoggingMixin):
    """Composes user-facing notifications for plan events.

    Methods return a list of requests (possibly empty) so callers can
    simply extend their pending notifications.
    """

    def __init__(self, user_directory: UserDirectoryProtocol) -> None:
        self._users = user_directory
        self._init_logger(component="notifications")

    async def display_name(self, user_id: UUID, snapshot: str | None = None) -> str:
        """Resolve a display name, falling back to snapshot then "Someone"."""
        try:
            name = await self._users.get_display_name(user_id)
        except Exception as exc:
            self._log_operation("display_name", user_id=str(user_id)).warning(
                "display_name_lookup_failed", error=str(exc)
            )
            name = None
        return name or snapshot or FALLBACK_NAME

    def _request(
        self,
        plan: Plan,
        recipients: Iterable[UUID],
        kind: NotificationKind,
        title: str,
        body: str,
        **extra: Any,
    ) -> list[NotificationRequest]:
        user_ids = _unique(recipients)
        if not user_ids:
            return []
        data: dict[str, Any] = {"plan_id": str(plan.id)}
        data.update(extra)
        return [NotificationRequest(user_ids=user_ids, kind=kind, title=title, body=body, data=data)]

    # -------------------------------------------------------------------------
    # Creation and responses
    # -------------------------------------------------------------------------

    def invitations(self, plan: Plan, owner_name: str) -> list[NotificationRequest]:
        """Invite every invitee to a new plan."""
        recipients = [i.user_id for i in plan.invites]
        if plan.kind is PlanKind.GROUP_SWIPE:
            return self._request(
                plan,
                recipients,
                NotificationKind.GROUP_SWIPE_INVITE,
                "Group Swipe Started!",
                f"{owner_name} started a group swipe — tap to vote!",
            )
        return self._request(
            plan,
            recipients,
            NotificationKind.PLAN_INVITE,
            "Dining Plan Invite",
            f'{owner_name} invited you to "{plan.title}"',
        )

    def rsvp_response(self, plan: Plan, invite: PlanInvite, name: str) -> list[NotificationRequest]:
        """Tell the owner an invitee accepted or declined."""
        accepted = invite.status is InviteStatus.ACCEPTED
        verb = "accepted" if accepted else "declined"
        return self._request(
            plan,
            [plan.owner_id],
            NotificationKind.RSVP_RESPONSE,
            "RSVP Accepted" if accepted else "RSVP Declined",
            f'{name} {verb} your invite to "{plan.title}"',
            status=invite.status.value,
        )

    def swipe_completed(self, plan: Plan, swiper_id: UUID, name: str) -> list[NotificationRequest]:
        """Tell the other required participants someone finished swiping."""
        recipients = [u for u in plan.required_participant_ids() if u != swiper_id]
        return self._request(
            plan,
            recipients,
            NotificationKind.SWIPE_COMPLETED,
            "Swipe Update",
            f'{name} finished swiping for "{plan.title}"',
        )

    def group_pick_decided(
        self,
        plan: Plan,
        winner: RestaurantOption,
        exclude: UUID | None = None,
    ) -> list[NotificationRequest]:
        """Announce a quorum-decided winner to the required participants."""
        recipients = [u for u in plan.required_participant_ids() if u != exclude]
        return self._request(
            plan,
            recipients,
            NotificationKind.GROUP_SWIPE_RESULT,
            "Group Pick Decided!",
            f'The group picked {winner.name} for "{plan.title}"',
            restaurant_id=winner.id,
        )

    # -------------------------------------------------------------------------
    # Deadline sweep
    # -------------------------------------------------------------------------

    def deadline_declines(
        self, plan: Plan, declined: Iterable[PlanInvite]
    ) -> list[NotificationRequest]:
        """Tell each auto-declined invitee, and the owner about each of them."""
        requests: list[NotificationRequest] = []
        for invite in declined:
            requests += self._request(
                plan,
                [invite.user_id],
                NotificationKind.RSVP_DEADLINE_PASSED,
                "RSVP Deadline Passed",
                f"You didn't respond to \"{plan.title}\" in time. "
                "You've been removed from the plan.",
            )
            requests += self._request(
                plan,
                [plan.owner_id],
                NotificationKind.RSVP_DEADLINE_MISSED_ORGANIZER,
                "RSVP Deadline Missed",
                f'{invite.name or FALLBACK_NAME} didn\'t respond to "{plan.title}" '
                "before the deadline.",
                user_id=str(invite.user_id),
            )
        return requests

    def voting_open(self, plan: Plan) -> list[NotificationRequest]:
        """Tell the owner and accepted invitees that voting has opened."""
        recipients = [plan.owner_id] + [i.user_id for i in plan.accepted_invites]
        return self._request(
            plan,
            recipients,
            NotificationKind.VOTING_OPEN,
            "Voting is Open!",
            f'RSVP deadline passed for "{plan.title}". Time to vote on restaurants!',
        )

    def restaurant_picked(self, plan: Plan, winner: RestaurantOption) -> list[NotificationRequest]:
        """Announce an event-time auto-confirmation to owner and accepted invitees."""
        recipients = [plan.owner_id] + [i.user_id for i in plan.accepted_invites]
        return self._request(
            plan,
            recipients,
            NotificationKind.GROUP_SWIPE_RESULT,
            "Restaurant Picked!",
            f'The group picked {winner.name} for "{plan.title}"',
            restaurant_id=winner.id,
        )

    # -------------------------------------------------------------------------
    # Membership and status
    # -------------------------------------------------------------------------

    def plan_cancelled(self, plan: Plan, owner_name: str | None) -> list[NotificationRequest]:
        """Tell every invitee the owner cancelled the plan."""
        return self._request(
            plan,
            [i.user_id for i in plan.invites],
            NotificationKind.PLAN_CANCELLED,
            "Plan Cancelled",
            f'"{plan.title}" has been cancelled by {owner_name or "the organizer"}',
        )

    def plan_auto_cancelled(self, plan: Plan) -> list[NotificationRequest]:
        """Tell the owner the plan lost its last accepted invitee."""
        return self._request(
            plan,
            [plan.owner_id],
            NotificationKind.PLAN_AUTO_CANCELLED,
            "Plan Auto-Cancelled",
            f'"{plan.title}" was cancelled — not enough participants',
        )

    def participant_left(self, plan: Plan, name: str) -> list[NotificationRequest]:
        """Tell the owner and remaining invitees someone left."""
        recipients = [plan.owner_id] + [i.user_id for i in plan.invites]
        return self._request(
            plan,
            recipients,
            NotificationKind.PARTICIPANT_LEFT,
            "Participant Left",
            f'{name} has left "{plan.title}"',
        )

    def organizer_delegated(
        self, plan: Plan, previous_owner_name: str
    ) -> list[NotificationRequest]:
        """Tell the new owner they now run the plan."""
        return self._request(
            plan,
            [plan.owner_id],
            NotificationKind.ORGANIZER_DELEGATED,
            "You're Now the Organizer",
            f'{previous_owner_name} made you the organizer of "{plan.title}"',
        )

    def organizer_changed(self, plan: Plan, new_owner_name: str) -> list[NotificationRequest]:
        """Tell the remaining invitees who the new owner is."""
        return self._request(
            plan,
            [i.user_id for i in plan.invites],
            NotificationKind.ORGANIZER_CHANGED,
            "New Organizer",
            f'{new_owner_name} is now the organizer of "{plan.title}"',
            owner_id=str(plan.owner_id),
        )
