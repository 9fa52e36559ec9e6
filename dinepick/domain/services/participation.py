"""Participation rules for plans.

Pure functions that validate and apply participant actions (RSVP, swipe,
leave, delegate) to a Plan. Each function either raises a domain error
before touching anything, or returns a new Plan together with what
happened. Callers persist the returned plan and notify afterwards.

Quorum:
    The required participant set is the owner plus every invitee who has
    not declined. When every required participant has finished swiping,
    the tally runs and the plan is confirmed with the winner.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo
from uuid import UUID

from dinepick.domain.errors.plan import (
    AlreadyRespondedError,
    AlreadySwipedError,
    DeadlinePassedError,
    InvalidCandidateError,
    NotAParticipantError,
    NotEligibleError,
    NotOrganizerError,
    OwnerCannotLeaveError,
    PastEventError,
    TooFewParticipantsError,
    VotingNotOpenError,
)
from dinepick.domain.errors.state_transition import PlanNotOpenError
from dinepick.domain.models.plan import (
    InviteStatus,
    Plan,
    PlanInvite,
    PlanKind,
    PlanStatus,
    RestaurantOption,
)
from dinepick.domain.services.event_schedule import compute_event_instant
from dinepick.domain.services.vote_tally import tally_winner


@dataclass(frozen=True)
class RsvpOutcome:
    """Result of an RSVP.

    Attributes:
        plan: Plan after the response.
        invite: The responder's updated invite.
        winner: Set if a decline completed the quorum and confirmed the plan.
    """

    plan: Plan
    invite: PlanInvite
    winner: RestaurantOption | None = None


@dataclass(frozen=True)
class SwipeOutcome:
    """Result of a swipe submission.

    Attributes:
        plan: Plan after the votes were recorded.
        auto_accepted: True if the swipe accepted a pending invite.
        winner: Set if this submission completed the quorum.
    """

    plan: Plan
    auto_accepted: bool = False
    winner: RestaurantOption | None = None


@dataclass(frozen=True)
class LeaveOutcome:
    """Result of a participant leaving.

    Attributes:
        plan: Plan after removal.
        departed: The removed invite.
        auto_cancelled: True if the departure left no accepted invitees.
    """

    plan: Plan
    departed: PlanInvite
    auto_cancelled: bool = False


@dataclass(frozen=True)
class DelegationOutcome:
    """Result of handing the organizer role to an invitee."""

    plan: Plan
    previous_owner_id: UUID
    new_owner: PlanInvite


def event_instant(plan: Plan, tz: tzinfo) -> datetime | None:
    """Return the plan's event instant, or None if it has no usable date."""
    return compute_event_instant(plan.date, plan.time, tz)


def resolve_if_complete(
    plan: Plan, now: datetime
) -> tuple[Plan, RestaurantOption | None]:
    """Tally and confirm the plan if every required participant is done.

    Args:
        plan: Plan to check.
        now: Timestamp for the confirmation.

    Returns:
        (plan, winner). The plan is unchanged and winner is None when the
        quorum is incomplete, the plan is not voting, or there is nothing
        to pick from.
    """
    if plan.status is not PlanStatus.VOTING or not plan.all_required_done():
        return plan, None

    winner = tally_winner(plan.candidates, plan.votes)
    if winner is None:
        return plan, None
    return plan.with_resolution(winner, now), winner


def apply_rsvp(
    plan: Plan,
    user_id: UUID,
    accept: bool,
    now: datetime,
    tz: tzinfo,
) -> RsvpOutcome:
    """Record an invitee's accept/decline.

    Args:
        plan: Current plan.
        user_id: The responding invitee.
        accept: True to accept, False to decline.
        now: Current time.
        tz: Plan timezone for event-instant computation.

    Returns:
        RsvpOutcome with the updated plan.

    Raises:
        PlanNotOpenError: If the plan is not voting.
        DeadlinePassedError: If the RSVP deadline has passed.
        PastEventError: If the event time has passed.
        NotAParticipantError: If the user holds no invite.
        AlreadyRespondedError: If the invite was already answered.
    """
    if plan.status is not PlanStatus.VOTING:
        raise PlanNotOpenError(plan.id, plan.status, "respond to")

    if (
        plan.kind is PlanKind.SCHEDULED
        and plan.rsvp_deadline is not None
        and plan.rsvp_deadline <= now
    ):
        raise DeadlinePassedError(plan.id, plan.rsvp_deadline)

    event_at = event_instant(plan, tz)
    if event_at is not None and event_at < now:
        raise PastEventError(plan.id, event_at)

    invite = plan.find_invite(user_id)
    if invite is None:
        raise NotAParticipantError(
            plan.id, user_id, detail=f"User {user_id} is not invited to plan {plan.id}"
        )
    if invite.status is not InviteStatus.PENDING:
        raise AlreadyRespondedError(plan.id, user_id, invite.responded_at)

    status = InviteStatus.ACCEPTED if accept else InviteStatus.DECLINED
    updated_invite = invite.with_response(status, now)
    updated = plan.with_changes(
        now,
        invites=tuple(
            updated_invite if i.user_id == user_id else i for i in plan.invites
        ),
    )

    winner = None
    if not accept and updated.kind is PlanKind.GROUP_SWIPE:
        # Declining shrinks the required set, which may complete the quorum
        updated, winner = resolve_if_complete(updated, now)

    return RsvpOutcome(plan=updated, invite=updated_invite, winner=winner)


def apply_swipe(
    plan: Plan,
    user_id: UUID,
    liked_ids: Iterable[str],
    now: datetime,
    tz: tzinfo,
) -> SwipeOutcome:
    """Record a participant's swipe votes.

    The submission is validated in full before anything is applied. A
    pending invitee who swipes is treated as having accepted.

    Args:
        plan: Current plan.
        user_id: The swiping participant.
        liked_ids: Candidate ids the participant liked (may be empty).
        now: Current time.
        tz: Plan timezone for event-instant computation.

    Returns:
        SwipeOutcome with the updated plan and the winner if resolved.

    Raises:
        PlanNotOpenError: If the plan is not voting.
        VotingNotOpenError: If a scheduled plan's voting has not opened.
        PastEventError: If the event time has passed.
        NotAParticipantError: If the user is neither owner nor a
            non-declined invitee.
        AlreadySwipedError: If the user already submitted.
        InvalidCandidateError: If any id is not a plan candidate.
    """
    if plan.status is not PlanStatus.VOTING:
        raise PlanNotOpenError(plan.id, plan.status, "swipe on")

    if (
        plan.kind is PlanKind.SCHEDULED
        and plan.rsvp_deadline is not None
        and plan.rsvp_deadline > now
        and plan.pending_invites
    ):
        raise VotingNotOpenError(plan.id, plan.rsvp_deadline)

    event_at = event_instant(plan, tz)
    if event_at is not None and event_at < now:
        raise PastEventError(plan.id, event_at)

    invite = plan.find_invite(user_id)
    is_invitee = invite is not None and invite.status is not InviteStatus.DECLINED
    if not plan.is_owner(user_id) and not is_invitee:
        raise NotAParticipantError(plan.id, user_id)

    if user_id in plan.completed_voters or user_id in plan.votes:
        raise AlreadySwipedError(plan.id, user_id)

    liked = frozenset(liked_ids)
    unknown = liked - plan.candidate_ids
    if unknown:
        raise InvalidCandidateError(plan.id, unknown)

    auto_accepted = invite is not None and invite.status is InviteStatus.PENDING
    invites = plan.invites
    if auto_accepted:
        invites = tuple(
            i.with_response(InviteStatus.ACCEPTED, now) if i.user_id == user_id else i
            for i in plan.invites
        )

    votes = dict(plan.votes)
    votes[user_id] = liked
    updated = plan.with_changes(
        now,
        invites=invites,
        votes=votes,
        completed_voters=plan.completed_voters | {user_id},
    )

    updated, winner = resolve_if_complete(updated, now)
    return SwipeOutcome(plan=updated, auto_accepted=auto_accepted, winner=winner)


def apply_leave(plan: Plan, user_id: UUID, now: datetime) -> LeaveOutcome:
    """Remove an invitee from the plan.

    The invite, the user's votes and their completed-voter entry are all
    removed. If the user had accepted and no accepted invitee remains,
    the plan is cancelled.

    Raises:
        OwnerCannotLeaveError: If the user is the owner.
        NotAParticipantError: If the user holds no invite.
        PlanNotOpenError: If the plan is completed or cancelled.
    """
    if plan.is_owner(user_id):
        raise OwnerCannotLeaveError(plan.id)

    invite = plan.find_invite(user_id)
    if invite is None:
        raise NotAParticipantError(plan.id, user_id)

    if plan.is_terminal:
        raise PlanNotOpenError(plan.id, plan.status, "leave")

    votes = {k: v for k, v in plan.votes.items() if k != user_id}
    updated = plan.with_changes(
        now,
        invites=tuple(i for i in plan.invites if i.user_id != user_id),
        votes=votes,
        completed_voters=plan.completed_voters - {user_id},
    )

    auto_cancelled = False
    if invite.status is InviteStatus.ACCEPTED and not updated.accepted_invites:
        updated = updated.with_status(PlanStatus.CANCELLED, now)
        auto_cancelled = True

    return LeaveOutcome(plan=updated, departed=invite, auto_cancelled=auto_cancelled)


def apply_delegation(
    plan: Plan,
    current_owner_id: UUID,
    new_owner_id: UUID,
    min_group_size: int,
    now: datetime,
) -> DelegationOutcome:
    """Hand the organizer role to an accepted invitee.

    The new owner stops being an invite. The previous owner leaves the
    plan entirely: their votes and completed-voter entry are purged.

    Args:
        plan: Current plan.
        current_owner_id: The caller, who must be the owner.
        new_owner_id: Accepted invitee to promote.
        min_group_size: Minimum owner-plus-invitees count that allows
            delegation.
        now: Current time.

    Raises:
        NotOrganizerError: If the caller is not the owner.
        PlanNotOpenError: If the plan is completed or cancelled.
        NotEligibleError: If the target is not an accepted invitee.
        TooFewParticipantsError: If the group is below min_group_size.
    """
    if not plan.is_owner(current_owner_id):
        raise NotOrganizerError(plan.id, current_owner_id, "delegate")

    if plan.is_terminal:
        raise PlanNotOpenError(plan.id, plan.status, "delegate")

    new_owner = plan.find_invite(new_owner_id)
    if new_owner is None or new_owner.status is not InviteStatus.ACCEPTED:
        raise NotEligibleError(plan.id, new_owner_id)

    group_size = 1 + len(plan.invites)
    if group_size < min_group_size:
        raise TooFewParticipantsError(plan.id, group_size, min_group_size)

    votes = {k: v for k, v in plan.votes.items() if k != current_owner_id}
    updated = plan.with_changes(
        now,
        owner_id=new_owner_id,
        invites=tuple(i for i in plan.invites if i.user_id != new_owner_id),
        votes=votes,
        completed_voters=plan.completed_voters - {current_owner_id},
    )
    return DelegationOutcome(
        plan=updated, previous_owner_id=current_owner_id, new_owner=new_owner
    )


def restaurant_by_id(plan: Plan, candidate_id: str) -> RestaurantOption | None:
    """Look up a candidate by id."""
    for candidate in plan.candidates:
        if candidate.id == candidate_id:
            return candidate
    return None


__all__ = [
    "DelegationOutcome",
    "LeaveOutcome",
    "RsvpOutcome",
    "SwipeOutcome",
    "apply_delegation",
    "apply_leave",
    "apply_rsvp",
    "apply_swipe",
    "event_instant",
    "resolve_if_complete",
    "restaurant_by_id",
]
