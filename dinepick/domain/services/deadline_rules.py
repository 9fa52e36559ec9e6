"""Time-driven transitions for scheduled plans.

evaluate_deadlines applies, in order, every rule whose time has come:

1. RSVP deadline passed -> every pending invite is declined.
2. RSVP deadline passed and voting not yet opened -> voting_opened_at set.
3. Event instant passed -> tally; a non-null winner confirms the plan.

Each rule checks the state it produces, so evaluating a plan twice at the
same instant changes nothing the second time. The sweep and the
check-on-access read path both go through this function.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo

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
class DeadlineEvaluation:
    """What the deadline rules did to one plan.

    Attributes:
        plan: Plan after every applicable rule.
        declined_invites: Invites auto-declined by this evaluation (their
            pre-decline state).
        voting_opened: True if this evaluation opened voting.
        winner: Winner if this evaluation confirmed the plan.
        unresolved: True if the event time passed but the tally had no
            candidate to pick, so the plan stays in voting.
        event_at: The computed event instant, if any.
    """

    plan: Plan
    declined_invites: tuple[PlanInvite, ...] = ()
    voting_opened: bool = False
    winner: RestaurantOption | None = None
    unresolved: bool = False
    event_at: datetime | None = None

    @property
    def changed(self) -> bool:
        """Check if the plan needs saving."""
        return bool(self.declined_invites) or self.voting_opened or self.winner is not None


def is_subject_to_deadlines(plan: Plan) -> bool:
    """Only scheduled plans still voting have time-driven transitions."""
    return plan.kind is PlanKind.SCHEDULED and plan.status is PlanStatus.VOTING


def evaluate_deadlines(plan: Plan, now: datetime, tz: tzinfo) -> DeadlineEvaluation:
    """Apply every time-driven rule that is due at ``now``.

    Args:
        plan: Plan to evaluate.
        now: Evaluation instant.
        tz: Timezone for the plan's wall-clock date/time.

    Returns:
        DeadlineEvaluation. ``changed`` is False when nothing was due.
    """
    if not is_subject_to_deadlines(plan):
        return DeadlineEvaluation(plan=plan)

    updated = plan
    declined: tuple[PlanInvite, ...] = ()
    voting_opened = False

    if plan.rsvp_deadline is not None and plan.rsvp_deadline <= now:
        declined = plan.pending_invites
        if declined:
            updated = updated.with_changes(
                now,
                invites=tuple(
                    i.with_response(InviteStatus.DECLINED, now)
                    if i.status is InviteStatus.PENDING
                    else i
                    for i in updated.invites
                ),
            )

        if updated.voting_opened_at is None:
            updated = updated.with_changes(now, voting_opened_at=now)
            voting_opened = True

    event_at = compute_event_instant(plan.date, plan.time, tz)
    winner = None
    unresolved = False
    if event_at is not None and event_at <= now:
        winner = tally_winner(updated.candidates, updated.votes)
        if winner is None:
            unresolved = True
        else:
            updated = updated.with_resolution(winner, now)

    return DeadlineEvaluation(
        plan=updated,
        declined_invites=declined,
        voting_opened=voting_opened,
        winner=winner,
        unresolved=unresolved,
        event_at=event_at,
    )
