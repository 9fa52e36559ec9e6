"""Pure domain services: tally, event schedule, participation and deadline rules."""

from dinepick.domain.services.deadline_rules import (
    DeadlineEvaluation,
    evaluate_deadlines,
    is_subject_to_deadlines,
)
from dinepick.domain.services.event_schedule import (
    compute_event_instant,
    parse_clock_time,
    parse_plan_date,
    uses_midnight_fallback,
)
from dinepick.domain.services.participation import (
    DelegationOutcome,
    LeaveOutcome,
    RsvpOutcome,
    SwipeOutcome,
    apply_delegation,
    apply_leave,
    apply_rsvp,
    apply_swipe,
    event_instant,
    resolve_if_complete,
    restaurant_by_id,
)
from dinepick.domain.services.vote_tally import count_approvals, tally_winner

__all__ = [
    "DeadlineEvaluation",
    "DelegationOutcome",
    "LeaveOutcome",
    "RsvpOutcome",
    "SwipeOutcome",
    "apply_delegation",
    "apply_leave",
    "apply_rsvp",
    "apply_swipe",
    "compute_event_instant",
    "count_approvals",
    "evaluate_deadlines",
    "event_instant",
    "is_subject_to_deadlines",
    "parse_clock_time",
    "parse_plan_date",
    "resolve_if_complete",
    "restaurant_by_id",
    "tally_winner",
    "uses_midnight_fallback",
]
