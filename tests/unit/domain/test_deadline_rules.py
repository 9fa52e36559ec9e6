"""Unit tests for time-driven plan transitions."""

from datetime import timezone

from dinepick.domain.models.plan import InviteStatus, PlanStatus
from dinepick.domain.services.deadline_rules import (
    evaluate_deadlines,
    is_subject_to_deadlines,
)
from tests.helpers.plan_builders import (
    AFTER_DEADLINE,
    AFTER_EVENT,
    BEFORE_DEADLINE,
    EVENT_AT,
    RSVP_DEADLINE,
    invite,
    make_plan,
    make_scheduled_plan,
)

UTC = timezone.utc


class TestSubjectToDeadlines:
    def test_group_swipe_plans_are_never_swept(self) -> None:
        plan = make_plan(rsvp_deadline=RSVP_DEADLINE)

        assert not is_subject_to_deadlines(plan)
        assert not evaluate_deadlines(plan, AFTER_EVENT, UTC).changed

    def test_cancelled_plans_are_never_swept(self) -> None:
        plan = make_scheduled_plan().with_status(PlanStatus.CANCELLED, BEFORE_DEADLINE)

        assert not evaluate_deadlines(plan, AFTER_EVENT, UTC).changed


class TestRsvpDeadline:
    def test_nothing_due_before_deadline(self) -> None:
        evaluation = evaluate_deadlines(make_scheduled_plan(), BEFORE_DEADLINE, UTC)

        assert not evaluation.changed
        assert evaluation.event_at == EVENT_AT

    def test_deadline_declines_pending_and_opens_voting(self) -> None:
        accepted = invite(name="Ana", status=InviteStatus.ACCEPTED)
        pending = invite(name="Ben")
        plan = make_scheduled_plan(invites=(accepted, pending))

        evaluation = evaluate_deadlines(plan, AFTER_DEADLINE, UTC)

        assert evaluation.changed
        assert evaluation.voting_opened
        assert [i.user_id for i in evaluation.declined_invites] == [pending.user_id]
        declined = evaluation.plan.find_invite(pending.user_id)
        assert declined.status is InviteStatus.DECLINED
        assert declined.responded_at == AFTER_DEADLINE
        assert evaluation.plan.find_invite(accepted.user_id) == accepted
        assert evaluation.plan.voting_opened_at == AFTER_DEADLINE
        assert evaluation.plan.status is PlanStatus.VOTING

    def test_deadline_reached_exactly_is_due(self) -> None:
        evaluation = evaluate_deadlines(make_scheduled_plan(), RSVP_DEADLINE, UTC)

        assert len(evaluation.declined_invites) == 2

    def test_second_evaluation_is_a_no_op(self) -> None:
        first = evaluate_deadlines(make_scheduled_plan(), AFTER_DEADLINE, UTC)

        second = evaluate_deadlines(first.plan, AFTER_DEADLINE, UTC)

        assert not second.changed
        assert second.plan == first.plan

    def test_voting_opened_at_is_set_once(self) -> None:
        plan = make_scheduled_plan(invites=(), voting_opened_at=RSVP_DEADLINE)

        evaluation = evaluate_deadlines(plan, AFTER_DEADLINE, UTC)

        assert not evaluation.voting_opened
        assert evaluation.plan.voting_opened_at == RSVP_DEADLINE


class TestEventTime:
    def test_event_time_confirms_with_tally_winner(self) -> None:
        plan = make_scheduled_plan()
        plan = plan.with_changes(BEFORE_DEADLINE, votes={plan.owner_id: frozenset({"r3"})})

        evaluation = evaluate_deadlines(plan, AFTER_EVENT, UTC)

        assert evaluation.winner.id == "r3"
        assert evaluation.plan.status is PlanStatus.CONFIRMED
        assert evaluation.plan.resolved_restaurant.id == "r3"
        # deadline rules apply in the same pass
        assert evaluation.voting_opened
        assert len(evaluation.declined_invites) == 2

    def test_no_votes_confirms_best_rated(self) -> None:
        evaluation = evaluate_deadlines(make_scheduled_plan(), AFTER_EVENT, UTC)

        assert evaluation.winner.id == "r2"

    def test_no_candidates_marks_unresolved(self) -> None:
        plan = make_scheduled_plan(candidates=(), invites=(), voting_opened_at=RSVP_DEADLINE)

        evaluation = evaluate_deadlines(plan, AFTER_EVENT, UTC)

        assert evaluation.unresolved
        assert evaluation.winner is None
        assert not evaluation.changed
        assert evaluation.plan.status is PlanStatus.VOTING

    def test_confirmed_plan_is_left_alone(self) -> None:
        confirmed = evaluate_deadlines(make_scheduled_plan(), AFTER_EVENT, UTC).plan

        again = evaluate_deadlines(confirmed, AFTER_EVENT, UTC)

        assert not again.changed
        assert again.plan == confirmed

    def test_unparseable_time_resolves_at_midnight(self) -> None:
        plan = make_scheduled_plan(time="around seven", rsvp_deadline=None)

        # midnight of the event date is before the 19:00 dinner
        evaluation = evaluate_deadlines(plan, EVENT_AT.replace(hour=1), UTC)

        assert evaluation.winner is not None
