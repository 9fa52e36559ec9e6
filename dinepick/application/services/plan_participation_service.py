"""Plan participation service.

Orchestrates the participant-facing mutators: RSVP, swipe submission,
leaving a plan, and delegating the organizer role.

Each operation follows the same shape:
1. Validate and mutate through the pure participation rules
2. Persist with compare-and-swap (one retry on conflict)
3. Publish notifications only after the save succeeded

A call that raises has changed nothing: every rule runs before the save
and notifications are composed after it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from dinepick.application.ports.plan_repository import PlanRepositoryProtocol
from dinepick.application.ports.time_authority import TimeAuthorityProtocol
from dinepick.application.services.base import LoggingMixin
from dinepick.application.services.notification_outbox import NotificationOutbox
from dinepick.application.services.plan_mutation import (
    AppliedMutation,
    PlanMutation,
    PlanMutationRunner,
)
from dinepick.application.services.plan_notifications import PlanNotificationComposer
from dinepick.config.plan_config import DEFAULT_PLAN_POLICY_CONFIG, PlanPolicyConfig
from dinepick.domain.models.notification import NotificationRequest
from dinepick.domain.models.plan import Plan
from dinepick.domain.services.participation import (
    DelegationOutcome,
    LeaveOutcome,
    RsvpOutcome,
    SwipeOutcome,
    apply_delegation,
    apply_leave,
    apply_rsvp,
    apply_swipe,
)
from dinepick.infrastructure.monitoring.plan_metrics import PlanMetricsCollector


class PlanParticipationService(LoggingMixin):
    """Participant actions on a plan.

    Attributes:
        _repository: Plan storage.
        _runner: Load-mutate-save helper.
        _outbox: Post-commit notification publisher.
        _composer: Notification text and recipients.
        _time: Clock.
        _config: Policy configuration.
        _metrics: Optional Prometheus collector.
    """

    def __init__(
        self,
        repository: PlanRepositoryProtocol,
        outbox: NotificationOutbox,
        composer: PlanNotificationComposer,
        time_authority: TimeAuthorityProtocol,
        config: PlanPolicyConfig = DEFAULT_PLAN_POLICY_CONFIG,
        metrics: PlanMetricsCollector | None = None,
    ) -> None:
        self._repository = repository
        self._runner = PlanMutationRunner(repository)
        self._outbox = outbox
        self._composer = composer
        self._time = time_authority
        self._config = config
        self._metrics = metrics
        self._init_logger(component="planning")

    def _record_transition(self, applied: AppliedMutation[Any], trigger: str) -> None:
        if self._metrics is None or applied.previous.status is applied.plan.status:
            return
        self._metrics.record_transition(
            applied.previous.status.value, applied.plan.status.value, trigger
        )

    async def _publish(self, requests: Iterable[NotificationRequest]) -> None:
        await self._outbox.publish(requests)

    async def respond_to_invite(self, plan_id: UUID, user_id: UUID, accept: bool) -> Plan:
        """Accept or decline an invite.

        Args:
            plan_id: The plan.
            user_id: The responding invitee.
            accept: True to accept, False to decline.

        Returns:
            The saved plan.

        Raises:
            PlanNotFoundError: If the plan does not exist.
            PlanNotOpenError: If the plan is not voting.
            DeadlinePassedError: If the RSVP deadline has passed.
            PastEventError: If the event time has passed.
            NotAParticipantError: If the user holds no invite.
            AlreadyRespondedError: If the invite was already answered.
            ConcurrentModificationError: If the save kept conflicting.
        """
        log = self._log_operation(
            "respond_to_invite", plan_id=str(plan_id), user_id=str(user_id), accept=accept
        )
        now = self._time.utcnow()
        tz = self._config.tz

        def mutate(plan: Plan) -> PlanMutation[RsvpOutcome]:
            outcome = apply_rsvp(plan, user_id, accept, now, tz)
            return PlanMutation(plan=outcome.plan, result=outcome)

        applied = await self._runner.run(plan_id, "respond_to_invite", mutate)
        outcome = applied.result
        plan = applied.plan
        log.info("rsvp_recorded", status=outcome.invite.status.value)

        name = await self._composer.display_name(user_id, snapshot=outcome.invite.name)
        requests = self._composer.rsvp_response(plan, outcome.invite, name)
        if outcome.winner is not None:
            self._record_transition(applied, "quorum")
            log.info("plan_confirmed", restaurant_id=outcome.winner.id, trigger="quorum")
            requests += self._composer.group_pick_decided(plan, outcome.winner)
        await self._publish(requests)
        return plan

    async def submit_swipe(
        self, plan_id: UUID, user_id: UUID, liked_ids: Iterable[str]
    ) -> Plan:
        """Record a participant's liked candidates.

        If this completes the quorum, the plan is tallied and confirmed in
        the same save.

        Args:
            plan_id: The plan.
            user_id: The swiping participant.
            liked_ids: Liked candidate ids (may be empty).

        Returns:
            The saved plan.

        Raises:
            PlanNotFoundError: If the plan does not exist.
            PlanNotOpenError: If the plan is not voting.
            VotingNotOpenError: If a scheduled plan's voting has not opened.
            PastEventError: If the event time has passed.
            NotAParticipantError: If the user has no standing to vote.
            AlreadySwipedError: If the user already submitted.
            InvalidCandidateError: If any id is not a candidate.
            ConcurrentModificationError: If the save kept conflicting.
        """
        liked = tuple(liked_ids)
        log = self._log_operation(
            "submit_swipe", plan_id=str(plan_id), user_id=str(user_id), liked=len(liked)
        )
        now = self._time.utcnow()
        tz = self._config.tz

        def mutate(plan: Plan) -> PlanMutation[SwipeOutcome]:
            outcome = apply_swipe(plan, user_id, liked, now, tz)
            return PlanMutation(plan=outcome.plan, result=outcome)

        applied = await self._runner.run(plan_id, "submit_swipe", mutate)
        outcome = applied.result
        plan = applied.plan
        log.info("swipe_recorded", auto_accepted=outcome.auto_accepted)

        invite = plan.find_invite(user_id)
        name = await self._composer.display_name(
            user_id, snapshot=invite.name if invite is not None else None
        )
        requests = self._composer.swipe_completed(plan, user_id, name)
        if outcome.winner is not None:
            self._record_transition(applied, "quorum")
            log.info("plan_confirmed", restaurant_id=outcome.winner.id, trigger="quorum")
            requests += self._composer.group_pick_decided(plan, outcome.winner, exclude=user_id)
        await self._publish(requests)
        return plan

    async def leave_plan(self, plan_id: UUID, user_id: UUID) -> Plan:
        """Remove an invitee from a plan.

        Raises:
            PlanNotFoundError: If the plan does not exist.
            OwnerCannotLeaveError: If the user is the owner.
            NotAParticipantError: If the user holds no invite.
            PlanNotOpenError: If the plan is completed or cancelled.
            ConcurrentModificationError: If the save kept conflicting.
        """
        log = self._log_operation("leave_plan", plan_id=str(plan_id), user_id=str(user_id))
        now = self._time.utcnow()

        def mutate(plan: Plan) -> PlanMutation[LeaveOutcome]:
            outcome = apply_leave(plan, user_id, now)
            return PlanMutation(plan=outcome.plan, result=outcome)

        applied = await self._runner.run(plan_id, "leave_plan", mutate)
        outcome = applied.result
        plan = applied.plan

        if outcome.auto_cancelled:
            self._record_transition(applied, "leave")
            log.info("plan_auto_cancelled")
            await self._publish(self._composer.plan_auto_cancelled(plan))
            return plan

        log.info("participant_left")
        name = await self._composer.display_name(user_id, snapshot=outcome.departed.name)
        await self._publish(self._composer.participant_left(plan, name))
        return plan

    async def delegate_organizer(
        self, plan_id: UUID, current_owner_id: UUID, new_owner_id: UUID
    ) -> Plan:
        """Hand the organizer role to an accepted invitee.

        Raises:
            PlanNotFoundError: If the plan does not exist.
            NotOrganizerError: If the caller is not the owner.
            PlanNotOpenError: If the plan is completed or cancelled.
            NotEligibleError: If the target is not an accepted invitee.
            TooFewParticipantsError: If the group is too small to delegate.
            ConcurrentModificationError: If the save kept conflicting.
        """
        log = self._log_operation(
            "delegate_organizer",
            plan_id=str(plan_id),
            user_id=str(current_owner_id),
            new_owner_id=str(new_owner_id),
        )
        now = self._time.utcnow()
        min_group_size = self._config.min_delegation_group_size

        def mutate(plan: Plan) -> PlanMutation[DelegationOutcome]:
            outcome = apply_delegation(plan, current_owner_id, new_owner_id, min_group_size, now)
            return PlanMutation(plan=outcome.plan, result=outcome)

        applied = await self._runner.run(plan_id, "delegate_organizer", mutate)
        outcome = applied.result
        plan = applied.plan
        log.info("organizer_delegated")

        previous_name = await self._composer.display_name(current_owner_id)
        new_name = await self._composer.display_name(
            new_owner_id, snapshot=outcome.new_owner.name
        )
        requests = self._composer.organizer_delegated(plan, previous_name)
        requests += self._composer.organizer_changed(plan, new_name)
        await self._publish(requests)
        return plan
