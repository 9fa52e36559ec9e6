"""Deadline enforcement service.

Applies the time-driven transitions of scheduled plans: auto-declining
pending invites once the RSVP deadline passes, opening voting, and
auto-confirming when the event time arrives.

Two entry points share the same per-plan logic:
- run_sweep: periodic pass over every scheduled plan still voting
- enforce_plan: check-on-access from the read path

Developer Golden Rules:
1. IDEMPOTENT - A second run at the same instant changes nothing
2. ISOLATED - One plan failing never stops the sweep
3. COMMIT THEN NOTIFY - Notifications follow a successful save only
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any
from uuid import UUID

from dinepick.application.ports.plan_repository import PlanFilter, PlanRepositoryProtocol
from dinepick.application.ports.time_authority import TimeAuthorityProtocol
from dinepick.application.services.base import LoggingMixin
from dinepick.application.services.notification_outbox import NotificationOutbox
from dinepick.application.services.plan_mutation import PlanMutation, PlanMutationRunner
from dinepick.application.services.plan_notifications import PlanNotificationComposer
from dinepick.config.plan_config import DEFAULT_PLAN_POLICY_CONFIG, PlanPolicyConfig
from dinepick.domain.models.notification import NotificationRequest
from dinepick.domain.models.plan import Plan, PlanKind, PlanStatus
from dinepick.domain.services.deadline_rules import (
    DeadlineEvaluation,
    evaluate_deadlines,
    is_subject_to_deadlines,
)
from dinepick.domain.services.event_schedule import uses_midnight_fallback
from dinepick.infrastructure.monitoring.plan_metrics import PlanMetricsCollector
from dinepick.infrastructure.observability.correlation import correlation_scope


@dataclass(frozen=True)
class DeadlineSweepResult:
    """Counts from one sweep run.

    Attributes:
        as_of: The instant the sweep evaluated against.
        examined: Plans considered.
        declined_invites: Invites auto-declined across all plans.
        voting_opened: Plans whose voting opened.
        confirmed: Plans auto-confirmed at event time.
        unresolved: Plans past event time with nothing to pick.
        failed_plan_ids: Plans whose enforcement raised.
    """

    as_of: datetime
    examined: int = 0
    declined_invites: int = 0
    voting_opened: int = 0
    confirmed: int = 0
    unresolved: int = 0
    failed_plan_ids: tuple[UUID, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> int:
        return len(self.failed_plan_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "as_of": self.as_of.isoformat(),
            "examined": self.examined,
            "declined_invites": self.declined_invites,
            "voting_opened": self.voting_opened,
            "confirmed": self.confirmed,
            "unresolved": self.unresolved,
            "failed": self.failed,
        }


class DeadlineEnforcementService(LoggingMixin):
    """Applies RSVP-deadline and event-time transitions to scheduled plans.

    Example:
        >>> service = DeadlineEnforcementService(
        ...     repository=repo,
        ...     outbox=outbox,
        ...     composer=composer,
        ...     time_authority=time_authority,
        ... )
        >>> result = await service.run_sweep(as_of=datetime(2026, 3, 1, tzinfo=timezone.utc))
        >>> result.confirmed
        1
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
        self._init_logger(component="deadlines")

    async def run_sweep(self, as_of: datetime | None = None) -> DeadlineSweepResult:
        """Evaluate every scheduled plan still in voting.

        Each run gets its own correlation id. A plan that fails is logged,
        counted and skipped; the rest of the sweep continues.

        Args:
            as_of: Evaluation instant. Defaults to the time authority's now.

        Returns:
            DeadlineSweepResult with per-outcome counts.
        """
        now = as_of or self._time.utcnow()
        with correlation_scope():
            log = self._log_operation("run_sweep", as_of=now.isoformat())
            log.info("deadline_sweep_started")

            plans = await self._repository.find_plans(
                PlanFilter(kind=PlanKind.SCHEDULED, statuses=(PlanStatus.VOTING,))
            )

            declined = opened = confirmed = unresolved = 0
            failed: list[UUID] = []
            for plan in plans:
                try:
                    evaluation = await self.enforce_plan(plan, as_of=now)
                except Exception as exc:
                    failed.append(plan.id)
                    log.error(
                        "deadline_enforcement_failed",
                        plan_id=str(plan.id),
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                    self._record_outcome("failed")
                    continue

                declined += len(evaluation.declined_invites)
                opened += int(evaluation.voting_opened)
                confirmed += int(evaluation.winner is not None)
                unresolved += int(evaluation.unresolved)

            result = DeadlineSweepResult(
                as_of=now,
                examined=len(plans),
                declined_invites=declined,
                voting_opened=opened,
                confirmed=confirmed,
                unresolved=unresolved,
                failed_plan_ids=tuple(failed),
            )
            if self._metrics is not None:
                self._metrics.record_sweep_completed()
            log.info("deadline_sweep_completed", **result.to_dict())
            return result

    async def enforce_plan(
        self, plan: Plan, as_of: datetime | None = None
    ) -> DeadlineEvaluation:
        """Apply every due deadline rule to one plan and persist the result.

        Args:
            plan: The plan as currently loaded.
            as_of: Evaluation instant. Defaults to the time authority's now.

        Returns:
            DeadlineEvaluation whose ``plan`` is the stored state.

        Raises:
            ConcurrentModificationError: If the save kept conflicting.
        """
        if not is_subject_to_deadlines(plan):
            return DeadlineEvaluation(plan=plan)

        now = as_of or self._time.utcnow()
        tz = self._config.tz
        log = self._log_operation("enforce_plan", plan_id=str(plan.id))

        def mutate(current: Plan) -> PlanMutation[DeadlineEvaluation]:
            evaluation = evaluate_deadlines(current, now, tz)
            return PlanMutation(
                plan=evaluation.plan, result=evaluation, changed=evaluation.changed
            )

        applied = await self._runner.run(plan.id, "enforce_deadlines", mutate, loaded=plan)
        evaluation = replace(applied.result, plan=applied.plan)
        stored = applied.plan

        if (evaluation.winner is not None or evaluation.unresolved) and uses_midnight_fallback(
            stored.date, stored.time
        ):
            log.warning(
                "event_time_unparseable",
                date=stored.date,
                time=stored.time,
                event_at=evaluation.event_at.isoformat() if evaluation.event_at else None,
            )

        if evaluation.unresolved:
            # Stays in voting; the next sweep will try again
            log.warning("plan_unresolved_at_event_time", candidates=len(stored.candidates))
            self._record_outcome("unresolved")

        if not applied.saved:
            if not evaluation.unresolved:
                self._record_outcome("unchanged")
            return evaluation

        requests: list[NotificationRequest] = []
        if evaluation.declined_invites:
            log.info("invites_auto_declined", count=len(evaluation.declined_invites))
            self._record_outcome("declined")
            requests += self._composer.deadline_declines(stored, evaluation.declined_invites)
        if evaluation.voting_opened:
            log.info("voting_opened")
            self._record_outcome("voting_opened")
            requests += self._composer.voting_open(stored)
        if evaluation.winner is not None:
            log.info("plan_confirmed", restaurant_id=evaluation.winner.id, trigger="deadline")
            self._record_outcome("confirmed")
            if self._metrics is not None:
                self._metrics.record_transition(
                    applied.previous.status.value, stored.status.value, "deadline"
                )
            requests += self._composer.restaurant_picked(stored, evaluation.winner)

        await self._outbox.publish(requests)
        return evaluation

    def _record_outcome(self, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.record_sweep_outcome(outcome)
