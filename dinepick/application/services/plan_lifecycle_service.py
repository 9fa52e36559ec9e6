"""Plan lifecycle service.

Owner-facing operations (create, update, change status, delete) and the
read path (get with check-on-access deadline enforcement, list).

Status changes go through Plan.with_status, so the transition matrix is
enforced in exactly one place. Confirmation always carries a restaurant:
the owner's pick if set, otherwise the tally winner.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from uuid6 import uuid7

from dinepick.application.dtos.plan import (
    CreatePlanRequest,
    UpdatePlanRequest,
    parse_create_request,
    parse_update_request,
)
from dinepick.application.ports.plan_repository import PlanFilter, PlanRepositoryProtocol
from dinepick.application.ports.time_authority import TimeAuthorityProtocol
from dinepick.application.services.base import LoggingMixin
from dinepick.application.services.deadline_enforcement_service import (
    DeadlineEnforcementService,
)
from dinepick.application.services.notification_outbox import NotificationOutbox
from dinepick.application.services.plan_mutation import PlanMutation, PlanMutationRunner
from dinepick.application.services.plan_notifications import PlanNotificationComposer
from dinepick.config.plan_config import DEFAULT_PLAN_POLICY_CONFIG, PlanPolicyConfig
from dinepick.domain.errors.concurrent_modification import ConcurrentModificationError
from dinepick.domain.errors.plan import (
    InvalidCandidateError,
    NotOrganizerError,
    PlanNotFoundError,
    PlanValidationError,
)
from dinepick.domain.errors.state_transition import PlanNotOpenError
from dinepick.domain.models.plan import Plan, PlanInvite, PlanKind, PlanStatus
from dinepick.domain.services.participation import restaurant_by_id
from dinepick.domain.services.vote_tally import tally_winner
from dinepick.infrastructure.monitoring.plan_metrics import PlanMetricsCollector


_SCHEDULE_FIELDS = ("date", "time", "rsvp_deadline")


def _check_schedule_fields(plan: Plan) -> None:
    """Scheduled plans keep a full schedule; group-swipe plans have no RSVP cutoff."""
    if plan.kind is PlanKind.SCHEDULED:
        for name in _SCHEDULE_FIELDS:
            if getattr(plan, name) in (None, ""):
                raise PlanValidationError(name, "is required for scheduled plans")
    elif plan.rsvp_deadline is not None:
        raise PlanValidationError("rsvp_deadline", "group-swipe plans have no RSVP deadline")


class PlanLifecycleService(LoggingMixin):
    """Creates, edits, transitions and reads plans."""

    def __init__(
        self,
        repository: PlanRepositoryProtocol,
        outbox: NotificationOutbox,
        composer: PlanNotificationComposer,
        deadlines: DeadlineEnforcementService,
        time_authority: TimeAuthorityProtocol,
        config: PlanPolicyConfig = DEFAULT_PLAN_POLICY_CONFIG,
        metrics: PlanMetricsCollector | None = None,
    ) -> None:
        self._repository = repository
        self._runner = PlanMutationRunner(repository)
        self._outbox = outbox
        self._composer = composer
        self._deadlines = deadlines
        self._time = time_authority
        self._config = config
        self._metrics = metrics
        self._init_logger(component="planning")

    # -------------------------------------------------------------------------
    # Policy checks
    # -------------------------------------------------------------------------

    def _check_text_limits(
        self,
        title: str | None,
        cuisine: str | None,
        options: tuple[str, ...] | list[str] | None,
    ) -> None:
        config = self._config
        if title is not None and len(title) > config.max_title_length:
            raise PlanValidationError(
                "title", f"must be {config.max_title_length} characters or less"
            )
        if cuisine is not None and len(cuisine) > config.max_cuisine_length:
            raise PlanValidationError(
                "cuisine", f"must be {config.max_cuisine_length} characters or less"
            )
        if options is not None and len(options) > config.max_options:
            raise PlanValidationError(
                "options", f"cannot have more than {config.max_options} options"
            )

    def _check_create_policy(
        self, owner_id: UUID, request: CreatePlanRequest, invitee_ids: list[UUID]
    ) -> None:
        config = self._config
        self._check_text_limits(request.title, request.cuisine, request.options)
        if owner_id in invitee_ids:
            raise PlanValidationError("invitee_ids", "the owner cannot invite themselves")
        if len(invitee_ids) > config.max_invitees:
            raise PlanValidationError(
                "invitee_ids", f"cannot invite more than {config.max_invitees} people"
            )
        if request.restaurant_count is not None and not (
            config.min_restaurant_count
            <= request.restaurant_count
            <= config.max_restaurant_count
        ):
            raise PlanValidationError(
                "restaurant_count",
                f"must be between {config.min_restaurant_count} "
                f"and {config.max_restaurant_count}",
            )

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def create_plan(
        self,
        owner_id: UUID,
        request: CreatePlanRequest | Mapping[str, Any],
    ) -> Plan:
        """Create a plan in voting with every invite pending.

        Args:
            owner_id: The organizer.
            request: Validated request, or raw input to validate.

        Returns:
            The stored plan.

        Raises:
            PlanValidationError: If the input breaks a schema or policy rule.
        """
        if not isinstance(request, CreatePlanRequest):
            request = parse_create_request(request)

        invitee_ids = request.unique_invitee_ids()
        self._check_create_policy(owner_id, request, invitee_ids)

        invites = []
        for user_id in invitee_ids:
            invites.append(
                PlanInvite(user_id=user_id, name=await self._composer.display_name(user_id))
            )

        now = self._time.utcnow()
        plan = Plan(
            id=uuid7(),
            kind=request.kind,
            title=request.title,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            invites=tuple(invites),
            candidates=tuple(c.to_domain() for c in request.candidates),
            rsvp_deadline=request.rsvp_deadline,
            date=request.date,
            time=request.time,
            cuisine=request.cuisine,
            budget=request.budget,
            options=tuple(request.options),
            restaurant_count=request.restaurant_count,
            allow_curveball=request.allow_curveball,
        )
        stored = await self._repository.create_plan(plan)

        self._log_operation(
            "create_plan", plan_id=str(stored.id), user_id=str(owner_id)
        ).info(
            "plan_created",
            kind=stored.kind.value,
            invitees=len(stored.invites),
            candidates=len(stored.candidates),
        )

        owner_name = await self._composer.display_name(owner_id)
        await self._outbox.publish(self._composer.invitations(stored, owner_name))
        return stored

    async def update_plan(
        self,
        plan_id: UUID,
        user_id: UUID,
        changes: UpdatePlanRequest | Mapping[str, Any],
    ) -> Plan:
        """Apply owner edits to a plan still in voting.

        Raises:
            PlanValidationError: If the input breaks a schema or policy rule.
            PlanNotFoundError: If the plan does not exist.
            NotOrganizerError: If the caller is not the owner.
            PlanNotOpenError: If the plan is no longer voting.
            InvalidCandidateError: If the restaurant pick is not a candidate.
        """
        if not isinstance(changes, UpdatePlanRequest):
            changes = parse_update_request(changes)

        field_changes = changes.field_changes()
        self._check_text_limits(
            field_changes.get("title"),
            field_changes.get("cuisine"),
            field_changes.get("options"),
        )
        if "title" in field_changes and not field_changes["title"]:
            raise PlanValidationError("title", "cannot be blank")
        now = self._time.utcnow()

        def mutate(plan: Plan) -> PlanMutation[None]:
            if not plan.is_owner(user_id):
                raise NotOrganizerError(plan.id, user_id, "update")
            if plan.status is not PlanStatus.VOTING:
                raise PlanNotOpenError(plan.id, plan.status, "update")

            updated = plan.with_changes(now, **field_changes)
            _check_schedule_fields(updated)
            if changes.restaurant_id is not None:
                pick = restaurant_by_id(plan, changes.restaurant_id)
                if pick is None:
                    raise InvalidCandidateError(plan.id, [changes.restaurant_id])
                updated = updated.with_restaurant_override(pick, now)
            elif changes.clear_restaurant:
                updated = updated.with_restaurant_override(None, now)
            return PlanMutation(plan=updated, result=None)

        applied = await self._runner.run(plan_id, "update_plan", mutate)
        self._log_operation("update_plan", plan_id=str(plan_id), user_id=str(user_id)).info(
            "plan_updated", fields=sorted(field_changes)
        )
        return applied.plan

    async def change_status(
        self, plan_id: UUID, user_id: UUID, target: PlanStatus
    ) -> Plan:
        """Owner-triggered status transition.

        Confirming a plan with no restaurant picked runs the tally first.

        Raises:
            PlanNotFoundError: If the plan does not exist.
            NotOrganizerError: If the caller is not the owner.
            InvalidTransitionError: If the transition is not allowed, or a
                confirmation has no restaurant to confirm with.
        """
        log = self._log_operation(
            "change_status", plan_id=str(plan_id), user_id=str(user_id), target=target.value
        )
        now = self._time.utcnow()

        def mutate(plan: Plan) -> PlanMutation[None]:
            if not plan.is_owner(user_id):
                raise NotOrganizerError(plan.id, user_id, "change the status of")
            if target is PlanStatus.CONFIRMED and plan.status is PlanStatus.VOTING:
                pick = plan.restaurant_override or tally_winner(plan.candidates, plan.votes)
                if pick is not None:
                    return PlanMutation(plan=plan.with_resolution(pick, now), result=None)
            return PlanMutation(plan=plan.with_status(target, now), result=None)

        applied = await self._runner.run(plan_id, "change_status", mutate)
        plan = applied.plan
        log.info(
            "plan_status_changed",
            from_status=applied.previous.status.value,
            to_status=plan.status.value,
        )
        if self._metrics is not None:
            self._metrics.record_transition(
                applied.previous.status.value, plan.status.value, "owner"
            )

        if plan.status is PlanStatus.CANCELLED:
            owner_name = await self._composer.display_name(user_id)
            await self._outbox.publish(self._composer.plan_cancelled(plan, owner_name))
        return plan

    async def delete_plan(self, plan_id: UUID, user_id: UUID) -> None:
        """Remove a plan (owner only).

        Raises:
            PlanNotFoundError: If the plan does not exist.
            NotOrganizerError: If the caller is not the owner.
        """
        plan = await self._repository.get_plan(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        if not plan.is_owner(user_id):
            raise NotOrganizerError(plan_id, user_id, "delete")
        await self._repository.delete_plan(plan_id)
        self._log_operation("delete_plan", plan_id=str(plan_id), user_id=str(user_id)).info(
            "plan_deleted"
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get_plan(self, plan_id: UUID, as_of: datetime | None = None) -> Plan:
        """Read a plan, first applying any deadline rule that is due.

        The read never fails because of a concurrent writer: if the
        enforcement save keeps conflicting, the freshly stored plan is
        returned and the next read or sweep catches up.

        Raises:
            PlanNotFoundError: If the plan does not exist.
        """
        plan = await self._repository.get_plan(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)

        try:
            evaluation = await self._deadlines.enforce_plan(plan, as_of=as_of)
        except ConcurrentModificationError:
            self._log_operation("get_plan", plan_id=str(plan_id)).warning(
                "check_on_access_conflict"
            )
            fresh = await self._repository.get_plan(plan_id)
            if fresh is None:
                raise PlanNotFoundError(plan_id) from None
            return fresh
        return evaluation.plan

    async def list_plans_for_user(self, user_id: UUID) -> list[Plan]:
        """Plans the user owns or is invited to, newest first."""
        return await self._repository.find_plans(PlanFilter(participant_id=user_id))
