"""Plan repository port.

Defines the storage contract for plans. Implementations may use
PostgreSQL, in-memory storage, or other backends.

Repository Rules:
1. FAIL LOUD - Repository raises on errors, never returns partial writes
2. CAS ON EVERY SAVE - save_plan only succeeds against the expected version
3. SERVICE DECIDES - Repository stores, service validates and notifies
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from dinepick.domain.models.plan import Plan, PlanKind, PlanStatus


@dataclass(frozen=True)
class PlanFilter:
    """Selection criteria for find_plans.

    Every set field narrows the result; an empty filter matches all plans.

    Attributes:
        kind: Only plans of this kind.
        statuses: Only plans in one of these statuses.
        rsvp_deadline_before: Only plans whose RSVP deadline is at or
            before this instant.
        participant_id: Only plans this user owns or is invited to.
    """

    kind: PlanKind | None = None
    statuses: tuple[PlanStatus, ...] = ()
    rsvp_deadline_before: datetime | None = None
    participant_id: UUID | None = None

    def matches(self, plan: Plan) -> bool:
        """Check a plan against this filter in memory."""
        if self.kind is not None and plan.kind is not self.kind:
            return False
        if self.statuses and plan.status not in self.statuses:
            return False
        if self.rsvp_deadline_before is not None and (
            plan.rsvp_deadline is None or plan.rsvp_deadline > self.rsvp_deadline_before
        ):
            return False
        if self.participant_id is not None and not plan.involves(self.participant_id):
            return False
        return True


class PlanRepositoryProtocol(Protocol):
    """Protocol for plan storage operations.

    Methods:
        get_plan: Retrieve a plan by ID
        create_plan: Store a new plan at version 0
        save_plan: Compare-and-swap write of an updated plan
        find_plans: List plans matching a filter
        delete_plan: Remove a plan
    """

    async def get_plan(self, plan_id: UUID) -> Plan | None:
        """Retrieve a plan by ID.

        Args:
            plan_id: The plan identifier.

        Returns:
            The plan if found, None otherwise.
        """
        ...

    async def create_plan(self, plan: Plan) -> Plan:
        """Store a new plan.

        Args:
            plan: The plan to store.

        Returns:
            The stored plan at version 0.

        Raises:
            PlanAlreadyExistsError: If plan.id already exists.
        """
        ...

    async def save_plan(self, plan: Plan, expected_version: int) -> Plan:
        """Write an updated plan if nobody else has written it since it was read.

        Implementation Notes:
        - PostgreSQL: UPDATE ... WHERE id = :id AND version = :expected
        - Verify row count = 1 for success

        Args:
            plan: The updated plan.
            expected_version: Version the caller read.

        Returns:
            The stored plan with version expected_version + 1.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
            PlanConflictError: If the stored version differs from expected_version.
        """
        ...

    async def find_plans(self, plan_filter: PlanFilter) -> list[Plan]:
        """List plans matching a filter, newest first (by created_at)."""
        ...

    async def delete_plan(self, plan_id: UUID) -> None:
        """Remove a plan.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
        """
        ...
