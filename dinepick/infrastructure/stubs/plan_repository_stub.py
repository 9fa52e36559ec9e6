"""Plan repository stub implementation.

In-memory implementation of PlanRepositoryProtocol for development and
testing. Saves are compare-and-swap against the plan version, serialized
by an asyncio.Lock the way a row lock serializes them in PostgreSQL.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from uuid import UUID

from dinepick.application.ports.plan_repository import PlanFilter, PlanRepositoryProtocol
from dinepick.domain.errors.concurrent_modification import PlanConflictError
from dinepick.domain.errors.plan import PlanAlreadyExistsError, PlanNotFoundError
from dinepick.domain.models.plan import Plan


def _detached(plan: Plan) -> Plan:
    """Copy the one mutable container so callers never share storage."""
    return replace(plan, votes=dict(plan.votes))


class PlanRepositoryStub(PlanRepositoryProtocol):
    """In-memory stub implementation of PlanRepositoryProtocol.

    NOT suitable for production use.

    Attributes:
        _plans: Dictionary mapping plan.id to the stored Plan.
        save_count: Successful save_plan calls (for test assertions).
        conflict_count: Rejected save_plan calls (for test assertions).
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._plans: dict[UUID, Plan] = {}
        # Lock for simulating atomic CAS operations
        self._cas_lock = asyncio.Lock()
        self.save_count = 0
        self.conflict_count = 0

    async def get_plan(self, plan_id: UUID) -> Plan | None:
        plan = self._plans.get(plan_id)
        return _detached(plan) if plan is not None else None

    async def create_plan(self, plan: Plan) -> Plan:
        async with self._cas_lock:
            if plan.id in self._plans:
                raise PlanAlreadyExistsError(plan.id)
            stored = _detached(plan.with_version(0))
            self._plans[plan.id] = stored
            return _detached(stored)

    async def save_plan(self, plan: Plan, expected_version: int) -> Plan:
        """Compare-and-swap write.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
            PlanConflictError: If the stored version differs from expected_version.
        """
        async with self._cas_lock:
            current = self._plans.get(plan.id)
            if current is None:
                raise PlanNotFoundError(plan.id)

            if current.version != expected_version:
                self.conflict_count += 1
                raise PlanConflictError(
                    plan_id=plan.id,
                    expected_version=expected_version,
                    actual_version=current.version,
                )

            stored = _detached(plan.with_version(expected_version + 1))
            self._plans[plan.id] = stored
            self.save_count += 1
            return _detached(stored)

    async def find_plans(self, plan_filter: PlanFilter) -> list[Plan]:
        matching = [_detached(p) for p in self._plans.values() if plan_filter.matches(p)]
        matching.sort(key=lambda p: p.created_at, reverse=True)
        return matching

    async def delete_plan(self, plan_id: UUID) -> None:
        async with self._cas_lock:
            if plan_id not in self._plans:
                raise PlanNotFoundError(plan_id)
            del self._plans[plan_id]

    # Test helpers

    def clear(self) -> None:
        """Clear all stored plans."""
        self._plans.clear()
        self.save_count = 0
        self.conflict_count = 0

    def get_all(self) -> list[Plan]:
        """Get all stored plans."""
        return [_detached(p) for p in self._plans.values()]

    def put(self, plan: Plan) -> None:
        """Store a plan directly, bypassing CAS (test setup)."""
        self._plans[plan.id] = _detached(plan)
