"""Optimistic-concurrency runner for plan mutations.

Every state-changing operation goes through PlanMutationRunner.run:

1. Load the plan (or use the one the caller already holds)
2. Run the pure mutate function, which validates and returns a new Plan
3. save_plan(new, expected_version=loaded.version)
4. On PlanConflictError, reload and re-run steps 2-3 exactly once
5. A second conflict raises ConcurrentModificationError

Because mutate re-runs against the freshly loaded plan, every check
(quorum, already-swiped, status) sees the winning writer's state. Two
last voters racing each other therefore confirm the plan exactly once.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar
from uuid import UUID

from dinepick.application.ports.plan_repository import PlanRepositoryProtocol
from dinepick.application.services.base import LoggingMixin
from dinepick.domain.errors.concurrent_modification import (
    ConcurrentModificationError,
    PlanConflictError,
)
from dinepick.domain.errors.plan import PlanNotFoundError
from dinepick.domain.models.plan import Plan

ResultT = TypeVar("ResultT")

# First attempt plus one retry
MAX_SAVE_ATTEMPTS = 2


@dataclass(frozen=True)
class PlanMutation(Generic[ResultT]):
    """What a mutate function wants persisted.

    Attributes:
        plan: The new plan state.
        result: Operation-specific outcome passed back to the caller.
        changed: False to skip the save (nothing to persist).
    """

    plan: Plan
    result: ResultT
    changed: bool = True


@dataclass(frozen=True)
class AppliedMutation(Generic[ResultT]):
    """Outcome of a completed run.

    Attributes:
        previous: The plan as loaded by the successful attempt.
        plan: The plan as stored (or as loaded, if nothing changed).
        result: The mutate function's result from the successful attempt.
        saved: True if a save happened.
        attempts: Number of attempts used.
    """

    previous: Plan
    plan: Plan
    result: ResultT
    saved: bool
    attempts: int


class PlanMutationRunner(LoggingMixin):
    """Runs load-mutate-save with a single retry on version conflict."""

    def __init__(
        self,
        repository: PlanRepositoryProtocol,
        max_attempts: int = MAX_SAVE_ATTEMPTS,
    ) -> None:
        self._repository = repository
        self._max_attempts = max_attempts
        self._init_logger(component="planning")

    async def run(
        self,
        plan_id: UUID,
        operation: str,
        mutate: Callable[[Plan], PlanMutation[ResultT]],
        *,
        loaded: Plan | None = None,
    ) -> AppliedMutation[ResultT]:
        """Apply mutate to the plan and persist it with compare-and-swap.

        Args:
            plan_id: Plan to mutate.
            operation: Operation name for logs and errors.
            mutate: Pure function from current plan to PlanMutation. May raise
                domain errors, which propagate unchanged.
            loaded: Plan already loaded by the caller, used for the first
                attempt instead of a fresh read.

        Returns:
            AppliedMutation describing the committed result.

        Raises:
            PlanNotFoundError: If the plan does not exist.
            ConcurrentModificationError: If every attempt conflicted.
        """
        log = self._log_operation(operation, plan_id=str(plan_id))

        for attempt in range(1, self._max_attempts + 1):
            if attempt == 1 and loaded is not None:
                current = loaded
            else:
                fresh = await self._repository.get_plan(plan_id)
                if fresh is None:
                    raise PlanNotFoundError(plan_id)
                current = fresh

            mutation = mutate(current)
            if not mutation.changed:
                return AppliedMutation(
                    previous=current,
                    plan=current,
                    result=mutation.result,
                    saved=False,
                    attempts=attempt,
                )

            try:
                stored = await self._repository.save_plan(
                    mutation.plan, expected_version=current.version
                )
            except PlanConflictError as exc:
                log.warning(
                    "plan_save_conflict",
                    attempt=attempt,
                    expected_version=exc.expected_version,
                    actual_version=exc.actual_version,
                )
                continue

            return AppliedMutation(
                previous=current,
                plan=stored,
                result=mutation.result,
                saved=True,
                attempts=attempt,
            )

        log.error("plan_mutation_abandoned", attempts=self._max_attempts)
        raise ConcurrentModificationError(plan_id, operation)
