"""Concurrent modification errors for optimistic plan saves.

A plan carries a version number. Saving compares the expected version
with the stored one; a mismatch means another writer got there first.

- PlanConflictError is raised by repositories on a version mismatch.
- ConcurrentModificationError is raised by the application layer when
  the single permitted retry also conflicted.
"""

from __future__ import annotations

from uuid import UUID

from dinepick.domain.errors.plan import PlanError


class PlanConflictError(PlanError):
    """Raised by a repository when the stored version is not the expected one.

    This is a recoverable error - the caller should re-read the plan,
    re-validate, and decide whether to retry.

    Attributes:
        plan_id: UUID of the plan being saved.
        expected_version: Version the writer loaded.
        actual_version: Version currently stored (None if the plan vanished).
    """

    def __init__(
        self,
        plan_id: UUID,
        expected_version: int,
        actual_version: int | None,
    ) -> None:
        """Initialize plan conflict error.

        Args:
            plan_id: UUID of the plan being saved.
            expected_version: Version the writer loaded.
            actual_version: Version currently stored, if any.
        """
        self.plan_id = plan_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Plan {plan_id} was modified concurrently: expected version "
            f"{expected_version}, found {actual_version}"
        )


class ConcurrentModificationError(PlanError):
    """Raised when a mutation still conflicts after its single retry.

    Attributes:
        plan_id: UUID of the plan.
        operation: Name of the operation that gave up.
    """

    def __init__(self, plan_id: UUID, operation: str) -> None:
        """Initialize concurrent modification error.

        Args:
            plan_id: UUID of the plan.
            operation: Name of the operation that gave up.
        """
        self.plan_id = plan_id
        self.operation = operation
        super().__init__(
            f"Concurrent modification detected for plan {plan_id} during "
            f"{operation}. Another writer modified this plan."
        )
