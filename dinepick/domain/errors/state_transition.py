"""State transition errors for the plan state machine.

This module defines errors for invalid plan status transitions and for
mutations attempted while a plan's status forbids them.

Rules:
- Status only moves forward through the transition matrix
- Terminal plans (completed, cancelled) are never resurrected
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from dinepick.domain.errors.plan import PlanError

if TYPE_CHECKING:
    from dinepick.domain.models.plan import PlanStatus


class InvalidTransitionError(PlanError):
    """Raised when a status change is not permitted by the transition matrix.

    Attributes:
        current_status: Status the plan is in.
        requested_status: Status the caller asked for.
        allowed_transitions: Valid target statuses from the current status.
        reason: Optional extra detail (e.g. no winner could be resolved).
    """

    def __init__(
        self,
        current_status: PlanStatus,
        requested_status: PlanStatus,
        allowed_transitions: list[PlanStatus] | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize invalid transition error.

        Args:
            current_status: Current plan status.
            requested_status: Attempted target status.
            allowed_transitions: Valid statuses from current status (optional).
            reason: Optional detail appended to the message.
        """
        self.current_status = current_status
        self.requested_status = requested_status
        self.allowed_transitions = allowed_transitions or []
        self.reason = reason

        allowed_str = (
            f" Valid transitions: {[s.value for s in self.allowed_transitions]}"
            if self.allowed_transitions
            else ""
        )
        reason_str = f" ({reason})" if reason else ""
        super().__init__(
            f"Cannot transition from {current_status.value} to "
            f"{requested_status.value}.{allowed_str}{reason_str}"
        )


class PlanNotOpenError(PlanError):
    """Raised when a plan's status forbids the requested mutation.

    Swipes and RSVPs are only accepted while voting; leaving and
    delegating are refused once the plan is completed or cancelled.

    Attributes:
        plan_id: UUID of the plan.
        status: Status that blocked the operation.
        operation: Name of the refused operation.
    """

    def __init__(self, plan_id: UUID, status: PlanStatus, operation: str) -> None:
        """Initialize plan not open error.

        Args:
            plan_id: UUID of the plan.
            status: Current plan status.
            operation: Name of the refused operation.
        """
        self.plan_id = plan_id
        self.status = status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} plan {plan_id} while it is {status.value}"
        )
