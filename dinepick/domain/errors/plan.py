"""Plan domain errors.

This module provides exception classes for failures while creating a plan,
responding to it, swiping on it, or changing its membership. Every error is
raised before anything is persisted, so a failed call never leaves a
partially mutated plan behind.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from dinepick.domain.exceptions import DinePickError


class PlanError(DinePickError):
    """Base error for plan-related operations."""

    pass


class PlanNotFoundError(PlanError):
    """Raised when a plan does not exist.

    Attributes:
        plan_id: The plan that was not found.
    """

    def __init__(self, plan_id: UUID) -> None:
        """Initialize the error.

        Args:
            plan_id: The plan that was not found.
        """
        self.plan_id = plan_id
        super().__init__(f"Plan not found: {plan_id}")


class PlanAlreadyExistsError(PlanError):
    """Raised when creating a plan whose id is already stored."""

    def __init__(self, plan_id: UUID) -> None:
        self.plan_id = plan_id
        super().__init__(f"Plan already exists: {plan_id}")


class PlanValidationError(PlanError):
    """Raised when create/update input breaks a plan policy rule.

    Attributes:
        field: Name of the offending field.
        message: What was wrong with it.
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize the error.

        Args:
            field: Name of the offending field.
            message: What was wrong with it.
        """
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")


class NotAParticipantError(PlanError):
    """Raised when the caller has no standing on the plan.

    Attributes:
        plan_id: The plan being acted on.
        user_id: The caller.
    """

    def __init__(self, plan_id: UUID, user_id: UUID, detail: str | None = None) -> None:
        """Initialize the error.

        Args:
            plan_id: The plan being acted on.
            user_id: The caller.
            detail: Optional detail replacing the default message.
        """
        self.plan_id = plan_id
        self.user_id = user_id
        super().__init__(
            detail or f"User {user_id} is not a participant in plan {plan_id}"
        )


class NotOrganizerError(NotAParticipantError):
    """Raised when someone other than the owner attempts an owner-only action."""

    def __init__(self, plan_id: UUID, user_id: UUID, operation: str) -> None:
        self.operation = operation
        super().__init__(
            plan_id,
            user_id,
            detail=f"Only the organizer of plan {plan_id} can {operation}",
        )


class AlreadyRespondedError(PlanError):
    """Raised when an invitee responds to the same invite twice.

    Attributes:
        plan_id: The plan.
        user_id: The invitee.
        responded_at: When the first response was recorded.
    """

    def __init__(
        self, plan_id: UUID, user_id: UUID, responded_at: datetime | None
    ) -> None:
        self.plan_id = plan_id
        self.user_id = user_id
        self.responded_at = responded_at
        super().__init__(
            f"User {user_id} has already responded to plan {plan_id}"
        )


class AlreadySwipedError(PlanError):
    """Raised when a participant submits swipes a second time."""

    def __init__(self, plan_id: UUID, user_id: UUID) -> None:
        self.plan_id = plan_id
        self.user_id = user_id
        super().__init__(
            f"User {user_id} has already submitted swipes for plan {plan_id}"
        )


class InvalidCandidateError(PlanError):
    """Raised when a swipe references a restaurant outside the plan's candidates.

    The whole submission is rejected; no vote from it is recorded.

    Attributes:
        plan_id: The plan.
        invalid_ids: Candidate ids that are not part of the plan.
    """

    def __init__(self, plan_id: UUID, invalid_ids: Iterable[str]) -> None:
        self.plan_id = plan_id
        self.invalid_ids = tuple(sorted(set(invalid_ids)))
        super().__init__(
            f"Unknown restaurant ids for plan {plan_id}: {list(self.invalid_ids)}"
        )


class OwnerCannotLeaveError(PlanError):
    """Raised when the owner tries to leave instead of cancelling or delegating."""

    def __init__(self, plan_id: UUID) -> None:
        self.plan_id = plan_id
        super().__init__(
            f"The organizer cannot leave plan {plan_id}. Cancel or delegate instead."
        )


class NotEligibleError(PlanError):
    """Raised when a delegation target is not an accepted invitee."""

    def __init__(self, plan_id: UUID, user_id: UUID) -> None:
        self.plan_id = plan_id
        self.user_id = user_id
        super().__init__(
            f"User {user_id} must be an accepted invitee of plan {plan_id} "
            "to become its organizer"
        )


class TooFewParticipantsError(PlanError):
    """Raised when delegation would leave the group below the minimum size.

    Attributes:
        plan_id: The plan.
        group_size: Owner plus invitees at the time of the request.
        minimum: Configured minimum group size for delegation.
    """

    def __init__(self, plan_id: UUID, group_size: int, minimum: int) -> None:
        self.plan_id = plan_id
        self.group_size = group_size
        self.minimum = minimum
        super().__init__(
            f"Cannot delegate on plan {plan_id} with {group_size} people "
            f"(minimum {minimum}). Cancel instead."
        )


class DeadlinePassedError(PlanError):
    """Raised when an RSVP arrives after the plan's RSVP deadline."""

    def __init__(self, plan_id: UUID, deadline: datetime) -> None:
        self.plan_id = plan_id
        self.deadline = deadline
        super().__init__(
            f"RSVP deadline for plan {plan_id} passed at {deadline.isoformat()}"
        )


class PastEventError(PlanError):
    """Raised when an RSVP or swipe arrives after the plan's event time."""

    def __init__(self, plan_id: UUID, event_at: datetime) -> None:
        self.plan_id = plan_id
        self.event_at = event_at
        super().__init__(
            f"Plan {plan_id} took place at {event_at.isoformat()}"
        )


class VotingNotOpenError(PlanError):
    """Raised when a scheduled plan is swiped on before voting opens.

    Voting opens once the RSVP deadline passes, or earlier if every
    invitee has already responded.
    """

    def __init__(self, plan_id: UUID, deadline: datetime) -> None:
        self.plan_id = plan_id
        self.deadline = deadline
        super().__init__(
            f"Voting on plan {plan_id} is not open yet. RSVP deadline is "
            f"{deadline.isoformat()}"
        )
