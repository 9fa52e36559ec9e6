"""Domain errors for DinePick.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from DinePickError.
"""

from dinepick.domain.errors.concurrent_modification import (
    ConcurrentModificationError,
    PlanConflictError,
)
from dinepick.domain.errors.plan import (
    AlreadyRespondedError,
    AlreadySwipedError,
    DeadlinePassedError,
    InvalidCandidateError,
    NotAParticipantError,
    NotEligibleError,
    NotOrganizerError,
    OwnerCannotLeaveError,
    PastEventError,
    PlanAlreadyExistsError,
    PlanError,
    PlanNotFoundError,
    PlanValidationError,
    TooFewParticipantsError,
    VotingNotOpenError,
)
from dinepick.domain.errors.state_transition import (
    InvalidTransitionError,
    PlanNotOpenError,
)

__all__: list[str] = [
    "AlreadyRespondedError",
    "AlreadySwipedError",
    "ConcurrentModificationError",
    "DeadlinePassedError",
    "InvalidCandidateError",
    "InvalidTransitionError",
    "NotAParticipantError",
    "NotEligibleError",
    "NotOrganizerError",
    "OwnerCannotLeaveError",
    "PastEventError",
    "PlanAlreadyExistsError",
    "PlanConflictError",
    "PlanError",
    "PlanNotFoundError",
    "PlanNotOpenError",
    "PlanValidationError",
    "TooFewParticipantsError",
    "VotingNotOpenError",
]
