"""Domain models for DinePick.

Contains value objects and domain models that represent
core business concepts. These models are immutable and
contain no infrastructure dependencies.
"""

from dinepick.domain.models.notification import NotificationKind, NotificationRequest
from dinepick.domain.models.plan import (
    STATUS_TRANSITION_MATRIX,
    TERMINAL_STATUSES,
    InviteStatus,
    Participant,
    ParticipantRole,
    Plan,
    PlanInvite,
    PlanKind,
    PlanStatus,
    RestaurantOption,
)

__all__: list[str] = [
    "InviteStatus",
    "NotificationKind",
    "NotificationRequest",
    "Participant",
    "ParticipantRole",
    "Plan",
    "PlanInvite",
    "PlanKind",
    "PlanStatus",
    "RestaurantOption",
    "STATUS_TRANSITION_MATRIX",
    "TERMINAL_STATUSES",
]
