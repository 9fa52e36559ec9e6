"""Application services for the plan core."""

from dinepick.application.services.deadline_enforcement_service import (
    DeadlineEnforcementService,
    DeadlineSweepResult,
)
from dinepick.application.services.deadline_monitor import DeadlineMonitor
from dinepick.application.services.notification_dispatch_worker import (
    NotificationDispatchWorker,
)
from dinepick.application.services.notification_outbox import NotificationOutbox
from dinepick.application.services.plan_lifecycle_service import PlanLifecycleService
from dinepick.application.services.plan_mutation import (
    AppliedMutation,
    PlanMutation,
    PlanMutationRunner,
)
from dinepick.application.services.plan_notifications import (
    FALLBACK_NAME,
    PlanNotificationComposer,
)
from dinepick.application.services.plan_participation_service import (
    PlanParticipationService,
)
from dinepick.application.services.time_authority_service import SystemTimeAuthority

__all__ = [
    "AppliedMutation",
    "DeadlineEnforcementService",
    "DeadlineMonitor",
    "DeadlineSweepResult",
    "FALLBACK_NAME",
    "NotificationDispatchWorker",
    "NotificationOutbox",
    "PlanLifecycleService",
    "PlanMutation",
    "PlanMutationRunner",
    "PlanNotificationComposer",
    "PlanParticipationService",
    "SystemTimeAuthority",
]
