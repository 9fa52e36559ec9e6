"""Application ports - Abstract interfaces for infrastructure adapters.

Available ports:
- PlanRepositoryProtocol: Plan storage with compare-and-swap saves
- NotificationDispatcherProtocol: User notification delivery
- NotificationQueueProtocol: Buffer between services and delivery
- UserDirectoryProtocol: Display-name lookups
- TimeAuthorityProtocol: Injectable clock
"""

from dinepick.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from dinepick.application.ports.notification_queue import NotificationQueueProtocol
from dinepick.application.ports.plan_repository import PlanFilter, PlanRepositoryProtocol
from dinepick.application.ports.time_authority import TimeAuthorityProtocol
from dinepick.application.ports.user_directory import UserDirectoryProtocol

__all__: list[str] = [
    "NotificationDispatcherProtocol",
    "NotificationQueueProtocol",
    "PlanFilter",
    "PlanRepositoryProtocol",
    "TimeAuthorityProtocol",
    "UserDirectoryProtocol",
]
