"""In-memory stubs for development and testing."""

from dinepick.infrastructure.stubs.notification_dispatcher_stub import (
    NotificationDispatcherStub,
    SentNotification,
)
from dinepick.infrastructure.stubs.plan_repository_stub import PlanRepositoryStub
from dinepick.infrastructure.stubs.user_directory_stub import UserDirectoryStub

__all__ = [
    "NotificationDispatcherStub",
    "PlanRepositoryStub",
    "SentNotification",
    "UserDirectoryStub",
]
