"""Bootstrap wiring for the plan core.

Builds the plan services on top of their ports. Collaborators are module
singletons with get_/set_ accessors so scripts and tests can swap any of
them before the container is assembled.

Environment Variables:
- DINEPICK_PLAN_BACKEND: "memory" (default) or "postgres"
- Everything read by PlanPolicyConfig.from_environment()
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dinepick.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from dinepick.application.ports.notification_queue import NotificationQueueProtocol
from dinepick.application.ports.plan_repository import PlanRepositoryProtocol
from dinepick.application.ports.time_authority import TimeAuthorityProtocol
from dinepick.application.ports.user_directory import UserDirectoryProtocol
from dinepick.application.services.deadline_enforcement_service import (
    DeadlineEnforcementService,
)
from dinepick.application.services.deadline_monitor import DeadlineMonitor
from dinepick.application.services.notification_dispatch_worker import (
    NotificationDispatchWorker,
)
from dinepick.application.services.notification_outbox import NotificationOutbox
from dinepick.application.services.plan_lifecycle_service import PlanLifecycleService
from dinepick.application.services.plan_notifications import PlanNotificationComposer
from dinepick.application.services.plan_participation_service import (
    PlanParticipationService,
)
from dinepick.application.services.time_authority_service import SystemTimeAuthority
from dinepick.bootstrap.database import get_session_factory
from dinepick.config.plan_config import PlanPolicyConfig
from dinepick.infrastructure.adapters.messaging.in_memory_notification_queue import (
    InMemoryNotificationQueue,
)
from dinepick.infrastructure.adapters.notification.webhook_notification_dispatcher import (
    WebhookNotificationDispatcher,
)
from dinepick.infrastructure.adapters.persistence.postgres_plan_repository import (
    PostgresPlanRepository,
)
from dinepick.infrastructure.monitoring.plan_metrics import (
    PlanMetricsCollector,
    get_plan_metrics_collector,
)
from dinepick.infrastructure.stubs.notification_dispatcher_stub import (
    NotificationDispatcherStub,
)
from dinepick.infrastructure.stubs.plan_repository_stub import PlanRepositoryStub
from dinepick.infrastructure.stubs.user_directory_stub import UserDirectoryStub

PLAN_BACKENDS = ("memory", "postgres")


@dataclass(frozen=True)
class PlanningContainer:
    """Every service of the plan core, wired to one set of collaborators."""

    config: PlanPolicyConfig
    repository: PlanRepositoryProtocol
    queue: NotificationQueueProtocol
    dispatcher: NotificationDispatcherProtocol
    time_authority: TimeAuthorityProtocol
    metrics: PlanMetricsCollector | None
    composer: PlanNotificationComposer
    outbox: NotificationOutbox
    lifecycle: PlanLifecycleService
    participation: PlanParticipationService
    deadlines: DeadlineEnforcementService
    deadline_monitor: DeadlineMonitor
    dispatch_worker: NotificationDispatchWorker

    async def start(self) -> None:
        """Start the background workers."""
        await self.dispatch_worker.start()
        await self.deadline_monitor.start()

    async def stop(self) -> None:
        """Stop the workers; the dispatch worker flushes what is queued."""
        await self.deadline_monitor.stop()
        await self.dispatch_worker.stop()


def build_planning_container(
    *,
    repository: PlanRepositoryProtocol,
    queue: NotificationQueueProtocol,
    dispatcher: NotificationDispatcherProtocol,
    user_directory: UserDirectoryProtocol,
    time_authority: TimeAuthorityProtocol,
    config: PlanPolicyConfig,
    metrics: PlanMetricsCollector | None = None,
) -> PlanningContainer:
    """Assemble the plan services from explicit collaborators."""
    composer = PlanNotificationComposer(user_directory)
    outbox = NotificationOutbox(queue, metrics=metrics)
    deadlines = DeadlineEnforcementService(
        repository, outbox, composer, time_authority, config=config, metrics=metrics
    )
    return PlanningContainer(
        config=config,
        repository=repository,
        queue=queue,
        dispatcher=dispatcher,
        time_authority=time_authority,
        metrics=metrics,
        composer=composer,
        outbox=outbox,
        lifecycle=PlanLifecycleService(
            repository,
            outbox,
            composer,
            deadlines,
            time_authority,
            config=config,
            metrics=metrics,
        ),
        participation=PlanParticipationService(
            repository, outbox, composer, time_authority, config=config, metrics=metrics
        ),
        deadlines=deadlines,
        deadline_monitor=DeadlineMonitor(
            deadlines,
            time_authority,
            interval_seconds=config.deadline_sweep_interval_seconds,
        ),
        dispatch_worker=NotificationDispatchWorker(
            queue,
            dispatcher,
            metrics=metrics,
            interval_seconds=config.notification_dispatch_interval_seconds,
            batch_size=config.notification_batch_size,
        ),
    )


_config: PlanPolicyConfig | None = None
_time_authority: TimeAuthorityProtocol | None = None
_plan_repository: PlanRepositoryProtocol | None = None
_notification_queue: NotificationQueueProtocol | None = None
_notification_dispatcher: NotificationDispatcherProtocol | None = None
_user_directory: UserDirectoryProtocol | None = None
_container: PlanningContainer | None = None


def get_plan_backend() -> str:
    """Selected plan storage backend.

    Raises:
        ValueError: If DINEPICK_PLAN_BACKEND names an unknown backend.
    """
    backend = os.environ.get("DINEPICK_PLAN_BACKEND", "memory").lower()
    if backend not in PLAN_BACKENDS:
        raise ValueError(
            f"DINEPICK_PLAN_BACKEND must be one of {', '.join(PLAN_BACKENDS)}, got {backend!r}"
        )
    return backend


def get_plan_config() -> PlanPolicyConfig:
    """Get plan policy configuration (from the environment on first call)."""
    global _config
    if _config is None:
        _config = PlanPolicyConfig.from_environment()
    return _config


def get_time_authority() -> TimeAuthorityProtocol:
    """Get the time authority instance."""
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_plan_repository() -> PlanRepositoryProtocol:
    """Get plan repository instance for the selected backend."""
    global _plan_repository
    if _plan_repository is None:
        if get_plan_backend() == "postgres":
            _plan_repository = PostgresPlanRepository(get_session_factory())
        else:
            _plan_repository = PlanRepositoryStub()
    return _plan_repository


def get_notification_queue() -> NotificationQueueProtocol:
    """Get notification queue instance."""
    global _notification_queue
    if _notification_queue is None:
        _notification_queue = InMemoryNotificationQueue()
    return _notification_queue


def get_notification_dispatcher() -> NotificationDispatcherProtocol:
    """Get notification dispatcher (webhook when a URL is configured)."""
    global _notification_dispatcher
    if _notification_dispatcher is None:
        config = get_plan_config()
        if config.notification_webhook_url:
            _notification_dispatcher = WebhookNotificationDispatcher(
                config.notification_webhook_url,
                timeout_seconds=config.notification_webhook_timeout_seconds,
                max_retries=config.notification_webhook_max_retries,
                secret=config.notification_webhook_secret,
            )
        else:
            _notification_dispatcher = NotificationDispatcherStub()
    return _notification_dispatcher


def get_user_directory() -> UserDirectoryProtocol:
    """Get user directory instance."""
    global _user_directory
    if _user_directory is None:
        _user_directory = UserDirectoryStub()
    return _user_directory


def get_planning_container() -> PlanningContainer:
    """Get the plan services, wiring them on first call."""
    global _container
    if _container is None:
        _container = build_planning_container(
            repository=get_plan_repository(),
            queue=get_notification_queue(),
            dispatcher=get_notification_dispatcher(),
            user_directory=get_user_directory(),
            time_authority=get_time_authority(),
            config=get_plan_config(),
            metrics=get_plan_metrics_collector(),
        )
    return _container


def set_plan_config(config: PlanPolicyConfig) -> None:
    """Set custom plan configuration (testing/override)."""
    global _config
    _config = config


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority (testing/override)."""
    global _time_authority
    _time_authority = time_authority


def set_plan_repository(repository: PlanRepositoryProtocol) -> None:
    """Set custom plan repository (testing/override)."""
    global _plan_repository
    _plan_repository = repository


def set_notification_dispatcher(dispatcher: NotificationDispatcherProtocol) -> None:
    """Set custom notification dispatcher (testing/override)."""
    global _notification_dispatcher
    _notification_dispatcher = dispatcher


def set_user_directory(user_directory: UserDirectoryProtocol) -> None:
    """Set custom user directory (testing/override)."""
    global _user_directory
    _user_directory = user_directory


def reset_planning_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _config
    global _time_authority
    global _plan_repository
    global _notification_queue
    global _notification_dispatcher
    global _user_directory
    global _container

    _config = None
    _time_authority = None
    _plan_repository = None
    _notification_queue = None
    _notification_dispatcher = None
    _user_directory = None
    _container = None
