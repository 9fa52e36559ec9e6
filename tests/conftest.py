"""
Pytest configuration and shared fixtures for dinepick tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for failing or spying collaborators
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from dinepick.bootstrap.planning import PlanningContainer, build_planning_container
from dinepick.config.plan_config import TEST_PLAN_POLICY_CONFIG, PlanPolicyConfig
from dinepick.infrastructure.adapters.messaging.in_memory_notification_queue import (
    InMemoryNotificationQueue,
)
from dinepick.infrastructure.monitoring.plan_metrics import PlanMetricsCollector
from dinepick.infrastructure.stubs.notification_dispatcher_stub import (
    NotificationDispatcherStub,
)
from dinepick.infrastructure.stubs.plan_repository_stub import PlanRepositoryStub
from dinepick.infrastructure.stubs.user_directory_stub import UserDirectoryStub
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.plan_builders import CREATED_AT


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Time authority frozen at the default plan creation instant."""
    return FakeTimeAuthority(frozen_at=CREATED_AT)


@pytest.fixture
def plan_config() -> PlanPolicyConfig:
    return TEST_PLAN_POLICY_CONFIG


@pytest.fixture
def plan_repository() -> PlanRepositoryStub:
    return PlanRepositoryStub()


@pytest.fixture
def notification_queue() -> InMemoryNotificationQueue:
    return InMemoryNotificationQueue()


@pytest.fixture
def dispatcher() -> NotificationDispatcherStub:
    return NotificationDispatcherStub()


@pytest.fixture
def user_directory() -> UserDirectoryStub:
    return UserDirectoryStub()


@pytest.fixture
def metrics() -> PlanMetricsCollector:
    """Metrics collector on its own registry so tests never share counters."""
    return PlanMetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def planning(
    plan_repository: PlanRepositoryStub,
    notification_queue: InMemoryNotificationQueue,
    dispatcher: NotificationDispatcherStub,
    user_directory: UserDirectoryStub,
    fake_time_authority: FakeTimeAuthority,
    plan_config: PlanPolicyConfig,
    metrics: PlanMetricsCollector,
) -> PlanningContainer:
    """Every plan service wired to in-memory stubs."""
    return build_planning_container(
        repository=plan_repository,
        queue=notification_queue,
        dispatcher=dispatcher,
        user_directory=user_directory,
        time_authority=fake_time_authority,
        config=plan_config,
        metrics=metrics,
    )
