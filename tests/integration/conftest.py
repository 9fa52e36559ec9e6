"""
Integration test configuration with testcontainers.

Provides a session-scoped PostgreSQL 16 container for the plan repository
tests. In-memory flow tests in this directory never request it, so they
run without Docker.

Container Reuse Pattern:
- The container is started once per test session (scope="session")
- The plans table is truncated before every test (function-scoped fixture)
- The container is stopped after all tests complete

Usage:
    @pytest.mark.integration
    async def test_example(postgres_plan_repository: PostgresPlanRepository) -> None:
        ...

Note: Docker must be running for these fixtures; without it the tests
that need PostgreSQL are skipped.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from dinepick.infrastructure.adapters.persistence.postgres_plan_repository import (
    PostgresPlanRepository,
)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container."""
    container = PostgresContainer("postgres:16-alpine")
    try:
        container.start()
    except Exception as exc:
        pytest.skip(f"PostgreSQL container unavailable: {exc}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get async-compatible PostgreSQL connection URL.

    testcontainers returns a psycopg2 URL by default; convert to asyncpg.
    """
    sync_url = postgres_container.get_connection_url()
    async_url: str = sync_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    ).replace("postgresql://", "postgresql+asyncpg://")
    return async_url


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory over an empty plans table."""
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await PostgresPlanRepository(factory).create_schema()
    async with factory() as session, session.begin():
        await session.execute(text("TRUNCATE plans"))

    yield factory

    await engine.dispose()


@pytest.fixture
def postgres_plan_repository(
    session_factory: async_sessionmaker[AsyncSession],
) -> PostgresPlanRepository:
    return PostgresPlanRepository(session_factory)
