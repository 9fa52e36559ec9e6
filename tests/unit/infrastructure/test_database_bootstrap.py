"""Unit tests for database URL handling in the database bootstrap."""

import pytest

from dinepick.bootstrap.database import (
    get_database_url,
    get_session_factory,
    mask_database_url,
    reset_database_bootstrap,
)


@pytest.fixture(autouse=True)
def _reset_database() -> None:
    reset_database_bootstrap()
    yield
    reset_database_bootstrap()


@pytest.mark.parametrize(
    "configured",
    [
        "postgresql://dine:pw@db:5432/dinepick",
        "postgres://dine:pw@db:5432/dinepick",
        "postgresql+asyncpg://dine:pw@db:5432/dinepick",
        "dine:pw@db:5432/dinepick",
    ],
)
def test_url_converted_to_asyncpg(monkeypatch: pytest.MonkeyPatch, configured: str) -> None:
    monkeypatch.setenv("DATABASE_URL", configured)

    assert get_database_url() == "postgresql+asyncpg://dine:pw@db:5432/dinepick"


def test_missing_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(ValueError, match="DATABASE_URL"):
        get_session_factory()


@pytest.mark.parametrize(
    ("url", "masked"),
    [
        (
            "postgresql+asyncpg://dine:s3cret@db:5432/dinepick",
            "postgresql+asyncpg://dine:***@db:5432/dinepick",
        ),
        ("postgresql+asyncpg://dine@db/dinepick", "postgresql+asyncpg://dine@db/dinepick"),
        ("sqlite+aiosqlite:///plans.db", "sqlite+aiosqlite:///plans.db"),
    ],
)
def test_password_masked(url: str, masked: str) -> None:
    assert mask_database_url(url) == masked


def test_session_factory_is_singleton(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://dine:pw@localhost:5432/dinepick")

    assert get_session_factory() is get_session_factory()


def test_non_postgres_url_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "mysql://dine:pw@db/dinepick")

    with pytest.raises(ValueError, match="PostgreSQL"):
        get_database_url()
