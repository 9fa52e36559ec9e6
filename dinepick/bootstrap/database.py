"""Async SQLAlchemy engine for the postgres plan backend.

Reads ``DATABASE_URL`` (any ``postgres://``/``postgresql://`` form, with or
without a driver) and ``SQLALCHEMY_ECHO``. The engine is created lazily on
the first ``get_session_factory()`` call and shared afterwards.
"""

from __future__ import annotations

import os

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from structlog import get_logger

logger = get_logger()

ASYNC_DRIVER = "postgresql+asyncpg"
_POSTGRES_DRIVERS = ("postgres", "postgresql")


def _parse(raw: str) -> URL:
    if "://" not in raw:
        raw = f"{ASYNC_DRIVER}://{raw}"
    try:
        return make_url(raw)
    except ArgumentError as exc:
        raise ValueError(f"DATABASE_URL is not a valid URL: {exc}") from exc


def get_database_url() -> str:
    """Return DATABASE_URL rewritten for the asyncpg driver.

    Raises:
        ValueError: DATABASE_URL is unset, malformed, or not PostgreSQL.
    """
    raw = os.environ.get("DATABASE_URL", "").strip()
    if not raw:
        raise ValueError("DATABASE_URL is not set; the postgres plan backend needs it")

    url = _parse(raw)
    if url.get_backend_name() not in _POSTGRES_DRIVERS:
        raise ValueError(f"DATABASE_URL must point at PostgreSQL, got {url.drivername!r}")
    return url.set(drivername=ASYNC_DRIVER).render_as_string(hide_password=False)


def mask_database_url(url: str) -> str:
    """Render ``url`` with its password (if any) shown as ``***``."""
    return make_url(url).render_as_string(hide_password=True)


def _echo_enabled() -> bool:
    return os.environ.get("SQLALCHEMY_ECHO", "").lower() in ("1", "true", "yes")


class _EngineHolder:
    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None


_holder = _EngineHolder()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Shared session factory, creating the engine on first use."""
    if _holder.session_factory is None:
        url = get_database_url()
        engine = create_async_engine(url, echo=_echo_enabled(), pool_pre_ping=True)
        _holder.engine = engine
        _holder.session_factory = async_sessionmaker(engine, expire_on_commit=False)
        logger.info(
            "database_engine_created",
            component="database_bootstrap",
            url=mask_database_url(url),
        )
    return _holder.session_factory


def reset_database_bootstrap() -> None:
    """Forget the engine without disposing it (tests)."""
    _holder.engine = None
    _holder.session_factory = None


async def close_database_engine() -> None:
    """Dispose the pooled connections on shutdown."""
    engine = _holder.engine
    reset_database_bootstrap()
    if engine is not None:
        await engine.dispose()
