"""PostgreSQL plan repository.

Production implementation of PlanRepositoryProtocol. Each plan is one row
of the ``plans`` table: the full plan document in a JSONB column, plus the
columns the deadline sweep and list queries filter on.

Concurrency:
    save_plan is a single ``UPDATE ... WHERE id = :id AND version =
    :expected``. A row count of zero means either the plan is gone or
    someone else saved first; a follow-up SELECT tells the two apart.

Usage:
    from dinepick.bootstrap.database import get_session_factory

    repository = PostgresPlanRepository(get_session_factory())
    await repository.create_schema()
"""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from dinepick.application.ports.plan_repository import PlanFilter, PlanRepositoryProtocol
from dinepick.domain.errors.concurrent_modification import PlanConflictError
from dinepick.domain.errors.plan import PlanAlreadyExistsError, PlanNotFoundError
from dinepick.domain.models.plan import Plan
from dinepick.infrastructure.adapters.persistence.plan_codec import (
    plan_from_document,
    plan_to_document,
)

logger = get_logger()

PLANS_TABLE_DDL = (
    """
    CREATE TABLE IF NOT EXISTS plans (
        id UUID PRIMARY KEY,
        kind TEXT NOT NULL,
        status TEXT NOT NULL,
        owner_id UUID NOT NULL,
        rsvp_deadline TIMESTAMPTZ NULL,
        created_at TIMESTAMPTZ NOT NULL,
        version INTEGER NOT NULL DEFAULT 0,
        document JSONB NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_plans_kind_status ON plans (kind, status)",
    "CREATE INDEX IF NOT EXISTS ix_plans_owner_id ON plans (owner_id)",
    "CREATE INDEX IF NOT EXISTS ix_plans_invites ON plans USING GIN ((document -> 'invites'))",
)


def _load_document(value: Any) -> dict[str, Any]:
    # asyncpg hands JSONB back as text unless a codec is registered
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return dict(value)


def _row_params(plan: Plan) -> dict[str, Any]:
    return {
        "id": plan.id,
        "kind": plan.kind.value,
        "status": plan.status.value,
        "owner_id": plan.owner_id,
        "rsvp_deadline": plan.rsvp_deadline,
        "created_at": plan.created_at,
        "document": json.dumps(plan_to_document(plan)),
    }


class PostgresPlanRepository(PlanRepositoryProtocol):
    """PlanRepositoryProtocol backed by PostgreSQL via SQLAlchemy async.

    Attributes:
        _session_factory: SQLAlchemy async session factory for DB access.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._log = logger.bind(component="postgres_plan_repository")

    async def create_schema(self) -> None:
        """Create the plans table and its indexes if they do not exist."""
        async with self._session_factory() as session:
            async with session.begin():
                for statement in PLANS_TABLE_DDL:
                    await session.execute(text(statement))
        self._log.info("plans_schema_ready")

    async def get_plan(self, plan_id: UUID) -> Plan | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT document, version
                    FROM plans
                    WHERE id = :id
                """),
                {"id": plan_id},
            )
            row = result.fetchone()
        if row is None:
            return None
        return plan_from_document(_load_document(row[0]), version=row[1])

    async def create_plan(self, plan: Plan) -> Plan:
        stored = plan.with_version(0)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        text("""
                            INSERT INTO plans (
                                id, kind, status, owner_id, rsvp_deadline,
                                created_at, version, document
                            )
                            VALUES (
                                :id, :kind, :status, :owner_id, :rsvp_deadline,
                                :created_at, 0, CAST(:document AS JSONB)
                            )
                        """),
                        _row_params(stored),
                    )
        except IntegrityError as e:
            raise PlanAlreadyExistsError(plan.id) from e

        self._log.debug("plan_inserted", plan_id=str(plan.id))
        return stored

    async def save_plan(self, plan: Plan, expected_version: int) -> Plan:
        stored = plan.with_version(expected_version + 1)
        params = _row_params(stored)
        params["expected_version"] = expected_version

        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    text("""
                        UPDATE plans
                        SET status = :status,
                            owner_id = :owner_id,
                            rsvp_deadline = :rsvp_deadline,
                            version = version + 1,
                            document = CAST(:document AS JSONB)
                        WHERE id = :id AND version = :expected_version
                    """),
                    params,
                )
                if result.rowcount == 1:
                    return stored

                current = await session.execute(
                    text("SELECT version FROM plans WHERE id = :id"),
                    {"id": plan.id},
                )
                actual_version = current.scalar()

        if actual_version is None:
            raise PlanNotFoundError(plan.id)

        self._log.debug(
            "plan_version_conflict",
            plan_id=str(plan.id),
            expected_version=expected_version,
            actual_version=actual_version,
        )
        raise PlanConflictError(
            plan_id=plan.id,
            expected_version=expected_version,
            actual_version=actual_version,
        )

    async def find_plans(self, plan_filter: PlanFilter) -> list[Plan]:
        clauses: list[str] = []
        params: dict[str, Any] = {}

        if plan_filter.kind is not None:
            clauses.append("kind = :kind")
            params["kind"] = plan_filter.kind.value
        if plan_filter.statuses:
            clauses.append("status = ANY(:statuses)")
            params["statuses"] = [s.value for s in plan_filter.statuses]
        if plan_filter.rsvp_deadline_before is not None:
            clauses.append("rsvp_deadline IS NOT NULL AND rsvp_deadline <= :deadline_before")
            params["deadline_before"] = plan_filter.rsvp_deadline_before
        if plan_filter.participant_id is not None:
            clauses.append(
                "(owner_id = :participant_id"
                " OR document -> 'invites' @> CAST(:invite_match AS JSONB))"
            )
            params["participant_id"] = plan_filter.participant_id
            params["invite_match"] = json.dumps(
                [{"user_id": str(plan_filter.participant_id)}]
            )

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT document, version
                    FROM plans
                    {where}
                    ORDER BY created_at DESC
                """),
                params,
            )
            rows = result.fetchall()

        return [plan_from_document(_load_document(doc), version=version) for doc, version in rows]

    async def delete_plan(self, plan_id: UUID) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    text("DELETE FROM plans WHERE id = :id"),
                    {"id": plan_id},
                )
                if result.rowcount == 0:
                    raise PlanNotFoundError(plan_id)
        self._log.debug("plan_deleted", plan_id=str(plan_id))
