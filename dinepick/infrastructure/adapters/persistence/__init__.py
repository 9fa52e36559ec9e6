"""Persistence adapters."""

from dinepick.infrastructure.adapters.persistence.plan_codec import (
    plan_from_document,
    plan_to_document,
)
from dinepick.infrastructure.adapters.persistence.postgres_plan_repository import (
    PLANS_TABLE_DDL,
    PostgresPlanRepository,
)

__all__ = [
    "PLANS_TABLE_DDL",
    "PostgresPlanRepository",
    "plan_from_document",
    "plan_to_document",
]
