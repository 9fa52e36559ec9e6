"""Plan document codec.

Converts between the frozen Plan model and the JSON document stored in the
``plans.document`` column. Votes are stored as
``{user_id: [candidate_id, ...]}`` with candidate ids sorted, and all
datetimes as ISO-8601 strings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from dinepick.domain.models.plan import (
    InviteStatus,
    Plan,
    PlanInvite,
    PlanKind,
    PlanStatus,
    RestaurantOption,
)


def _dt_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _dt_from_str(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def restaurant_to_document(option: RestaurantOption) -> dict[str, Any]:
    return {
        "id": option.id,
        "name": option.name,
        "rating": option.rating,
        "image_url": option.image_url,
        "address": option.address,
        "cuisine": option.cuisine,
        "price_level": option.price_level,
    }


def restaurant_from_document(doc: dict[str, Any]) -> RestaurantOption:
    return RestaurantOption(
        id=str(doc["id"]),
        name=doc["name"],
        rating=float(doc.get("rating", 0.0)),
        image_url=doc.get("image_url", ""),
        address=doc.get("address", ""),
        cuisine=doc.get("cuisine", ""),
        price_level=doc.get("price_level"),
    )


def _invite_to_document(invite: PlanInvite) -> dict[str, Any]:
    return {
        "user_id": str(invite.user_id),
        "name": invite.name,
        "status": invite.status.value,
        "responded_at": _dt_to_str(invite.responded_at),
    }


def _invite_from_document(doc: dict[str, Any]) -> PlanInvite:
    return PlanInvite(
        user_id=UUID(doc["user_id"]),
        name=doc.get("name", ""),
        status=InviteStatus(doc.get("status", InviteStatus.PENDING.value)),
        responded_at=_dt_from_str(doc.get("responded_at")),
    )


def plan_to_document(plan: Plan) -> dict[str, Any]:
    """Serialize a plan to a JSON-compatible dict.

    The version is not part of the document; it lives in its own column.
    """
    return {
        "id": str(plan.id),
        "kind": plan.kind.value,
        "title": plan.title,
        "owner_id": str(plan.owner_id),
        "status": plan.status.value,
        "invites": [_invite_to_document(i) for i in plan.invites],
        "candidates": [restaurant_to_document(c) for c in plan.candidates],
        "votes": {str(user): sorted(liked) for user, liked in plan.votes.items()},
        "completed_voters": sorted(str(u) for u in plan.completed_voters),
        "rsvp_deadline": _dt_to_str(plan.rsvp_deadline),
        "voting_opened_at": _dt_to_str(plan.voting_opened_at),
        "resolved_restaurant": (
            restaurant_to_document(plan.resolved_restaurant)
            if plan.resolved_restaurant is not None
            else None
        ),
        "restaurant_override": (
            restaurant_to_document(plan.restaurant_override)
            if plan.restaurant_override is not None
            else None
        ),
        "date": plan.date,
        "time": plan.time,
        "cancelled_at": _dt_to_str(plan.cancelled_at),
        "cuisine": plan.cuisine,
        "budget": plan.budget,
        "options": list(plan.options),
        "restaurant_count": plan.restaurant_count,
        "allow_curveball": plan.allow_curveball,
        "created_at": _dt_to_str(plan.created_at),
        "updated_at": _dt_to_str(plan.updated_at),
    }


def plan_from_document(doc: dict[str, Any], version: int = 0) -> Plan:
    """Rebuild a plan from its stored document and version column."""
    resolved = doc.get("resolved_restaurant")
    override = doc.get("restaurant_override")
    created_at = datetime.fromisoformat(doc["created_at"])
    updated_at = _dt_from_str(doc.get("updated_at")) or created_at
    return Plan(
        id=UUID(doc["id"]),
        kind=PlanKind(doc["kind"]),
        title=doc["title"],
        owner_id=UUID(doc["owner_id"]),
        created_at=created_at,
        updated_at=updated_at,
        status=PlanStatus(doc["status"]),
        invites=tuple(_invite_from_document(i) for i in doc.get("invites", [])),
        candidates=tuple(restaurant_from_document(c) for c in doc.get("candidates", [])),
        votes={
            UUID(user): frozenset(str(c) for c in liked)
            for user, liked in (doc.get("votes") or {}).items()
        },
        completed_voters=frozenset(UUID(u) for u in doc.get("completed_voters", [])),
        rsvp_deadline=_dt_from_str(doc.get("rsvp_deadline")),
        voting_opened_at=_dt_from_str(doc.get("voting_opened_at")),
        resolved_restaurant=restaurant_from_document(resolved) if resolved else None,
        restaurant_override=restaurant_from_document(override) if override else None,
        date=doc.get("date"),
        time=doc.get("time"),
        cancelled_at=_dt_from_str(doc.get("cancelled_at")),
        cuisine=doc.get("cuisine", "Any"),
        budget=doc.get("budget", "$$"),
        options=tuple(doc.get("options", [])),
        restaurant_count=doc.get("restaurant_count"),
        allow_curveball=bool(doc.get("allow_curveball", False)),
        version=version,
    )
