"""Plan request models.

Pydantic models validating the shape of create/update input before it
reaches the lifecycle service. Policy limits that come from
PlanPolicyConfig (title length, invitee count, ...) are checked by the
service; these models only check what holds regardless of configuration.

Developer Golden Rules:
1. VALIDATE EARLY - Pydantic handles schema validation
2. FAIL LOUD - Schema errors surface as PlanValidationError
3. NO PARTIAL PLANS - Nothing is stored until validation passes
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from dinepick.domain.errors.plan import PlanValidationError
from dinepick.domain.models.plan import PlanKind, RestaurantOption
from dinepick.domain.services.event_schedule import parse_plan_date

ModelT = TypeVar("ModelT", bound=BaseModel)

# Fields an update may explicitly clear; whether the plan's kind allows it is
# checked against the stored plan
_NULLABLE_FIELDS = frozenset({"date", "time", "rsvp_deadline"})


class RestaurantOptionDTO(BaseModel):
    """A candidate restaurant as supplied at plan creation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Provider identifier")
    name: str = Field(..., min_length=1, description="Display name")
    rating: float = Field(default=0.0, ge=0.0, description="Quality score for tie-breaks")
    image_url: str = Field(default="")
    address: str = Field(default="")
    cuisine: str = Field(default="")
    price_level: int | None = Field(default=None, ge=1, le=4)

    def to_domain(self) -> RestaurantOption:
        return RestaurantOption(
            id=self.id,
            name=self.name,
            rating=self.rating,
            image_url=self.image_url,
            address=self.address,
            cuisine=self.cuisine,
            price_level=self.price_level,
        )


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CreatePlanRequest(BaseModel):
    """Request to create a plan.

    Attributes:
        kind: "scheduled" or "group-swipe".
        title: Plan title.
        invitee_ids: Users to invite. Duplicates collapse to one invite.
        candidates: Restaurant pool, fixed for the life of the plan.
        date: Event date (YYYY-MM-DD); required for scheduled plans.
        time: Event time ("7:30 PM"); required for scheduled plans.
        rsvp_deadline: RSVP cutoff; required for scheduled plans.
        cuisine: Cuisine preference label.
        budget: Budget label.
        options: Free-form option tags.
        restaurant_count: Requested candidate pool size.
        allow_curveball: Whether a wildcard candidate may be suggested.
    """

    model_config = ConfigDict(frozen=True)

    kind: PlanKind = Field(default=PlanKind.SCHEDULED)
    title: str = Field(..., min_length=1)
    invitee_ids: list[UUID] = Field(default_factory=list)
    candidates: list[RestaurantOptionDTO] = Field(default_factory=list)
    date: str | None = Field(default=None)
    time: str | None = Field(default=None)
    rsvp_deadline: datetime | None = Field(default=None)
    cuisine: str = Field(default="Any")
    budget: str = Field(default="$$")
    options: list[str] = Field(default_factory=list)
    restaurant_count: int | None = Field(default=None)
    allow_curveball: bool = Field(default=False)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be blank")
        return v

    @field_validator("rsvp_deadline")
    @classmethod
    def deadline_is_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)

    @model_validator(mode="after")
    def check_kind_requirements(self) -> CreatePlanRequest:
        if self.kind is PlanKind.SCHEDULED:
            missing = [
                name
                for name in ("date", "time", "rsvp_deadline")
                if getattr(self, name) in (None, "")
            ]
            if missing:
                raise ValueError(
                    f"scheduled plans require {', '.join(missing)}"
                )
        elif self.rsvp_deadline is not None:
            raise ValueError("group-swipe plans have no RSVP deadline")
        if self.date is not None and parse_plan_date(self.date) is None:
            raise ValueError(f"date must be YYYY-MM-DD, got {self.date!r}")

        ids = [c.id for c in self.candidates]
        if len(ids) != len(set(ids)):
            raise ValueError("candidate ids must be unique")
        return self

    def unique_invitee_ids(self) -> list[UUID]:
        """Invitee ids with duplicates removed, first occurrence kept."""
        return list(dict.fromkeys(self.invitee_ids))


class UpdatePlanRequest(BaseModel):
    """Owner edits to a plan still in voting.

    Only fields present in the input are applied. ``restaurant_id`` sets
    the owner's pick; ``clear_restaurant`` removes it.
    """

    model_config = ConfigDict(frozen=True)

    title: str | None = Field(default=None, min_length=1)
    date: str | None = Field(default=None)
    time: str | None = Field(default=None)
    rsvp_deadline: datetime | None = Field(default=None)
    cuisine: str | None = Field(default=None)
    budget: str | None = Field(default=None)
    options: list[str] | None = Field(default=None)
    allow_curveball: bool | None = Field(default=None)
    restaurant_id: str | None = Field(default=None)
    clear_restaurant: bool = Field(default=False)

    @field_validator("rsvp_deadline")
    @classmethod
    def deadline_is_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)

    @field_validator("date")
    @classmethod
    def date_is_iso(cls, v: str | None) -> str | None:
        if v is not None and parse_plan_date(v) is None:
            raise ValueError(f"date must be YYYY-MM-DD, got {v!r}")
        return v

    @model_validator(mode="after")
    def check_restaurant_flags(self) -> UpdatePlanRequest:
        if self.clear_restaurant and self.restaurant_id is not None:
            raise ValueError("restaurant_id and clear_restaurant are mutually exclusive")
        return self

    def field_changes(self) -> dict[str, Any]:
        """Plain field changes explicitly provided by the caller."""
        plain = {
            "title", "date", "time", "rsvp_deadline", "cuisine", "budget",
            "options", "allow_curveball",
        }
        changes: dict[str, Any] = {}
        for name in sorted(self.model_fields_set & plain):
            value = getattr(self, name)
            if value is None and name not in _NULLABLE_FIELDS:
                continue
            if name == "options" and value is not None:
                value = tuple(value)
            if name == "title" and value is not None:
                value = value.strip()
            changes[name] = value
        return changes


def _parse(model: type[ModelT], payload: Mapping[str, Any]) -> ModelT:
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "request"
        raise PlanValidationError(field, first.get("msg", "invalid value")) from exc


def parse_create_request(payload: Mapping[str, Any]) -> CreatePlanRequest:
    """Validate raw input into a CreatePlanRequest.

    Raises:
        PlanValidationError: Naming the first offending field.
    """
    return _parse(CreatePlanRequest, payload)


def parse_update_request(payload: Mapping[str, Any]) -> UpdatePlanRequest:
    """Validate raw input into an UpdatePlanRequest.

    Raises:
        PlanValidationError: Naming the first offending field.
    """
    return _parse(UpdatePlanRequest, payload)
