"""Request models for the plan core."""

from dinepick.application.dtos.plan import (
    CreatePlanRequest,
    RestaurantOptionDTO,
    UpdatePlanRequest,
    parse_create_request,
    parse_update_request,
)

__all__ = [
    "CreatePlanRequest",
    "RestaurantOptionDTO",
    "UpdatePlanRequest",
    "parse_create_request",
    "parse_update_request",
]
