"""Plan policy configuration.

Limits and intervals for the plan core, with environment variable
overrides for production tuning.

Environment Variables (Policy):
- DINEPICK_MIN_DELEGATION_GROUP_SIZE: Owner + invitees needed to delegate (default: 3)
- DINEPICK_MAX_TITLE_LENGTH: Plan title limit (default: 100)
- DINEPICK_MAX_CUISINE_LENGTH: Cuisine label limit (default: 50)
- DINEPICK_MAX_INVITEES: Invitees per plan (default: 50)
- DINEPICK_MAX_OPTIONS: Option tags per plan (default: 20)
- DINEPICK_PLAN_TIMEZONE: IANA zone for event date/time (default: UTC)

Environment Variables (Workers):
- DINEPICK_DEADLINE_SWEEP_INTERVAL: Seconds between sweeps (default: 300)
- DINEPICK_NOTIFICATION_DISPATCH_INTERVAL: Seconds between queue drains (default: 1.0)
- DINEPICK_NOTIFICATION_BATCH_SIZE: Requests per drain (default: 100)
- DINEPICK_NOTIFICATION_WEBHOOK_URL: Webhook endpoint (default: unset)
- DINEPICK_NOTIFICATION_WEBHOOK_TIMEOUT: Webhook timeout seconds (default: 5.0)
- DINEPICK_NOTIFICATION_WEBHOOK_SECRET: HMAC secret for webhook signatures (default: unset)
- DINEPICK_NOTIFICATION_WEBHOOK_MAX_RETRIES: Delivery attempts per request (default: 3)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable, falling back on missing or invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable, falling back on missing or invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class PlanPolicyConfig:
    """Configuration for plan validation, delegation and background workers.

    Attributes:
        min_delegation_group_size: Owner plus invitees required before the
            organizer role can be handed off. Default: 3.
        max_title_length: Maximum plan title length. Default: 100.
        max_cuisine_length: Maximum cuisine label length. Default: 50.
        max_invitees: Maximum invitees per plan. Default: 50.
        max_options: Maximum option tags per plan. Default: 20.
        min_restaurant_count: Lower bound for restaurant_count. Default: 5.
        max_restaurant_count: Upper bound for restaurant_count. Default: 20.
        plan_timezone: IANA zone the plans' wall-clock date/time are in.
            Default: "UTC".
        deadline_sweep_interval_seconds: Seconds between deadline sweeps.
            Default: 300 (5 minutes).
        notification_dispatch_interval_seconds: Seconds between queue
            drains when the queue is empty. Default: 1.0.
        notification_batch_size: Max requests delivered per drain.
            Default: 100.
        notification_webhook_url: Endpoint for the webhook dispatcher.
            None selects the logging-only stub.
        notification_webhook_timeout_seconds: HTTP timeout for webhook
            delivery. Default: 5.0.
        notification_webhook_secret: Optional HMAC-SHA256 signing secret.
        notification_webhook_max_retries: Delivery attempts before a
            request is reported as failed. Default: 3.
    """

    min_delegation_group_size: int = 3
    max_title_length: int = 100
    max_cuisine_length: int = 50
    max_invitees: int = 50
    max_options: int = 20
    min_restaurant_count: int = 5
    max_restaurant_count: int = 20
    plan_timezone: str = "UTC"
    deadline_sweep_interval_seconds: float = 300.0
    notification_dispatch_interval_seconds: float = 1.0
    notification_batch_size: int = 100
    notification_webhook_url: str | None = None
    notification_webhook_timeout_seconds: float = 5.0
    notification_webhook_secret: str | None = None
    notification_webhook_max_retries: int = 3

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.min_delegation_group_size < 2:
            raise ValueError(
                "min_delegation_group_size must be at least 2, "
                f"got {self.min_delegation_group_size}"
            )
        for name in ("max_title_length", "max_cuisine_length", "max_invitees", "max_options"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.min_restaurant_count < 1:
            raise ValueError(
                f"min_restaurant_count must be positive, got {self.min_restaurant_count}"
            )
        if self.max_restaurant_count < self.min_restaurant_count:
            raise ValueError(
                f"max_restaurant_count ({self.max_restaurant_count}) must be at least "
                f"min_restaurant_count ({self.min_restaurant_count})"
            )
        try:
            ZoneInfo(self.plan_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown plan_timezone {self.plan_timezone!r}") from exc
        if self.deadline_sweep_interval_seconds <= 0:
            raise ValueError(
                "deadline_sweep_interval_seconds must be positive, "
                f"got {self.deadline_sweep_interval_seconds}"
            )
        if self.notification_dispatch_interval_seconds <= 0:
            raise ValueError(
                "notification_dispatch_interval_seconds must be positive, "
                f"got {self.notification_dispatch_interval_seconds}"
            )
        if self.notification_batch_size < 1:
            raise ValueError(
                f"notification_batch_size must be positive, got {self.notification_batch_size}"
            )
        if self.notification_webhook_timeout_seconds <= 0:
            raise ValueError(
                "notification_webhook_timeout_seconds must be positive, "
                f"got {self.notification_webhook_timeout_seconds}"
            )
        if self.notification_webhook_max_retries < 1:
            raise ValueError(
                "notification_webhook_max_retries must be at least 1, "
                f"got {self.notification_webhook_max_retries}"
            )

    @property
    def tz(self) -> tzinfo:
        """The plan timezone as a tzinfo."""
        return ZoneInfo(self.plan_timezone)

    @classmethod
    def from_environment(cls) -> PlanPolicyConfig:
        """Create config from environment variables with defaults.

        Returns:
            PlanPolicyConfig with values from environment or defaults.
        """
        return cls(
            min_delegation_group_size=_get_int_env("DINEPICK_MIN_DELEGATION_GROUP_SIZE", 3),
            max_title_length=_get_int_env("DINEPICK_MAX_TITLE_LENGTH", 100),
            max_cuisine_length=_get_int_env("DINEPICK_MAX_CUISINE_LENGTH", 50),
            max_invitees=_get_int_env("DINEPICK_MAX_INVITEES", 50),
            max_options=_get_int_env("DINEPICK_MAX_OPTIONS", 20),
            plan_timezone=os.environ.get("DINEPICK_PLAN_TIMEZONE", "UTC"),
            deadline_sweep_interval_seconds=_get_float_env(
                "DINEPICK_DEADLINE_SWEEP_INTERVAL", 300.0
            ),
            notification_dispatch_interval_seconds=_get_float_env(
                "DINEPICK_NOTIFICATION_DISPATCH_INTERVAL", 1.0
            ),
            notification_batch_size=_get_int_env("DINEPICK_NOTIFICATION_BATCH_SIZE", 100),
            notification_webhook_url=os.environ.get("DINEPICK_NOTIFICATION_WEBHOOK_URL") or None,
            notification_webhook_timeout_seconds=_get_float_env(
                "DINEPICK_NOTIFICATION_WEBHOOK_TIMEOUT", 5.0
            ),
            notification_webhook_secret=(
                os.environ.get("DINEPICK_NOTIFICATION_WEBHOOK_SECRET") or None
            ),
            notification_webhook_max_retries=_get_int_env(
                "DINEPICK_NOTIFICATION_WEBHOOK_MAX_RETRIES", 3
            ),
        )


# Pre-defined configurations for common use cases

# Default production config
DEFAULT_PLAN_POLICY_CONFIG = PlanPolicyConfig()

# Testing config with fast worker intervals
TEST_PLAN_POLICY_CONFIG = PlanPolicyConfig(
    deadline_sweep_interval_seconds=0.01,
    notification_dispatch_interval_seconds=0.01,
    notification_batch_size=10,
)
