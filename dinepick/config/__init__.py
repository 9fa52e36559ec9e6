"""Configuration for the DinePick plan core."""

from dinepick.config.plan_config import (
    DEFAULT_PLAN_POLICY_CONFIG,
    TEST_PLAN_POLICY_CONFIG,
    PlanPolicyConfig,
)

__all__ = [
    "DEFAULT_PLAN_POLICY_CONFIG",
    "TEST_PLAN_POLICY_CONFIG",
    "PlanPolicyConfig",
]
