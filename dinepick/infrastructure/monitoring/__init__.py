"""Prometheus metrics for the plan core."""

from dinepick.infrastructure.monitoring.plan_metrics import (
    PlanMetricsCollector,
    get_plan_metrics_collector,
)

__all__ = ["PlanMetricsCollector", "get_plan_metrics_collector"]
