"""Plan metrics for Prometheus exposition.

Counters for plan status transitions, deadline sweep outcomes and
notification delivery, plus a gauge for the notification backlog.
Useful queries:

    rate(plan_status_transitions_total{to_status="confirmed"}[1h])
    increase(plan_deadline_sweep_outcomes_total{outcome="failed"}[1d])
"""

from __future__ import annotations

import os
import threading

from prometheus_client import CollectorRegistry, Counter, Gauge

# Thread lock for singleton initialization
_metrics_lock = threading.Lock()

SWEEP_OUTCOMES = ("declined", "voting_opened", "confirmed", "unresolved", "unchanged", "failed")
DISPATCH_RESULTS = ("delivered", "failed")


class PlanMetricsCollector:
    """Collects plan lifecycle metrics for Prometheus.

    Attributes:
        plan_status_transitions_total: Transitions by from/to status and trigger.
        plan_deadline_sweep_outcomes_total: Per-plan sweep outcomes.
        plan_deadline_sweeps_total: Completed sweep runs.
        plan_notifications_total: Notification deliveries by kind and result.
        plan_notification_queue_depth: Requests waiting for delivery.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize plan metrics collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "dinepick")

        self.plan_status_transitions_total = Counter(
            name="plan_status_transitions_total",
            documentation="Plan status transitions by trigger",
            labelnames=["from_status", "to_status", "trigger", "service", "environment"],
            registry=self._registry,
        )

        self.plan_deadline_sweep_outcomes_total = Counter(
            name="plan_deadline_sweep_outcomes_total",
            documentation="Per-plan outcomes of deadline sweeps",
            labelnames=["outcome", "service", "environment"],
            registry=self._registry,
        )

        self.plan_deadline_sweeps_total = Counter(
            name="plan_deadline_sweeps_total",
            documentation="Completed deadline sweep runs",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.plan_notifications_total = Counter(
            name="plan_notifications_total",
            documentation="Notification deliveries by kind and result",
            labelnames=["kind", "result", "service", "environment"],
            registry=self._registry,
        )

        self.plan_notification_queue_depth = Gauge(
            name="plan_notification_queue_depth",
            documentation="Notification requests waiting for delivery",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

    def record_transition(self, from_status: str, to_status: str, trigger: str) -> None:
        """Record a plan status transition.

        Args:
            from_status: Status before (e.g. "voting").
            to_status: Status after (e.g. "confirmed").
            trigger: What caused it ("owner", "quorum", "deadline", "leave").
        """
        self.plan_status_transitions_total.labels(
            from_status=from_status,
            to_status=to_status,
            trigger=trigger,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_sweep_outcome(self, outcome: str) -> None:
        """Record one plan's outcome within a sweep.

        Raises:
            ValueError: If outcome is not a known sweep outcome.
        """
        if outcome not in SWEEP_OUTCOMES:
            raise ValueError(f"Invalid outcome '{outcome}'. Must be one of {SWEEP_OUTCOMES}.")
        self.plan_deadline_sweep_outcomes_total.labels(
            outcome=outcome,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_sweep_completed(self) -> None:
        self.plan_deadline_sweeps_total.labels(
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_notification(self, kind: str, result: str) -> None:
        """Record a notification delivery attempt.

        Raises:
            ValueError: If result is not "delivered" or "failed".
        """
        if result not in DISPATCH_RESULTS:
            raise ValueError(f"Invalid result '{result}'. Must be one of {DISPATCH_RESULTS}.")
        self.plan_notifications_total.labels(
            kind=kind,
            result=result,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def set_queue_depth(self, depth: int) -> None:
        self.plan_notification_queue_depth.labels(
            service=self._service_name,
            environment=self._environment,
        ).set(depth)

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry


# Singleton instance
_plan_metrics_collector: PlanMetricsCollector | None = None


def get_plan_metrics_collector() -> PlanMetricsCollector:
    """Get the singleton PlanMetricsCollector instance (thread-safe)."""
    global _plan_metrics_collector
    if _plan_metrics_collector is None:
        with _metrics_lock:
            if _plan_metrics_collector is None:
                _plan_metrics_collector = PlanMetricsCollector()
    return _plan_metrics_collector
