"""Helpers for reading Prometheus samples in assertions."""

from __future__ import annotations

from prometheus_client import CollectorRegistry


def sample_total(registry: CollectorRegistry, name: str, **labels: str) -> float:
    """Sum every sample called ``name`` whose labels include ``labels``.

    Service and environment labels come from the process environment, so
    assertions match on the labels they care about only.
    """
    total = 0.0
    for metric in registry.collect():
        for sample in metric.samples:
            if sample.name != name:
                continue
            if all(sample.labels.get(k) == v for k, v in labels.items()):
                total += sample.value
    return total
