"""
discovery_sdk.tier0_core.metrics
─────────────────────────────────
Counters and gauges with standard labels for the discovery client.
Collected in the default Prometheus registry; exposing them (an HTTP
/metrics endpoint, a push gateway) is left to the host process.

Minimal stack: prometheus-client
Labels:        service (DISCOVERY_APP_NAME), env (DISCOVERY_ENVIRONMENT)
"""
from __future__ import annotations

import os
from typing import Callable

from prometheus_client import Counter, Gauge

# Standard labels applied to every metric
_DEFAULT_LABELS = ["service", "env"]
_SERVICE = os.getenv("DISCOVERY_APP_NAME", "discovery-client")
_ENV = os.getenv("DISCOVERY_ENVIRONMENT", "test")
_DEFAULT_LABEL_VALUES = {"service": _SERVICE, "env": _ENV}


def counter(name: str, description: str, labels: list[str] | None = None) -> Callable:
    """
    Create a counter with standard labels.

    Usage:
        reloads_total = counter("property_reloads_total", "Property file reloads", ["result"])
        reloads_total(result="ok").inc()
    """
    all_labels = _DEFAULT_LABELS + (labels or [])
    c = Counter(name, description, all_labels)

    def _counter(**extra_labels: str) -> Counter:
        return c.labels(**_DEFAULT_LABEL_VALUES, **extra_labels)

    return _counter


def gauge(name: str, description: str, labels: list[str] | None = None) -> Callable:
    """
    Create a gauge with standard labels.

    Usage:
        last_change = gauge("identity_last_updated_timestamp_ms", "Last identity change")
        last_change().set(1700000000000)
    """
    all_labels = _DEFAULT_LABELS + (labels or [])
    g = Gauge(name, description, all_labels)

    def _gauge(**extra_labels: str) -> Gauge:
        return g.labels(**_DEFAULT_LABEL_VALUES, **extra_labels)

    return _gauge


# ── Client metrics ────────────────────────────────────────────────────────────
# Registered once at import; prometheus-client rejects duplicate names.

identity_refresh_total = counter(
    "discovery_identity_refresh_total",
    "Identity refresh attempts by outcome",
    ["outcome"],
)

identity_last_updated_ms = gauge(
    "discovery_identity_last_updated_timestamp_ms",
    "Timestamp of the last identity snapshot change",
)

property_reload_total = counter(
    "discovery_property_reload_total",
    "Property file reloads by result",
    ["result"],
)


__all__ = [
    "counter",
    "gauge",
    "identity_refresh_total",
    "identity_last_updated_ms",
    "property_reload_total",
]
