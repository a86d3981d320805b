"""
Instrumentation hooks for property lookups.

The lookup service reports events to an injected observer. ``LookupObserver``
does nothing; ``PrometheusLookupObserver`` exports counters and a latency
histogram.
"""

import logging
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

logger = logging.getLogger(__name__)


class LookupObserver:
    """No-op observer. Subclasses override the events they care about."""

    def on_cache_hit(self, address: str) -> None:
        pass

    def on_cache_miss(self, address: str, stale: bool) -> None:
        pass

    def on_fetch_success(self, address: str, duration_seconds: float) -> None:
        pass

    def on_fetch_error(self, kind: str) -> None:
        pass

    def on_cache_write(self, success: bool) -> None:
        pass


class PrometheusLookupObserver(LookupObserver):
    """Observer recording lookup metrics with prometheus_client."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        registry = registry if registry is not None else REGISTRY
        self.cache_requests = Counter(
            "property_cache_requests_total",
            "Property cache lookups by outcome",
            ["outcome"],
            registry=registry,
        )
        self.provider_requests = Counter(
            "property_provider_requests_total",
            "Property provider calls by result",
            ["result"],
            registry=registry,
        )
        self.provider_latency = Histogram(
            "property_provider_request_duration_seconds",
            "Duration of successful property provider calls",
            registry=registry,
        )
        self.cache_writes = Counter(
            "property_cache_writes_total",
            "Property cache writes by result",
            ["result"],
            registry=registry,
        )

    def on_cache_hit(self, address: str) -> None:
        self.cache_requests.labels(outcome="hit").inc()

    def on_cache_miss(self, address: str, stale: bool) -> None:
        self.cache_requests.labels(outcome="stale" if stale else "miss").inc()

    def on_fetch_success(self, address: str, duration_seconds: float) -> None:
        self.provider_requests.labels(result="success").inc()
        self.provider_latency.observe(duration_seconds)

    def on_fetch_error(self, kind: str) -> None:
        self.provider_requests.labels(result=kind).inc()

    def on_cache_write(self, success: bool) -> None:
        self.cache_writes.labels(result="success" if success else "failure").inc()


_prometheus_observer: Optional[PrometheusLookupObserver] = None


def get_prometheus_observer() -> PrometheusLookupObserver:
    """Process-wide Prometheus observer; metrics may only be registered once."""
    global _prometheus_observer
    if _prometheus_observer is None:
        _prometheus_observer = PrometheusLookupObserver()
        logger.info("Prometheus lookup metrics registered")
    return _prometheus_observer
