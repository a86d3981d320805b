from .lookup_observer import LookupObserver, PrometheusLookupObserver, get_prometheus_observer

__all__ = ["LookupObserver", "PrometheusLookupObserver", "get_prometheus_observer"]
