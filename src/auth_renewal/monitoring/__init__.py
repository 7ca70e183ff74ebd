"""Monitoring and metrics instrumentation for the auth renewal policy.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from auth_renewal.monitoring.metrics import (
    auth_backoff_seconds,
    auth_cache_invalidations_total,
    auth_retry_decisions_total,
    authentications_total,
)

__all__ = [
    "auth_retry_decisions_total",
    "auth_cache_invalidations_total",
    "authentications_total",
    "auth_backoff_seconds",
]
