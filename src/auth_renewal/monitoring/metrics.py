"""Custom Prometheus metrics for the auth renewal policy.

Alert rules should be configured for:
- auth_retry_decisions_total{kind="retry_budget_exhausted"} (tokens keep getting rejected)
- authentications_total{success="false"} (identity service down or credentials revoked)
- auth_cache_invalidations_total (a spike means many requests saw 401 at once)
"""

from prometheus_client import Counter, Histogram

# === Decision Metrics ===

auth_retry_decisions_total = Counter(
    "auth_retry_decisions_total",
    "Retry decisions taken for failed exchanges by failure kind",
    ["kind", "retry"],
)
"""
Decision counter.

Labels:
- kind: not_auth_failure, auth_expired, auth_rejected, retry_budget_exhausted, policy_error
- retry: true (request will be retried), false (terminal for this policy)

Alert thresholds:
- WARN: any retry_budget_exhausted in a 5 minute window
- CRITICAL: policy_error > 0 (ledger backend unreachable)
"""

# === Cache Metrics ===

auth_cache_invalidations_total = Counter(
    "auth_cache_invalidations_total",
    "Full invalidations of the authentication cache",
)

authentications_total = Counter(
    "authentications_total",
    "Authenticator invocations by outcome",
    ["success"],
)
"""
Authenticator calls (cache misses that reached the identity service).

Labels:
- success: true, false

With load collapsing in place this should track the number of distinct
credentials times the number of invalidations, not the request rate.
"""

# === Backoff Metrics ===

auth_backoff_seconds = Histogram(
    "auth_backoff_seconds",
    "Time spent waiting before re-sending a request after token renewal",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)
