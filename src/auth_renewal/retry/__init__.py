"""
Retry-on-renew policy for HTTP 401 responses.

Main Components:
    - RenewalRetryPolicy: decides retry / give-up for a failed exchange
    - RetryLedger: per-request 401 counters with idle eviction
      (InMemoryRetryLedger, RedisRetryLedger)
    - RetryOutcome: the decision and its FailureKind
    - sleep_uninterruptibly: backoff wait that ignores interruption

Usage:
    >>> from auth_renewal.retry import RenewalRetryPolicy, InMemoryRetryLedger
    >>> policy = RenewalRetryPolicy(auth_cache, InMemoryRetryLedger(), settings=settings)
    >>> policy.should_retry_request(exchange)
"""

from auth_renewal.retry.backoff import sleep_uninterruptibly
from auth_renewal.retry.engine import RenewalRetryPolicy
from auth_renewal.retry.ledger import InMemoryRetryLedger, RedisRetryLedger, RetryLedger
from auth_renewal.retry.outcome import RetryOutcome

__all__ = [
    "RenewalRetryPolicy",
    "RetryLedger",
    "InMemoryRetryLedger",
    "RedisRetryLedger",
    "RetryOutcome",
    "sleep_uninterruptibly",
]
