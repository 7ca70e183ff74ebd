"""
Enumerations shared across the auth renewal policy.
"""

from enum import Enum


class FailureKind(str, Enum):
    """
    Classification of a failed exchange as seen by the retry policy.

    - NOT_AUTH_FAILURE: any status other than 401; passed through untouched
    - AUTH_EXPIRED: 401 on a token-bearing request; triggers token renewal
    - AUTH_REJECTED: 401 on the authentication call itself; always terminal
    - RETRY_BUDGET_EXHAUSTED: 401 after the retry budget was used up; terminal
    - POLICY_ERROR: a collaborator failed while deciding; treated as terminal
    """

    NOT_AUTH_FAILURE = "not_auth_failure"
    AUTH_EXPIRED = "auth_expired"
    AUTH_REJECTED = "auth_rejected"
    RETRY_BUDGET_EXHAUSTED = "retry_budget_exhausted"
    POLICY_ERROR = "policy_error"


class LedgerBackend(str, Enum):
    """Storage backends available for the retry ledger."""

    MEMORY = "memory"
    REDIS = "redis"
