"""
Retry decision outcome.

This module defines the RetryOutcome dataclass returned by the retry policy
for every failed exchange it evaluates.
"""

from dataclasses import dataclass
from typing import Optional

from auth_renewal.models.enums import FailureKind


@dataclass(frozen=True)
class RetryOutcome:
    """
    Decision taken for one failed exchange.

    Attributes:
        retry: True if the caller should re-send the request
        kind: Why the policy decided the way it did
        attempt: Ledger count after the decision (None when the ledger was
            not consulted, e.g. non-401 or authentication-call failures)
    """

    retry: bool
    kind: FailureKind
    attempt: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate outcome invariants."""
        if self.retry and self.kind is not FailureKind.AUTH_EXPIRED:
            raise ValueError(f"only {FailureKind.AUTH_EXPIRED.value} may be retried, got {self.kind.value}")

        if self.attempt is not None and self.attempt < 1:
            raise ValueError("attempt must be >= 1")

    def __bool__(self) -> bool:
        return self.retry
