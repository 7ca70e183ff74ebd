"""
Exceptions raised by the HTTP execution layer.
"""

from typing import Optional

from auth_renewal.models.enums import FailureKind
from auth_renewal.models.exchange import RequestIdentity


class AuthRenewalFailed(Exception):
    """
    Raised when a request still gets 401 and the retry policy says stop.

    Carries what is left of the original response (its payload has already
    been released) plus the reason the policy gave up.

    Attributes:
        status_code: Status of the final response (always 401 today)
        kind: FailureKind reported by the policy
        identity: RequestIdentity of the logical request
        attempt: Ledger count when the policy gave up, if it was consulted
        headers: Headers of the final response
    """

    def __init__(
        self,
        status_code: int,
        kind: FailureKind,
        identity: RequestIdentity,
        attempt: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        self.kind = kind
        self.identity = identity
        self.attempt = attempt
        self.headers = headers or {}

        super().__init__(
            f"Request {identity} failed with {status_code} ({kind.value}"
            + (f" after {attempt} renewals)" if attempt else ")")
        )
