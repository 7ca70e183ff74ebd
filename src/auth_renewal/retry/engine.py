"""
Renewal retry policy for HTTP 401 responses.

Given a failed exchange, decides whether the failure means "the token we
sent has expired or was revoked" and, if so, forces token renewal by
invalidating the authentication cache and tells the caller to retry.

Decision table (status 401 only; anything else is never retried here):
    1. Request carries identity + secret headers but no token header:
       it *is* the authentication call. Never retried.
    2. First 401 for this request identity: record 1, invalidate, retry.
    3. Count c already recorded and c + 1 >= num_retries: give up.
    4. Otherwise: record c + 1, invalidate, back off, retry.

Usage:
    policy = RenewalRetryPolicy(auth_cache, ledger, settings=settings)
    if policy.should_retry_request(exchange):
        ...re-send with the same RequestIdentity...
"""

from typing import Callable, Optional

import structlog

from auth_renewal.auth.cache import AuthenticationCache
from auth_renewal.config import Settings
from auth_renewal.models.enums import FailureKind
from auth_renewal.models.exchange import FailedExchange, RequestView
from auth_renewal.monitoring.metrics import (
    auth_backoff_seconds,
    auth_retry_decisions_total,
)
from auth_renewal.retry.backoff import sleep_uninterruptibly
from auth_renewal.retry.ledger import RetryLedger
from auth_renewal.retry.outcome import RetryOutcome

logger = structlog.get_logger(__name__)

UNAUTHORIZED = 401

# Bound on lost compare-and-record races before the policy gives up
MAX_LEDGER_CONFLICTS = 8


class RenewalRetryPolicy:
    """
    Stateless decision engine; all state lives in the ledger and the cache.

    Safe to call from any number of threads. Both collaborators are shared
    process-wide and are handed in at construction time.

    Attributes:
        auth_cache: Cache invalidated before every retry
        ledger: Per-request 401 counters
        num_retries: Budget; the request gives up once count + 1 reaches it
        backoff_seconds: Wait before every retry after the first
    """

    def __init__(
        self,
        auth_cache: AuthenticationCache,
        ledger: RetryLedger,
        settings: Optional[Settings] = None,
        sleeper: Callable[[float], None] = sleep_uninterruptibly,
    ):
        settings = settings or Settings()
        self.auth_cache = auth_cache
        self.ledger = ledger
        self.num_retries = settings.NUM_RETRIES
        self.backoff_seconds = settings.RETRY_BACKOFF_SECONDS
        self.user_header = settings.AUTH_USER_HEADER
        self.key_header = settings.AUTH_KEY_HEADER
        self.token_header = settings.AUTH_TOKEN_HEADER
        self._sleeper = sleeper

        logger.info(
            "RenewalRetryPolicy initialized",
            num_retries=self.num_retries,
            backoff_seconds=self.backoff_seconds,
            ledger=type(ledger).__name__,
        )

    def should_retry_request(self, exchange: FailedExchange) -> bool:
        """True if the request should be re-sent. See `evaluate`."""
        return self.evaluate(exchange).retry

    def evaluate(self, exchange: FailedExchange) -> RetryOutcome:
        """
        Decide what to do with a failed exchange.

        The response is released exactly once before this returns, whichever
        branch was taken. Never raises: a collaborator failure is logged and
        reported as a POLICY_ERROR outcome.

        Args:
            exchange: Request identity, request view and open response

        Returns:
            RetryOutcome with the decision and its reason
        """
        try:
            outcome = self._decide(exchange)
        except Exception:
            logger.exception(
                "Retry policy failed, not retrying",
                request_id=str(exchange.identity),
            )
            outcome = RetryOutcome(retry=False, kind=FailureKind.POLICY_ERROR)
        finally:
            self._release(exchange)

        auth_retry_decisions_total.labels(
            kind=outcome.kind.value,
            retry=str(outcome.retry).lower(),
        ).inc()
        return outcome

    def _decide(self, exchange: FailedExchange) -> RetryOutcome:
        if exchange.response.status_code != UNAUTHORIZED:
            return RetryOutcome(retry=False, kind=FailureKind.NOT_AUTH_FAILURE)

        request_id = str(exchange.identity)

        if self.is_authentication_request(exchange.request):
            logger.debug("401 from authentication request, not retrying", request_id=request_id)
            return RetryOutcome(retry=False, kind=FailureKind.AUTH_REJECTED)

        for _ in range(MAX_LEDGER_CONFLICTS):
            count = self.ledger.get_count(exchange.identity)

            if count is None:
                if not self.ledger.compare_and_record(exchange.identity, None, 1):
                    continue
                logger.debug("Invalidating authentication token - first 401", request_id=request_id)
                self.auth_cache.invalidate_all()
                return RetryOutcome(retry=True, kind=FailureKind.AUTH_EXPIRED, attempt=1)

            if count + 1 >= self.num_retries:
                logger.warning(
                    "Too many 401s, giving up",
                    request_id=request_id,
                    attempts=count,
                    num_retries=self.num_retries,
                )
                return RetryOutcome(
                    retry=False,
                    kind=FailureKind.RETRY_BUDGET_EXHAUSTED,
                    attempt=count,
                )

            if not self.ledger.compare_and_record(exchange.identity, count, count + 1):
                continue
            logger.debug(
                "Invalidating authentication token - retry",
                request_id=request_id,
                attempt=count + 1,
            )
            self.auth_cache.invalidate_all()
            self._backoff(request_id)
            return RetryOutcome(retry=True, kind=FailureKind.AUTH_EXPIRED, attempt=count + 1)

        raise RuntimeError(
            f"Retry ledger kept changing under request {request_id} "
            f"({MAX_LEDGER_CONFLICTS} conflicting writes)"
        )

    def is_authentication_request(self, request: Optional[RequestView]) -> bool:
        """
        True for the call whose purpose is to obtain a token: identity and
        secret headers present, token header absent.
        """
        if request is None:
            return False
        return (
            request.has_header(self.user_header)
            and request.has_header(self.key_header)
            and not request.has_header(self.token_header)
        )

    def _backoff(self, request_id: str) -> None:
        logger.debug("Backing off before retry", request_id=request_id, seconds=self.backoff_seconds)
        with auth_backoff_seconds.time():
            self._sleeper(self.backoff_seconds)

    def _release(self, exchange: FailedExchange) -> None:
        try:
            exchange.response.release()
        except Exception:
            logger.exception("Failed to release response payload", request_id=str(exchange.identity))

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"num_retries={self.num_retries}, "
            f"backoff_seconds={self.backoff_seconds})"
        )
