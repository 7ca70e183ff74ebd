"""
HTTP execution layer that renews tokens on 401.

RenewingHttpClient is the piece that sits between application code and
httpx: it stamps the cached token on each request, and when a response comes
back 401 it hands the exchange to the RenewalRetryPolicy. The policy decides;
this layer loops or surfaces the failure.

One RequestIdentity is minted per logical call and reused for all of that
call's retries, which is what lets the ledger count them.
"""

from typing import Any, Optional

import httpx
import structlog

from auth_renewal.auth.cache import AuthenticationCache
from auth_renewal.http.adapters import HttpxRequestView, HttpxResponseView
from auth_renewal.http.exceptions import AuthRenewalFailed
from auth_renewal.models.credentials import Credentials
from auth_renewal.models.exchange import FailedExchange, RequestIdentity
from auth_renewal.retry.engine import UNAUTHORIZED, RenewalRetryPolicy

logger = structlog.get_logger(__name__)


class RenewingHttpClient:
    """
    Synchronous httpx client wrapper with token renewal.

    Responses other than 401 are returned as-is (open, not released); what to
    do with a 404 or a 503 is the caller's business, not this policy's.

    Attributes:
        client: Underlying httpx.Client (caller owns its lifecycle)
        auth_cache: Shared Access cache
        policy: Shared retry policy
        credentials: Credentials used for every request sent through here
    """

    def __init__(
        self,
        client: httpx.Client,
        auth_cache: AuthenticationCache,
        policy: RenewalRetryPolicy,
        credentials: Credentials,
    ):
        self.client = client
        self.auth_cache = auth_cache
        self.policy = policy
        self.credentials = credentials

    def send(
        self,
        request: httpx.Request,
        identity: Optional[RequestIdentity] = None,
    ) -> httpx.Response:
        """
        Send `request`, renewing the token and re-sending on 401 while the
        policy allows it.

        Args:
            request: Request to send; its token header is overwritten
            identity: Identity of the logical call; minted if omitted

        Returns:
            First response that is not 401

        Raises:
            AuthenticationError: Token could not be obtained
            AuthRenewalFailed: Still 401 and the policy gave up
            httpx.HTTPError: Transport failure (not handled here)
        """
        identity = identity or RequestIdentity.new()
        log = logger.bind(request_id=str(identity), method=request.method, url=str(request.url))

        while True:
            access = self.auth_cache.get(self.credentials)
            request.headers[self.policy.token_header] = access.token

            response = self.client.send(request)
            if response.status_code != UNAUTHORIZED:
                return response

            exchange = FailedExchange(
                identity=identity,
                request=HttpxRequestView(request),
                response=HttpxResponseView(response),
            )
            outcome = self.policy.evaluate(exchange)
            if outcome.retry:
                log.debug("Re-sending after token renewal", attempt=outcome.attempt)
                continue

            log.warning("Giving up on 401", kind=outcome.kind.value, attempt=outcome.attempt)
            raise AuthRenewalFailed(
                status_code=response.status_code,
                kind=outcome.kind,
                identity=identity,
                attempt=outcome.attempt,
                headers=dict(response.headers),
            )

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Build a request with the underlying client and `send` it."""
        return self.send(self.client.build_request(method, url, **kwargs))

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", url, **kwargs)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(identity={self.credentials.identity}, policy={self.policy!r})"
