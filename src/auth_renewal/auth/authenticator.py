"""
Authenticators: turn Credentials into Access.

`Authenticator` is the callback the AuthenticationCache loads through.
`TokenEndpointAuthenticator` is a concrete httpx implementation for token
endpoints that accept the identity/secret as headers (Swift/Keystone style
`X-Auth-User` + `X-Auth-Key`) and answer either with an `X-Auth-Token`
header or with a JSON access document.
"""

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

import httpx
import structlog

from auth_renewal.auth.exceptions import (
    AuthenticationError,
    AuthenticationUnavailableError,
    InvalidCredentialsError,
)
from auth_renewal.config import Settings
from auth_renewal.models.credentials import Access, Credentials

logger = structlog.get_logger(__name__)


@runtime_checkable
class Authenticator(Protocol):
    """
    Protocol for authentication backends.

    Implementations must be safe to call from several threads at once; the
    cache guarantees only that calls for the *same* credentials never overlap.
    """

    def authenticate(self, credentials: Credentials) -> Access:
        """
        Obtain a fresh Access for the given credentials.

        Raises:
            AuthenticationError: Authentication failed (any reason)
        """
        ...


class TokenEndpointAuthenticator:
    """
    Authenticator backed by an HTTP token endpoint.

    Request:
        GET <endpoint>
        X-Auth-User: <identity>
        X-Auth-Key: <secret>

    Accepted responses (2xx):
        - `X-Auth-Token` header (optional `X-Auth-Token-Expires` ISO timestamp)
        - JSON body:
          {"access": {"token": {"id": "...", "expires": "...",
                                "tenant": {"id": "..."}},
                      "user": {"id": "...", "roles": [{"name": "..."}]}}}
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.Client] = None,
    ):
        self.endpoint = settings.AUTH_ENDPOINT
        self.user_header = settings.AUTH_USER_HEADER
        self.key_header = settings.AUTH_KEY_HEADER
        self.token_header = settings.AUTH_TOKEN_HEADER
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(settings.AUTH_TIMEOUT))

        logger.info(
            "Token endpoint authenticator initialized",
            endpoint=self.endpoint,
            timeout=settings.AUTH_TIMEOUT,
        )

    def authenticate(self, credentials: Credentials) -> Access:
        headers = {
            self.user_header: credentials.identity,
            self.key_header: credentials.secret.get_secret_value(),
        }

        try:
            response = self._client.get(self.endpoint, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(
                "Token endpoint unreachable",
                endpoint=self.endpoint,
                identity=credentials.identity,
                error=str(e),
            )
            raise AuthenticationUnavailableError(
                f"Token endpoint unreachable: {e}",
                details={"endpoint": self.endpoint, "error_type": type(e).__name__},
            ) from e

        if response.status_code in (401, 403):
            raise InvalidCredentialsError(
                f"Credentials rejected for {credentials.identity}",
                details={"status_code": response.status_code, "identity": credentials.identity},
            )
        if response.status_code >= 500:
            raise AuthenticationUnavailableError(
                f"Token endpoint returned {response.status_code}",
                details={"status_code": response.status_code, "endpoint": self.endpoint},
            )
        if not response.is_success:
            raise AuthenticationError(
                f"Unexpected status {response.status_code} from token endpoint",
                details={"status_code": response.status_code},
            )

        access = self._parse_access(response)
        logger.debug(
            "Authenticated",
            identity=credentials.identity,
            user_id=access.user_id,
            expires_at=access.expires_at.isoformat() if access.expires_at else None,
        )
        return access

    def _parse_access(self, response: httpx.Response) -> Access:
        try:
            token = response.headers.get(self.token_header)
            if token:
                expires = response.headers.get(f"{self.token_header}-Expires")
                return Access(token=token, expires_at=_parse_timestamp(expires))

            body: Any = response.json()
            access = body["access"]
            token_doc = access["token"]
            user_doc = access.get("user") or {}
            tenant_doc = token_doc.get("tenant") or {}
            return Access(
                token=token_doc["id"],
                expires_at=_parse_timestamp(token_doc.get("expires")),
                user_id=user_doc.get("id"),
                tenant_id=tenant_doc.get("id"),
                scopes=tuple(role["name"] for role in user_doc.get("roles", [])),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationError(
                "Token endpoint response carried no usable token",
                details={"status_code": response.status_code, "error_type": type(e).__name__},
            ) from e

    def close(self) -> None:
        """Close the underlying HTTP client if this authenticator created it."""
        if self._owns_client:
            self._client.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(endpoint={self.endpoint})"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # fromisoformat() before 3.11 rejects a trailing "Z"
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
