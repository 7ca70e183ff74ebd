"""
Credentials and Access value models.

Credentials are only ever used as a cache key, so they are frozen and
compared by value. Access is what an authenticator hands back; once cached
it is shared by every request using the same credentials, which is why it
is frozen as well.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Credentials(BaseModel):
    """
    Identity + secret pair used to authenticate.

    The secret is a SecretStr so it never shows up in reprs or log lines.
    """
    model_config = ConfigDict(frozen=True)

    identity: str = Field(..., min_length=1, description="User name or API user")
    secret: SecretStr = Field(..., description="Password or API key")

    def __str__(self) -> str:
        return f"Credentials(identity={self.identity})"


class Access(BaseModel):
    """
    Result of a successful authentication: a token plus its metadata.
    """
    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1, description="Opaque access token")
    expires_at: Optional[datetime] = Field(
        default=None,
        description="Token expiry (timezone-aware); None if the server did not say",
    )
    user_id: Optional[str] = Field(default=None, description="Authenticated user id")
    tenant_id: Optional[str] = Field(default=None, description="Tenant/project scope")
    scopes: tuple[str, ...] = Field(default=(), description="Granted scopes or roles")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True when the token carries an expiry that is already in the past."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at

    def __repr__(self) -> str:
        return (
            f"Access(user_id={self.user_id!r}, tenant_id={self.tenant_id!r}, "
            f"expires_at={self.expires_at!r})"
        )
