"""
Failed-exchange value types consumed by the retry policy.

The policy never sees how requests are built or parsed. It only needs:
- a request view that can answer "is header X present?"
- a response view with a status code and a single release operation
- a stable identity for the logical request, assigned by the caller
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, runtime_checkable
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class RequestIdentity(BaseModel):
    """
    Stable identifier of one logical request.

    Not derived from request content: two structurally identical requests
    issued separately get different identities. The execution layer mints one
    per logical call and reuses it across that call's own retries.
    """
    model_config = ConfigDict(frozen=True)

    value: UUID = Field(default_factory=uuid4)

    @classmethod
    def new(cls) -> "RequestIdentity":
        return cls()

    def __str__(self) -> str:
        return str(self.value)


@runtime_checkable
class RequestView(Protocol):
    """Read-only view of the request that failed."""

    def has_header(self, name: str) -> bool:
        """Presence check, case-insensitive. Values are never inspected."""
        ...


@runtime_checkable
class ResponseView(Protocol):
    """Read-only view of the response plus its open payload."""

    @property
    def status_code(self) -> int:
        ...

    def release(self) -> None:
        """Drain/close the payload and give the connection back."""
        ...


class HeaderListRequest(BaseModel):
    """
    Minimal RequestView over an ordered, possibly-repeating header list.

    Useful for callers that do not go through httpx.
    """
    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    url: str = "/"
    headers: Optional[tuple[tuple[str, str], ...]] = None

    @classmethod
    def from_pairs(
        cls,
        pairs: Optional[Iterable[tuple[str, str]]],
        method: str = "GET",
        url: str = "/",
    ) -> "HeaderListRequest":
        return cls(
            method=method,
            url=url,
            headers=tuple(pairs) if pairs is not None else None,
        )

    def has_header(self, name: str) -> bool:
        if self.headers is None:
            return False
        wanted = name.lower()
        return any(key.lower() == wanted for key, _ in self.headers)


@dataclass(frozen=True)
class FailedExchange:
    """
    A request paired with the response it got.

    The response payload is still open; whoever evaluates the exchange is
    responsible for releasing it exactly once.
    """

    identity: RequestIdentity
    request: RequestView
    response: ResponseView

    @property
    def status_code(self) -> int:
        return self.response.status_code
