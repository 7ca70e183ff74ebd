"""
Load-collapsing authentication cache.

Maps Credentials to the Access previously obtained for them. On a miss the
authenticator is called exactly once per key, even when many threads ask for
the same credentials at the same moment: the first caller performs the load,
everyone else blocks on it and receives the same Access (or the same error).

Usage:
    cache = AuthenticationCache(authenticator)
    access = cache.get(credentials)
    ...
    cache.invalidate_all()   # after a 401 on a token-bearing request
"""

import threading
from typing import Optional

import structlog

from auth_renewal.auth.authenticator import Authenticator
from auth_renewal.auth.exceptions import AuthenticationError
from auth_renewal.models.credentials import Access, Credentials
from auth_renewal.monitoring.metrics import (
    auth_cache_invalidations_total,
    authentications_total,
)

logger = structlog.get_logger(__name__)


class _PendingLoad:
    """One in-flight authenticator call and the threads waiting on it."""

    __slots__ = ("done", "access", "error")

    def __init__(self) -> None:
        self.done = threading.Event()
        self.access: Optional[Access] = None
        self.error: Optional[AuthenticationError] = None

    def result(self) -> Access:
        self.done.wait()
        if self.error is not None:
            raise self.error
        assert self.access is not None
        return self.access


class AuthenticationCache:
    """
    Process-wide cache of Access values keyed by Credentials.

    Thread-safe. Entries live until `invalidate_all()` (or `invalidate()`)
    removes them, or until the Access reports itself expired, in which case
    the next `get()` reloads it.

    A load that is already running when `invalidate_all()` is called keeps
    running and its result is stored: the token it returns was minted after
    the rejected one, and starting a second load for the same key would break
    the one-in-flight-call-per-key guarantee.

    Attributes:
        authenticator: Backend used on cache misses
    """

    def __init__(self, authenticator: Authenticator):
        self.authenticator = authenticator
        self._lock = threading.Lock()
        self._entries: dict[Credentials, Access] = {}
        self._loading: dict[Credentials, _PendingLoad] = {}

        logger.info(
            "AuthenticationCache initialized",
            authenticator=type(authenticator).__name__,
        )

    def get(self, credentials: Credentials) -> Access:
        """
        Return the cached Access for `credentials`, authenticating if needed.

        Raises:
            AuthenticationError: The authenticator failed; nothing was cached
        """
        with self._lock:
            access = self._entries.get(credentials)
            if access is not None:
                if not access.is_expired():
                    return access
                del self._entries[credentials]
                logger.debug("Cached access expired", identity=credentials.identity)

            pending = self._loading.get(credentials)
            is_loader = pending is None
            if is_loader:
                pending = _PendingLoad()
                self._loading[credentials] = pending

        if is_loader:
            self._load(credentials, pending)
        return pending.result()

    def _load(self, credentials: Credentials, pending: _PendingLoad) -> None:
        try:
            pending.access = self.authenticator.authenticate(credentials)
            authentications_total.labels(success="true").inc()
        except AuthenticationError as e:
            pending.error = e
            authentications_total.labels(success="false").inc()
            logger.warning(
                "Authentication failed",
                identity=credentials.identity,
                error_type=type(e).__name__,
                error=e.message,
            )
        except Exception as e:
            error = AuthenticationError(
                f"Authenticator raised {type(e).__name__}: {e}",
                details={"error_type": type(e).__name__},
            )
            error.__cause__ = e
            pending.error = error
            authentications_total.labels(success="false").inc()
            logger.exception("Authenticator raised unexpected error", identity=credentials.identity)
        finally:
            if pending.access is None and pending.error is None:
                # BaseException in the loader: waiters must not hang or see None
                pending.error = AuthenticationError("Authentication was interrupted")
            with self._lock:
                self._loading.pop(credentials, None)
                if pending.access is not None:
                    self._entries[credentials] = pending.access
            pending.done.set()

    def invalidate_all(self) -> None:
        """Discard every cached Access, whatever its credentials. Never fails."""
        with self._lock:
            discarded = len(self._entries)
            self._entries.clear()
        auth_cache_invalidations_total.inc()
        logger.debug("Invalidated authentication cache", discarded=discarded)

    def invalidate(self, credentials: Credentials) -> None:
        """Discard the cached Access for one set of credentials, if any."""
        with self._lock:
            self._entries.pop(credentials, None)
        logger.debug("Invalidated cached access", identity=credentials.identity)

    def size(self) -> int:
        """Number of cached entries (in-flight loads excluded)."""
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(authenticator={type(self.authenticator).__name__}, size={self.size()})"
