"""
Retry ledger: how many times has this request already failed with 401?

Keyed by RequestIdentity, never by request content. Every entry expires a
fixed idle window after its last write, whatever its count, so a process
that sees many distinct requests does not grow without bound.

Two implementations:
    - InMemoryRetryLedger: per-process, write-ordered dict with lazy eviction
    - RedisRetryLedger: shared between processes, eviction via key TTL
"""

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Protocol, runtime_checkable

import structlog
from redis import Redis
from redis.exceptions import WatchError

from auth_renewal.models.exchange import RequestIdentity

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0


def _check_count(count: int) -> None:
    if count < 1:
        raise ValueError(f"retry count must be >= 1, got {count}")


@runtime_checkable
class RetryLedger(Protocol):
    """
    Protocol for retry-count storage.

    `compare_and_record` is the atomic read-modify-write used by the retry
    policy; `get_count` and `record_attempt` are the plain accessors.
    """

    def get_count(self, identity: RequestIdentity) -> Optional[int]:
        """Current count, or None if never seen or already evicted."""
        ...

    def record_attempt(self, identity: RequestIdentity, count: int) -> None:
        """Store `count` and restart the idle window."""
        ...

    def compare_and_record(
        self, identity: RequestIdentity, expected: Optional[int], count: int
    ) -> bool:
        """
        Store `count` only if the current value still equals `expected`
        (None meaning absent). Returns False if another writer got there first.
        """
        ...


class InMemoryRetryLedger:
    """
    Thread-safe in-process retry ledger.

    Entries are kept in write order, so expired ones are always at the front
    and eviction stops at the first live entry.

    Attributes:
        ttl_seconds: Idle window measured from the last write
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # identity -> (count, written_at)
        self._entries: "OrderedDict[RequestIdentity, tuple[int, float]]" = OrderedDict()

    def _evict_expired(self, now: float) -> None:
        while self._entries:
            identity, (_, written_at) = next(iter(self._entries.items()))
            if now - written_at < self.ttl_seconds:
                break
            self._entries.popitem(last=False)
            logger.debug("Retry ledger entry expired", request_id=str(identity))

    def _store(self, identity: RequestIdentity, count: int, now: float) -> None:
        self._entries[identity] = (count, now)
        self._entries.move_to_end(identity)

    def get_count(self, identity: RequestIdentity) -> Optional[int]:
        with self._lock:
            self._evict_expired(self._clock())
            entry = self._entries.get(identity)
            return entry[0] if entry is not None else None

    def record_attempt(self, identity: RequestIdentity, count: int) -> None:
        _check_count(count)
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            self._store(identity, count, now)

    def compare_and_record(
        self, identity: RequestIdentity, expected: Optional[int], count: int
    ) -> bool:
        _check_count(count)
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            entry = self._entries.get(identity)
            current = entry[0] if entry is not None else None
            if current != expected:
                return False
            self._store(identity, count, now)
            return True

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired(self._clock())
            return len(self._entries)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(ttl_seconds={self.ttl_seconds})"


class RedisRetryLedger:
    """
    Retry ledger stored in Redis, shared by every process using the same keys.

    Each identity is one string key holding the count, written with a PX
    expiry so Redis does the eviction. compare_and_record uses WATCH/MULTI.

    Attributes:
        client: Redis client (see persistence.redis_client)
        ttl_seconds: Idle window measured from the last write
        key_prefix: Namespace for ledger keys
    """

    def __init__(
        self,
        client: Redis,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        key_prefix: str = "auth_renewal:retry:",
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self._ttl_ms = max(1, int(ttl_seconds * 1000))

    def _key(self, identity: RequestIdentity) -> str:
        return f"{self.key_prefix}{identity.value}"

    def get_count(self, identity: RequestIdentity) -> Optional[int]:
        raw = self.client.get(self._key(identity))
        return int(raw) if raw is not None else None

    def record_attempt(self, identity: RequestIdentity, count: int) -> None:
        _check_count(count)
        self.client.set(self._key(identity), count, px=self._ttl_ms)

    def compare_and_record(
        self, identity: RequestIdentity, expected: Optional[int], count: int
    ) -> bool:
        _check_count(count)
        key = self._key(identity)
        with self.client.pipeline() as pipe:
            try:
                pipe.watch(key)
                raw = pipe.get(key)
                current = int(raw) if raw is not None else None
                if current != expected:
                    pipe.unwatch()
                    return False
                pipe.multi()
                pipe.set(key, count, px=self._ttl_ms)
                pipe.execute()
                return True
            except WatchError:
                logger.debug("Concurrent retry ledger write", request_id=str(identity))
                return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(ttl_seconds={self.ttl_seconds}, key_prefix={self.key_prefix!r})"
