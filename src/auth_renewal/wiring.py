"""
Process-wide construction of the auth renewal components.

The authentication cache and the retry ledger are shared state: build them
once at startup with `build_policy` and pass the returned objects to every
RenewingHttpClient. Nothing here is a module-level singleton.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from redis import Redis

from auth_renewal.auth.authenticator import Authenticator
from auth_renewal.auth.cache import AuthenticationCache
from auth_renewal.config import Settings
from auth_renewal.models.enums import LedgerBackend
from auth_renewal.persistence.redis_client import RedisClient
from auth_renewal.retry.engine import RenewalRetryPolicy
from auth_renewal.retry.ledger import InMemoryRetryLedger, RedisRetryLedger, RetryLedger

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RenewalComponents:
    """The shared objects a process needs to renew tokens on 401."""

    auth_cache: AuthenticationCache
    ledger: RetryLedger
    policy: RenewalRetryPolicy


def build_ledger(settings: Settings, redis_client: Optional[Redis] = None) -> RetryLedger:
    """
    Create the retry ledger selected by RETRY_LEDGER_BACKEND.

    Args:
        settings: Application settings
        redis_client: Client to use for the redis backend; a pooled one is
            created from REDIS_URL if omitted

    Returns:
        RetryLedger instance
    """
    if settings.RETRY_LEDGER_BACKEND is LedgerBackend.REDIS:
        client = redis_client or RedisClient.get_client(settings)
        return RedisRetryLedger(
            client,
            ttl_seconds=settings.RETRY_LEDGER_TTL_SECONDS,
            key_prefix=settings.RETRY_LEDGER_KEY_PREFIX,
        )
    return InMemoryRetryLedger(ttl_seconds=settings.RETRY_LEDGER_TTL_SECONDS)


def build_policy(
    settings: Settings,
    authenticator: Authenticator,
    redis_client: Optional[Redis] = None,
) -> RenewalComponents:
    """
    Build the authentication cache, retry ledger and retry policy.

    Call once per process.

    Args:
        settings: Application settings
        authenticator: Backend the cache loads Access through
        redis_client: Optional client for the redis ledger backend

    Returns:
        RenewalComponents holding the shared instances
    """
    auth_cache = AuthenticationCache(authenticator)
    ledger = build_ledger(settings, redis_client)
    policy = RenewalRetryPolicy(auth_cache, ledger, settings=settings)

    logger.info(
        "Auth renewal components built",
        ledger_backend=settings.RETRY_LEDGER_BACKEND.value,
        num_retries=settings.NUM_RETRIES,
    )
    return RenewalComponents(auth_cache=auth_cache, ledger=ledger, policy=policy)
