"""
Redis client with connection pooling for the shared retry ledger.

Uses redis-py with a process-wide connection pool so every policy instance
in the process talks to Redis over the same sockets.
"""

import logging
from typing import Optional

from redis import ConnectionPool, Redis

from auth_renewal.config import Settings

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Redis client wrapper with connection pooling.

    The pool is created lazily on first use and shared by all clients
    handed out afterwards.
    """

    _pool: Optional[ConnectionPool] = None

    @classmethod
    def get_client(cls, settings: Settings) -> Redis:
        """
        Get Redis client backed by the shared pool.

        Args:
            settings: Application settings (REDIS_URL, REDIS_MAX_CONNECTIONS)

        Returns:
            Redis client instance
        """
        if cls._pool is None:
            cls._pool = ConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=True,  # Auto-decode bytes to str
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )
            logger.info("Initialized Redis connection pool")

        return Redis(connection_pool=cls._pool)

    @classmethod
    def close_pool(cls) -> None:
        """Close connection pool (cleanup on shutdown)."""
        if cls._pool is not None:
            cls._pool.disconnect()
            cls._pool = None
            logger.info("Closed Redis connection pool")


def get_redis_client(settings: Settings) -> Redis:
    """
    Helper returning a pooled Redis client.

    Args:
        settings: Application settings

    Returns:
        Redis client instance
    """
    return RedisClient.get_client(settings)
