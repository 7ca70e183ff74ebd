"""
Redis persistence layer.

- redis_client.py: pooled Redis connection used by RedisRetryLedger

Storage Strategy:
- One string key per request identity holding its 401 count
- Key TTL equals the ledger idle window and is reset on every write
"""

from auth_renewal.persistence.redis_client import RedisClient, get_redis_client

__all__ = [
    "RedisClient",
    "get_redis_client",
]
