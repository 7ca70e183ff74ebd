"""Integration test fixtures (service checks and prerequisites).

Integration tests are skipped if required services are not running.
"""

import uuid

import pytest
from redis import Redis


@pytest.fixture(scope="session")
def check_redis():
    """Check if Redis is available at localhost:6379.

    Skips tests if Redis is not reachable.
    """
    try:
        client = Redis.from_url("redis://localhost:6379/0")
        client.ping()
        client.close()
    except Exception as e:
        pytest.skip(f"Redis not available: {e}")


@pytest.fixture
def key_prefix() -> str:
    """Unique key namespace per test."""
    return f"auth_renewal:test:{uuid.uuid4().hex}:"


@pytest.fixture
def real_redis(check_redis, key_prefix):
    """Real Redis client; keys under `key_prefix` are removed afterwards."""
    client = Redis.from_url("redis://localhost:6379/0", decode_responses=True)
    yield client
    for key in client.scan_iter(f"{key_prefix}*"):
        client.delete(key)
    client.close()
