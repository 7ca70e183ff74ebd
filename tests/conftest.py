"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from auth_renewal.config import Settings
from auth_renewal.models.credentials import Access, Credentials


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with short intervals.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            settings = test_settings.model_copy(update={"NUM_RETRIES": 2})
    """
    return Settings(
        # === Application ===
        APP_NAME="auth-renewal (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Retry on renew ===
        NUM_RETRIES=5,
        RETRY_LEDGER_TTL_SECONDS=300.0,
        RETRY_BACKOFF_SECONDS=0.01,

        # === Token endpoint ===
        AUTH_ENDPOINT="https://identity.test/v2.0/tokens",
        AUTH_TIMEOUT=5.0,

        # === Redis ===
        REDIS_URL="redis://localhost:6379/0",
        REDIS_MAX_CONNECTIONS=10,
    )


@pytest.fixture
def credentials() -> Credentials:
    """Credentials for a demo user."""
    return Credentials(identity="demo", secret="s3cr3t")


@pytest.fixture
def create_access():
    """Factory fixture to create Access values.

    Usage:
        def test_something(create_access):
            access = create_access(token="abc", expires_in=timedelta(hours=1))
    """
    def _create(
        token: str = "token-1",
        expires_in: timedelta | None = timedelta(hours=1),
        user_id: str = "user-1",
    ) -> Access:
        expires_at = datetime.now(timezone.utc) + expires_in if expires_in is not None else None
        return Access(token=token, expires_at=expires_at, user_id=user_id)

    return _create
