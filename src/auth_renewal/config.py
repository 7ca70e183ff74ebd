"""
Configuration settings for the auth renewal policy.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from auth_renewal.models.enums import LedgerBackend


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "auth-renewal"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry on renew ===
    NUM_RETRIES: int = 5  # Attempts per request before giving up
    RETRY_LEDGER_TTL_SECONDS: float = 300.0  # Idle window since last write
    RETRY_BACKOFF_SECONDS: float = 5.0  # Wait before every non-first retry

    # === Auth headers (presence-checked, case-insensitive) ===
    AUTH_USER_HEADER: str = "X-Auth-User"
    AUTH_KEY_HEADER: str = "X-Auth-Key"
    AUTH_TOKEN_HEADER: str = "X-Auth-Token"

    # === Retry ledger backend ===
    RETRY_LEDGER_BACKEND: LedgerBackend = LedgerBackend.MEMORY
    RETRY_LEDGER_KEY_PREFIX: str = "auth_renewal:retry:"

    # === Redis ===
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 20

    # === Token endpoint ===
    AUTH_ENDPOINT: str = "http://localhost:5000/v2.0/tokens"
    AUTH_TIMEOUT: float = 30.0  # seconds

    @field_validator("NUM_RETRIES")
    @classmethod
    def _check_num_retries(cls, value: int) -> int:
        if value < 1:
            raise ValueError("NUM_RETRIES must be >= 1")
        return value

    @field_validator("RETRY_LEDGER_TTL_SECONDS")
    @classmethod
    def _check_ttl(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("RETRY_LEDGER_TTL_SECONDS must be > 0")
        return value

    @field_validator("RETRY_BACKOFF_SECONDS")
    @classmethod
    def _check_backoff(cls, value: float) -> float:
        if value < 0:
            raise ValueError("RETRY_BACKOFF_SECONDS must be >= 0")
        return value
