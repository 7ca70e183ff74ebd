"""Unit test fixtures (mocks and stubs).

Provides fake collaborators for testing the retry policy without a network
or a Redis server.
"""

from unittest.mock import MagicMock, Mock

import pytest

from auth_renewal.auth.cache import AuthenticationCache
from auth_renewal.models.exchange import FailedExchange, HeaderListRequest, RequestIdentity


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    """ResponseView that counts how often it was released."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        self.release_calls = 0

    def release(self) -> None:
        self.release_calls += 1


TOKEN_HEADERS = (("X-Auth-Token", "expired-token"), ("Accept", "application/json"))
AUTH_CALL_HEADERS = (("X-Auth-User", "demo"), ("X-Auth-Key", "s3cr3t"))


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_auth_cache():
    """Mock AuthenticationCache (only invalidate_all matters to the policy)."""
    mock = MagicMock(spec=AuthenticationCache)
    mock.invalidate_all = Mock(return_value=None)
    return mock


@pytest.fixture
def mock_sleeper():
    """Stand-in for sleep_uninterruptibly so tests do not wait."""
    return Mock(return_value=None)


@pytest.fixture
def mock_redis():
    """Mock Redis client for unit tests (sync)."""
    mock = Mock()
    mock.set = Mock(return_value=True)
    mock.get = Mock(return_value=None)
    mock.delete = Mock(return_value=1)
    mock.exists = Mock(return_value=False)
    return mock


@pytest.fixture
def create_exchange():
    """Factory fixture to create a FailedExchange with a FakeResponse.

    Usage:
        def test_something(create_exchange):
            exchange = create_exchange(status_code=401)
            exchange.response.release_calls  # -> 0
    """
    def _create(
        status_code: int = 401,
        headers=TOKEN_HEADERS,
        identity: RequestIdentity | None = None,
    ) -> FailedExchange:
        return FailedExchange(
            identity=identity or RequestIdentity.new(),
            request=HeaderListRequest.from_pairs(headers),
            response=FakeResponse(status_code),
        )

    return _create
