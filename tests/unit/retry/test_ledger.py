"""
Unit tests for the retry ledgers.

InMemoryRetryLedger is driven by a fake clock; RedisRetryLedger by a mocked
Redis client.
"""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import WatchError

from auth_renewal.models.exchange import RequestIdentity
from auth_renewal.retry.ledger import InMemoryRetryLedger, RedisRetryLedger, RetryLedger


@pytest.fixture
def ledger(fake_clock):
    return InMemoryRetryLedger(ttl_seconds=300.0, clock=fake_clock)


# ============================================================================
# InMemoryRetryLedger
# ============================================================================


def test_unknown_identity_is_absent(ledger):
    assert ledger.get_count(RequestIdentity.new()) is None


def test_record_and_read_back(ledger):
    identity = RequestIdentity.new()

    ledger.record_attempt(identity, 1)
    ledger.record_attempt(identity, 2)

    assert ledger.get_count(identity) == 2
    assert len(ledger) == 1


def test_entry_expires_after_ttl_since_last_write(ledger, fake_clock):
    """Test that eviction is measured from the last write, not the first."""
    identity = RequestIdentity.new()
    ledger.record_attempt(identity, 1)

    fake_clock.advance(200)
    ledger.record_attempt(identity, 2)
    fake_clock.advance(200)
    assert ledger.get_count(identity) == 2

    fake_clock.advance(100)
    assert ledger.get_count(identity) is None


def test_reads_do_not_extend_ttl(ledger, fake_clock):
    identity = RequestIdentity.new()
    ledger.record_attempt(identity, 1)

    for _ in range(3):
        fake_clock.advance(100)
        ledger.get_count(identity)

    assert ledger.get_count(identity) is None


def test_eviction_is_independent_of_count(ledger, fake_clock):
    low = RequestIdentity.new()
    high = RequestIdentity.new()
    ledger.record_attempt(low, 1)
    ledger.record_attempt(high, 4)

    fake_clock.advance(300)

    assert ledger.get_count(low) is None
    assert ledger.get_count(high) is None
    assert len(ledger) == 0


def test_only_stale_entries_are_evicted(ledger, fake_clock):
    old = RequestIdentity.new()
    recent = RequestIdentity.new()
    ledger.record_attempt(old, 1)
    fake_clock.advance(250)
    ledger.record_attempt(recent, 1)
    fake_clock.advance(100)

    assert ledger.get_count(old) is None
    assert ledger.get_count(recent) == 1


def test_rewriting_an_old_entry_moves_it_behind_newer_ones(ledger, fake_clock):
    """Test that write order, not insertion order, drives eviction."""
    first = RequestIdentity.new()
    second = RequestIdentity.new()
    ledger.record_attempt(first, 1)
    fake_clock.advance(10)
    ledger.record_attempt(second, 1)
    fake_clock.advance(10)
    ledger.record_attempt(first, 2)

    fake_clock.advance(291)

    assert ledger.get_count(second) is None
    assert ledger.get_count(first) == 2


def test_compare_and_record_on_absent_entry(ledger):
    identity = RequestIdentity.new()

    assert ledger.compare_and_record(identity, None, 1) is True
    assert ledger.compare_and_record(identity, None, 1) is False
    assert ledger.get_count(identity) == 1


def test_compare_and_record_rejects_stale_expectation(ledger):
    identity = RequestIdentity.new()
    ledger.record_attempt(identity, 3)

    assert ledger.compare_and_record(identity, 2, 3) is False
    assert ledger.compare_and_record(identity, 3, 4) is True
    assert ledger.get_count(identity) == 4


def test_compare_and_record_sees_expired_entry_as_absent(ledger, fake_clock):
    identity = RequestIdentity.new()
    ledger.record_attempt(identity, 3)
    fake_clock.advance(301)

    assert ledger.compare_and_record(identity, 3, 4) is False
    assert ledger.compare_and_record(identity, None, 1) is True


@pytest.mark.parametrize("count", [0, -1])
def test_non_positive_counts_are_rejected(ledger, count):
    with pytest.raises(ValueError):
        ledger.record_attempt(RequestIdentity.new(), count)


def test_invalid_ttl_is_rejected():
    with pytest.raises(ValueError):
        InMemoryRetryLedger(ttl_seconds=0)


def test_in_memory_ledger_satisfies_protocol(ledger):
    assert isinstance(ledger, RetryLedger)


# ============================================================================
# RedisRetryLedger
# ============================================================================


@pytest.fixture
def redis_ledger(mock_redis):
    return RedisRetryLedger(mock_redis, ttl_seconds=300.0, key_prefix="test:retry:")


@pytest.fixture
def mock_pipeline(mock_redis):
    """Pipeline returned by `with client.pipeline() as pipe`."""
    pipe = MagicMock()
    pipe.get.return_value = None
    mock_redis.pipeline = MagicMock()
    mock_redis.pipeline.return_value.__enter__.return_value = pipe
    return pipe


def test_redis_get_count_parses_stored_value(redis_ledger, mock_redis):
    identity = RequestIdentity.new()
    mock_redis.get.return_value = "3"

    assert redis_ledger.get_count(identity) == 3
    mock_redis.get.assert_called_once_with(f"test:retry:{identity.value}")


def test_redis_get_count_absent(redis_ledger, mock_redis):
    mock_redis.get.return_value = None

    assert redis_ledger.get_count(RequestIdentity.new()) is None


def test_redis_record_attempt_sets_ttl(redis_ledger, mock_redis):
    identity = RequestIdentity.new()

    redis_ledger.record_attempt(identity, 2)

    mock_redis.set.assert_called_once_with(f"test:retry:{identity.value}", 2, px=300000)


def test_redis_compare_and_record_writes_when_expected(redis_ledger, mock_pipeline):
    identity = RequestIdentity.new()
    key = f"test:retry:{identity.value}"

    assert redis_ledger.compare_and_record(identity, None, 1) is True

    mock_pipeline.watch.assert_called_once_with(key)
    mock_pipeline.multi.assert_called_once()
    mock_pipeline.set.assert_called_once_with(key, 1, px=300000)
    mock_pipeline.execute.assert_called_once()


def test_redis_compare_and_record_skips_on_mismatch(redis_ledger, mock_pipeline):
    mock_pipeline.get.return_value = "2"

    assert redis_ledger.compare_and_record(RequestIdentity.new(), 1, 2) is False

    mock_pipeline.unwatch.assert_called_once()
    mock_pipeline.multi.assert_not_called()
    mock_pipeline.execute.assert_not_called()


def test_redis_compare_and_record_loses_race(redis_ledger, mock_pipeline):
    mock_pipeline.get.return_value = "1"
    mock_pipeline.execute.side_effect = WatchError("key changed")

    assert redis_ledger.compare_and_record(RequestIdentity.new(), 1, 2) is False


def test_redis_ledger_rounds_sub_millisecond_ttl_up(mock_redis):
    ledger = RedisRetryLedger(mock_redis, ttl_seconds=0.0001)
    identity = RequestIdentity.new()

    ledger.record_attempt(identity, 1)

    assert mock_redis.set.call_args.kwargs["px"] == 1
