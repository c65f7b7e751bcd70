"""Tests for retrying transient store failures."""

import asyncio

import pytest

from soa_core.exceptions import PersistenceError, TransientStoreError
from soa_service.config import PersistenceConfig
from soa_service.retry import retry_with_backoff


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FlakyOperation:
    """Fails with a transient error a set number of times, then succeeds."""

    def __init__(self, failures: int, result: str = "ok"):
        self.failures = failures
        self.calls = 0
        self.result = result

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientStoreError("rate limited", status_code=429)
        return self.result


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


class TestRetryWithBackoff:
    """Test suite for retry_with_backoff."""

    def test_success_first_time(self, sleep):
        operation = FlakyOperation(failures=0)
        result = asyncio.run(retry_with_backoff(operation, sleep=sleep))

        assert result == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    def test_retries_with_exponential_backoff(self, sleep):
        """Delays should double from the base delay."""
        operation = FlakyOperation(failures=3)
        result = asyncio.run(retry_with_backoff(operation, config=PersistenceConfig(), sleep=sleep))

        assert result == "ok"
        assert operation.calls == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    def test_gives_up_after_max_retries(self, sleep):
        """The last transient error propagates once retries are exhausted."""
        operation = FlakyOperation(failures=10)

        with pytest.raises(TransientStoreError) as exc_info:
            asyncio.run(retry_with_backoff(operation, config=PersistenceConfig(max_retries=2), sleep=sleep))

        assert exc_info.value.status_code == 429
        assert operation.calls == 3
        assert sleep.delays == [1.0, 2.0]

    def test_custom_backoff(self, sleep):
        config = PersistenceConfig(retry_base_delay=0.5, retry_backoff_factor=3.0)
        asyncio.run(retry_with_backoff(FlakyOperation(failures=2), config=config, sleep=sleep))
        assert sleep.delays == [0.5, 1.5]

    def test_non_transient_errors_not_retried(self, sleep):
        calls = []

        async def broken():
            calls.append(1)
            raise PersistenceError("constraint violated")

        with pytest.raises(PersistenceError):
            asyncio.run(retry_with_backoff(broken, sleep=sleep))

        assert len(calls) == 1
        assert sleep.delays == []

    def test_no_retries(self, sleep):
        operation = FlakyOperation(failures=1)
        with pytest.raises(TransientStoreError):
            asyncio.run(retry_with_backoff(operation, config=PersistenceConfig(max_retries=0), sleep=sleep))
        assert operation.calls == 1
