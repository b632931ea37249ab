"""Tests for retry module."""

import pytest
from types import SimpleNamespace

from feedscrape_core import retry as retry_module
from feedscrape_core.retry import (
    NavigationError,
    RetryExhaustedError,
    backoff_delay,
    execute_with_retry,
    navigate_with_retry,
)

pytestmark = pytest.mark.asyncio


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping."""
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(retry_module, "asyncio", SimpleNamespace(sleep=fake_sleep))
    return delays


class TestExecuteWithRetry:
    """Test the generic retry helper."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, sleeps):
        """Function succeeds on first try - no retries needed."""
        call_count = 0

        async def succeeds():
            nonlocal call_count
            call_count += 1
            return "success"

        assert await execute_with_retry(succeeds, max_attempts=3) == "success"
        assert call_count == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_success_after_retry(self, sleeps):
        """Function fails once, then succeeds."""
        call_count = 0

        async def fails_once(value):
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise TimeoutError("First attempt failed")
            return value

        assert await execute_with_retry(fails_once, "ok", max_attempts=3, base_delay=0.5) == "ok"
        assert call_count == 2
        assert sleeps == [0.5]

    @pytest.mark.asyncio
    async def test_exhausted_retries(self, sleeps):
        """Function keeps failing - exhausts all retries with linear backoff."""
        call_count = 0

        async def always_fails():
            nonlocal call_count
            call_count += 1
            raise ConnectionError("Always fails")

        with pytest.raises(RetryExhaustedError) as exc_info:
            await execute_with_retry(always_fails, max_attempts=3, base_delay=1.0)

        assert call_count == 3
        assert sleeps == [1.0, 2.0]
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, ConnectionError)
        assert exc_info.value.__cause__ is exc_info.value.last_error

    @pytest.mark.asyncio
    async def test_non_retryable_exception(self, sleeps):
        """Non-retryable exceptions are raised immediately."""
        call_count = 0

        async def raises_value_error():
            nonlocal call_count
            call_count += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            await execute_with_retry(
                raises_value_error, max_attempts=3, retryable_exceptions=(ConnectionError,)
            )
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_invalid_attempts(self):
        async def noop():
            return None

        with pytest.raises(ValueError):
            await execute_with_retry(noop, max_attempts=0)


class TestNavigateWithRetry:
    """Test navigation on a page source."""

    @pytest.mark.asyncio
    async def test_recovers(self, sleeps, fake_source_factory):
        source = fake_source_factory([], nav_failures=2)
        assert await navigate_with_retry(source, "https://example.com", max_attempts=3, base_delay=0.1) is True
        assert source.navigations == ["https://example.com"] * 3
        assert sleeps == pytest.approx([0.1, 0.2])

    @pytest.mark.asyncio
    async def test_navigation_error(self, sleeps, fake_source_factory):
        source = fake_source_factory([], nav_failures=5)
        with pytest.raises(NavigationError) as exc_info:
            await navigate_with_retry(source, "https://example.com", max_attempts=2)

        err = exc_info.value
        assert isinstance(err, RetryExhaustedError)
        assert err.url == "https://example.com"
        assert err.attempts == 2
        assert isinstance(err.__cause__, ConnectionError)
        assert len(source.navigations) == 2

    @pytest.mark.asyncio
    async def test_passes_settle_options(self, sleeps):
        received = {}

        class Source:
            async def navigate_to(self, url, wait_until="networkidle", timeout_ms=30000):
                received.update(url=url, wait_until=wait_until, timeout_ms=timeout_ms)

        await navigate_with_retry(Source(), "https://example.com", wait_until="load", timeout_ms=5000)
        assert received == {"url": "https://example.com", "wait_until": "load", "timeout_ms": 5000}


class TestBackoff:

    async def test_linear(self):
        assert backoff_delay(1, 1.0) == 1.0
        assert backoff_delay(3, 0.5) == 1.5
        assert backoff_delay(2, 0) == 0
