"""Tests for the token bucket rate limiter."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from streamspot.infrastructure.rate_limiter import (
    RateLimiter,
    RateLimiterConfig,
    get_spotify_limiter,
)


class TestRateLimiter:
    async def test_burst_is_served_without_waiting(self, mocker) -> None:
        sleep = mocker.patch("streamspot.infrastructure.rate_limiter.asyncio.sleep", AsyncMock())
        limiter = RateLimiter(RateLimiterConfig(max_tokens=3, refill_rate=1.0))

        for _ in range(3):
            await limiter.acquire()

        sleep.assert_not_awaited()

    async def test_empty_bucket_waits(self) -> None:
        limiter = RateLimiter(RateLimiterConfig(max_tokens=1, refill_rate=100.0))
        await limiter.acquire()
        # Second token arrives after ~10ms
        await asyncio.wait_for(limiter.acquire(), timeout=1.0)

    async def test_retry_after_is_honored(self, mocker) -> None:
        sleep = mocker.patch("streamspot.infrastructure.rate_limiter.asyncio.sleep", AsyncMock())
        limiter = RateLimiter()

        waited = await limiter.handle_rate_limit_response(retry_after=7)

        assert waited == 7.0
        sleep.assert_awaited_once_with(7.0)

    async def test_backoff_grows_without_retry_after(self, mocker) -> None:
        mocker.patch("streamspot.infrastructure.rate_limiter.asyncio.sleep", AsyncMock())
        limiter = RateLimiter(RateLimiterConfig(initial_backoff_seconds=1.0, backoff_multiplier=2.0))

        assert await limiter.handle_rate_limit_response() == 1.0
        assert await limiter.handle_rate_limit_response() == 2.0
        limiter.reset_backoff()
        assert await limiter.handle_rate_limit_response() == 1.0

    async def test_retry_after_is_capped(self, mocker) -> None:
        mocker.patch("streamspot.infrastructure.rate_limiter.asyncio.sleep", AsyncMock())
        limiter = RateLimiter(RateLimiterConfig(max_backoff_seconds=30.0))
        assert await limiter.handle_rate_limit_response(retry_after=3600) == 30.0


def test_spotify_limiter_is_shared() -> None:
    assert get_spotify_limiter() is get_spotify_limiter()
    assert get_spotify_limiter().name == "spotify"


@pytest.mark.parametrize("tokens", [1, 5])
async def test_context_manager_takes_a_token(tokens: int) -> None:
    limiter = RateLimiter(RateLimiterConfig(max_tokens=tokens, refill_rate=0.001))
    async with limiter:
        pass
    assert limiter._tokens == pytest.approx(tokens - 1, abs=0.01)
