"""
Token bucket rate limiter for the Spotify Web API.

Hey future me - artist discovery fires one catalog query per tracked artist at
once, and every query may page several times. Without a limiter the first few
hundred requests go out in the same second and Spotify answers with 429s.

ALGORITHM: Token Bucket
- bucket holds max_tokens
- tokens refill at refill_rate per second
- each request takes one token, an empty bucket means waiting

ADAPTIVE BACKOFF on 429:
- honor Retry-After if present, else wait 1s, 2s, 4s ... (capped)
- a successful request resets the backoff

USAGE:
    limiter = get_spotify_limiter()

    async with limiter:
        response = await client.get(url)

    # on 429:
    await limiter.handle_rate_limit_response(retry_after)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RateLimiterConfig:
    """Rate limiter configuration.

    Spotify allows roughly 180 requests per minute; 2 req/s sustained with a
    burst of 10 leaves headroom. max_backoff_seconds must stay high, Spotify
    can send Retry-After values of several minutes and capping below that
    just earns the next 429.
    """

    max_tokens: int = 10
    refill_rate: float = 2.0
    max_backoff_seconds: float = 600.0
    initial_backoff_seconds: float = 1.0
    backoff_multiplier: float = 2.0


@dataclass
class RateLimiter:
    """Token bucket with adaptive 429 backoff. Use as ``async with limiter:``."""

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    name: str = "default"

    _tokens: float = field(default=0.0, init=False)
    _last_refill: float = field(default_factory=time.monotonic, init=False)
    _current_backoff: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        self._tokens = float(self.config.max_tokens)
        self._current_backoff = self.config.initial_backoff_seconds

    @classmethod
    def for_spotify(cls) -> "RateLimiter":
        return cls(config=RateLimiterConfig(), name="spotify")

    def _refill_tokens(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(
            float(self.config.max_tokens), self._tokens + elapsed * self.config.refill_rate
        )
        self._last_refill = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        while True:
            async with self._lock:
                self._refill_tokens()
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return
                wait_time = (1.0 - self._tokens) / self.config.refill_rate
            logger.debug("RateLimiter[%s]: bucket empty, waiting %.2fs", self.name, wait_time)
            await asyncio.sleep(wait_time)

    async def handle_rate_limit_response(self, retry_after: int | None = None) -> float:
        """Sleep after a 429 and grow the backoff for the next one.

        Args:
            retry_after: Retry-After header value in seconds, if the API sent one

        Returns:
            Seconds actually waited
        """
        async with self._lock:
            wait_time = float(retry_after) if retry_after is not None else self._current_backoff
            wait_time = min(wait_time, self.config.max_backoff_seconds)
            self._current_backoff = min(
                self._current_backoff * self.config.backoff_multiplier,
                self.config.max_backoff_seconds,
            )
            self._tokens = 0.0

        logger.warning(
            "RateLimiter[%s]: 429 received, waiting %.1fs before retry", self.name, wait_time
        )
        await asyncio.sleep(wait_time)
        return wait_time

    def reset_backoff(self) -> None:
        self._current_backoff = self.config.initial_backoff_seconds

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        if exc_type is None:
            self.reset_backoff()


# One limiter per upstream, shared by every client instance in the process.
_spotify_limiter: RateLimiter | None = None


def get_spotify_limiter() -> RateLimiter:
    """Get the process-wide Spotify rate limiter."""
    global _spotify_limiter
    if _spotify_limiter is None:
        _spotify_limiter = RateLimiter.for_spotify()
    return _spotify_limiter


__all__ = ["RateLimiter", "RateLimiterConfig", "get_spotify_limiter"]
