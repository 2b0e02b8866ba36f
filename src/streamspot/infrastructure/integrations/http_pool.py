"""Shared HTTP client pool for connection reuse across the integrations.

Hey future me - the album sync runs 50 scraper requests at a time for
thousands of albums. Opening a fresh httpx.AsyncClient per request would throw
away keep-alive and burn sockets, so both clients borrow this one pool unless
a test hands them its own client.

    client = await HttpClientPool.get_client()

Call HttpClientPool.close() at shutdown (lifecycle.py and the CLI do).
"""

import asyncio
import logging
from typing import ClassVar

import httpx

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Process-wide shared ``httpx.AsyncClient``."""

    _client: ClassVar[httpx.AsyncClient | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    DEFAULT_TIMEOUT: ClassVar[float] = 60.0
    DEFAULT_MAX_KEEPALIVE: ClassVar[int] = 20
    # Above the default album concurrency so the semaphore, not the pool, is the limit.
    DEFAULT_MAX_CONNECTIONS: ClassVar[int] = 64

    @classmethod
    def _ensure_lock(cls) -> asyncio.Lock:
        # Created lazily so it binds to the running loop.
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_client(
        cls,
        timeout: float | None = None,
        max_connections: int | None = None,
    ) -> httpx.AsyncClient:
        """Return the shared client, creating it on first use.

        Config arguments only apply to the call that creates the client.
        """
        async with cls._ensure_lock():
            if cls._client is None:
                effective_timeout = timeout or cls.DEFAULT_TIMEOUT
                effective_max_conn = max_connections or cls.DEFAULT_MAX_CONNECTIONS
                cls._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(effective_timeout),
                    limits=httpx.Limits(
                        max_keepalive_connections=cls.DEFAULT_MAX_KEEPALIVE,
                        max_connections=effective_max_conn,
                    ),
                    http2=True,
                    follow_redirects=True,
                )
                logger.info(
                    "HTTP client pool initialized (timeout=%.1fs, max_conn=%d)",
                    effective_timeout,
                    effective_max_conn,
                )
            return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared client; the next get_client() creates a new one."""
        async with cls._ensure_lock():
            if cls._client is not None:
                await cls._client.aclose()
                cls._client = None
                logger.info("HTTP client pool closed")

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._client is not None
