# Hey future me - this is what keeps "database is locked" from killing album tasks!
#
# The daily update fans out up to 50 album ingestions at once, each with its own
# session. On PostgreSQL that's fine. On SQLite only ONE writer holds the lock at a
# time and the others get OperationalError("database is locked"). The lock is
# temporary, so waiting a bit and retrying the write almost always succeeds.
#
# USAGE:
#   @with_db_retry()
#   async def upsert_album(self, ...) -> None:
#       ...
"""Retry helper for SQLite lock errors."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def is_lock_error(exception: BaseException) -> bool:
    """True if the exception is a retryable SQLite lock/busy error."""
    if not isinstance(exception, OperationalError):
        return False
    error_msg = str(exception).lower()
    return "locked" in error_msg or "busy" in error_msg


def with_db_retry(
    max_attempts: int = 3,
    initial_delay: float = 0.5,
    max_delay: float = 5.0,
    backoff_factor: float = 2.0,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Retry an async store operation on lock errors with exponential backoff.

    The delay goes 0.5s -> 1s -> 2s ... capped at ``max_delay``. Only lock
    errors are retried; any other ``OperationalError`` (bad SQL, connection
    refused) is raised on the first attempt.

    Careful: the decorated call must be safe to repeat. Every write in the
    catalog repository is an upsert or insert-if-absent, so it is.

    Args:
        max_attempts: Total attempts including the first one.
        initial_delay: Seconds to wait before the first retry.
        max_delay: Upper bound for a single wait.
        backoff_factor: Multiplier applied to the delay after each retry.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            delay = initial_delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except OperationalError as e:
                    if not is_lock_error(e) or attempt == max_attempts:
                        if is_lock_error(e):
                            logger.error(
                                "Database locked after %d attempts, giving up: %s",
                                max_attempts,
                                func.__qualname__,
                            )
                        raise
                    logger.warning(
                        "Database locked (attempt %d/%d), retrying in %.1fs: %s",
                        attempt,
                        max_attempts,
                        delay,
                        func.__qualname__,
                    )
                    await asyncio.sleep(delay)
                    delay = min(delay * backoff_factor, max_delay)
            raise RuntimeError("Unexpected state in retry decorator")

        return wrapper

    return decorator
