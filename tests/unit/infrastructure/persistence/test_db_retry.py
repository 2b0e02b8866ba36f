"""Tests for the SQLite lock retry decorator."""

from collections.abc import Awaitable, Callable

import pytest
from sqlalchemy.exc import OperationalError

from streamspot.infrastructure.persistence.retry import is_lock_error, with_db_retry


def _operational_error(message: str) -> OperationalError:
    return OperationalError("INSERT ...", {}, Exception(message))


class TestIsLockError:
    def test_locked(self) -> None:
        assert is_lock_error(_operational_error("database is locked"))

    def test_busy(self) -> None:
        assert is_lock_error(_operational_error("database table is busy"))

    def test_other_operational_error(self) -> None:
        assert not is_lock_error(_operational_error("no such table: album"))

    def test_not_operational(self) -> None:
        assert not is_lock_error(ValueError("locked"))


def _flaky(outcomes: list[object]) -> tuple[Callable[[], Awaitable[object]], list[int]]:
    """A real coroutine function that raises or returns the next outcome per call.

    The decorator logs ``func.__qualname__``, so it needs a real function here.
    """
    calls: list[int] = []

    async def write() -> object:
        calls.append(1)
        outcome = outcomes[min(len(calls), len(outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return write, calls


class TestWithDbRetry:
    async def test_retries_lock_errors_then_succeeds(self) -> None:
        func, calls = _flaky([_operational_error("database is locked"), "ok"])
        wrapped = with_db_retry(max_attempts=3, initial_delay=0)(func)

        assert await wrapped() == "ok"
        assert len(calls) == 2

    async def test_gives_up_after_max_attempts(self) -> None:
        func, calls = _flaky([_operational_error("database is locked")])
        wrapped = with_db_retry(max_attempts=3, initial_delay=0)(func)

        with pytest.raises(OperationalError):
            await wrapped()
        assert len(calls) == 3

    async def test_other_errors_are_not_retried(self) -> None:
        func, calls = _flaky([_operational_error("no such column: foo")])
        wrapped = with_db_retry(max_attempts=3, initial_delay=0)(func)

        with pytest.raises(OperationalError):
            await wrapped()
        assert len(calls) == 1

    async def test_keeps_the_wrapped_name(self) -> None:
        func, _ = _flaky(["ok"])

        assert with_db_retry()(func).__name__ == "write"
