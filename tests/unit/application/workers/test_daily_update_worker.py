"""Tests for DailyUpdateWorker scheduling."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, PropertyMock

import pytest

from streamspot.application.services import DailyUpdateService
from streamspot.application.workers import DailyUpdateWorker
from streamspot.config import SyncSettings
from streamspot.domain.exceptions import SyncAbortedError


@pytest.fixture
def service() -> MagicMock:
    mock = MagicMock(spec=DailyUpdateService)
    mock.run = AsyncMock()
    type(mock).is_running = PropertyMock(return_value=False)
    return mock


@pytest.fixture
def worker(service: MagicMock) -> DailyUpdateWorker:
    return DailyUpdateWorker(service, SyncSettings(auto_run_hour=2))


class TestIsDue:
    def test_not_before_the_configured_hour(self, worker: DailyUpdateWorker) -> None:
        assert not worker.is_due(datetime(2024, 6, 2, 1, 59))

    def test_due_from_the_configured_hour(self, worker: DailyUpdateWorker) -> None:
        assert worker.is_due(datetime(2024, 6, 2, 2, 0))
        assert worker.is_due(datetime(2024, 6, 2, 23, 0))

    async def test_once_per_day(self, worker: DailyUpdateWorker) -> None:
        await worker.run_once(datetime(2024, 6, 2, 2, 0))

        assert not worker.is_due(datetime(2024, 6, 2, 5, 0))
        assert worker.is_due(datetime(2024, 6, 3, 2, 0))


class TestRunOnce:
    async def test_success(self, worker: DailyUpdateWorker, service: MagicMock) -> None:
        await worker.run_once(datetime(2024, 6, 2, 2, 0))

        service.run.assert_awaited_once()
        assert worker.get_status()["last_result"] == "completed"
        assert worker.get_status()["last_run_date"] == "2024-06-02"

    async def test_abort_is_recorded(self, worker: DailyUpdateWorker, service: MagicMock) -> None:
        service.run.side_effect = SyncAbortedError("status_gate", "down")

        await worker.run_once(datetime(2024, 6, 2, 2, 0))

        status = worker.get_status()
        assert status["last_result"] == "aborted: status_gate"
        assert status["errors_total"] == 1

    async def test_crash_does_not_escape(
        self, worker: DailyUpdateWorker, service: MagicMock
    ) -> None:
        service.run.side_effect = RuntimeError("boom")

        await worker.run_once(datetime(2024, 6, 2, 2, 0))

        assert worker.get_status()["last_result"] == "failed"

    async def test_skips_when_manual_run_in_progress(
        self, worker: DailyUpdateWorker, service: MagicMock
    ) -> None:
        type(service).is_running = PropertyMock(return_value=True)

        await worker.run_once(datetime(2024, 6, 2, 2, 0))

        service.run.assert_not_awaited()
        assert worker.get_status()["last_result"] == "skipped"


class TestLifecycle:
    async def test_start_and_stop(self, service: MagicMock) -> None:
        worker = DailyUpdateWorker(
            service, SyncSettings(auto_run_hour=23), check_interval_seconds=3600
        )
        await worker.start()
        assert worker.is_running
        await worker.start()

        await worker.stop()
        assert not worker.is_running
