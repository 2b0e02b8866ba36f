# Hey future me - this worker is the in-process alternative to a cron entry!
#
# Off by default (SYNC_AUTO_RUN_ENABLED). When on, it wakes up every
# check_interval_seconds and starts the daily update once per calendar day,
# as soon as the local hour reaches SYNC_AUTO_RUN_HOUR. A run can take hours
# (the status gate alone may wait for the source to roll over), that's fine,
# the loop simply awaits it.
#
# Error handling:
# - SyncAbortedError: logged, the day is marked as attempted, next try tomorrow
# - anything else: logged with traceback, same as above. No crash loop!
"""Background worker that runs the daily update once per day."""

import asyncio
import contextlib
import logging
import time
from datetime import date, datetime

from streamspot.application.services.daily_update_service import DailyUpdateService
from streamspot.config.settings import SyncSettings
from streamspot.domain.exceptions import SyncAbortedError
from streamspot.infrastructure.observability import log_worker_health

logger = logging.getLogger(__name__)

HEALTH_LOG_EVERY_N_CYCLES = 60


class DailyUpdateWorker:
    """Schedules ``DailyUpdateService.run`` inside the server process."""

    def __init__(
        self,
        service: DailyUpdateService,
        settings: SyncSettings,
        check_interval_seconds: int = 60,
    ) -> None:
        self.service = service
        self.settings = settings
        self.check_interval_seconds = check_interval_seconds

        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._last_run_date: date | None = None
        self._last_result: str | None = None

        self._cycles_completed = 0
        self._errors_total = 0
        self._start_time = time.time()

    @property
    def is_running(self) -> bool:
        return self._running

    def get_status(self) -> dict[str, object]:
        return {
            "running": self._running,
            "run_hour": self.settings.auto_run_hour,
            "last_run_date": self._last_run_date.isoformat() if self._last_run_date else None,
            "last_result": self._last_result,
            "errors_total": self._errors_total,
        }

    async def start(self) -> None:
        """Start the background loop (idempotent)."""
        if self._running:
            logger.warning("daily_update_worker.already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "worker.started",
            extra={"worker": "daily_update", "run_hour": self.settings.auto_run_hour},
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it (idempotent)."""
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info(
            "worker.stopped",
            extra={
                "worker": "daily_update",
                "cycles_completed": self._cycles_completed,
                "errors_total": self._errors_total,
            },
        )

    def is_due(self, now: datetime) -> bool:
        """True once per day, from the configured hour on."""
        if now.hour < self.settings.auto_run_hour:
            return False
        return self._last_run_date != now.date()

    async def run_once(self, now: datetime) -> None:
        """Run the daily update for ``now``'s day and record the outcome."""
        self._last_run_date = now.date()
        if self.service.is_running:
            logger.info("Daily update already running (manual trigger), skipping")
            self._last_result = "skipped"
            return
        try:
            elapsed = await self.service.run()
        except SyncAbortedError as e:
            self._errors_total += 1
            self._last_result = f"aborted: {e.stage}"
            logger.error("Daily update aborted, next attempt tomorrow: %s", e.message)
        except Exception:
            # Keep the loop alive; the traceback is the only report we get.
            self._errors_total += 1
            self._last_result = "failed"
            logger.exception("Daily update crashed, next attempt tomorrow")
        else:
            self._last_result = "completed"
            logger.info("Daily update completed in %s", elapsed)

    async def _run_loop(self) -> None:
        while self._running:
            now = datetime.now()
            if self.is_due(now):
                await self.run_once(now)

            self._cycles_completed += 1
            if self._cycles_completed % HEALTH_LOG_EVERY_N_CYCLES == 0:
                log_worker_health(
                    logger,
                    "daily_update",
                    self._cycles_completed,
                    self._errors_total,
                    time.time() - self._start_time,
                    extra_stats={"last_result": self._last_result},
                )
            await asyncio.sleep(self.check_interval_seconds)
