"""Background workers."""

from streamspot.application.workers.daily_update_worker import DailyUpdateWorker

__all__ = ["DailyUpdateWorker"]
