"""Calendar keys for one daily update run."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta


@dataclass(frozen=True)
class SyncDay:
    """The dates a daily update writes against.

    Attributes:
        today: Local calendar date of the run; stored in ``album.updated`` to
            mark albums ingested by this run.
        stream_date: Key of ``daily_streams`` and ``follower_instance`` rows.
            Defaults to the previous day because the count that rolls over at
            midnight describes the day that just ended.

    Hey future me - build this ONCE per run and pass it down. If every task
    called date.today() on its own, a run crossing midnight would split its
    rows across two keys and the "already updated" queries would lie.
    """

    today: date
    stream_date: date

    @classmethod
    def current(cls, stream_date_offset_days: int = 1) -> "SyncDay":
        """Build the sync day from local time."""
        return cls.for_date(datetime.now().date(), stream_date_offset_days)

    @classmethod
    def for_date(cls, today: date, stream_date_offset_days: int = 1) -> "SyncDay":
        """Build the sync day for an explicit calendar date."""
        return cls(
            today=today,
            stream_date=today - timedelta(days=stream_date_offset_days),
        )
