"""Tests for SyncDay."""

from datetime import date

from streamspot.domain.value_objects import SyncDay


class TestSyncDay:
    def test_stream_date_is_previous_day_by_default(self) -> None:
        day = SyncDay.for_date(date(2024, 3, 1))
        assert day.today == date(2024, 3, 1)
        assert day.stream_date == date(2024, 2, 29)

    def test_zero_offset_keys_streams_by_today(self) -> None:
        day = SyncDay.for_date(date(2024, 3, 1), stream_date_offset_days=0)
        assert day.stream_date == day.today

    def test_crosses_year_boundary(self) -> None:
        day = SyncDay.for_date(date(2025, 1, 1))
        assert day.stream_date == date(2024, 12, 31)

    def test_current_uses_local_date(self) -> None:
        day = SyncDay.current()
        assert day.today == date.today()
        assert (day.today - day.stream_date).days == 1
