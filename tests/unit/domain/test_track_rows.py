"""Tests for TrackRow figures."""

from streamspot.domain.dtos import TrackRow


class TestTrackRowFromHistory:
    def test_no_history(self) -> None:
        row = TrackRow.from_history("T1", "Song", [])
        assert row.total is None
        assert row.difference_day is None
        assert row.difference_week is None

    def test_single_value_has_total_only(self) -> None:
        row = TrackRow.from_history("T1", "Song", [500])
        assert row.total == 500
        assert row.difference_day is None

    def test_day_difference_needs_two_values(self) -> None:
        row = TrackRow.from_history("T1", "Song", [700, 500])
        assert row.difference_day == 200
        assert row.difference_week is None

    def test_week_difference_needs_eight_values(self) -> None:
        history = [800, 700, 600, 500, 400, 300, 200, 100]
        row = TrackRow.from_history("T1", "Song", history)
        assert row.total == 800
        assert row.difference_day == 100
        assert row.difference_week == 700
