"""Tests for ReportService displays."""

from datetime import date, timedelta

import pytest

from streamspot.application.services import ReportService
from streamspot.domain.exceptions import EntityNotFoundException
from streamspot.infrastructure.persistence import CatalogRepository

LAST_DAY = date(2024, 6, 8)


async def _seed(repo: CatalogRepository) -> None:
    await repo.upsert_artist("AR1", "Artist", [{"url": "https://i.test/ar1"}])
    await repo.add_follower_count("AR1", LAST_DAY - timedelta(days=1), 90)
    await repo.add_follower_count("AR1", LAST_DAY, 100)
    for album_id, release in (("AL1", date(2019, 1, 1)), ("AL2", date(2023, 1, 1))):
        await repo.upsert_album(
            album_id,
            name=f"Album {album_id}",
            release_date=release,
            album_type="ALBUM",
            images=[{"url": f"https://i.test/{album_id}", "height": 640, "width": 640}],
            colors={"colorRaw": {"hex": "#000000"}},
            sharing_id=f"share-{album_id}",
            updated=LAST_DAY,
        )
        await repo.add_artist_albums(["AR1"], album_id)
    await repo.upsert_track("T1", album_id="AL1", name="A Song", length=1)
    await repo.upsert_track("T2", album_id="AL1", name="B Song", length=1)
    await repo.upsert_track("T3", album_id="AL2", name="New Song", length=1)
    # T1: eight days of +100, T2: two days of +5, T3: nothing yet
    for offset in range(8):
        await repo.upsert_daily_streams("T1", LAST_DAY - timedelta(days=offset), 1000 - 100 * offset)
    await repo.upsert_daily_streams("T2", LAST_DAY, 50)
    await repo.upsert_daily_streams("T2", LAST_DAY - timedelta(days=1), 45)


class TestAlbumDisplay:
    async def test_track_rows_and_totals(self, repo: CatalogRepository) -> None:
        await _seed(repo)

        display = await ReportService(repo).album_display("AL1")

        assert display.name == "Album AL1"
        assert display.date == LAST_DAY
        assert display.sharing_id == "share-AL1"
        rows = {row.id: row for row in display.tracks}
        assert (rows["T1"].total, rows["T1"].difference_day, rows["T1"].difference_week) == (
            1000,
            100,
            700,
        )
        assert (rows["T2"].total, rows["T2"].difference_day, rows["T2"].difference_week) == (
            50,
            5,
            None,
        )
        assert display.total == 1050
        assert display.difference_day == 105
        assert display.difference_week == 700

    async def test_unknown_album(self, repo: CatalogRepository) -> None:
        with pytest.raises(EntityNotFoundException):
            await ReportService(repo).album_display("NOPE")


class TestArtistDisplay:
    async def test_albums_newest_first_with_latest_followers(
        self, repo: CatalogRepository
    ) -> None:
        await _seed(repo)

        display = await ReportService(repo).artist_display("AR1")

        assert display.followers == 100
        assert [album.id for album in display.albums] == ["AL2", "AL1"]
        new_album = display.albums[0]
        assert new_album.tracks[0].total is None
        assert new_album.total == 0

    async def test_unknown_artist(self, repo: CatalogRepository) -> None:
        with pytest.raises(EntityNotFoundException):
            await ReportService(repo).artist_display("NOPE")
