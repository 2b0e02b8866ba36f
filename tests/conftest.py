"""Shared fixtures: in-memory SQLite store, settings and payload factories."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from streamspot.config import (
    DatabaseSettings,
    Settings,
    SpotifySettings,
    SyncSettings,
    WebPlayerSettings,
)
from streamspot.domain.dtos import AlbumUnion, TrackUnion
from streamspot.infrastructure.persistence import CatalogRepository, Database

# Hey future me - tests use AR1 (and AR2) as tracked artists and AR9 as a guest that is
# never tracked. Payloads default to a single track by AR1.
TRACKED_ARTIST = "AR1"


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at an in-memory database and fake endpoints, no waiting."""
    return Settings(
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
        spotify=SpotifySettings(
            client_id="test-client-id",
            client_secret="test-client-secret",
            api_base_url="https://api.spotify.test/v1",
            token_url="https://accounts.spotify.test/api/token",
        ),
        webplayer=WebPlayerSettings(
            album_endpoint="https://scraper.test/album",
            track_endpoint="https://scraper.test/track",
            artist_endpoint="https://scraper.test/artist",
        ),
        sync=SyncSettings(
            status_check_track_id="CANARY",
            status_check_interval_seconds=0,
            stream_sweep_interval_seconds=0,
            # One in-memory connection (StaticPool) is shared by every session,
            # so album tasks run one at a time here.
            max_concurrent_albums=1,
        ),
    )


@pytest.fixture
async def db(settings: Settings) -> AsyncGenerator[Database, None]:
    """Fresh in-memory database with all tables."""
    database = Database(settings)
    await database.create_tables()
    yield database
    await database.close()


@pytest.fixture
async def session(db: Database) -> AsyncGenerator[AsyncSession, None]:
    async with db.session_factory() as session:
        yield session


@pytest.fixture
def repo(session: AsyncSession) -> CatalogRepository:
    return CatalogRepository(session)


def _artist_refs(artist_ids: list[str]) -> dict[str, Any]:
    return {"items": [{"uri": f"spotify:artist:{a}"} for a in artist_ids]}


@pytest.fixture
def album_payload() -> Callable[..., dict[str, Any]]:
    """Factory for raw album union JSON as the scraper returns it.

    ``tracks`` is a list of ``(track_id, playcount, artist_ids)`` tuples.
    """

    def _build(
        album_id: str = "AL1",
        tracks: list[tuple[str, int, list[str]]] | None = None,
        name: str = "Test Album",
        release: str = "2021-03-05T00:00:00Z",
    ) -> dict[str, Any]:
        if tracks is None:
            tracks = [("T1", 500, [TRACKED_ARTIST])]
        return {
            "__typename": "Album",
            "uri": f"spotify:album:{album_id}",
            "name": name,
            "date": {"isoString": release},
            "type": "ALBUM",
            "artists": _artist_refs([TRACKED_ARTIST]),
            "coverArt": {
                "extractedColors": {
                    "colorRaw": {"hex": "#535353"},
                    "colorLight": {"hex": "#7A7A7A"},
                    "colorDark": {"hex": "#535353"},
                },
                "sources": [
                    {"url": f"https://i.scdn.test/{album_id}-640", "height": 640, "width": 640},
                    {"url": f"https://i.scdn.test/{album_id}-300", "height": 300, "width": 300},
                ],
            },
            "sharingInfo": {
                "shareUrl": f"https://open.spotify.test/album/{album_id}",
                "shareId": f"share-{album_id}",
            },
            "tracks": {
                "items": [
                    {
                        "uid": f"uid-{track_id}",
                        "track": {
                            "uri": f"spotify:track:{track_id}",
                            "name": f"Song {track_id}",
                            # The scraper sends play counts as strings
                            "playcount": str(playcount),
                            "duration": {"totalMilliseconds": 180000},
                            "artists": _artist_refs(artists),
                        },
                    }
                    for track_id, playcount, artists in tracks
                ]
            },
        }

    return _build


@pytest.fixture
def album_union(
    album_payload: Callable[..., dict[str, Any]],
) -> Callable[..., AlbumUnion]:
    """Same as album_payload, already decoded."""

    def _build(*args: Any, **kwargs: Any) -> AlbumUnion:
        return AlbumUnion.model_validate(album_payload(*args, **kwargs))

    return _build


@pytest.fixture
def track_payload() -> Callable[..., dict[str, Any]]:
    def _build(track_id: str = "CANARY", playcount: int = 1000) -> dict[str, Any]:
        return {
            "__typename": "Track",
            "id": track_id,
            "uri": f"spotify:track:{track_id}",
            "name": "Canary Song",
            "playcount": str(playcount),
            "duration": {"totalMilliseconds": 200000},
            "trackNumber": 1,
            "contentRating": {"label": "NONE"},
        }

    return _build


@pytest.fixture
def track_union(track_payload: Callable[..., dict[str, Any]]) -> Callable[..., TrackUnion]:
    def _build(*args: Any, **kwargs: Any) -> TrackUnion:
        return TrackUnion.model_validate(track_payload(*args, **kwargs))

    return _build
