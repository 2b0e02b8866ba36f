"""Catalog store: every read and write the sync engine performs.

Hey future me - all writes here are ``INSERT .. ON CONFLICT`` statements built
with the dialect's own ``insert`` (SQLite for dev/tests, PostgreSQL in prod).
That's the whole idempotence story of the daily update: re-running an album
ingestion rewrites the same keys and nothing else. Last write wins for equal
keys. Don't "optimize" these into select-then-insert, two concurrent album
tasks that share a track would race.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from streamspot.domain.exceptions import ConfigurationError
from streamspot.infrastructure.persistence.models import (
    AlbumModel,
    ArtistAlbumModel,
    ArtistModel,
    ArtistTrackModel,
    DailyStreamsModel,
    FollowerInstanceModel,
    TrackModel,
    utc_now,
)
from streamspot.infrastructure.persistence.retry import with_db_retry


def _dialect_insert(session: AsyncSession, table: Any) -> Any:
    """Return an ``insert`` construct that supports ``on_conflict_*``."""
    bind = session.get_bind()
    if bind.dialect.name == "postgresql":
        return postgresql.insert(table)
    if bind.dialect.name == "sqlite":
        return sqlite.insert(table)
    raise ConfigurationError(
        f"Upserts are not supported for dialect '{bind.dialect.name}', "
        "use SQLite or PostgreSQL"
    )


class CatalogRepository:
    """Repository over artists, albums, tracks and their time series."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- artists -------------------------------------------------------------

    async def get_artist(self, artist_id: str) -> ArtistModel | None:
        return await self.session.get(ArtistModel, artist_id)

    async def list_artists(self) -> Sequence[ArtistModel]:
        stmt = select(ArtistModel).order_by(ArtistModel.name)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_artist_ids(self) -> set[str]:
        result = await self.session.execute(select(ArtistModel.id))
        return set(result.scalars().all())

    @with_db_retry()
    async def upsert_artist(
        self, artist_id: str, name: str, images: list[dict[str, Any]]
    ) -> None:
        """Insert the artist, or refresh name and images if it exists."""
        stmt = _dialect_insert(self.session, ArtistModel).values(
            id=artist_id, name=name, images=images
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ArtistModel.id],
            set_={"name": stmt.excluded.name, "images": stmt.excluded.images},
        )
        await self.session.execute(stmt)

    @with_db_retry()
    async def add_follower_count(
        self, artist_id: str, on_date: date, count: int
    ) -> None:
        """Record the follower count for a day; an existing row for the day wins."""
        stmt = _dialect_insert(self.session, FollowerInstanceModel).values(
            artist_id=artist_id, date=on_date, count=count
        )
        await self.session.execute(stmt.on_conflict_do_nothing())

    async def get_follower_counts(
        self, artist_id: str, limit: int
    ) -> Sequence[FollowerInstanceModel]:
        stmt = (
            select(FollowerInstanceModel)
            .where(FollowerInstanceModel.artist_id == artist_id)
            .order_by(FollowerInstanceModel.date.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def delete_artist(self, artist_id: str) -> bool:
        """Delete an artist together with the albums only it owns.

        Albums shared with another tracked artist survive, only the junction
        rows of this artist go away (FK cascade). Tracks and stream history
        follow their album through the cascades.

        Returns:
            False if the artist did not exist.
        """
        artist = await self.get_artist(artist_id)
        if artist is None:
            return False

        linked = select(ArtistAlbumModel.album_id).where(
            ArtistAlbumModel.artist_id == artist_id
        )
        owned_only = (
            select(ArtistAlbumModel.album_id)
            .where(ArtistAlbumModel.album_id.in_(linked))
            .group_by(ArtistAlbumModel.album_id)
            .having(func.count(ArtistAlbumModel.artist_id) == 1)
        )
        orphan_ids = list((await self.session.execute(owned_only)).scalars().all())
        if orphan_ids:
            await self.session.execute(
                delete(AlbumModel).where(AlbumModel.id.in_(orphan_ids))
            )
        await self.session.execute(delete(ArtistModel).where(ArtistModel.id == artist_id))
        return True

    # --- albums --------------------------------------------------------------

    async def get_album(self, album_id: str) -> AlbumModel | None:
        return await self.session.get(AlbumModel, album_id)

    async def list_albums_for_artist(self, artist_id: str) -> Sequence[AlbumModel]:
        stmt = (
            select(AlbumModel)
            .join(ArtistAlbumModel, ArtistAlbumModel.album_id == AlbumModel.id)
            .where(ArtistAlbumModel.artist_id == artist_id)
            .order_by(AlbumModel.release_date.desc(), AlbumModel.name)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def albums_pending_update(
        self, album_ids: Iterable[str], today: date
    ) -> set[str]:
        """Subset of ``album_ids`` not yet ingested on ``today``.

        Unknown albums are pending as well, so this is "discovered minus done".
        """
        pending = set(album_ids)
        if not pending:
            return pending
        stmt = select(AlbumModel.id).where(AlbumModel.updated == today)
        done = set((await self.session.execute(stmt)).scalars().all())
        return pending - done

    @with_db_retry()
    async def upsert_album(
        self,
        album_id: str,
        *,
        name: str,
        release_date: date,
        album_type: str,
        images: list[dict[str, Any]],
        colors: dict[str, Any] | None,
        sharing_id: str,
        updated: date,
        display: bool = True,
    ) -> None:
        """Insert or fully overwrite an album row."""
        values = {
            "id": album_id,
            "name": name,
            "release_date": release_date,
            "album_type": album_type,
            "images": images,
            "colors": colors,
            "display": display,
            "updated": updated,
            "sharing_id": sharing_id,
        }
        stmt = _dialect_insert(self.session, AlbumModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AlbumModel.id],
            set_={key: stmt.excluded[key] for key in values if key != "id"},
        )
        await self.session.execute(stmt)

    @with_db_retry()
    async def add_artist_albums(self, artist_ids: Iterable[str], album_id: str) -> None:
        """Link an album to artists, one row per distinct artist, skipping existing links."""
        rows = [
            {"artist_id": artist_id, "album_id": album_id}
            for artist_id in dict.fromkeys(artist_ids)
        ]
        if not rows:
            return
        stmt = _dialect_insert(self.session, ArtistAlbumModel).values(rows)
        await self.session.execute(stmt.on_conflict_do_nothing())

    # --- tracks --------------------------------------------------------------

    async def get_track(self, track_id: str) -> TrackModel | None:
        return await self.session.get(TrackModel, track_id)

    async def list_tracks_for_album(self, album_id: str) -> Sequence[TrackModel]:
        stmt = (
            select(TrackModel)
            .where(TrackModel.album_id == album_id)
            .order_by(TrackModel.name)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def existing_track_ids(self, track_ids: Iterable[str]) -> set[str]:
        wanted = list(set(track_ids))
        if not wanted:
            return set()
        stmt = select(TrackModel.id).where(TrackModel.id.in_(wanted))
        return set((await self.session.execute(stmt)).scalars().all())

    @with_db_retry()
    async def upsert_track(
        self, track_id: str, *, album_id: str, name: str, length: int
    ) -> None:
        """Insert the track or refresh name, length and album."""
        stmt = _dialect_insert(self.session, TrackModel).values(
            id=track_id, album_id=album_id, name=name, length=length
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TrackModel.id],
            set_={
                "name": stmt.excluded.name,
                "length": stmt.excluded.length,
                "album_id": stmt.excluded.album_id,
            },
        )
        await self.session.execute(stmt)

    @with_db_retry()
    async def add_artist_track(self, artist_id: str, track_id: str) -> None:
        stmt = _dialect_insert(self.session, ArtistTrackModel).values(
            artist_id=artist_id, track_id=track_id
        )
        await self.session.execute(stmt.on_conflict_do_nothing())

    async def albums_with_missing_streams(self, on_date: date) -> set[str]:
        """Album ids owning at least one track without a stream row for ``on_date``."""
        recorded = select(DailyStreamsModel.track_id).where(
            DailyStreamsModel.date == on_date
        )
        stmt = (
            select(TrackModel.album_id)
            .where(TrackModel.id.not_in(recorded))
            .distinct()
        )
        return set((await self.session.execute(stmt)).scalars().all())

    # --- stream history ------------------------------------------------------

    async def recent_streams(self, track_id: str, limit: int) -> list[int]:
        """Latest ``limit`` stream values of a track, most recent date first."""
        stmt = (
            select(DailyStreamsModel.streams)
            .where(DailyStreamsModel.track_id == track_id)
            .order_by(DailyStreamsModel.date.desc())
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    @with_db_retry()
    async def upsert_daily_streams(
        self,
        track_id: str,
        on_date: date,
        streams: int,
        captured_at: datetime | None = None,
    ) -> None:
        """Write the day's play count, overwriting a value already stored for the day."""
        stmt = _dialect_insert(self.session, DailyStreamsModel).values(
            track_id=track_id,
            date=on_date,
            streams=streams,
            time=captured_at or utc_now(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DailyStreamsModel.track_id, DailyStreamsModel.date],
            set_={"streams": stmt.excluded.streams, "time": stmt.excluded.time},
        )
        await self.session.execute(stmt)
