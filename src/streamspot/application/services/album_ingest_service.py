"""Album ingestion: one album union payload into the catalog store.

Hey future me - this is the unit of work the daily update runs 50-wide. Order
matters here:

1. fetch the union payload (failure -> skip the album, `updated` untouched so
   the next sync iteration picks it up again)
2. upsert the album with updated=today and COMMIT, before any track work
3. per track with at least one tracked artist: upsert track + artist_tracks
   (a store error on one track is logged and only that track is skipped)
4. artist_albums rows, deduped by artist, in one batch
5. readiness per track, daily_streams row on READY

Every task gets its own session from the session provider, never share one
across tasks (AsyncSession is not concurrency safe).
"""

import logging
from collections.abc import Callable, Collection
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from streamspot.application.services.readiness import (
    DEFAULT_HISTORY_DEPTH,
    DEFAULT_SETTLE_THRESHOLD,
    ReadinessOracle,
)
from streamspot.domain.dtos import AlbumTrackDetail, AlbumUnion
from streamspot.domain.exceptions import ExternalServiceError
from streamspot.domain.ports import IWebPlayerClient
from streamspot.domain.value_objects import Readiness, SyncDay
from streamspot.infrastructure.observability import (
    end_operation,
    get_module_logger,
    start_operation,
)
from streamspot.infrastructure.persistence.repositories import CatalogRepository

logger = get_module_logger(__name__)

SessionProvider = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@dataclass
class IngestResult:
    """Summary of one album task."""

    album_id: str
    success: bool = True
    tracks_upserted: int = 0
    tracks_failed: list[str] = field(default_factory=list)
    streams_recorded: int = 0
    streams_not_ready: int = 0
    error: str | None = None


class AlbumIngestService:
    """Fetches album union payloads and writes them into the store."""

    def __init__(
        self,
        session_provider: SessionProvider,
        webplayer_client: IWebPlayerClient,
        settle_threshold: int = DEFAULT_SETTLE_THRESHOLD,
        history_depth: int = DEFAULT_HISTORY_DEPTH,
    ) -> None:
        self.session_provider = session_provider
        self.webplayer_client = webplayer_client
        self.settle_threshold = settle_threshold
        self.history_depth = history_depth

    async def _fetch(self, album_id: str, result: IngestResult) -> AlbumUnion | None:
        try:
            return await self.webplayer_client.get_album_union(album_id)
        except ExternalServiceError as e:
            logger.warning("Skipping album %s, fetch failed: %s", album_id, e.message)
            result.success = False
            result.error = e.message
            return None

    async def ingest(
        self, album_id: str, tracked_artist_ids: Collection[str], sync_day: SyncDay
    ) -> IngestResult:
        """Ingest one album: metadata, tracked tracks, junctions, then streams."""
        start, op_id = start_operation(
            logger, "album.ingest", log_level=logging.DEBUG, album_id=album_id
        )
        result = IngestResult(album_id=album_id)
        union = await self._fetch(album_id, result)
        if union is None:
            return result

        # The album row is keyed by the id in the payload, which is what the
        # "not updated today" query compares against next iteration.
        stored_album_id = union.id

        async with self.session_provider() as session:
            repo = CatalogRepository(session)

            try:
                await repo.upsert_album(
                    stored_album_id,
                    name=union.name,
                    release_date=union.release_date,
                    album_type=union.album_type,
                    images=[image.model_dump() for image in union.cover_art.sources],
                    colors=(
                        union.cover_art.extracted_colors.model_dump(by_alias=True)
                        if union.cover_art.extracted_colors
                        else None
                    ),
                    sharing_id=union.sharing_info.share_id,
                    updated=sync_day.today,
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Skipping album %s, store write failed: %s", album_id, e)
                result.success = False
                result.error = str(e)
                return result

            linked_artists: list[str] = []
            for track in union.track_details:
                tracked = [a for a in track.artist_ids if a in tracked_artist_ids]
                if not tracked:
                    continue
                try:
                    await repo.upsert_track(
                        track.id,
                        album_id=stored_album_id,
                        name=track.name,
                        length=track.duration.total_milliseconds,
                    )
                    for artist_id in dict.fromkeys(tracked):
                        await repo.add_artist_track(artist_id, track.id)
                    await session.commit()
                except SQLAlchemyError as e:
                    await session.rollback()
                    logger.error(
                        "Skipping track %s on album %s: %s", track.id, album_id, e
                    )
                    result.tracks_failed.append(track.id)
                    continue
                result.tracks_upserted += 1
                linked_artists.extend(tracked)

            if linked_artists:
                try:
                    await repo.add_artist_albums(linked_artists, stored_album_id)
                    await session.commit()
                except SQLAlchemyError as e:
                    await session.rollback()
                    logger.error(
                        "Linking artists to album %s failed: %s", album_id, e
                    )

            await self._record_streams(session, repo, union.track_details, sync_day, result)

        end_operation(
            logger,
            "album.ingest",
            start,
            op_id,
            log_level=logging.DEBUG,
            album_id=album_id,
            tracks_upserted=result.tracks_upserted,
            streams_recorded=result.streams_recorded,
            streams_not_ready=result.streams_not_ready,
        )
        return result

    async def record_streams(self, album_id: str, sync_day: SyncDay) -> IngestResult:
        """Re-fetch an album and record streams for its stored tracks only.

        Used by the completion sweep; album and track metadata are left alone.
        """
        result = IngestResult(album_id=album_id)
        union = await self._fetch(album_id, result)
        if union is None:
            return result

        async with self.session_provider() as session:
            repo = CatalogRepository(session)
            stored = await repo.existing_track_ids(t.id for t in union.track_details)
            tracks = [t for t in union.track_details if t.id in stored]
            await self._record_streams(session, repo, tracks, sync_day, result)
        return result

    async def _record_streams(
        self,
        session: AsyncSession,
        repo: CatalogRepository,
        tracks: list[AlbumTrackDetail],
        sync_day: SyncDay,
        result: IngestResult,
    ) -> None:
        oracle = ReadinessOracle(repo, self.settle_threshold, self.history_depth)
        for track in tracks:
            try:
                readiness = await oracle.check(track.id, track.playcount)
                if readiness is Readiness.NOT_READY:
                    result.streams_not_ready += 1
                if not readiness.should_record:
                    continue
                await repo.upsert_daily_streams(
                    track.id, sync_day.stream_date, track.playcount
                )
                await session.commit()
                result.streams_recorded += 1
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(
                    "Recording streams for track %s failed: %s", track.id, e
                )
