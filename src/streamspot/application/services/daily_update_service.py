"""Daily update orchestrator.

Hey future me - this is THE pipeline. One run, four stages, strictly in order:

1. status gate    - poll the canary track until the web player has rolled
                    over to a new day's play counts
2. artist refresh - names, images and follower counts of all tracked artists
3. album sync     - discover album ids, then ingest every album not yet
                    updated today (bounded rounds, 50-wide)
4. stream sweep   - tracks still missing today's stream row get re-polled
                    until they settle or the attempt cap is hit

Stages 1-3 abort the run with SyncAbortedError when they can't do their job.
Stage 4 never fails the run: whatever is still missing gets picked up by the
next run because the store is the only state we carry.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Collection, Iterable
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from streamspot.application.services.album_discovery_service import (
    AlbumDiscoveryService,
)
from streamspot.application.services.album_ingest_service import (
    AlbumIngestService,
    IngestResult,
    SessionProvider,
)
from streamspot.application.services.readiness import ReadinessOracle
from streamspot.config.settings import SyncSettings
from streamspot.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    SyncAbortedError,
)
from streamspot.domain.ports import ISpotifyClient, IWebPlayerClient
from streamspot.domain.value_objects import Readiness, SyncDay
from streamspot.infrastructure.observability import log_operation, set_correlation_id
from streamspot.infrastructure.persistence.repositories import CatalogRepository

logger = logging.getLogger(__name__)


class DailyUpdateService:
    """Runs the daily update against the store and both external sources."""

    def __init__(
        self,
        settings: SyncSettings,
        session_provider: SessionProvider,
        spotify_client: ISpotifyClient,
        webplayer_client: IWebPlayerClient,
        discovery_service: AlbumDiscoveryService | None = None,
        ingest_service: AlbumIngestService | None = None,
    ) -> None:
        self.settings = settings
        self.session_provider = session_provider
        self.spotify_client = spotify_client
        self.webplayer_client = webplayer_client
        self.discovery_service = discovery_service or AlbumDiscoveryService(
            spotify_client,
            webplayer_client,
            max_attempts=settings.discovery_max_attempts,
        )
        self.ingest_service = ingest_service or AlbumIngestService(
            session_provider,
            webplayer_client,
            settle_threshold=settings.settle_threshold,
            history_depth=settings.history_depth,
        )
        self._run_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    async def run(self, sync_day: SyncDay | None = None) -> timedelta:
        """Run all four stages once.

        Args:
            sync_day: Day to record against; computed once from local time if
                not given, so a run crossing midnight stays on one day.

        Returns:
            Wall-clock duration of the run.

        Raises:
            SyncAbortedError: A stage could not complete (nothing after it ran)
            ConfigurationError: A required setting is missing
        """
        async with self._run_lock:
            set_correlation_id()
            day = sync_day or SyncDay.current(self.settings.stream_date_offset_days)
            started = time.monotonic()

            async with log_operation(
                logger,
                "daily_update",
                today=day.today.isoformat(),
                stream_date=day.stream_date.isoformat(),
            ):
                await self.wait_for_status_gate()
                artist_ids = await self.refresh_artists(day)
                await self.sync_albums(artist_ids, day)
                await self.sweep_streams(day)

            return timedelta(seconds=time.monotonic() - started)

    # --- stage 1 -------------------------------------------------------------

    async def wait_for_status_gate(self) -> Readiness:
        """Block until the canary track's play count has rolled over.

        The live count is re-fetched every round. A canary the store doesn't
        know (UNKNOWN_TRACK) lets the run through.
        """
        track_id = self.settings.status_check_track_id
        if not track_id:
            raise ConfigurationError("SYNC_STATUS_CHECK_TRACK_ID must be set")

        max_attempts = self.settings.status_check_max_attempts
        attempt = 0
        while True:
            try:
                union = await self.webplayer_client.get_track_union(track_id)
            except ExternalServiceError as e:
                raise SyncAbortedError("status_gate", e.message) from e

            async with self.session_provider() as session:
                oracle = ReadinessOracle(
                    CatalogRepository(session),
                    settle_threshold=self.settings.settle_threshold,
                    history_depth=self.settings.history_depth,
                )
                readiness = await oracle.check(track_id, union.playcount)
            attempt += 1

            if readiness is not Readiness.NOT_READY:
                logger.info(
                    "Status gate passed (%s, track %s at %d plays)",
                    readiness.value,
                    union.name,
                    union.playcount,
                )
                return readiness

            if max_attempts is not None and attempt >= max_attempts:
                raise SyncAbortedError(
                    "status_gate",
                    f"source did not roll over after {attempt} checks",
                )
            logger.info(
                "Not ready for update (%s at %d plays), waiting %.0fs",
                union.name,
                union.playcount,
                self.settings.status_check_interval_seconds,
            )
            await asyncio.sleep(self.settings.status_check_interval_seconds)

    # --- stage 2 -------------------------------------------------------------

    async def refresh_artists(self, sync_day: SyncDay) -> set[str]:
        """Refresh every tracked artist and record today's follower count.

        Returns:
            The tracked artist ids (input for album sync).
        """
        async with self.session_provider() as session:
            artist_ids = await CatalogRepository(session).list_artist_ids()

        try:
            artists = await self.spotify_client.get_several_artists(sorted(artist_ids))
        except ExternalServiceError as e:
            raise SyncAbortedError("artist_refresh", e.message) from e
        if not artists:
            raise SyncAbortedError("artist_refresh", "no artist details returned")

        try:
            async with self.session_provider() as session:
                repo = CatalogRepository(session)
                for artist in artists:
                    await repo.upsert_artist(
                        artist.id,
                        artist.name,
                        [image.model_dump() for image in artist.images],
                    )
                    await repo.add_follower_count(
                        artist.id, sync_day.stream_date, artist.followers.total
                    )
        except SQLAlchemyError as e:
            raise SyncAbortedError("artist_refresh", f"store write failed: {e}") from e

        logger.info("Refreshed %d artists", len(artists))
        return artist_ids

    # --- stage 3 -------------------------------------------------------------

    async def sync_albums(self, artist_ids: Collection[str], sync_day: SyncDay) -> None:
        """Discover and ingest albums until all are updated today or the cap is hit."""
        album_ids = await self.discovery_service.discover(artist_ids)
        if album_ids is None:
            raise SyncAbortedError("album_sync", "album discovery returned nothing")

        max_attempts = self.settings.album_sync_max_attempts
        for attempt in range(1, max_attempts + 1):
            async with self.session_provider() as session:
                pending = await CatalogRepository(session).albums_pending_update(
                    album_ids, sync_day.today
                )
            if not pending:
                logger.info("All %d albums updated", len(album_ids))
                return

            logger.info(
                "Album sync round %d/%d: %d of %d albums pending",
                attempt,
                max_attempts,
                len(pending),
                len(album_ids),
            )
            await self._fan_out(
                pending,
                lambda album_id: self.ingest_service.ingest(
                    album_id, artist_ids, sync_day
                ),
            )

        async with self.session_provider() as session:
            pending = await CatalogRepository(session).albums_pending_update(
                album_ids, sync_day.today
            )
        if pending:
            logger.warning(
                "Album sync stopped after %d rounds with %d albums not updated",
                max_attempts,
                len(pending),
            )

    # --- stage 4 -------------------------------------------------------------

    async def sweep_streams(self, sync_day: SyncDay) -> bool:
        """Re-poll albums whose tracks still lack a stream row for the day.

        Returns:
            True if every track got its row, False if the attempt cap was hit.
        """
        max_attempts = self.settings.stream_sweep_max_attempts
        pending = await self._albums_missing_streams(sync_day)
        attempt = 0
        while pending:
            if max_attempts and attempt >= max_attempts:
                logger.warning(
                    "Stream sweep stopped after %d rounds, %d albums still missing "
                    "streams for %s",
                    attempt,
                    len(pending),
                    sync_day.stream_date.isoformat(),
                )
                return False
            attempt += 1

            await self._fan_out(
                pending,
                lambda album_id: self.ingest_service.record_streams(album_id, sync_day),
            )
            pending = await self._albums_missing_streams(sync_day)
            if pending and not (max_attempts and attempt >= max_attempts):
                logger.info(
                    "Tracks not ready on %d albums, waiting %.0fs",
                    len(pending),
                    self.settings.stream_sweep_interval_seconds,
                )
                await asyncio.sleep(self.settings.stream_sweep_interval_seconds)

        logger.info("All tracks have streams for %s", sync_day.stream_date.isoformat())
        return True

    async def _albums_missing_streams(self, sync_day: SyncDay) -> set[str]:
        async with self.session_provider() as session:
            return await CatalogRepository(session).albums_with_missing_streams(
                sync_day.stream_date
            )

    # Hey future me - the semaphore is the ONLY thing bounding album concurrency (and
    # with it, DB sessions and scraper requests in flight). return_exceptions keeps one
    # crashing album task from cancelling its siblings.
    async def _fan_out(
        self,
        album_ids: Iterable[str],
        task: Callable[[str], Awaitable[IngestResult]],
    ) -> list[IngestResult]:
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_albums)

        async def bounded(album_id: str) -> IngestResult:
            async with semaphore:
                return await task(album_id)

        ordered = list(album_ids)
        outcomes = await asyncio.gather(
            *(bounded(album_id) for album_id in ordered), return_exceptions=True
        )

        results: list[IngestResult] = []
        for album_id, outcome in zip(ordered, outcomes, strict=True):
            if isinstance(outcome, ConfigurationError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error(
                    "Album task %s crashed: %s", album_id, outcome, exc_info=outcome
                )
                continue
            results.append(outcome)

        failed = sum(1 for r in results if not r.success)
        logger.info(
            "Processed %d albums (%d failed, %d crashed)",
            len(ordered),
            failed,
            len(ordered) - len(results),
        )
        return results
