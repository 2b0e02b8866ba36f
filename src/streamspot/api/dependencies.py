"""FastAPI dependencies.

Hey future me - everything long-lived (Database, clients, the daily update
service) is built once in lifecycle.py and parked on app.state. These
dependencies only hand it out; request-scoped things (session, repository,
services around the session) are built per request.
"""

from collections.abc import AsyncGenerator
from typing import cast

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from streamspot.application.services import (
    ArtistService,
    DailyUpdateService,
    ReportService,
)
from streamspot.application.workers import DailyUpdateWorker
from streamspot.config import Settings
from streamspot.domain.ports import ISpotifyClient
from streamspot.infrastructure.persistence import CatalogRepository, Database


def get_settings(request: Request) -> Settings:
    return cast(Settings, request.app.state.settings)


def get_database(request: Request) -> Database:
    if not hasattr(request.app.state, "db"):
        raise HTTPException(status_code=503, detail="Database not initialized")
    return cast(Database, request.app.state.db)


# Uses session_scope() (commit on success, rollback on error) rather than the
# bare generator so the connection is always checked back in.
async def get_db_session(
    db: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    async with db.session_scope() as session:
        yield session


def get_catalog_repository(
    session: AsyncSession = Depends(get_db_session),
) -> CatalogRepository:
    return CatalogRepository(session)


def get_spotify_client(request: Request) -> ISpotifyClient:
    return cast(ISpotifyClient, request.app.state.spotify_client)


def get_artist_service(
    repository: CatalogRepository = Depends(get_catalog_repository),
    spotify_client: ISpotifyClient = Depends(get_spotify_client),
    settings: Settings = Depends(get_settings),
) -> ArtistService:
    return ArtistService(
        repository,
        spotify_client,
        protected_artist_ids=settings.sync.protected_artist_ids,
        stream_date_offset_days=settings.sync.stream_date_offset_days,
    )


def get_report_service(
    repository: CatalogRepository = Depends(get_catalog_repository),
) -> ReportService:
    return ReportService(repository)


def get_daily_update_service(request: Request) -> DailyUpdateService:
    return cast(DailyUpdateService, request.app.state.daily_update_service)


def get_daily_update_worker(request: Request) -> DailyUpdateWorker | None:
    return cast(
        DailyUpdateWorker | None, getattr(request.app.state, "daily_update_worker", None)
    )
