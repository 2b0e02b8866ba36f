"""Application wiring and the FastAPI lifespan.

``build_components`` is the single place where Settings turn into a Database,
the two HTTP clients and the DailyUpdateService. Both the web app (lifespan)
and the CLI use it, so a daily update started from cron and one started from
the API run with exactly the same wiring.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI

from streamspot.application.services.daily_update_service import DailyUpdateService
from streamspot.application.workers.daily_update_worker import DailyUpdateWorker
from streamspot.config import Settings, get_settings
from streamspot.domain.exceptions import ConfigurationError
from streamspot.infrastructure.integrations import (
    HttpClientPool,
    SpotifyClient,
    WebPlayerClient,
)
from streamspot.infrastructure.observability import configure_logging
from streamspot.infrastructure.persistence import Database

logger = logging.getLogger(__name__)


@dataclass
class Components:
    """Long-lived objects shared by the API and the CLI."""

    settings: Settings
    db: Database
    spotify_client: SpotifyClient
    webplayer_client: WebPlayerClient
    daily_update_service: DailyUpdateService

    async def close(self) -> None:
        await self.spotify_client.close()
        await self.webplayer_client.close()
        await self.db.close()
        await HttpClientPool.close()


# Hey future me, SQLite won't create missing parent directories for its file, and the
# error it gives instead ("unable to open database file") sends you hunting in the
# wrong place. Only runs for file-backed SQLite URLs.
def _validate_sqlite_path(settings: Settings) -> None:
    db_path = settings._get_sqlite_db_path()
    if db_path is None:
        return
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{db_path.parent}': {exc}. "
            "Update DATABASE_URL or adjust directory permissions."
        ) from exc


async def build_components(settings: Settings) -> Components:
    """Create the database, clients and daily update service from settings."""
    _validate_sqlite_path(settings)

    db = Database(settings)
    if settings.database.create_tables_on_startup:
        await db.create_tables()

    spotify_client = SpotifyClient(settings.spotify)
    webplayer_client = WebPlayerClient(settings.webplayer)
    service = DailyUpdateService(
        settings.sync,
        db.session_scope,
        spotify_client,
        webplayer_client,
    )
    logger.info("Components initialized (database: %s)", db.engine.url.drivername)
    return Components(
        settings=settings,
        db=db,
        spotify_client=spotify_client,
        webplayer_client=webplayer_client,
        daily_update_service=service,
    )


# Listen future me, everything before `yield` runs at startup, everything after at
# shutdown. The finally makes sure the pool and engine get closed even if startup blew
# up halfway.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: wiring, optional scheduler, cleanup."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    components: Components | None = None
    worker: DailyUpdateWorker | None = None
    try:
        components = await build_components(settings)
        app.state.db = components.db
        app.state.spotify_client = components.spotify_client
        app.state.webplayer_client = components.webplayer_client
        app.state.daily_update_service = components.daily_update_service

        if settings.sync.auto_run_enabled:
            worker = DailyUpdateWorker(components.daily_update_service, settings.sync)
            await worker.start()
        app.state.daily_update_worker = worker

        yield
    finally:
        logger.info("Shutting down application")
        if worker is not None:
            await worker.stop()

        task = getattr(app.state, "daily_update_task", None)
        if task is not None and not task.done():
            task.cancel()
            logger.warning("Cancelled a running daily update on shutdown")

        if components is not None:
            await components.close()
            logger.info("Database and HTTP clients closed")
