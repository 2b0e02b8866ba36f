"""FastAPI application factory."""

from fastapi import FastAPI

from streamspot import __version__
from streamspot.api.exception_handlers import register_exception_handlers
from streamspot.api.routers import api_router
from streamspot.config import Settings
from streamspot.infrastructure.lifecycle import lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the app. Pass settings to override the environment (tests)."""
    app = FastAPI(
        title="StreamSpot",
        description="Daily play count and follower tracking for Spotify artists",
        version=__version__,
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings

    register_exception_handlers(app)
    app.include_router(api_router)
    return app
