"""Fixtures for API tests: the real app, lifespan included, on an in-memory store."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI

from streamspot.api.dependencies import get_spotify_client
from streamspot.config import Settings
from streamspot.domain.dtos import ArtistDetail
from streamspot.domain.ports import ISpotifyClient
from streamspot.main import create_app


@pytest.fixture
def protected_artist_id() -> str:
    return "0du5cEVh5yTK9QJze8zA0C"


@pytest.fixture
def spotify_mock() -> AsyncMock:
    client = AsyncMock(spec=ISpotifyClient)
    client.get_several_artists.side_effect = lambda ids: [
        ArtistDetail.model_validate(
            {"id": i, "name": f"Artist {i}", "images": [], "followers": {"total": 7}}
        )
        for i in ids
    ]
    return client


# Hey future me - the lifespan runs for real (Database, create_tables, clients), only the
# Spotify client is swapped via dependency_overrides. ASGITransport doesn't run lifespan
# events on its own, hence the explicit lifespan_context.
@pytest.fixture
async def app(
    settings: Settings, spotify_mock: AsyncMock, protected_artist_id: str
) -> AsyncGenerator[FastAPI, None]:
    settings.sync.protected_artist_ids = [protected_artist_id]
    application = create_app(settings)
    application.dependency_overrides[get_spotify_client] = lambda: spotify_mock
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client
