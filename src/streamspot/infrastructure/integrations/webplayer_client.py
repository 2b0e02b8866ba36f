"""Client for the web player scraper that serves union payloads.

Hey future me - the scraper is our own small endpoint in front of the Spotify
web player. Each entity kind has its own URL and takes the id in a JSON body
(``{"albumID": ...}``, ``{"trackID": ...}``, ``{"artistID": ...}``), sent with
GET like the deployed endpoint expects. Responses for albums and tracks are
union payloads discriminated by ``__typename``; appears-on is a bare JSON list
of album ids. Anything that is not a 200 with the right shape becomes an
ExternalServiceError, the sync loops treat that as "try this id again later".
"""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from streamspot.config.settings import WebPlayerSettings
from streamspot.domain.dtos import AlbumUnion, TrackUnion, union_adapter
from streamspot.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    PayloadValidationError,
)
from streamspot.domain.ports import IWebPlayerClient
from streamspot.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

_album_ids_adapter: TypeAdapter[list[str]] = TypeAdapter(list[str])


class WebPlayerClient(IWebPlayerClient):
    """HTTP client for the scraper endpoints."""

    SERVICE = "webplayer"

    def __init__(
        self, settings: WebPlayerSettings, client: httpx.AsyncClient | None = None
    ) -> None:
        self.settings = settings
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await HttpClientPool.get_client(timeout=self.settings.timeout)
        return self._client

    async def close(self) -> None:
        self._client = None

    async def _fetch(self, endpoint: str, key: str, resource_id: str) -> Any:
        """Send ``{key: resource_id}`` to the endpoint and return decoded JSON."""
        if not endpoint:
            raise ConfigurationError(
                f"No web player endpoint configured for {key} requests"
            )
        client = await self._get_client()
        try:
            response = await client.request(
                "GET",
                endpoint,
                json={key: resource_id},
                timeout=self.settings.timeout,
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                f"Web player request failed for {resource_id}: {e}",
                service=self.SERVICE,
                resource_id=resource_id,
            ) from e

        if response.status_code != 200:
            raise ExternalServiceError(
                f"Web player returned {response.status_code} for {resource_id}",
                service=self.SERVICE,
                resource_id=resource_id,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise PayloadValidationError(
                f"Web player returned a non-JSON body for {resource_id}",
                service=self.SERVICE,
                resource_id=resource_id,
            ) from e

    def _decode_union(self, data: Any, resource_id: str) -> AlbumUnion | TrackUnion:
        try:
            return union_adapter.validate_python(data)
        except ValidationError as e:
            raise PayloadValidationError(
                f"Invalid union payload for {resource_id}: {e.error_count()} errors",
                service=self.SERVICE,
                resource_id=resource_id,
            ) from e

    async def get_album_union(self, album_id: str) -> AlbumUnion:
        data = await self._fetch(self.settings.album_endpoint, "albumID", album_id)
        union = self._decode_union(data, album_id)
        if not isinstance(union, AlbumUnion):
            raise PayloadValidationError(
                f"Expected an album union for {album_id}, got {union.typename}",
                service=self.SERVICE,
                resource_id=album_id,
            )
        return union

    async def get_track_union(self, track_id: str) -> TrackUnion:
        data = await self._fetch(self.settings.track_endpoint, "trackID", track_id)
        union = self._decode_union(data, track_id)
        if not isinstance(union, TrackUnion):
            raise PayloadValidationError(
                f"Expected a track union for {track_id}, got {union.typename}",
                service=self.SERVICE,
                resource_id=track_id,
            )
        return union

    async def get_artist_appears_on(self, artist_id: str) -> list[str]:
        data = await self._fetch(self.settings.artist_endpoint, "artistID", artist_id)
        try:
            return _album_ids_adapter.validate_python(data)
        except ValidationError as e:
            raise PayloadValidationError(
                f"Invalid appears-on payload for {artist_id}",
                service=self.SERVICE,
                resource_id=artist_id,
            ) from e
