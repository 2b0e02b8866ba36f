"""Spotify Web API client (client credentials flow)."""

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from streamspot.config.settings import SpotifySettings
from streamspot.domain.dtos import ArtistDetail
from streamspot.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    PayloadValidationError,
)
from streamspot.domain.ports import ISpotifyClient
from streamspot.domain.value_objects import id_from_uri
from streamspot.infrastructure.integrations.http_pool import HttpClientPool
from streamspot.infrastructure.rate_limiter import RateLimiter, get_spotify_limiter

logger = logging.getLogger(__name__)

# /v1/artists accepts at most this many ids per call.
ARTISTS_BATCH_SIZE = 50
ALBUM_GROUPS = ("album", "single", "compilation")
ALBUMS_PAGE_SIZE = 50


class SpotifyClient(ISpotifyClient):
    """HTTP client for the public Spotify Web API.

    No user is involved: we only read public artist and catalog data, so an
    app token from the client credentials grant is enough. The token is cached
    until shortly before it expires.
    """

    def __init__(
        self,
        settings: SpotifySettings,
        client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            client: Optional pre-built HTTP client (tests); defaults to the shared pool
            rate_limiter: Optional limiter; defaults to the process-wide Spotify limiter
        """
        self.settings = settings
        self._client = client
        self._owns_client = False
        self._rate_limiter = rate_limiter or get_spotify_limiter()
        self._access_token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await HttpClientPool.get_client()
        return self._client

    async def close(self) -> None:
        # The pooled client is closed by HttpClientPool.close() at shutdown.
        self._client = None
        self._access_token = None

    # Hey future me, the token request is guarded by a lock because discovery starts
    # dozens of catalog queries at once and we want ONE token request, not dozens.
    async def _get_access_token(self) -> str:
        """Return a valid app access token, fetching a new one when needed."""
        if not self.settings.is_configured:
            raise ConfigurationError(
                "SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET must be set"
            )

        async with self._token_lock:
            if self._access_token and time.monotonic() < self._token_expires_at:
                return self._access_token

            client = await self._get_client()
            try:
                response = await client.post(
                    self.settings.token_url,
                    data={"grant_type": "client_credentials"},
                    auth=(self.settings.client_id, self.settings.client_secret),
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            except httpx.HTTPError as e:
                raise ExternalServiceError(
                    f"Spotify token request failed: {e}", service="spotify"
                ) from e

            if response.status_code != 200:
                raise ExternalServiceError(
                    f"Spotify token request returned {response.status_code}",
                    service="spotify",
                    status_code=response.status_code,
                )

            payload = response.json()
            token = payload.get("access_token")
            if not token:
                raise PayloadValidationError(
                    "Spotify token response has no access_token", service="spotify"
                )
            # Refresh a minute early so a long page walk never runs on a dead token.
            expires_in = int(payload.get("expires_in", 3600))
            self._access_token = token
            self._token_expires_at = time.monotonic() + max(expires_in - 60, 0)
            return token

    # All API calls go through here: token bucket before each request, Retry-After
    # honored on 429, at most max_retries retries. Anything else non-200 is an error
    # for the caller, the engine's loops decide whether to try again.
    async def _api_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        max_retries: int = 3,
        resource_id: str | None = None,
    ) -> dict[str, Any]:
        """Make a rate-limited API request and return the decoded JSON body.

        Raises:
            ExternalServiceError: On transport errors, non-200 responses or
                429s beyond ``max_retries``
        """
        token = await self._get_access_token()
        client = await self._get_client()
        headers = {"Authorization": f"Bearer {token}"}

        for attempt in range(max_retries + 1):
            try:
                async with self._rate_limiter:
                    response = await client.request(
                        method, url, params=params, headers=headers
                    )
            except httpx.HTTPError as e:
                raise ExternalServiceError(
                    f"Spotify request failed: {e}",
                    service="spotify",
                    resource_id=resource_id,
                ) from e

            if response.status_code == 429:
                retry_after_str = response.headers.get("Retry-After")
                retry_after = int(retry_after_str) if retry_after_str else None
                if attempt >= max_retries:
                    raise ExternalServiceError(
                        f"Spotify API rate limited (429) after {max_retries} retries. "
                        f"Retry-After: {retry_after or 'not provided'} seconds.",
                        service="spotify",
                        resource_id=resource_id,
                        status_code=429,
                    )
                await self._rate_limiter.handle_rate_limit_response(retry_after)
                continue

            if response.status_code != 200:
                raise ExternalServiceError(
                    f"Spotify {method} {response.request.url.path} returned "
                    f"{response.status_code}",
                    service="spotify",
                    resource_id=resource_id,
                    status_code=response.status_code,
                )

            try:
                body = response.json()
            except ValueError as e:
                raise PayloadValidationError(
                    "Spotify returned a non-JSON body",
                    service="spotify",
                    resource_id=resource_id,
                ) from e
            if not isinstance(body, dict):
                raise PayloadValidationError(
                    "Spotify returned an unexpected JSON shape",
                    service="spotify",
                    resource_id=resource_id,
                )
            return body

        raise RuntimeError("Unexpected state in Spotify request loop")

    async def get_several_artists(self, artist_ids: Sequence[str]) -> list[ArtistDetail]:
        """
        Get details for any number of artists, 50 ids per request.

        Unknown or deleted ids come back as null and are dropped.

        Raises:
            ExternalServiceError: If any batch fails (no partial result)
        """
        ids = list(dict.fromkeys(artist_ids))
        artists: list[ArtistDetail] = []
        for start in range(0, len(ids), ARTISTS_BATCH_SIZE):
            batch = ids[start : start + ARTISTS_BATCH_SIZE]
            body = await self._api_request(
                "GET",
                f"{self.settings.api_base_url}/artists",
                params={"ids": ",".join(batch)},
            )
            try:
                artists.extend(
                    ArtistDetail.model_validate(item)
                    for item in body.get("artists", [])
                    if item is not None
                )
            except ValidationError as e:
                raise PayloadValidationError(
                    f"Invalid artist payload: {e.error_count()} errors", service="spotify"
                ) from e
        return artists

    # Listen future me, prolific artists have hundreds of releases, so every group is
    # walked page by page over `next` until Spotify says there is no next page.
    # `appears_on` is deliberately NOT requested here, the web player scraper covers it.
    async def get_artist_album_ids(self, artist_id: str) -> list[str]:
        """
        Get the ids of all albums, singles and compilations of an artist.

        Raises:
            ExternalServiceError: If any page fails; the artist gets retried as a whole
        """
        album_ids: list[str] = []
        for group in ALBUM_GROUPS:
            url: str | None = f"{self.settings.api_base_url}/artists/{artist_id}/albums"
            params: dict[str, Any] | None = {
                "include_groups": group,
                "offset": 0,
                "limit": ALBUMS_PAGE_SIZE,
                "locale": self.settings.locale,
            }
            while url:
                body = await self._api_request(
                    "GET", url, params=params, resource_id=artist_id
                )
                try:
                    album_ids.extend(id_from_uri(item["uri"]) for item in body["items"])
                except (KeyError, TypeError, ValueError) as e:
                    raise PayloadValidationError(
                        f"Invalid album page for artist {artist_id}",
                        service="spotify",
                        resource_id=artist_id,
                    ) from e
                url = body.get("next")
                # `next` already carries the query string
                params = None
        return album_ids
