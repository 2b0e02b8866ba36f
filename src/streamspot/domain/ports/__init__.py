"""Port interfaces for the external sources.

Hey future me, the services depend on these ABCs, never on the httpx clients
directly. That's what lets the unit tests hand in an AsyncMock(spec=...) and
drive discovery and ingestion without any network.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from streamspot.domain.dtos import AlbumUnion, ArtistDetail, TrackUnion


class ISpotifyClient(ABC):
    """Port for the public Spotify Web API (client credentials)."""

    @abstractmethod
    async def get_several_artists(self, artist_ids: Sequence[str]) -> list[ArtistDetail]:
        """Fetch artist details, batching the ids in groups of 50.

        Raises:
            ExternalServiceError: If any batch request fails
        """

    @abstractmethod
    async def get_artist_album_ids(self, artist_id: str) -> list[str]:
        """All album, single and compilation ids of an artist (every page).

        Raises:
            ExternalServiceError: If any page request fails
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""


class IWebPlayerClient(ABC):
    """Port for the web player scraper exposing union payloads."""

    @abstractmethod
    async def get_album_union(self, album_id: str) -> AlbumUnion:
        """Album union payload with per-track play counts.

        Raises:
            ExternalServiceError: On transport errors or non-200 responses
            PayloadValidationError: If the payload is not an album union
        """

    @abstractmethod
    async def get_track_union(self, track_id: str) -> TrackUnion:
        """Track union payload (live play count of one track).

        Raises:
            ExternalServiceError: On transport errors or non-200 responses
            PayloadValidationError: If the payload is not a track union
        """

    @abstractmethod
    async def get_artist_appears_on(self, artist_id: str) -> list[str]:
        """Album ids the artist appears on (features, compilations by others).

        Raises:
            ExternalServiceError: On transport errors or non-200 responses
            PayloadValidationError: If the payload is not a list of ids
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""


__all__ = ["ISpotifyClient", "IWebPlayerClient"]
