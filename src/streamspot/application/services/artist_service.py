"""Artist administration: start and stop tracking artists."""

import logging
from collections.abc import Collection

from streamspot.domain.exceptions import BusinessRuleViolation, EntityNotFoundException
from streamspot.domain.ports import ISpotifyClient
from streamspot.domain.value_objects import SyncDay
from streamspot.infrastructure.persistence.models import ArtistModel
from streamspot.infrastructure.persistence.repositories import CatalogRepository

logger = logging.getLogger(__name__)


class ArtistService:
    """Creates and deletes tracked artists.

    Hey future me - creating an artist only stores the artist and today's
    follower count. Its albums show up with the next daily update, discovery
    walks every tracked artist anyway.
    """

    def __init__(
        self,
        repository: CatalogRepository,
        spotify_client: ISpotifyClient,
        protected_artist_ids: Collection[str] = (),
        stream_date_offset_days: int = 1,
    ) -> None:
        self.repository = repository
        self.spotify_client = spotify_client
        self.protected_artist_ids = frozenset(protected_artist_ids)
        self.stream_date_offset_days = stream_date_offset_days

    async def list_artists(self) -> list[ArtistModel]:
        return list(await self.repository.list_artists())

    async def create_artist(self, artist_id: str) -> ArtistModel:
        """Start tracking an artist.

        Raises:
            BusinessRuleViolation: If the id is protected
            EntityNotFoundException: If Spotify doesn't know the artist
            ExternalServiceError: If the Spotify request fails
        """
        if artist_id in self.protected_artist_ids:
            raise BusinessRuleViolation(f"Artist {artist_id} is protected")

        details = await self.spotify_client.get_several_artists([artist_id])
        detail = next((a for a in details if a.id == artist_id), None)
        if detail is None:
            raise EntityNotFoundException("Artist", artist_id)

        day = SyncDay.current(self.stream_date_offset_days)
        await self.repository.upsert_artist(
            detail.id, detail.name, [image.model_dump() for image in detail.images]
        )
        await self.repository.add_follower_count(
            detail.id, day.stream_date, detail.followers.total
        )
        await self.repository.session.flush()
        logger.info("Now tracking artist %s (%s)", detail.name, detail.id)

        artist = await self.repository.get_artist(detail.id)
        if artist is None:  # pragma: no cover - just upserted
            raise EntityNotFoundException("Artist", artist_id)
        await self.repository.session.refresh(artist)
        return artist

    async def delete_artist(self, artist_id: str) -> bool:
        """Stop tracking an artist and drop the albums only it owned.

        Returns:
            False if the artist wasn't tracked.

        Raises:
            BusinessRuleViolation: If the id is protected
        """
        if artist_id in self.protected_artist_ids:
            raise BusinessRuleViolation(f"Artist {artist_id} is protected")

        deleted = await self.repository.delete_artist(artist_id)
        if deleted:
            logger.info("Stopped tracking artist %s", artist_id)
        return deleted
