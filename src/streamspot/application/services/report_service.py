"""Report assembly for the album and artist display endpoints."""

import logging

from streamspot.domain.dtos import AlbumDisplay, ArtistDisplay, TrackRow
from streamspot.domain.exceptions import EntityNotFoundException
from streamspot.infrastructure.persistence.models import AlbumModel
from streamspot.infrastructure.persistence.repositories import CatalogRepository

logger = logging.getLogger(__name__)

# Latest value plus one full week back.
DISPLAY_HISTORY_DEPTH = 8


class ReportService:
    """Builds read-only displays from the stored time series."""

    def __init__(self, repository: CatalogRepository) -> None:
        self.repository = repository

    async def album_display(self, album_id: str) -> AlbumDisplay:
        """
        Album with latest total, day and week gains per track.

        Raises:
            EntityNotFoundException: If the album is not in the store
        """
        album = await self.repository.get_album(album_id)
        if album is None:
            raise EntityNotFoundException("Album", album_id)
        return await self._build_album(album)

    async def artist_display(self, artist_id: str) -> ArtistDisplay:
        """
        Artist with every album display it owns.

        Raises:
            EntityNotFoundException: If the artist is not in the store
        """
        artist = await self.repository.get_artist(artist_id)
        if artist is None:
            raise EntityNotFoundException("Artist", artist_id)

        followers = await self.repository.get_follower_counts(artist_id, limit=1)
        albums = await self.repository.list_albums_for_artist(artist_id)
        return ArtistDisplay(
            id=artist.id,
            name=artist.name,
            images=list(artist.images or []),
            followers=followers[0].count if followers else None,
            albums=[await self._build_album(album) for album in albums],
        )

    async def _build_album(self, album: AlbumModel) -> AlbumDisplay:
        rows: list[TrackRow] = []
        for track in await self.repository.list_tracks_for_album(album.id):
            history = await self.repository.recent_streams(
                track.id, DISPLAY_HISTORY_DEPTH
            )
            rows.append(TrackRow.from_history(track.id, track.name, history))

        return AlbumDisplay(
            id=album.id,
            name=album.name,
            date=album.updated,
            release_date=album.release_date,
            album_type=album.album_type,
            sharing_id=album.sharing_id,
            colors=album.colors,
            images=list(album.images or []),
            tracks=rows,
            total=sum(row.total or 0 for row in rows),
            difference_day=sum(row.difference_day or 0 for row in rows),
            difference_week=sum(row.difference_week or 0 for row in rows),
        )
