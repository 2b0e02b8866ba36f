"""Artist endpoints: list, start/stop tracking, artist display."""

import logging

from fastapi import APIRouter, Depends

from streamspot.api.dependencies import get_artist_service, get_report_service
from streamspot.api.schemas import (
    ArtistDisplayResponse,
    ArtistResponse,
    DeleteArtistResponse,
)
from streamspot.application.services import ArtistService, ReportService
from streamspot.domain.exceptions import EntityNotFoundException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/artists", tags=["Artists"])


@router.get("", response_model=list[ArtistResponse])
async def list_artists(
    service: ArtistService = Depends(get_artist_service),
) -> list[ArtistResponse]:
    """All tracked artists, by name."""
    artists = await service.list_artists()
    return [ArtistResponse.model_validate(artist) for artist in artists]


# POST with the id in the path, no body, so the admin tooling can call it with a bare curl.
@router.post("/create/{artist_id}", response_model=ArtistResponse)
async def create_artist(
    artist_id: str,
    service: ArtistService = Depends(get_artist_service),
) -> ArtistResponse:
    """Start tracking an artist; its albums arrive with the next daily update."""
    artist = await service.create_artist(artist_id)
    return ArtistResponse.model_validate(artist)


@router.post("/delete/{artist_id}", response_model=DeleteArtistResponse)
async def delete_artist(
    artist_id: str,
    service: ArtistService = Depends(get_artist_service),
) -> DeleteArtistResponse:
    """Stop tracking an artist and drop the albums nobody else owns."""
    if not await service.delete_artist(artist_id):
        raise EntityNotFoundException("Artist", artist_id)
    return DeleteArtistResponse(
        id=artist_id, deleted=True, message=f"Artist {artist_id} deleted"
    )


@router.get("/display/{artist_id}", response_model=ArtistDisplayResponse)
async def artist_display(
    artist_id: str,
    service: ReportService = Depends(get_report_service),
) -> ArtistDisplayResponse:
    display = await service.artist_display(artist_id)
    return ArtistDisplayResponse.model_validate(display)
