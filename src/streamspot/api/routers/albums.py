"""Album display endpoint."""

from fastapi import APIRouter, Depends

from streamspot.api.dependencies import get_report_service
from streamspot.api.schemas import AlbumDisplayResponse
from streamspot.application.services import ReportService

router = APIRouter(prefix="/album", tags=["Albums"])


@router.get("/display/{album_id}", response_model=AlbumDisplayResponse)
async def album_display(
    album_id: str,
    service: ReportService = Depends(get_report_service),
) -> AlbumDisplayResponse:
    """Album with per-track totals and day/week gains."""
    display = await service.album_display(album_id)
    return AlbumDisplayResponse.model_validate(display)
