"""API response schemas."""

from streamspot.api.schemas.catalog import (
    AlbumDisplayResponse,
    ArtistDisplayResponse,
    ArtistResponse,
    DeleteArtistResponse,
    ImageSchema,
    TrackRowResponse,
)
from streamspot.api.schemas.updates import DailyUpdateStatusResponse, HealthResponse

__all__ = [
    "AlbumDisplayResponse",
    "ArtistDisplayResponse",
    "ArtistResponse",
    "DailyUpdateStatusResponse",
    "DeleteArtistResponse",
    "HealthResponse",
    "ImageSchema",
    "TrackRowResponse",
]
