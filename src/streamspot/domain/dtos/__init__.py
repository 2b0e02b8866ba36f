"""Payload and report DTOs shared between integrations, services and the API."""

from streamspot.domain.dtos.payloads import (
    AlbumTrackDetail,
    AlbumUnion,
    ArtistDetail,
    ExtractedColors,
    Image,
    TrackUnion,
    union_adapter,
)
from streamspot.domain.dtos.reports import AlbumDisplay, ArtistDisplay, TrackRow

__all__ = [
    "AlbumDisplay",
    "AlbumTrackDetail",
    "AlbumUnion",
    "ArtistDetail",
    "ArtistDisplay",
    "ExtractedColors",
    "Image",
    "TrackRow",
    "TrackUnion",
    "union_adapter",
]
