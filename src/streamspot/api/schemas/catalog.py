"""Response schemas for artists and the display endpoints."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ImageSchema(BaseModel):
    """Image descriptor as stored."""

    url: str
    height: int | None = None
    width: int | None = None


class ArtistResponse(BaseModel):
    """A tracked artist."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Spotify artist id")
    name: str = Field(..., description="Artist name")
    images: list[ImageSchema] = Field(default_factory=list)


class DeleteArtistResponse(BaseModel):
    id: str
    deleted: bool
    message: str


class TrackRowResponse(BaseModel):
    """Latest figures of one track. Gains are null until enough history exists."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    total: int | None = Field(None, description="Latest cumulative play count")
    difference_day: int | None = Field(None, description="Gain over the last day")
    difference_week: int | None = Field(None, description="Gain over the last week")


class AlbumDisplayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    date: dt.date | None = Field(None, description="Last day the album was synced")
    release_date: dt.date
    album_type: str
    sharing_id: str
    colors: dict[str, Any] | None = None
    images: list[ImageSchema] = Field(default_factory=list)
    tracks: list[TrackRowResponse] = Field(default_factory=list)
    total: int = 0
    difference_day: int = 0
    difference_week: int = 0


class ArtistDisplayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    images: list[ImageSchema] = Field(default_factory=list)
    followers: int | None = None
    albums: list[AlbumDisplayResponse] = Field(default_factory=list)
