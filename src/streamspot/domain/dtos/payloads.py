"""Payload models for the two external sources.

Hey future me - the web player scraper answers with "union" payloads: one JSON
shape per entity kind, told apart by the ``__typename`` field ("Album" or
"Track"). We decode them as a pydantic discriminated union on that field, so a
payload of the wrong kind fails validation instead of half-parsing into the
wrong model. Everything else camelCases like the web player does.

The Spotify Web API models at the bottom are the small subset we read for
artist refresh and catalog discovery.
"""

import datetime as dt
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from streamspot.domain.value_objects import id_from_uri


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class Image(_CamelModel):
    """Image descriptor as stored in ``artist.images`` / ``album.images``."""

    url: str
    height: int | None = None
    width: int | None = None


class Color(_CamelModel):
    hex: str


class ExtractedColors(_CamelModel):
    """Palette the web player extracts from cover art."""

    color_raw: Color
    color_light: Color
    color_dark: Color


class UriRef(_CamelModel):
    uri: str

    @property
    def id(self) -> str:
        return id_from_uri(self.uri)


class UriRefList(_CamelModel):
    items: list[UriRef] = Field(default_factory=list)


class CoverArt(_CamelModel):
    extracted_colors: ExtractedColors | None = None
    sources: list[Image] = Field(default_factory=list)


class DateObject(_CamelModel):
    iso_string: dt.datetime


class Duration(_CamelModel):
    total_milliseconds: int


class SharingInfo(_CamelModel):
    share_url: str | None = None
    share_id: str


class ContentRating(_CamelModel):
    label: str


class AlbumTrackDetail(_CamelModel):
    """One track as embedded in an album union."""

    uri: str
    name: str
    # The web player sends play counts as numeric strings; lax mode coerces.
    playcount: int = Field(ge=0)
    duration: Duration
    artists: UriRefList
    saved: bool = False

    @property
    def id(self) -> str:
        return id_from_uri(self.uri)

    @property
    def artist_ids(self) -> list[str]:
        return [artist.id for artist in self.artists.items]


class AlbumTrackItem(_CamelModel):
    uid: str | None = None
    track: AlbumTrackDetail


class AlbumTracks(_CamelModel):
    items: list[AlbumTrackItem] = Field(default_factory=list)


class AlbumUnion(_CamelModel):
    """Full album snapshot: metadata, cover art, sharing info and tracks."""

    typename: Literal["Album"] = Field(alias="__typename")
    uri: str
    name: str
    date: DateObject
    album_type: str = Field(alias="type")
    artists: UriRefList = Field(default_factory=UriRefList)
    cover_art: CoverArt
    sharing_info: SharingInfo
    tracks: AlbumTracks = Field(default_factory=AlbumTracks)

    @property
    def id(self) -> str:
        return id_from_uri(self.uri)

    @property
    def release_date(self) -> dt.date:
        return self.date.iso_string.date()

    @property
    def track_details(self) -> list[AlbumTrackDetail]:
        return [item.track for item in self.tracks.items]


class TrackUnion(_CamelModel):
    """Single track snapshot (used for the status gate canary)."""

    typename: Literal["Track"] = Field(alias="__typename")
    id: str
    uri: str
    name: str
    playcount: int = Field(ge=0)
    duration: Duration
    track_number: int | None = None
    content_rating: ContentRating | None = None
    sharing_info: SharingInfo | None = None


UnionPayload = Annotated[AlbumUnion | TrackUnion, Field(discriminator="typename")]

union_adapter: TypeAdapter[AlbumUnion | TrackUnion] = TypeAdapter(UnionPayload)


# --- Spotify Web API ---------------------------------------------------------


class Followers(BaseModel):
    model_config = ConfigDict(extra="ignore")

    href: str | None = None
    total: int = 0


class ArtistDetail(BaseModel):
    """Artist object from ``GET /v1/artists?ids=...``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    images: list[Image] = Field(default_factory=list)
    followers: Followers = Field(default_factory=Followers)
