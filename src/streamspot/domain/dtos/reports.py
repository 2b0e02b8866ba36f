"""Read-side DTOs for album and artist displays.

Hey future me - these are plain dataclasses on purpose, the report service
builds them straight from ORM rows and the API layer maps them onto its
pydantic response models (from_attributes). A stream figure is None when
there isn't enough history for it yet, never 0, so a new track doesn't look
like it had a dead week.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass
class TrackRow:
    """One track with its latest figures."""

    id: str
    name: str
    total: int | None = None
    difference_day: int | None = None
    difference_week: int | None = None

    @classmethod
    def from_history(cls, track_id: str, name: str, history: list[int]) -> "TrackRow":
        """Build from up to 8 stream values, most recent date first."""
        return cls(
            id=track_id,
            name=name,
            total=history[0] if history else None,
            difference_day=history[0] - history[1] if len(history) >= 2 else None,
            difference_week=history[0] - history[7] if len(history) >= 8 else None,
        )


@dataclass
class AlbumDisplay:
    """Album with per-track rows and totals summed over tracks."""

    id: str
    name: str
    date: date | None
    release_date: date
    album_type: str
    sharing_id: str
    colors: dict[str, Any] | None = None
    images: list[dict[str, Any]] = field(default_factory=list)
    tracks: list[TrackRow] = field(default_factory=list)
    total: int = 0
    difference_day: int = 0
    difference_week: int = 0


@dataclass
class ArtistDisplay:
    """Artist with its albums, newest release first."""

    id: str
    name: str
    images: list[dict[str, Any]] = field(default_factory=list)
    followers: int | None = None
    albums: list[AlbumDisplay] = field(default_factory=list)
