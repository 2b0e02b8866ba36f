"""SQLAlchemy ORM models for StreamSpot."""

import datetime as dt
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Listen up, every entity is keyed by the bare Spotify id (what id_from_uri returns), not by
# a surrogate UUID. That's what makes every write an idempotent upsert: the payload already
# carries the primary key. Artists are the root of ownership - albums and tracks only exist
# because a tracked artist led us to them.
class ArtistModel(Base):
    """A tracked artist."""

    __tablename__ = "artist"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Ordered list of {"url", "height", "width"} dicts, largest first as Spotify sends them.
    images: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    albums: Mapped[list["AlbumModel"]] = relationship(
        "AlbumModel", secondary="artist_albums", back_populates="artists"
    )
    follower_instances: Mapped[list["FollowerInstanceModel"]] = relationship(
        "FollowerInstanceModel", cascade="all, delete-orphan", passive_deletes=True
    )


class AlbumModel(Base):
    """An album discovered through a tracked artist."""

    __tablename__ = "album"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(512), nullable=False)
    release_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    # 'ALBUM', 'SINGLE', 'COMPILATION', 'EP' as the web player reports them
    album_type: Mapped[str] = mapped_column(String(32), nullable=False)
    images: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    # {"colorRaw": {"hex": ...}, "colorLight": {...}, "colorDark": {...}}
    colors: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    display: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True, server_default=sa.true()
    )
    # Hey future me - `updated` is THE resume marker for the album sync loop!
    # It equals the run's SyncDay.today iff the album was ingested by that run.
    updated: Mapped[dt.date | None] = mapped_column(sa.Date, nullable=True, index=True)
    sharing_id: Mapped[str] = mapped_column(String(128), nullable=False)

    artists: Mapped[list["ArtistModel"]] = relationship(
        "ArtistModel", secondary="artist_albums", back_populates="albums"
    )
    tracks: Mapped[list["TrackModel"]] = relationship(
        "TrackModel",
        back_populates="album",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TrackModel(Base):
    """A track on an album with at least one tracked artist."""

    __tablename__ = "track"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    album_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("album.id", ondelete="CASCADE", onupdate="NO ACTION"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(512), nullable=False)
    # Duration in milliseconds
    length: Mapped[int] = mapped_column(Integer, nullable=False)

    album: Mapped["AlbumModel"] = relationship("AlbumModel", back_populates="tracks")
    daily_streams: Mapped[list["DailyStreamsModel"]] = relationship(
        "DailyStreamsModel",
        back_populates="track",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(DailyStreamsModel.date)",
    )


class DailyStreamsModel(Base):
    """Cumulative play count of a track, one row per (track, date)."""

    __tablename__ = "daily_streams"

    track_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("track.id", ondelete="CASCADE", onupdate="CASCADE"),
        primary_key=True,
    )
    date: Mapped[dt.date] = mapped_column(sa.Date, primary_key=True)
    # Wall-clock time the value was captured
    time: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now
    )
    streams: Mapped[int] = mapped_column(BigInteger, nullable=False)

    track: Mapped["TrackModel"] = relationship(
        "TrackModel", back_populates="daily_streams"
    )


class FollowerInstanceModel(Base):
    """Follower count of an artist, one row per (artist, date)."""

    __tablename__ = "follower_instance"

    artist_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("artist.id", ondelete="CASCADE", onupdate="CASCADE"),
        primary_key=True,
    )
    date: Mapped[dt.date] = mapped_column(sa.Date, primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False)


# Junctions carry nothing but the pair; rows are immutable facts (insert-if-absent).
class ArtistAlbumModel(Base):
    """Artist <-> album association."""

    __tablename__ = "artist_albums"

    artist_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("artist.id", ondelete="CASCADE"), primary_key=True
    )
    album_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("album.id", ondelete="CASCADE"), primary_key=True
    )


class ArtistTrackModel(Base):
    """Artist <-> track association."""

    __tablename__ = "artist_tracks"

    artist_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("artist.id", ondelete="CASCADE"), primary_key=True
    )
    track_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("track.id", ondelete="CASCADE"), primary_key=True
    )
