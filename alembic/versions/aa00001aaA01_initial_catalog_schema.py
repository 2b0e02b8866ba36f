"""initial catalog schema

Revision ID: aa00001aaA01
Revises:
Create Date: 2026-10-19 09:00:00.000000

Hey future me - this is the whole catalog in one go:

    artist ──< artist_albums >── album ──< track ──< daily_streams
       │                                    │
       ├──< follower_instance               └──< artist_tracks >── artist

Every key is the bare Spotify id. Deleting an album takes its tracks and
their stream history with it (ON DELETE CASCADE), deleting an artist takes
its follower history and junction rows. Orphan albums are removed by the
application, not by the schema.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "aa00001aaA01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create all catalog tables."""
    op.create_table(
        "artist",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
    )

    op.create_table(
        "album",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(512), nullable=False),
        sa.Column("release_date", sa.Date(), nullable=False),
        sa.Column("album_type", sa.String(32), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("colors", sa.JSON(), nullable=True),
        sa.Column(
            "display", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("updated", sa.Date(), nullable=True),
        sa.Column("sharing_id", sa.String(128), nullable=False),
    )
    op.create_index("ix_album_updated", "album", ["updated"])

    op.create_table(
        "track",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "album_id",
            sa.String(64),
            sa.ForeignKey("album.id", ondelete="CASCADE", onupdate="NO ACTION"),
            nullable=False,
        ),
        sa.Column("name", sa.String(512), nullable=False),
        sa.Column("length", sa.Integer(), nullable=False),
    )
    op.create_index("ix_track_album_id", "track", ["album_id"])

    op.create_table(
        "daily_streams",
        sa.Column(
            "track_id",
            sa.String(64),
            sa.ForeignKey("track.id", ondelete="CASCADE", onupdate="CASCADE"),
            primary_key=True,
        ),
        sa.Column("date", sa.Date(), primary_key=True),
        sa.Column("time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("streams", sa.BigInteger(), nullable=False),
    )

    op.create_table(
        "follower_instance",
        sa.Column(
            "artist_id",
            sa.String(64),
            sa.ForeignKey("artist.id", ondelete="CASCADE", onupdate="CASCADE"),
            primary_key=True,
        ),
        sa.Column("date", sa.Date(), primary_key=True),
        sa.Column("count", sa.Integer(), nullable=False),
    )

    op.create_table(
        "artist_albums",
        sa.Column(
            "artist_id",
            sa.String(64),
            sa.ForeignKey("artist.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "album_id",
            sa.String(64),
            sa.ForeignKey("album.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "artist_tracks",
        sa.Column(
            "artist_id",
            sa.String(64),
            sa.ForeignKey("artist.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "track_id",
            sa.String(64),
            sa.ForeignKey("track.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )


def downgrade() -> None:
    """Drop all catalog tables (children first)."""
    op.drop_table("artist_tracks")
    op.drop_table("artist_albums")
    op.drop_table("follower_instance")
    op.drop_table("daily_streams")
    op.drop_index("ix_track_album_id", table_name="track")
    op.drop_table("track")
    op.drop_index("ix_album_updated", table_name="album")
    op.drop_table("album")
    op.drop_table("artist")
