"""StreamSpot - daily play-count tracking for Spotify artists."""

__version__ = "0.1.0"
