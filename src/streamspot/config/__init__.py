"""Configuration module for StreamSpot."""

from .settings import (
    DatabaseSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
    SyncSettings,
    WebPlayerSettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "ObservabilitySettings",
    "Settings",
    "SpotifySettings",
    "SyncSettings",
    "WebPlayerSettings",
    "get_settings",
]
