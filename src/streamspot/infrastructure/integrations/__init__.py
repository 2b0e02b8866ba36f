"""HTTP clients for the Spotify Web API and the web player scraper."""

from streamspot.infrastructure.integrations.http_pool import HttpClientPool
from streamspot.infrastructure.integrations.spotify_client import SpotifyClient
from streamspot.infrastructure.integrations.webplayer_client import WebPlayerClient

__all__ = ["HttpClientPool", "SpotifyClient", "WebPlayerClient"]
