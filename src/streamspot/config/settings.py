"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_", env_file=".env", extra="ignore"
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./streamspot.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    # Production schemas are managed by Alembic; this covers fresh dev databases.
    create_tables_on_startup: bool = True
    pool_pre_ping: bool = True
    # Pool options only apply to PostgreSQL. The ingest fan-out opens one
    # session per album task, so the pool should cover the concurrency cap.
    pool_size: int = 20
    max_overflow: int = 40
    pool_timeout: int = 30
    pool_recycle: int = 3600


class SpotifySettings(BaseSettings):
    """Spotify Web API credentials (client credentials flow)."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_", env_file=".env", extra="ignore"
    )

    client_id: str = ""
    client_secret: str = ""
    api_base_url: str = "https://api.spotify.com/v1"
    token_url: str = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    locale: str = "en-US,en;q=0.9"

    @property
    def is_configured(self) -> bool:
        """Check whether both client credentials are present."""
        return bool(self.client_id.strip() and self.client_secret.strip())


class WebPlayerSettings(BaseSettings):
    """Endpoints of the web player scraper that exposes play counts."""

    model_config = SettingsConfigDict(
        env_prefix="WEBPLAYER_", env_file=".env", extra="ignore"
    )

    album_endpoint: str = ""
    track_endpoint: str = ""
    artist_endpoint: str = ""
    timeout: float = 60.0


class SyncSettings(BaseSettings):
    """Tuning knobs for the daily update."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_", env_file=".env", extra="ignore"
    )

    # Canary track whose play count decides whether the source has rolled over.
    status_check_track_id: str = ""
    status_check_interval_seconds: float = 900.0
    # None keeps polling until the source rolls over.
    status_check_max_attempts: int | None = None

    max_concurrent_albums: int = Field(default=50, ge=1)
    discovery_max_attempts: int = Field(default=13, ge=1)
    album_sync_max_attempts: int = Field(default=13, ge=1)

    stream_sweep_interval_seconds: float = 900.0
    # 0 means unbounded.
    stream_sweep_max_attempts: int = Field(default=13, ge=0)

    settle_threshold: int = 100
    history_depth: int = Field(default=3, ge=2)
    # Stream and follower rows are keyed by the day the counts describe.
    stream_date_offset_days: int = Field(default=1, ge=0)

    # Artists that can never be created or deleted through the admin surface.
    protected_artist_ids: list[str] = Field(default_factory=list)

    # In-process scheduler; off by default, an external cron is expected.
    auto_run_enabled: bool = False
    auto_run_hour: int = Field(default=0, ge=0, le=23)

    @field_validator("status_check_max_attempts")
    @classmethod
    def _positive_or_none(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("status_check_max_attempts must be >= 1 or unset")
        return value


class ObservabilitySettings(BaseSettings):
    """Logging output settings."""

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    log_json_format: bool = False


class Settings(BaseSettings):
    """Root settings object, built once at process start."""

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    app_name: str = "streamspot"
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"  # nosec B104 - container deployment
    api_port: int = 8000

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    webplayer: WebPlayerSettings = Field(default_factory=WebPlayerSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    observability: ObservabilitySettings = Field(
        default_factory=ObservabilitySettings
    )

    def _get_sqlite_db_path(self) -> Path | None:
        """Return the on-disk SQLite file path, or None for other backends."""
        url = self.database.url
        if not url.startswith("sqlite"):
            return None
        _, _, path = url.partition(":///")
        if not path or path.startswith(":memory:"):
            return None
        return Path(path)


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
