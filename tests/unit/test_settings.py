"""Tests for settings parsing."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from streamspot.config import DatabaseSettings, Settings, SpotifySettings, SyncSettings


class TestSqlitePath:
    def test_file_url(self) -> None:
        settings = Settings(database=DatabaseSettings(url="sqlite+aiosqlite:///./data/s.db"))
        assert settings._get_sqlite_db_path() == Path("./data/s.db")

    def test_memory_url(self) -> None:
        settings = Settings(database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"))
        assert settings._get_sqlite_db_path() is None

    def test_postgres_url(self) -> None:
        settings = Settings(
            database=DatabaseSettings(url="postgresql+asyncpg://u:p@db/streamspot")
        )
        assert settings._get_sqlite_db_path() is None


class TestSyncSettings:
    def test_defaults(self) -> None:
        sync = SyncSettings()
        assert sync.max_concurrent_albums == 50
        assert sync.discovery_max_attempts == 13
        assert sync.album_sync_max_attempts == 13
        assert sync.stream_sweep_max_attempts == 13
        assert sync.settle_threshold == 100
        assert sync.stream_date_offset_days == 1
        assert sync.status_check_max_attempts is None

    def test_status_check_attempts_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            SyncSettings(status_check_max_attempts=0)

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SYNC_SETTLE_THRESHOLD", "250")
        assert SyncSettings().settle_threshold == 250


def test_spotify_is_configured() -> None:
    assert SpotifySettings(client_id="a", client_secret="b").is_configured
    assert not SpotifySettings(client_id="a", client_secret=" ").is_configured
