"""Tests for the command line entry point."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from streamspot import __main__ as cli
from streamspot.config import Settings
from streamspot.domain.exceptions import ConfigurationError, SyncAbortedError


@pytest.fixture
def components(mocker, settings: Settings) -> MagicMock:
    mock = MagicMock()
    mock.daily_update_service.run = AsyncMock()
    mock.close = AsyncMock()
    mocker.patch.object(cli, "build_components", AsyncMock(return_value=mock))
    mocker.patch.object(cli, "get_settings", return_value=settings)
    mocker.patch.object(cli, "configure_logging")
    return mock


def test_daily_update_success(components: MagicMock) -> None:
    assert cli.main(["daily-update"]) == 0
    components.daily_update_service.run.assert_awaited_once()
    components.close.assert_awaited_once()


def test_daily_update_aborted(components: MagicMock) -> None:
    components.daily_update_service.run.side_effect = SyncAbortedError("status_gate", "down")

    assert cli.main(["daily-update"]) == 1
    components.close.assert_awaited_once()


def test_daily_update_configuration_error(components: MagicMock) -> None:
    components.daily_update_service.run.side_effect = ConfigurationError("no canary track")

    assert cli.main(["daily-update"]) == 2
    components.close.assert_awaited_once()


def test_unusable_database_path_exits_with_2(components: MagicMock, mocker) -> None:
    mocker.patch.object(
        cli,
        "build_components",
        AsyncMock(side_effect=ConfigurationError("Unable to create SQLite database directory")),
    )

    assert cli.main(["daily-update"]) == 2
    components.close.assert_not_awaited()


def test_serve_runs_uvicorn(components: MagicMock, mocker) -> None:
    run = mocker.patch.object(cli.uvicorn, "run")

    assert cli.main(["serve", "--port", "9001"]) == 0

    assert run.call_args.kwargs["port"] == 9001
    assert run.call_args.kwargs["factory"] is True


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        cli.main([])
