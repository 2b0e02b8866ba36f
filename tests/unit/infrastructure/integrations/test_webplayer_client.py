"""Tests for the web player scraper client."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from streamspot.config import Settings, WebPlayerSettings
from streamspot.domain.dtos import AlbumUnion, TrackUnion
from streamspot.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    PayloadValidationError,
)
from streamspot.infrastructure.integrations import WebPlayerClient


def _client(settings: WebPlayerSettings, handler: Callable[[httpx.Request], httpx.Response]) -> WebPlayerClient:
    return WebPlayerClient(
        settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


class TestRequestShape:
    async def test_album_request_is_get_with_json_body(
        self, settings: Settings, album_payload: Callable[..., dict[str, Any]]
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=album_payload("AL1"))

        union = await _client(settings.webplayer, handler).get_album_union("AL1")

        assert isinstance(union, AlbumUnion)
        assert seen[0].method == "GET"
        assert str(seen[0].url) == "https://scraper.test/album"
        assert json.loads(seen[0].content) == {"albumID": "AL1"}

    async def test_track_request_body(
        self, settings: Settings, track_payload: Callable[..., dict[str, Any]]
    ) -> None:
        bodies: list[Any] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=track_payload("CANARY", 77))

        union = await _client(settings.webplayer, handler).get_track_union("CANARY")

        assert isinstance(union, TrackUnion)
        assert union.playcount == 77
        assert bodies == [{"trackID": "CANARY"}]

    async def test_appears_on_returns_album_ids(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"artistID": "AR1"}
            return httpx.Response(200, json=["AL7", "AL8"])

        album_ids = await _client(settings.webplayer, handler).get_artist_appears_on("AR1")
        assert album_ids == ["AL7", "AL8"]


class TestFailures:
    async def test_non_200_is_external_service_error(self, settings: Settings) -> None:
        client = _client(settings.webplayer, lambda r: httpx.Response(500, text="oops"))
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.get_album_union("AL1")
        assert exc_info.value.status_code == 500
        assert exc_info.value.resource_id == "AL1"

    async def test_transport_error_is_external_service_error(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalServiceError):
            await _client(settings.webplayer, handler).get_track_union("T1")

    async def test_non_json_body(self, settings: Settings) -> None:
        client = _client(settings.webplayer, lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(PayloadValidationError):
            await client.get_album_union("AL1")

    async def test_wrong_union_kind(
        self, settings: Settings, track_payload: Callable[..., dict[str, Any]]
    ) -> None:
        """A track payload on the album endpoint must not half-parse."""
        client = _client(settings.webplayer, lambda r: httpx.Response(200, json=track_payload()))
        with pytest.raises(PayloadValidationError):
            await client.get_album_union("AL1")

    async def test_appears_on_wrong_shape(self, settings: Settings) -> None:
        client = _client(settings.webplayer, lambda r: httpx.Response(200, json={"items": []}))
        with pytest.raises(PayloadValidationError):
            await client.get_artist_appears_on("AR1")

    async def test_payload_errors_are_external_service_errors(self) -> None:
        """The sync loops only catch ExternalServiceError, so this hierarchy matters."""
        assert issubclass(PayloadValidationError, ExternalServiceError)

    async def test_missing_endpoint(self) -> None:
        client = WebPlayerClient(WebPlayerSettings(album_endpoint=""))
        with pytest.raises(ConfigurationError):
            await client.get_album_union("AL1")
