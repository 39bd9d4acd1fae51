"""Tests for OAuth client-credentials token provider and bearer auth."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from backdrop.core.api.http.auth import BearerTokenAuth, ClientCredentialsTokenProvider
from backdrop.core.api.http.errors import TokenAcquisitionError
from tests.conftest import json_response, make_client

TOKEN_URL = "https://auth.example.test/token"


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _token_handler(tokens: list[dict], calls: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return json_response(200, tokens[min(len(calls), len(tokens)) - 1])

    return handler


def _provider(handler, clock: FakeClock | None = None) -> ClientCredentialsTokenProvider:
    return ClientCredentialsTokenProvider(
        make_client(handler, base_url="https://auth.example.test"),
        token_url=TOKEN_URL,
        client_id="cid",
        client_secret="secret",
        scope="openid,firefly_api",
        clock=clock or FakeClock(),
    )


class TestClientCredentialsTokenProvider:
    """Token caching and refresh."""

    @pytest.mark.asyncio
    async def test_posts_form_encoded_credentials(self) -> None:
        calls: list[httpx.Request] = []
        provider = _provider(_token_handler([{"access_token": "t1", "expires_in": 3600}], calls))

        assert await provider.get_token() == "t1"

        form = parse_qs(calls[0].content.decode())
        assert calls[0].method == "POST"
        assert calls[0].headers["content-type"] == "application/x-www-form-urlencoded"
        assert form["grant_type"] == ["client_credentials"]
        assert form["client_id"] == ["cid"]
        assert form["client_secret"] == ["secret"]
        assert form["scope"] == ["openid,firefly_api"]

    @pytest.mark.asyncio
    async def test_token_cached_until_five_minutes_before_expiry(self) -> None:
        clock = FakeClock()
        calls: list[httpx.Request] = []
        provider = _provider(
            _token_handler(
                [{"access_token": "t1", "expires_in": 3600}, {"access_token": "t2"}], calls
            ),
            clock,
        )

        assert await provider.get_token() == "t1"
        clock.now += 3600 - 300 - 1
        assert await provider.get_token() == "t1"
        assert len(calls) == 1

        clock.now += 2
        assert await provider.get_token() == "t2"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_missing_expires_in_defaults_to_a_day(self) -> None:
        clock = FakeClock()
        calls: list[httpx.Request] = []
        provider = _provider(_token_handler([{"access_token": "t1"}], calls), clock)

        await provider.get_token()
        clock.now += 86400 - 301
        await provider.get_token()
        assert len(calls) == 1
        clock.now += 2
        await provider.get_token()
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_refresh_always_fetches(self) -> None:
        calls: list[httpx.Request] = []
        provider = _provider(
            _token_handler([{"access_token": "t1"}, {"access_token": "t2"}], calls)
        )

        assert await provider.get_token() == "t1"
        assert await provider.refresh_token() == "t2"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_endpoint_failure_raises_token_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return json_response(401, {"error": "invalid_client"})

        with pytest.raises(TokenAcquisitionError) as exc_info:
            await _provider(handler).get_token()
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_response_without_token_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return json_response(200, {"token_type": "bearer"})

        with pytest.raises(TokenAcquisitionError):
            await _provider(handler).get_token()


class StaticProvider:
    def __init__(self) -> None:
        self.refreshes = 0

    async def get_token(self) -> str:
        return "stale"

    async def refresh_token(self) -> str:
        self.refreshes += 1
        return "fresh"


class TestBearerTokenAuth:
    """Bearer header application and 401 handling."""

    @pytest.mark.asyncio
    async def test_refreshes_once_on_401(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["Authorization"])
            if request.headers["Authorization"] == "Bearer stale":
                return httpx.Response(401)
            return json_response(200, {"ok": True})

        provider = StaticProvider()
        async with make_client(handler, auth=BearerTokenAuth(provider)) as client:
            resp = await client.get("/scene-assets")

        assert resp.status_code == 200
        assert seen == ["Bearer stale", "Bearer fresh"]
        assert provider.refreshes == 1
