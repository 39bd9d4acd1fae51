"""Tests for the direct generation provider."""

from __future__ import annotations

import json

import httpx
import pytest

from backdrop.core.api.http.auth import BearerTokenAuth
from backdrop.core.api.http.errors import TokenAcquisitionError
from backdrop.core.providers.direct import DirectGenerationProvider
from backdrop.core.providers.errors import (
    GenerationSubmitError,
    NoImageInResponseError,
    ProviderAuthError,
)
from backdrop.core.scenes.models import Product
from tests.conftest import json_response, make_client


def _provider(handler) -> DirectGenerationProvider:
    return DirectGenerationProvider(make_client(handler, headers={"x-api-key": "cid"}))


class TestDirectGenerationProvider:
    """Request shaping and response handling."""

    @pytest.mark.asyncio
    async def test_generate_from_prompt_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return json_response(200, {"outputs": [{"image": {"url": "https://img/1.jpg"}}]})

        url = await _provider(handler).generate_from_prompt("Rainy Paris cafe. Photorealistic.")

        body = json.loads(seen[0].content)
        assert url == "https://img/1.jpg"
        assert seen[0].url.path == "/generate"
        assert seen[0].headers["x-api-key"] == "cid"
        assert body == {
            "prompt": "Rainy Paris cafe. Photorealistic.",
            "contentClass": "photo",
            "size": {"width": 2688, "height": 1536},
            "numVariations": 1,
        }

    @pytest.mark.asyncio
    async def test_edit_includes_seed_image(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return json_response(200, {"images": [{"url": "https://img/2.jpg"}]})

        await _provider(handler).edit_scene_background("https://seed/s.jpg", "Add snow")

        body = json.loads(seen[0].content)
        assert body["image"] == {"source": {"url": "https://seed/s.jpg"}}
        assert body["prompt"] == "Add snow"

    @pytest.mark.asyncio
    async def test_scene_background_uses_setting_prompt(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return json_response(200, {"images": [{"url": "https://img/3.jpg"}]})

        products = [Product(id="p1", name="Serum", category="skincare")]
        await _provider(handler).generate_scene_background("bathroom", products)

        prompt = json.loads(seen[0].content)["prompt"]
        assert "bathroom" in prompt.lower()
        assert "skincare" in prompt

    @pytest.mark.asyncio
    async def test_http_failure_is_submit_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="bad prompt")

        with pytest.raises(GenerationSubmitError):
            await _provider(handler).generate_from_prompt("x")

    @pytest.mark.asyncio
    async def test_missing_image_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return json_response(200, {"status": "ok"})

        with pytest.raises(NoImageInResponseError):
            await _provider(handler).generate_from_prompt("x")

    @pytest.mark.asyncio
    async def test_token_failure_is_provider_auth_error(self) -> None:
        class FailingTokens:
            async def get_token(self) -> str:
                raise TokenAcquisitionError(
                    message="Token request failed", method="POST", url="https://auth/token"
                )

            async def refresh_token(self) -> str:
                raise AssertionError("not reached")

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("request should not be sent")

        provider = DirectGenerationProvider(
            make_client(handler, auth=BearerTokenAuth(FailingTokens()))
        )
        with pytest.raises(ProviderAuthError):
            await provider.generate_from_prompt("x")
