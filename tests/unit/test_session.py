"""Unit tests for BackdropSession wiring."""

from __future__ import annotations

import json
import random

import httpx
import pytest

from backdrop.core.caching import MemoryAssetCache, NullAssetCache
from backdrop.core.config.models import AppConfig
from backdrop.core.providers.async_job import AsyncJobGenerationProvider
from backdrop.core.providers.base import ImageProvider
from backdrop.core.providers.direct import DirectGenerationProvider
from backdrop.core.scenes.gradients import KNOWN_GRADIENTS
from backdrop.core.scenes.models import ResolutionOptions
from backdrop.core.scenes.novelty import DenyListNoveltyClassifier
from backdrop.core.session import BackdropSession
from tests.conftest import json_response

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def _full_config(**overrides) -> AppConfig:
    data = {
        "generation": {
            "enabled": True,
            "provider": "async",
            "base_url": "https://gen.test",
            "token_url": "https://ims.test/token",
            "client_id": "gen-client",
            "client_secret": "gen-secret",
            "poll_interval_s": 0,
        },
        "crm_auth": {
            "token_url": "https://crm.test/oauth/token",
            "client_id": "crm-client",
            "client_secret": "crm-secret",
        },
        "registry": {"base_url": "https://crm.test/api"},
        "managed_assets": {"base_url": "https://cms.test"},
        "preseeded": {"asset_base_url": "https://shop.test"},
    }
    data.update(overrides)
    return AppConfig.model_validate(data)


class FakeServices:
    """Mock transport answering every service the session talks to."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host, path, method = request.url.host, request.url.path, request.method

        if path.endswith("/token"):
            return json_response(200, {"access_token": f"{host}-token", "expires_in": 3600})
        if host == "gen.test" and method == "POST" and path == "/generate":
            return json_response(200, {"jobId": "j1"})
        if host == "gen.test" and path == "/status/j1":
            outputs = [{"image": {"url": "https://gen.test/o.png"}}]
            return json_response(200, {"status": "succeeded", "outputs": outputs})
        if host == "gen.test" and path == "/o.png":
            return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
        if host == "crm.test" and path == "/api/scene-assets":
            if method == "GET":
                return json_response(200, {"records": []})
            return json_response(201, {"id": 77})
        if host == "cms.test" and path == "/assets":
            if method == "GET":
                return json_response(200, {"records": []})
            return json_response(201, {"id": "cms-1", "url": "https://cms.test/cms-1.png"})
        return httpx.Response(404)

    def find(self, host: str, method: str, path: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.url.host == host and r.method == method and r.url.path == path
        ]


class TestWiring:
    def test_empty_config_disables_remote_tiers(self) -> None:
        session = BackdropSession(AppConfig())

        assert session.registry is None
        assert session.managed is None
        assert session.asset_client is None
        assert session.generation_provider is None
        assert isinstance(session.cache, MemoryAssetCache)

    def test_sections_select_components(self) -> None:
        config = _full_config(novelty_strategy="deny-list", cache={"enabled": False})
        session = BackdropSession(config, transport=httpx.MockTransport(FakeServices()))

        assert session.registry is not None
        assert session.managed is not None
        assert isinstance(session.generation_provider, AsyncJobGenerationProvider)
        assert isinstance(session.novelty, DenyListNoveltyClassifier)
        assert isinstance(session.cache, NullAssetCache)

    def test_direct_provider(self) -> None:
        config = _full_config()
        config.generation = config.generation.model_copy(
            update={"provider": ImageProvider.DIRECT}
        )
        session = BackdropSession(config)
        assert isinstance(session.generation_provider, DirectGenerationProvider)

    def test_missing_credentials_disable_generation(self) -> None:
        config = _full_config()
        config.generation = config.generation.model_copy(update={"client_secret": None})
        assert BackdropSession(config).generation_provider is None

    def test_resolver_is_shared(self) -> None:
        session = BackdropSession(AppConfig())
        assert session.resolver is session.resolver

    def test_rejects_wrong_config_type(self) -> None:
        with pytest.raises(TypeError):
            BackdropSession(42)  # type: ignore[arg-type]


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_empty_config_resolves_gradient(self) -> None:
        async with BackdropSession(AppConfig()) as session:
            assert await session.resolver.resolve("bedroom") == KNOWN_GRADIENTS["bedroom"]

    @pytest.mark.asyncio
    async def test_preseeded_served_from_asset_host(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-type": "image/jpeg"})

        config = AppConfig.model_validate({"preseeded": {"asset_base_url": "https://shop.test"}})
        async with BackdropSession(
            config, transport=httpx.MockTransport(handler), rng=random.Random(0)
        ) as session:
            result = await session.resolver.resolve("office")
        assert result == "/assets/backgrounds/office-3.jpg"

    @pytest.mark.asyncio
    async def test_novel_prompt_generates_and_writes_back(self) -> None:
        services = FakeServices()
        opts = ResolutionOptions(creative_prompt="Neon Tokyo alley in the rain")

        async with BackdropSession(
            _full_config(), transport=httpx.MockTransport(services)
        ) as session:
            result = await session.resolver.resolve("travel", options=opts)
        # Leaving the session drains the detached write-backs.

        assert result == "https://gen.test/o.png"

        [submit] = services.find("gen.test", "POST", "/generate")
        assert submit.headers["authorization"] == "Bearer ims.test-token"
        assert submit.headers["x-api-key"] == "gen-client"

        [upload] = services.find("cms.test", "POST", "/assets")
        assert upload.headers["authorization"] == "Bearer crm.test-token"
        body = json.loads(upload.content)
        assert body["tags"] == ["scene-travel"]
        assert body["file_name"] == "scene-travel.png"

        [register] = services.find("crm.test", "POST", "/api/scene-assets")
        assert json.loads(register.content)["image_url"] == "https://gen.test/o.png"

        # Novel prompts never consult the managed store.
        assert services.find("cms.test", "GET", "/assets") == []

    @pytest.mark.asyncio
    async def test_failing_status_polls_are_not_retried_by_the_client(self) -> None:
        class BusyStatus(FakeServices):
            def __call__(self, request: httpx.Request) -> httpx.Response:
                if request.url.path == "/status/j1":
                    self.requests.append(request)
                    return httpx.Response(503)
                return super().__call__(request)

        services = BusyStatus()
        config = _full_config()
        config.generation = config.generation.model_copy(update={"max_polls": 3})
        opts = ResolutionOptions(creative_prompt="Neon Tokyo alley in the rain")

        async with BackdropSession(config, transport=httpx.MockTransport(services)) as session:
            result = await session.resolver.resolve("travel", options=opts)

        assert result == KNOWN_GRADIENTS["travel"]
        assert len(services.find("gen.test", "GET", "/status/j1")) == 3

    @pytest.mark.asyncio
    async def test_write_back_upload_without_asset_host(self) -> None:
        services = FakeServices()
        opts = ResolutionOptions(creative_prompt="Neon Tokyo alley in the rain")

        async with BackdropSession(
            _full_config(preseeded={}), transport=httpx.MockTransport(services)
        ) as session:
            assert session.asset_client is None
            assert await session.resolver.resolve("travel", options=opts) == (
                "https://gen.test/o.png"
            )

        [download] = services.find("gen.test", "GET", "/o.png")
        assert "authorization" not in download.headers
        [upload] = services.find("cms.test", "POST", "/assets")
        assert json.loads(upload.content)["title"] == "Scene travel"
