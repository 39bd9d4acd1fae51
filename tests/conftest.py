"""Shared pytest fixtures for backdrop tests."""

from __future__ import annotations

from collections.abc import Callable
import random
from typing import Any

import httpx
import pytest

from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.api.http.config import HttpClientConfig
from backdrop.core.api.http.retry import RetryPolicy
from backdrop.core.scenes.models import PreseededAsset

Handler = Callable[[httpx.Request], httpx.Response]

# ============================================================================
# HTTP Fixtures
# ============================================================================


def json_response(status_code: int = 200, payload: Any = None, **kwargs: Any) -> httpx.Response:
    """Build a JSON response with the right content type."""
    return httpx.Response(
        status_code,
        json=payload if payload is not None else {},
        headers={"content-type": "application/json"},
        **kwargs,
    )


def make_client(
    handler: Handler,
    base_url: str = "https://example.test",
    *,
    auth: httpx.Auth | None = None,
    headers: dict[str, str] | None = None,
) -> AsyncApiClient:
    """AsyncApiClient over a MockTransport with retries disabled."""
    return AsyncApiClient(
        HttpClientConfig(base_url=base_url, headers=headers or {}),
        auth=auth,
        retry_policy=RetryPolicy.no_retries(),
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def requests_log() -> list[httpx.Request]:
    """Collects requests seen by a mock handler."""
    return []


# ============================================================================
# Scene Fixtures
# ============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Deterministic random source."""
    return random.Random(1234)


@pytest.fixture
def bathroom_assets() -> list[PreseededAsset]:
    """Three bathroom variants."""
    return [
        PreseededAsset(
            setting="bathroom",
            variant=v,
            path=f"/assets/backgrounds/bathroom-{v}.jpg",
            tags=("scene-bathroom",),
        )
        for v in (1, 2, 3)
    ]


@pytest.fixture
def image_host_handler() -> Handler:
    """Static asset host: every .jpg under /assets/backgrounds exists."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/assets/backgrounds/") and request.url.path.endswith(
            ".jpg"
        ):
            return httpx.Response(200, headers={"content-type": "image/jpeg"})
        return httpx.Response(404)

    return handler
