"""Direct (synchronous-response) image generation provider."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.api.http.errors import ApiError, TokenAcquisitionError
from backdrop.core.providers.base import DEFAULT_HEIGHT, DEFAULT_WIDTH, build_generation_body
from backdrop.core.providers.errors import GenerationSubmitError, ProviderAuthError
from backdrop.core.providers.extraction import extract_image_reference
from backdrop.core.scenes.models import Product
from backdrop.core.scenes.prompts import build_scene_prompt

logger = logging.getLogger(__name__)


class DirectGenerationProvider:
    """Generation provider whose POST /generate returns the image inline.

    The HTTP client is expected to carry bearer auth and the ``x-api-key``
    header; this class only shapes requests and interprets responses.

    Args:
        http_client: Client rooted at the generation service
        width: Output width in pixels
        height: Output height in pixels
        generate_path: Submit endpoint path

    Example:
        >>> provider = DirectGenerationProvider(http_client)
        >>> url = await provider.generate_from_prompt("Rainy Paris cafe terrace. ...")
    """

    def __init__(
        self,
        http_client: AsyncApiClient,
        *,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        generate_path: str = "/generate",
    ) -> None:
        self._http = http_client
        self._width = width
        self._height = height
        self._generate_path = generate_path

    async def generate_from_prompt(self, prompt: str) -> str:
        return await self._run(self._body(prompt))

    async def generate_scene_background(
        self, setting: str, products: Sequence[Product] = ()
    ) -> str:
        return await self._run(self._body(build_scene_prompt(setting, products)))

    async def edit_scene_background(self, seed_image_url: str, prompt: str) -> str:
        return await self._run(self._body(prompt, seed_image_url=seed_image_url))

    def _body(self, prompt: str, *, seed_image_url: str | None = None) -> dict[str, Any]:
        return build_generation_body(
            prompt, width=self._width, height=self._height, seed_image_url=seed_image_url
        )

    async def _submit(self, body: dict[str, Any]) -> Any:
        """POST the generation request and return the decoded JSON body.

        Raises:
            ProviderAuthError: If no access token could be obtained
            GenerationSubmitError: If the request fails or is not JSON
        """
        try:
            resp = await self._http.post(self._generate_path, json_body=body)
            return self._http.json(resp)
        except TokenAcquisitionError as e:
            raise ProviderAuthError(f"Generation auth failed: {e}") from e
        except ApiError as e:
            raise GenerationSubmitError(f"Generation request failed: {e}") from e

    async def _run(self, body: dict[str, Any]) -> str:
        data = await self._submit(body)
        image_ref = extract_image_reference(data)
        logger.debug("Generation returned %s", image_ref[:80])
        return image_ref
