"""Provider factory for image generation dispatch."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.providers.async_job import AsyncJobGenerationProvider
from backdrop.core.providers.base import GenerationProvider, ImageProvider
from backdrop.core.providers.direct import DirectGenerationProvider

if TYPE_CHECKING:
    from backdrop.core.config.models import GenerationConfig

logger = logging.getLogger(__name__)


def create_generation_provider(
    config: GenerationConfig, http_client: AsyncApiClient | None
) -> GenerationProvider | None:
    """Create the configured generation provider.

    Args:
        config: Generation settings
        http_client: Authenticated client rooted at the generation service
            (None when the service is not configured)

    Returns:
        Provider instance, or None when the configured provider does not
        generate or credentials are missing
    """
    if not config.provider.generates:
        return None

    if http_client is None or not config.has_credentials:
        logger.info(
            "Generation provider %r configured without credentials, disabling generation",
            config.provider.value,
        )
        return None

    if config.provider == ImageProvider.DIRECT:
        return DirectGenerationProvider(http_client, width=config.width, height=config.height)

    return AsyncJobGenerationProvider(
        http_client,
        width=config.width,
        height=config.height,
        poll_interval_s=config.poll_interval_s,
        max_polls=config.max_polls,
    )
