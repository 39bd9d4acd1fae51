"""Base types and protocol for image generation providers."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol

from backdrop.core.scenes.models import Product


class ImageProvider(str, Enum):
    """Configured image provider selector."""

    DIRECT = "direct"
    ASYNC = "async"
    MANAGED_ONLY = "managed-only"
    NONE = "none"

    @property
    def generates(self) -> bool:
        """True for providers that call a generation service."""
        return self in (ImageProvider.DIRECT, ImageProvider.ASYNC)


DEFAULT_WIDTH = 2688
DEFAULT_HEIGHT = 1536


def build_generation_body(
    prompt: str,
    *,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    seed_image_url: str | None = None,
) -> dict[str, Any]:
    """Build the JSON body for POST /generate.

    Args:
        prompt: Final (already wrapped) generation prompt
        width: Output width in pixels
        height: Output height in pixels
        seed_image_url: Source image for edit requests

    Returns:
        Request body dict
    """
    body: dict[str, Any] = {
        "prompt": prompt,
        "contentClass": "photo",
        "size": {"width": width, "height": height},
        "numVariations": 1,
    }
    if seed_image_url:
        body["image"] = {"source": {"url": seed_image_url}}
    return body


class GenerationProvider(Protocol):
    """Protocol for image generation providers.

    All methods return a displayable image reference (URL or data URI).

    Raises (all methods):
        GenerationError: Any subclass from backdrop.core.providers.errors
    """

    async def generate_from_prompt(self, prompt: str) -> str:
        """Generate an image from a final prompt string."""
        ...

    async def generate_scene_background(
        self, setting: str, products: Sequence[Product] = ()
    ) -> str:
        """Generate the default background for a setting."""
        ...

    async def edit_scene_background(self, seed_image_url: str, prompt: str) -> str:
        """Edit a seed image according to a prompt."""
        ...
