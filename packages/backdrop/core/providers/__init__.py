"""Image generation provider abstraction."""

from backdrop.core.providers.async_job import AsyncJobGenerationProvider
from backdrop.core.providers.base import GenerationProvider, ImageProvider, build_generation_body
from backdrop.core.providers.direct import DirectGenerationProvider
from backdrop.core.providers.errors import (
    GenerationError,
    GenerationJobFailedError,
    GenerationSubmitError,
    GenerationTimeoutError,
    NoImageInResponseError,
    ProviderAuthError,
)
from backdrop.core.providers.extraction import extract_image_reference, find_image_reference
from backdrop.core.providers.factory import create_generation_provider

__all__ = [
    "GenerationProvider",
    "ImageProvider",
    "build_generation_body",
    "DirectGenerationProvider",
    "AsyncJobGenerationProvider",
    "create_generation_provider",
    "extract_image_reference",
    "find_image_reference",
    "GenerationError",
    "ProviderAuthError",
    "GenerationSubmitError",
    "GenerationJobFailedError",
    "NoImageInResponseError",
    "GenerationTimeoutError",
]
