"""Image reference extraction from generation responses.

Generation services disagree on where the image lives in the response body.
Extraction walks an ordered list of field paths and returns the first
non-empty value.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from backdrop.core.providers.errors import NoImageInResponseError


def _dig(data: Any, path: tuple[str | int, ...]) -> Any:
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
        elif not isinstance(current, dict):
            return None
        current = current[step] if isinstance(step, int) else current.get(step)
        if current is None:
            return None
    return current


def _as_data_uri(value: str) -> str:
    return f"data:image/png;base64,{value}"


@dataclass(frozen=True)
class ExtractionStrategy:
    """One field path plus an optional transform for the found value."""

    name: str
    path: tuple[str | int, ...]
    transform: Callable[[str], str] | None = None

    def extract(self, data: Any) -> str | None:
        value = _dig(data, self.path)
        if not isinstance(value, str) or not value:
            return None
        return self.transform(value) if self.transform else value


DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    ExtractionStrategy("outputs.presignedUrl", ("outputs", 0, "image", "presignedUrl")),
    ExtractionStrategy("outputs.url", ("outputs", 0, "image", "url")),
    ExtractionStrategy("images.url", ("images", 0, "url")),
    ExtractionStrategy("result.images.url", ("result", "images", 0, "url")),
    ExtractionStrategy("result.outputs.url", ("result", "outputs", 0, "image", "url")),
    ExtractionStrategy(
        "predictions.base64", ("predictions", 0, "bytesBase64Encoded"), _as_data_uri
    ),
)


def find_image_reference(
    data: Any, strategies: tuple[ExtractionStrategy, ...] = DEFAULT_STRATEGIES
) -> str | None:
    """Return the first image reference found, or None."""
    for strategy in strategies:
        ref = strategy.extract(data)
        if ref:
            return ref
    return None


def extract_image_reference(
    data: Any, strategies: tuple[ExtractionStrategy, ...] = DEFAULT_STRATEGIES
) -> str:
    """Return the first image reference found.

    Raises:
        NoImageInResponseError: If no strategy matches
    """
    ref = find_image_reference(data, strategies)
    if ref is None:
        keys = sorted(data.keys()) if isinstance(data, dict) else type(data).__name__
        raise NoImageInResponseError(f"Generation response contained no image (keys: {keys})")
    return ref
