"""Prompt construction for scene generation."""

from __future__ import annotations

from collections.abc import Sequence

from backdrop.core.scenes.models import KnownSetting, Product

SCENE_DESCRIPTIONS: dict[str, str] = {
    KnownSetting.NEUTRAL.value: (
        "Elegant minimalist empty surface with soft bokeh lights in the background, "
        "sophisticated neutral tones, studio lighting, clean uncluttered space"
    ),
    KnownSetting.BATHROOM.value: (
        "Luxurious modern bathroom counter with white marble surface, soft natural light, "
        "potted eucalyptus plant, high-end spa aesthetic, empty counter"
    ),
    KnownSetting.TRAVEL.value: (
        "Stylish hotel room with a leather carry-on suitcase on a bed, warm golden hour "
        "light, wanderlust travel aesthetic"
    ),
    KnownSetting.OUTDOOR.value: (
        "Fresh outdoor wooden table with lush green foliage, dappled sunlight, healthy "
        "active lifestyle setting, empty table surface"
    ),
    KnownSetting.LIFESTYLE.value: (
        "Sophisticated vanity dresser with round mirror, soft pink and cream tones, "
        "natural daylight from a large window, clean empty surface"
    ),
    KnownSetting.BEDROOM.value: (
        "Cozy bedroom nightstand with warm amber lamp light, soft linen textures, dark "
        "moody evening atmosphere, a small empty tray"
    ),
    KnownSetting.VANITY.value: (
        "Glamorous makeup vanity station with Hollywood mirror lights, velvet blush-pink "
        "seat, clean marble countertop, warm flattering light"
    ),
    KnownSetting.GYM.value: (
        "Modern gym locker room shelf, clean concrete and brushed metal surfaces, bright "
        "even overhead lighting, a folded white towel nearby"
    ),
    KnownSetting.OFFICE.value: (
        "Minimalist modern office desk near a large window, natural daylight, clean white "
        "surface with a small plant, calm productive atmosphere"
    ),
}

HOUSE_STYLE_SUFFIX = (
    "Empty background scene only, no products, no bottles, no text or labels. "
    "Professional interior photography, soft diffused shadows, ultra high quality, "
    "photorealistic."
)


def wrap_creative_prompt(raw_prompt: str) -> str:
    """Wrap an upstream scene description in the house photographic style."""
    text = raw_prompt.strip().rstrip(".")
    return f"{text}. {HOUSE_STYLE_SUFFIX}"


def build_scene_prompt(setting: str, products: Sequence[Product] = ()) -> str:
    """Default prompt for a setting, optionally flavoured by product categories.

    Unknown settings use the setting text itself as the scene description.
    """
    description = SCENE_DESCRIPTIONS.get(setting) or f"{setting.replace('-', ' ')} scene"
    categories = sorted({p.category for p in products if p.category})
    if categories:
        description = f"{description}, styled to complement {', '.join(categories)}"
    return wrap_creative_prompt(description)
