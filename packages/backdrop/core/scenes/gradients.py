"""Deterministic CSS gradients used when no image can be resolved."""

from __future__ import annotations

from backdrop.core.scenes.models import KnownSetting

KNOWN_GRADIENTS: dict[str, str] = {
    KnownSetting.NEUTRAL.value: "linear-gradient(135deg, #1a1a2e 0%, #16213e 50%, #0f3460 100%)",
    KnownSetting.BATHROOM.value: "linear-gradient(135deg, #e8d5c4 0%, #c9b8a8 40%, #a89080 100%)",
    KnownSetting.TRAVEL.value: "linear-gradient(135deg, #2d6a4f 0%, #40916c 40%, #74c69d 100%)",
    KnownSetting.OUTDOOR.value: "linear-gradient(135deg, #588157 0%, #a3b18a 50%, #dad7cd 100%)",
    KnownSetting.LIFESTYLE.value: "linear-gradient(135deg, #5e548e 0%, #9f86c0 50%, #e0b1cb 100%)",
    KnownSetting.BEDROOM.value: "linear-gradient(135deg, #2d2040 0%, #4a3560 50%, #6b4f80 100%)",
    KnownSetting.VANITY.value: "linear-gradient(135deg, #d4a5a5 0%, #c48b9f 50%, #9e6b8a 100%)",
    KnownSetting.GYM.value: "linear-gradient(135deg, #2c3e50 0%, #4a6572 50%, #6a8ea0 100%)",
    KnownSetting.OFFICE.value: "linear-gradient(135deg, #e8e8e0 0%, #c8c8c0 50%, #a8a8a0 100%)",
}


def fallback_gradient(setting: str) -> str:
    """Gradient for a setting; unrecognized settings get the neutral gradient."""
    return KNOWN_GRADIENTS.get(setting, KNOWN_GRADIENTS[KnownSetting.NEUTRAL.value])
