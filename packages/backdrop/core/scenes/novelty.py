"""Novelty heuristics: does a prompt warrant fresh image generation?

A *novel* prompt describes something the static asset tiers cannot serve
(a named city, weather, an unusual venue). Non-novel prompts are generic
beauty-scene boilerplate and are served from preseeded or managed assets.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from backdrop.core.scenes.models import is_known_setting

logger = logging.getLogger(__name__)

# A prompt built only from word characters and light punctuation that
# mentions any of these phrases is boilerplate.
GENERIC_PHRASES = re.compile(
    r"^[\w\s,.-]*(luxurious|elegant|soft lighting|high-end|beauty|skincare|cosmetic"
    r"|product|showcase|atmosphere|setting|perfect for)[\w\s,.-]*$",
    re.IGNORECASE,
)

SPECIFIC_SIGNALS = re.compile(
    r"\b("
    # cities / countries
    r"paris|london|tokyo|new york|mumbai|delhi|dubai|rome|milan|barcelona|madrid"
    r"|berlin|sydney|seoul|bangkok|istanbul|cairo|rio|mexico city|los angeles"
    r"|san francisco|singapore|hong kong|kyoto|venice|santorini|bali|marrakech"
    r"|japan|india|france|italy|spain|greece|morocco|iceland|brazil|mexico|egypt"
    # weather / time of day
    r"|rain|rainy|snow|snowy|storm|stormy|fog|foggy|mist|thunder|sunset|sunrise"
    r"|dusk|dawn|monsoon|blizzard|aurora"
    # unusual locations
    r"|street market|bazaar|desert|jungle|rainforest|glacier|volcano|canyon|cave"
    r"|underwater|rooftop|alley|skyline|harbor|harbour|lighthouse|vineyard"
    # transport
    r"|train|airport|airplane|plane|yacht|boat|ferry|subway|metro|taxi|car"
    # cultural venues
    r"|museum|gallery|temple|cathedral|opera|theater|theatre|festival|carnival"
    r")\b",
    re.IGNORECASE,
)


class NoveltyClassifier(Protocol):
    """Decides whether a (prompt, setting) pair should bypass static tiers."""

    def is_novel(self, prompt: str | None, setting: str) -> bool: ...


class AllowListNoveltyClassifier:
    """Novel unless the prompt is generic boilerplate.

    Unknown settings are always novel. An empty prompt is never novel.
    """

    def is_novel(self, prompt: str | None, setting: str) -> bool:
        if not is_known_setting(setting):
            return True
        if not prompt or not prompt.strip() or GENERIC_PHRASES.match(prompt):
            return False
        logger.debug("Novel prompt detected: %s", prompt[:80])
        return True


class DenyListNoveltyClassifier:
    """Novel only when the prompt names a specific real-world signal.

    Unknown settings are always novel.
    """

    def is_novel(self, prompt: str | None, setting: str) -> bool:
        if not is_known_setting(setting):
            return True
        if not prompt:
            return False
        match = SPECIFIC_SIGNALS.search(prompt)
        if match:
            logger.debug("Specific signal %r in prompt: %s", match.group(1), prompt[:80])
            return True
        return False


def create_novelty_classifier(strategy: str = "allow-list") -> NoveltyClassifier:
    """Create a novelty classifier by strategy name.

    Args:
        strategy: "allow-list" (default) or "deny-list"

    Raises:
        ValueError: If strategy is unknown
    """
    normalized = strategy.strip().lower().replace("_", "-")
    if normalized == "allow-list":
        return AllowListNoveltyClassifier()
    if normalized == "deny-list":
        return DenyListNoveltyClassifier()
    raise ValueError(f"Unknown novelty strategy: {strategy}")
