"""Preseeded asset bank with rotation and existence probing."""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from collections.abc import Iterable

from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.api.http.errors import ApiError
from backdrop.core.scenes.catalog import builtin_catalog
from backdrop.core.scenes.models import PreseededAsset

logger = logging.getLogger(__name__)


class PreseededAssetBank:
    """Bundled per-setting images, picked with rotation.

    Rotation memory is held per bank instance: consecutive picks for a setting
    with more than one variant never return the same variant twice in a row.

    Args:
        assets: Catalog entries (defaults to the built-in catalog)
        http_client: Client rooted at the static asset host, used for
            HEAD checks. Without one, no asset is considered to exist.
        rng: Random source (injectable for deterministic tests)
    """

    def __init__(
        self,
        assets: Iterable[PreseededAsset] | None = None,
        *,
        http_client: AsyncApiClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._by_setting: dict[str, list[PreseededAsset]] = defaultdict(list)
        for asset in builtin_catalog() if assets is None else assets:
            self._by_setting[asset.setting].append(asset)
        self._http_client = http_client
        self._rng = rng or random.Random()
        self._last_variant: dict[str, int] = {}

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_setting.values())

    def pick(self, setting: str) -> PreseededAsset | None:
        """Pick a random asset for a setting, avoiding the last-picked variant."""
        candidates = self._by_setting.get(setting)
        if not candidates:
            return None

        last = self._last_variant.get(setting)
        pool = [a for a in candidates if a.variant != last] if len(candidates) > 1 else candidates
        choice = self._rng.choice(pool)
        self._last_variant[setting] = choice.variant
        return choice

    async def exists(self, asset: PreseededAsset) -> bool:
        """HEAD-check an asset; True only for a 2xx image response."""
        if self._http_client is None:
            logger.debug("No asset host configured, cannot verify %s", asset.path)
            return False
        try:
            resp = await self._http_client.head(asset.path)
        except ApiError as e:
            logger.debug("Preseeded HEAD check failed for %s: %s", asset.path, e)
            return False
        ctype = resp.headers.get("content-type", "")
        return 200 <= resp.status_code < 300 and ctype.startswith("image/")
