"""Preseeded background catalog.

The built-in catalog ships with the storefront's static assets
(``/assets/backgrounds/{setting}-{variant}.jpg``). Deployments can replace it
with a JSON or YAML file listing the assets they actually ship.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict

from backdrop.core.scenes.models import KnownSetting, PreseededAsset

logger = logging.getLogger(__name__)

ASSET_PATH_TEMPLATE = "/assets/backgrounds/{setting}-{variant}.jpg"

# Variants actually shipped per setting; some settings have gaps.
_BUILTIN_VARIANTS: dict[KnownSetting, tuple[int, ...]] = {
    KnownSetting.NEUTRAL: (1, 2, 3),
    KnownSetting.BATHROOM: (1, 2, 3),
    KnownSetting.TRAVEL: (1, 2, 3),
    KnownSetting.OUTDOOR: (1, 2, 3),
    KnownSetting.LIFESTYLE: (2, 3),
    KnownSetting.BEDROOM: (1, 2, 3),
    KnownSetting.VANITY: (1, 2, 3),
    KnownSetting.GYM: (1, 3),
    KnownSetting.OFFICE: (3,),
}


class PreseededCatalog(BaseModel):
    """On-disk catalog file layout."""

    model_config = ConfigDict(frozen=True)

    assets: tuple[PreseededAsset, ...] = ()


def builtin_catalog() -> list[PreseededAsset]:
    """Return the catalog bundled with the storefront assets."""
    assets: list[PreseededAsset] = []
    for setting, variants in _BUILTIN_VARIANTS.items():
        for variant in variants:
            assets.append(
                PreseededAsset(
                    setting=setting.value,
                    variant=variant,
                    path=ASSET_PATH_TEMPLATE.format(setting=setting.value, variant=variant),
                    tags=(f"scene-{setting.value}",),
                )
            )
    return assets


def load_catalog(catalog_path: Path) -> list[PreseededAsset]:
    """Load a preseeded catalog from a JSON or YAML file.

    The file holds either a bare list of assets or ``{"assets": [...]}``.

    Args:
        catalog_path: Path to .json, .yaml or .yml file

    Returns:
        Catalog assets

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the extension is unsupported
        pydantic.ValidationError: If entries are malformed
    """
    if not catalog_path.exists():
        raise FileNotFoundError(f"Preseeded catalog not found: {catalog_path}")

    suffix = catalog_path.suffix.lower()
    text = catalog_path.read_text(encoding="utf-8")
    data: Any
    if suffix == ".json":
        data = json.loads(text)
    elif suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        raise ValueError(f"Unsupported catalog format: {suffix}")

    if isinstance(data, list):
        data = {"assets": data}
    catalog = PreseededCatalog.model_validate(data or {})
    logger.debug("Loaded %d preseeded assets from %s", len(catalog.assets), catalog_path)
    return list(catalog.assets)
