"""Scene registry client.

The registry stores scene asset records (setting, mood, context, image URL,
usage count). The resolver reads matches, increments usage, and registers
freshly generated scenes.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.api.http.errors import ApiError
from backdrop.core.scenes.models import NewRegistryAsset, RegistryAsset, RegistryCriteria

logger = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    """Scene registry request failed."""

    pass


def _records(data: Any) -> list[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        records = data.get("records")
        if isinstance(records, list):
            return records
    return []


class SceneRegistryClient:
    """Scene registry REST client (async).

    Args:
        http_client: Client rooted at the registry service, carrying CRM
            bearer auth

    Example:
        >>> registry = SceneRegistryClient(http_client)
        >>> match = await registry.find(RegistryCriteria(setting="travel", mood="calm"))
        >>> if match and match.is_real_image:
        ...     await registry.record_usage(match.id)
    """

    ASSETS_PATH = "/scene-assets"

    def __init__(self, http_client: AsyncApiClient) -> None:
        self.http_client = http_client

    async def find(self, criteria: RegistryCriteria) -> RegistryAsset | None:
        """Find the best registry match for the criteria.

        Returns:
            First matching asset, or None when nothing matches

        Raises:
            RegistryError: If the request fails
        """
        params = criteria.model_dump(exclude_none=True)
        try:
            resp = await self.http_client.get(self.ASSETS_PATH, params=params)
            data = self.http_client.json(resp)
        except ApiError as e:
            raise RegistryError(f"Scene registry lookup failed: {e}") from e

        for record in _records(data):
            try:
                return RegistryAsset.model_validate(record)
            except ValidationError:
                logger.warning("Skipping malformed scene registry record: %s", record)
        return None

    async def record_usage(self, asset_id: str) -> None:
        """Increment the usage counter of a registry asset.

        Raises:
            RegistryError: If the request fails
        """
        try:
            await self.http_client.post(f"{self.ASSETS_PATH}/{asset_id}/usage")
        except ApiError as e:
            raise RegistryError(f"Recording usage for {asset_id} failed: {e}") from e
        logger.debug("Recorded usage for scene asset %s", asset_id)

    async def register(self, asset: NewRegistryAsset) -> str | None:
        """Register a newly generated scene.

        Returns:
            New record id when the registry returns one

        Raises:
            RegistryError: If the request fails
        """
        try:
            resp = await self.http_client.post(
                self.ASSETS_PATH, json_body=asset.model_dump(exclude_none=True)
            )
            data = self.http_client.json(resp)
        except ApiError as e:
            raise RegistryError(f"Scene registration failed: {e}") from e

        new_id = data.get("id") if isinstance(data, dict) else None
        logger.info("Registered generated scene for %s (id=%s)", asset.setting, new_id)
        return str(new_id) if new_id else None
