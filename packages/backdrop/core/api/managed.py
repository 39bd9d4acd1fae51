"""Managed-asset (CMS) client.

Fetches curated scene images by id or tag and uploads newly generated
scenes as base64 payloads.
"""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
from typing import Any
from urllib.parse import urlparse

from pydantic import ValidationError

from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.api.http.errors import ApiError
from backdrop.core.scenes.models import ManagedAsset, ManagedAssetCriteria

logger = logging.getLogger(__name__)


class ManagedAssetError(RuntimeError):
    """Managed-asset store request failed."""

    pass


def scene_tag(setting: str) -> str:
    """Default managed-asset tag for a setting."""
    return f"scene-{setting}"


def decode_data_uri(uri: str) -> tuple[bytes, str]:
    """Decode a base64 ``data:`` URI.

    Returns:
        (raw bytes, mime type)

    Raises:
        ValueError: If the URI is not a base64 data URI
    """
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URI")
    mime = header[len("data:") : -len(";base64")] or "application/octet-stream"
    try:
        return base64.b64decode(payload, validate=True), mime
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def _slug(title: str) -> str:
    return title.lower().replace(" ", "-").replace("(", "").replace(")", "")


def _first_url(data: Any) -> str | None:
    if isinstance(data, dict) and data.get("url"):
        return str(data["url"])
    if isinstance(data, list):
        records = data
    elif isinstance(data, dict) and isinstance(data.get("records"), list):
        records = data["records"]
    else:
        return None
    for record in records:
        if isinstance(record, dict) and record.get("url"):
            return str(record["url"])
    return None


class ManagedAssetClient:
    """Managed-asset store client (async).

    Args:
        http_client: Client rooted at the managed-asset service, carrying CRM
            bearer auth
        download_client: Unauthenticated client used to download generated
            images before upload (relative paths resolve against its base URL)
    """

    ASSETS_PATH = "/assets"

    def __init__(
        self,
        http_client: AsyncApiClient,
        *,
        download_client: AsyncApiClient | None = None,
    ) -> None:
        self.http_client = http_client
        self.download_client = download_client

    async def fetch(self, criteria: ManagedAssetCriteria) -> str | None:
        """Fetch a managed image URL by asset id, else by tag.

        The tag defaults to ``scene-{setting}``. A 404 is a miss.

        Raises:
            ManagedAssetError: If the request fails
        """
        if criteria.asset_id:
            path = f"{self.ASSETS_PATH}/{criteria.asset_id}"
            params = None
        else:
            path = self.ASSETS_PATH
            params = {"tag": criteria.tag or scene_tag(criteria.setting)}

        try:
            resp = await self.http_client.get(path, params=params)
            data = self.http_client.json(resp)
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise ManagedAssetError(f"Managed asset lookup failed: {e}") from e

        return _first_url(data)

    async def upload(self, image_url: str, title: str, tags: list[str]) -> ManagedAsset:
        """Download an image and upload it to the managed store.

        Args:
            image_url: Image URL, path, or base64 data URI
            title: Asset title
            tags: Asset tags

        Returns:
            Created asset

        Raises:
            ManagedAssetError: If download or upload fails
        """
        content, mime = await self._read_image(image_url)
        extension = mimetypes.guess_extension(mime) or ".png"
        file_name = f"{_slug(title)}{extension}"

        body = {
            "title": title,
            "file_name": file_name,
            "tags": tags,
            "image_base64": base64.b64encode(content).decode("ascii"),
        }
        try:
            resp = await self.http_client.post(self.ASSETS_PATH, json_body=body)
            data = self.http_client.json(resp) or {}
        except ApiError as e:
            raise ManagedAssetError(f"Managed asset upload failed: {e}") from e

        try:
            asset = ManagedAsset.model_validate(
                {"title": title, "tags": tuple(tags), **(data if isinstance(data, dict) else {})}
            )
        except ValidationError as e:
            raise ManagedAssetError(f"Unexpected managed asset upload response: {data}") from e
        logger.info(
            "Uploaded %s to managed store (%d bytes, id=%s)", file_name, len(content), asset.id
        )
        return asset

    async def _read_image(self, image_url: str) -> tuple[bytes, str]:
        if image_url.startswith("data:"):
            try:
                return decode_data_uri(image_url)
            except ValueError as e:
                raise ManagedAssetError(f"Cannot decode image data URI: {e}") from e

        if self.download_client is None:
            raise ManagedAssetError(f"No download client configured for {image_url}")
        try:
            resp = await self.download_client.get(image_url)
        except ApiError as e:
            raise ManagedAssetError(f"Image download failed: {e}") from e

        mime = resp.headers.get("content-type", "").split(";")[0].strip()
        if not mime:
            mime = mimetypes.guess_type(urlparse(image_url).path)[0] or "image/png"
        return resp.content, mime
