"""Backdrop session: builds and owns every long-lived service.

The session is the composition root. It turns an AppConfig into HTTP clients,
token providers, service clients, the preseeded bank, the cache, the novelty
classifier, the generation provider and finally the BackgroundResolver. All
of them are created lazily on first access and shared for the session's
lifetime; ``aclose()`` drains detached write-backs and closes HTTP clients.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any

import httpx

from backdrop.core.api.http.auth import BearerTokenAuth, ClientCredentialsTokenProvider
from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.api.http.config import HttpClientConfig
from backdrop.core.api.http.retry import RetryPolicy
from backdrop.core.api.managed import ManagedAssetClient
from backdrop.core.api.registry import SceneRegistryClient
from backdrop.core.caching import AssetCache, MemoryAssetCache, NullAssetCache
from backdrop.core.config.loader import load_app_config
from backdrop.core.config.models import AppConfig, OAuthClientConfig
from backdrop.core.providers.base import GenerationProvider
from backdrop.core.providers.factory import create_generation_provider
from backdrop.core.scenes.catalog import load_catalog
from backdrop.core.scenes.novelty import NoveltyClassifier, create_novelty_classifier
from backdrop.core.scenes.preseeded import PreseededAssetBank
from backdrop.core.scenes.resolver import BackgroundResolver
from backdrop.core.scenes.tasks import DetachedTaskRunner

logger = logging.getLogger(__name__)


class BackdropSession:
    """Session coordinator for background resolution.

    Args:
        app_config: AppConfig instance, path, or None (default path/env)
        transport: Optional HTTPX transport shared by every client (tests)
        rng: Optional random source for preseeded rotation

    Example:
        async with BackdropSession("backdrop.yaml") as session:
            url = await session.resolver.resolve("travel")
    """

    def __init__(
        self,
        app_config: AppConfig | Path | str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.app_config: AppConfig = self._resolve_config(app_config)
        self._transport = transport
        self._rng = rng
        self._clients: list[AsyncApiClient] = []
        self.tasks = DetachedTaskRunner()

    @staticmethod
    def _resolve_config(value: Any) -> AppConfig:
        """Resolve config from instance, path, or default.

        Raises:
            TypeError: If value is wrong type
            FileNotFoundError: If path doesn't exist
            ValidationError: If config is invalid
        """
        if value is None:
            return load_app_config()
        elif isinstance(value, (Path, str)):
            return load_app_config(value)
        elif isinstance(value, AppConfig):
            return value
        else:
            raise TypeError(f"Expected AppConfig, Path, str, or None; got {type(value).__name__}")

    async def __aenter__(self) -> BackdropSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Wait for detached write-backs, then close every HTTP client."""
        await self.tasks.drain()
        for client in self._clients:
            await client.aclose()
        self._clients.clear()

    def _client(
        self,
        base_url: str,
        *,
        timeout_s: float = 15.0,
        auth: httpx.Auth | None = None,
        headers: dict[str, str] | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> AsyncApiClient:
        client = AsyncApiClient(
            HttpClientConfig(base_url=base_url, timeout_s=timeout_s, headers=headers or {}),
            auth=auth,
            retry_policy=retry_policy,
            transport=self._transport,
        )
        self._clients.append(client)
        return client

    def _bearer_auth(self, oauth: OAuthClientConfig) -> BearerTokenAuth | None:
        if not oauth.is_configured:
            return None
        assert oauth.token_url and oauth.client_id and oauth.client_secret
        provider = ClientCredentialsTokenProvider(
            self._client(oauth.token_url),
            token_url=oauth.token_url,
            client_id=oauth.client_id,
            client_secret=oauth.client_secret,
            scope=oauth.scope,
        )
        return BearerTokenAuth(provider)

    @property
    def crm_auth(self) -> BearerTokenAuth | None:
        """Bearer auth shared by the registry and managed-asset clients."""
        if not hasattr(self, "_crm_auth"):
            self._crm_auth = self._bearer_auth(self.app_config.crm_auth)
        return self._crm_auth

    @property
    def asset_client(self) -> AsyncApiClient | None:
        """Unauthenticated client for the static asset host."""
        if not hasattr(self, "_asset_client"):
            base_url = self.app_config.preseeded.asset_base_url
            self._asset_client = self._client(base_url) if base_url else None
        return self._asset_client

    def _download_client(self, fallback_base_url: str, timeout_s: float) -> AsyncApiClient:
        """Unauthenticated client for fetching generated images before upload.

        Relative paths resolve against the asset host when one is configured.
        """
        base_url = self.app_config.preseeded.asset_base_url or fallback_base_url
        return self._client(base_url, timeout_s=timeout_s)

    @property
    def registry(self) -> SceneRegistryClient | None:
        if not hasattr(self, "_registry"):
            cfg = self.app_config.registry
            self._registry = (
                SceneRegistryClient(
                    self._client(cfg.base_url, timeout_s=cfg.timeout_s, auth=self.crm_auth)
                )
                if cfg.base_url
                else None
            )
        return self._registry

    @property
    def managed(self) -> ManagedAssetClient | None:
        if not hasattr(self, "_managed"):
            cfg = self.app_config.managed_assets
            self._managed = (
                ManagedAssetClient(
                    self._client(cfg.base_url, timeout_s=cfg.timeout_s, auth=self.crm_auth),
                    download_client=self._download_client(cfg.base_url, cfg.timeout_s),
                )
                if cfg.base_url
                else None
            )
        return self._managed

    @property
    def preseeded(self) -> PreseededAssetBank:
        if not hasattr(self, "_preseeded"):
            catalog_path = self.app_config.preseeded.catalog_path
            assets = load_catalog(Path(catalog_path)) if catalog_path else None
            self._preseeded = PreseededAssetBank(
                assets, http_client=self.asset_client, rng=self._rng
            )
        return self._preseeded

    @property
    def cache(self) -> AssetCache:
        if not hasattr(self, "_cache"):
            self._cache: AssetCache = (
                MemoryAssetCache() if self.app_config.cache.enabled else NullAssetCache()
            )
        return self._cache

    @property
    def novelty(self) -> NoveltyClassifier:
        if not hasattr(self, "_novelty"):
            self._novelty = create_novelty_classifier(self.app_config.novelty_strategy)
        return self._novelty

    @property
    def generation_provider(self) -> GenerationProvider | None:
        """Generation provider, or None when generation is not configured."""
        if not hasattr(self, "_generation_provider"):
            cfg = self.app_config.generation
            http_client: AsyncApiClient | None = None
            if cfg.provider.generates and cfg.has_credentials:
                assert cfg.base_url and cfg.token_url and cfg.client_id and cfg.client_secret
                auth = self._bearer_auth(
                    OAuthClientConfig(
                        token_url=cfg.token_url,
                        client_id=cfg.client_id,
                        client_secret=cfg.client_secret,
                        scope=cfg.scope,
                    )
                )
                http_client = self._client(
                    cfg.base_url,
                    timeout_s=cfg.timeout_s,
                    auth=auth,
                    headers={"x-api-key": cfg.client_id},
                    retry_policy=RetryPolicy.no_retries(),
                )
            self._generation_provider = create_generation_provider(cfg, http_client)
        return self._generation_provider

    @property
    def resolver(self) -> BackgroundResolver:
        """The session's background resolver (one cache per session)."""
        if not hasattr(self, "_resolver"):
            cfg = self.app_config
            self._resolver = BackgroundResolver(
                provider=self.generation_provider,
                image_provider=cfg.generation.provider,
                generation_enabled=cfg.generation.enabled,
                registry=self.registry,
                managed=self.managed,
                preseeded=self.preseeded,
                novelty=self.novelty,
                cache=self.cache,
                tasks=self.tasks,
                upload_enabled=cfg.managed_assets.upload_enabled,
                prompt_prefix_length=cfg.cache.prompt_prefix_length,
            )
            logger.debug(
                "Resolver ready: provider=%s generation_enabled=%s registry=%s managed=%s",
                cfg.generation.provider.value,
                cfg.generation.enabled,
                self.registry is not None,
                self.managed is not None,
            )
        return self._resolver
