"""Background resolution pipeline.

Decides, per call, which image to show behind a storefront scene. Sources
are tried cheapest first: cache, caller-supplied references, the scene
registry, bundled preseeded assets, the managed-asset store, and finally
paid image generation. Every path ends in a displayable reference; the
setting's CSS gradient is the last resort.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from backdrop.core.api.http.errors import ApiError
from backdrop.core.api.managed import ManagedAssetClient, ManagedAssetError, scene_tag
from backdrop.core.api.registry import RegistryError, SceneRegistryClient
from backdrop.core.caching.backends.memory import MemoryAssetCache
from backdrop.core.caching.models import DEFAULT_PROMPT_PREFIX_LENGTH, derive_cache_key
from backdrop.core.caching.protocols import AssetCache
from backdrop.core.providers.base import GenerationProvider, ImageProvider
from backdrop.core.providers.errors import GenerationError
from backdrop.core.scenes.gradients import fallback_gradient
from backdrop.core.scenes.models import (
    ManagedAssetCriteria,
    NewRegistryAsset,
    Product,
    RegistryCriteria,
    ResolutionOptions,
)
from backdrop.core.scenes.novelty import AllowListNoveltyClassifier, NoveltyClassifier
from backdrop.core.scenes.preseeded import PreseededAssetBank
from backdrop.core.scenes.prompts import wrap_creative_prompt
from backdrop.core.scenes.tasks import DetachedTaskRunner

logger = logging.getLogger(__name__)


class BackgroundResolver:
    """Resolves a scene background for a setting.

    Collaborators left as None skip their tiers. The resolver owns its cache
    and rotation state; create one per application (or per session) and
    share it across calls.

    Args:
        provider: Generation provider (None disables generation)
        image_provider: Configured provider kind; ``managed-only`` and
            ``none`` stop before generation
        generation_enabled: Allow generation for non-novel prompts
        registry: Scene registry client
        managed: Managed-asset store client
        preseeded: Preseeded asset bank
        novelty: Novelty classifier (allow-list by default)
        cache: Resolved reference cache (in-memory by default)
        tasks: Runner for detached write-backs
        upload_enabled: Upload generated scenes to the managed store
        prompt_prefix_length: Prompt prefix length used in cache keys
    """

    def __init__(
        self,
        *,
        provider: GenerationProvider | None = None,
        image_provider: ImageProvider = ImageProvider.NONE,
        generation_enabled: bool = False,
        registry: SceneRegistryClient | None = None,
        managed: ManagedAssetClient | None = None,
        preseeded: PreseededAssetBank | None = None,
        novelty: NoveltyClassifier | None = None,
        cache: AssetCache | None = None,
        tasks: DetachedTaskRunner | None = None,
        upload_enabled: bool = True,
        prompt_prefix_length: int = DEFAULT_PROMPT_PREFIX_LENGTH,
    ) -> None:
        self.provider = provider
        self.image_provider = image_provider
        self.generation_enabled = generation_enabled
        self.registry = registry
        self.managed = managed
        self.preseeded = preseeded
        self.novelty: NoveltyClassifier = novelty or AllowListNoveltyClassifier()
        self.cache: AssetCache = cache if cache is not None else MemoryAssetCache()
        self.tasks = tasks or DetachedTaskRunner()
        self.upload_enabled = upload_enabled
        self.prompt_prefix_length = prompt_prefix_length

    async def resolve(
        self,
        setting: str,
        products: Sequence[Product] = (),
        options: ResolutionOptions | None = None,
    ) -> str:
        """Resolve the background reference for a setting.

        Never raises. Unexpected failures degrade to the setting's gradient.

        Args:
            setting: Scene setting (known or open-ended)
            products: Products shown in the scene
            options: Per-call overrides and hints

        Returns:
            Image URL, path, data URI, or CSS gradient
        """
        opts = options or ResolutionOptions()
        try:
            return await self._resolve(setting, products, opts)
        except Exception:
            logger.exception("Background resolution failed for %s", setting)
            return fallback_gradient(setting)

    async def _resolve(
        self, setting: str, products: Sequence[Product], opts: ResolutionOptions
    ) -> str:
        cache_key = derive_cache_key(setting, opts, prompt_prefix_length=self.prompt_prefix_length)
        novel = self.novelty.is_novel(opts.creative_prompt, setting)

        cached = self.cache.get(cache_key)
        if cached:
            return cached

        if opts.existing_background:
            logger.debug("Preserving existing background for %s", setting)
            return opts.existing_background

        if opts.image_url:
            logger.debug("Using explicit image for %s", setting)
            self.cache.set(cache_key, opts.image_url)
            return opts.image_url

        if opts.scene_asset_id and self.registry is not None:
            try:
                await self.registry.record_usage(opts.scene_asset_id)
            except RegistryError as e:
                logger.debug("Usage tracking for %s failed: %s", opts.scene_asset_id, e)

        if not opts.edit_mode:
            registry_url = await self._from_registry(setting, opts, cache_key)
            if registry_url:
                return registry_url

        if not opts.edit_mode and not novel:
            preseeded_path = await self._verified_preseeded(setting)
            if preseeded_path:
                logger.info("Using preseeded image for %s: %s", setting, preseeded_path)
                self.cache.set(cache_key, preseeded_path)
                return preseeded_path

        if not self.generation_enabled and not novel:
            return fallback_gradient(setting)

        managed_url: str | None = None
        if novel:
            logger.info("Novel prompt, skipping managed assets for %s", setting)
        else:
            managed_url = await self._from_managed(setting, opts)
            if managed_url and not opts.edit_mode:
                logger.info("Using managed asset for %s: %s", setting, managed_url)
                self.cache.set(cache_key, managed_url)
                return managed_url

        if self.provider is None or not self.image_provider.generates:
            return managed_url or fallback_gradient(setting)

        return await self._generate(setting, products, opts, cache_key, managed_url)

    async def _from_registry(
        self, setting: str, opts: ResolutionOptions, cache_key: str
    ) -> str | None:
        if self.registry is None:
            return None

        criteria = RegistryCriteria(
            setting=setting,
            mood=opts.mood,
            customer_context=opts.customer_context,
            scene_type=opts.scene_type,
        )
        try:
            match = await self.registry.find(criteria)
        except RegistryError as e:
            logger.warning("Scene registry lookup failed: %s", e)
            return None

        if match is None or not match.image_url:
            return None
        if not match.is_real_image:
            logger.info(
                "Registry match %s has placeholder image, skipping: %s", match.id, match.image_url
            )
            return None

        logger.info("Using registry match for %s: %s", setting, match.id)
        self.cache.set(cache_key, match.image_url)
        self.tasks.spawn(self.registry.record_usage(match.id), name=f"registry-usage-{match.id}")
        return match.image_url

    async def _verified_preseeded(self, setting: str) -> str | None:
        if self.preseeded is None:
            return None
        asset = self.preseeded.pick(setting)
        if asset is None:
            return None
        if await self.preseeded.exists(asset):
            return asset.path
        logger.debug("Preseeded image %s not reachable", asset.path)
        return None

    async def _from_managed(self, setting: str, opts: ResolutionOptions) -> str | None:
        if self.managed is None:
            return None
        criteria = ManagedAssetCriteria(
            setting=setting, asset_id=opts.managed_asset_id, tag=opts.managed_tag
        )
        try:
            return await self.managed.fetch(criteria)
        except ManagedAssetError as e:
            logger.warning("Managed asset lookup failed: %s", e)
            return None

    async def _generate(
        self,
        setting: str,
        products: Sequence[Product],
        opts: ResolutionOptions,
        cache_key: str,
        managed_url: str | None,
    ) -> str:
        assert self.provider is not None

        try:
            seed = managed_url
            if opts.edit_mode and not seed:
                seed = await self._verified_preseeded(setting)

            raw_prompt = opts.prompt
            prompt = wrap_creative_prompt(raw_prompt) if raw_prompt else None

            if opts.edit_mode and seed and prompt:
                image_url = await self.provider.edit_scene_background(seed, prompt)
            elif prompt:
                image_url = await self.provider.generate_from_prompt(prompt)
            else:
                image_url = await self.provider.generate_scene_background(setting, products)
        except (GenerationError, ApiError) as e:
            logger.error("Background generation failed (%s): %s", self.image_provider.value, e)
            return managed_url or fallback_gradient(setting)
        except Exception:
            logger.exception("Unexpected generation error (%s)", self.image_provider.value)
            return managed_url or fallback_gradient(setting)

        self.cache.set(cache_key, image_url)
        self.tasks.spawn(
            self._write_back(setting, opts, image_url), name=f"write-back-{setting}"
        )
        return image_url

    async def _write_back(self, setting: str, opts: ResolutionOptions, image_url: str) -> None:
        """Persist a generated scene to the managed store and the registry."""
        if self.managed is not None and self.upload_enabled:
            tags = [scene_tag(setting)]
            if opts.edit_mode:
                tags.append("edited")
            title = f"Scene {setting} (edited)" if opts.edit_mode else f"Scene {setting}"
            try:
                await self.managed.upload(image_url, title, tags)
            except ManagedAssetError as e:
                logger.warning("Managed upload of generated scene failed: %s", e)

        if self.registry is not None:
            await self.registry.register(
                NewRegistryAsset(
                    setting=setting,
                    mood=opts.mood,
                    customer_context=opts.customer_context,
                    scene_type=opts.scene_type or "product",
                    prompt=opts.prompt or f"Scene for {setting}",
                    image_url=image_url,
                    is_edited=opts.edit_mode,
                )
            )
