"""Pydantic configuration models for Backdrop."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backdrop.core.caching.models import DEFAULT_PROMPT_PREFIX_LENGTH
from backdrop.core.providers.async_job import DEFAULT_MAX_POLLS, DEFAULT_POLL_INTERVAL_S
from backdrop.core.providers.base import DEFAULT_HEIGHT, DEFAULT_WIDTH, ImageProvider

logger = logging.getLogger(__name__)

# Provider names used by earlier deployments.
PROVIDER_ALIASES: dict[str, ImageProvider] = {
    "imagen": ImageProvider.DIRECT,
    "firefly": ImageProvider.ASYNC,
    "cms-only": ImageProvider.MANAGED_ONLY,
}


class ConfigBase(BaseModel):
    """Base class for Backdrop configuration sections."""

    model_config = ConfigDict(extra="ignore")  # Forward compatibility


class LoggingConfig(ConfigBase):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log lines")
    filename: str | None = Field(default=None, description="Log file (stdout when unset)")


class OAuthClientConfig(ConfigBase):
    """OAuth2 client-credentials settings for a service."""

    token_url: str | None = None
    client_id: str | None = None
    client_secret: str | None = Field(default=None, repr=False)
    scope: str | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.token_url and self.client_id and self.client_secret)


class ServiceConfig(ConfigBase):
    """Base URL and timeout for an HTTP service."""

    base_url: str | None = None
    timeout_s: float = Field(default=15.0, gt=0)


class ManagedAssetConfig(ServiceConfig):
    """Managed-asset (CMS) store settings."""

    upload_enabled: bool = Field(
        default=True, description="Upload newly generated scenes to the managed store"
    )


class GenerationConfig(ConfigBase):
    """Image generation settings."""

    enabled: bool = Field(default=False, description="Enable generative backgrounds")
    provider: ImageProvider = ImageProvider.NONE
    base_url: str | None = None
    token_url: str | None = None
    client_id: str | None = None
    client_secret: str | None = Field(default=None, repr=False)
    scope: str = "openid,AdobeID,firefly_api,ff_apis"
    width: int = Field(default=DEFAULT_WIDTH, gt=0)
    height: int = Field(default=DEFAULT_HEIGHT, gt=0)
    timeout_s: float = Field(default=60.0, gt=0)
    poll_interval_s: float = Field(default=DEFAULT_POLL_INTERVAL_S, ge=0.0)
    max_polls: int = Field(default=DEFAULT_MAX_POLLS, ge=1)

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: object) -> object:
        """Accept aliases, and treat any unrecognized name as a generating provider."""
        if not isinstance(v, str):
            return v
        name = v.strip().lower()
        if not name:
            return ImageProvider.NONE
        if name in PROVIDER_ALIASES:
            return PROVIDER_ALIASES[name]
        if name not in {p.value for p in ImageProvider}:
            logger.warning("Unknown image provider %r, using %r", v, ImageProvider.ASYNC.value)
            return ImageProvider.ASYNC
        return name

    @property
    def has_credentials(self) -> bool:
        return bool(self.base_url and self.token_url and self.client_id and self.client_secret)


class PreseededConfig(ConfigBase):
    """Preseeded asset bank settings."""

    asset_base_url: str | None = Field(
        default=None, description="Host serving /assets/backgrounds/* (needed for HEAD checks)"
    )
    catalog_path: str | None = Field(
        default=None, description="JSON/YAML catalog replacing the built-in one"
    )


class CacheConfig(ConfigBase):
    """Resolved-background cache settings."""

    enabled: bool = True
    prompt_prefix_length: int = Field(default=DEFAULT_PROMPT_PREFIX_LENGTH, ge=1)


class AppConfig(ConfigBase):
    """Application-level configuration."""

    logging: LoggingConfig = LoggingConfig()
    generation: GenerationConfig = GenerationConfig()
    crm_auth: OAuthClientConfig = OAuthClientConfig()
    registry: ServiceConfig = ServiceConfig()
    managed_assets: ManagedAssetConfig = ManagedAssetConfig()
    preseeded: PreseededConfig = PreseededConfig()
    cache: CacheConfig = CacheConfig()
    novelty_strategy: str = Field(default="allow-list", pattern="^(allow-list|deny-list)$")

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("backdrop.yaml")
