"""Configuration management for Backdrop."""

from backdrop.core.config.loader import load_app_config, load_config
from backdrop.core.config.models import (
    AppConfig,
    CacheConfig,
    GenerationConfig,
    LoggingConfig,
    ManagedAssetConfig,
    OAuthClientConfig,
    PreseededConfig,
    ServiceConfig,
)

__all__ = [
    # Loaders
    "load_config",
    "load_app_config",
    # App-level config
    "AppConfig",
    "CacheConfig",
    "GenerationConfig",
    "LoggingConfig",
    "ManagedAssetConfig",
    "OAuthClientConfig",
    "PreseededConfig",
    "ServiceConfig",
]
