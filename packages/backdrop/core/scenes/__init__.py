"""Scene background resolution: models, novelty, preseeded assets, resolver.

Import the resolver from ``backdrop.core.scenes.resolver``; this package
root only re-exports the data models.
"""

from backdrop.core.scenes.models import (
    GenerationJob,
    JobStatus,
    KnownSetting,
    ManagedAsset,
    ManagedAssetCriteria,
    NewRegistryAsset,
    PreseededAsset,
    Product,
    RegistryAsset,
    RegistryCriteria,
    ResolutionOptions,
    is_known_setting,
)

__all__ = [
    "GenerationJob",
    "JobStatus",
    "KnownSetting",
    "ManagedAsset",
    "ManagedAssetCriteria",
    "NewRegistryAsset",
    "PreseededAsset",
    "Product",
    "RegistryAsset",
    "RegistryCriteria",
    "ResolutionOptions",
    "is_known_setting",
]
