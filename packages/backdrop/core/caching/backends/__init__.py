"""Cache backend implementations."""

from backdrop.core.caching.backends.memory import MemoryAssetCache
from backdrop.core.caching.backends.null import NullAssetCache

__all__ = ["MemoryAssetCache", "NullAssetCache"]
