"""Caching of resolved background references.

Key features:
- Semantic cache keys (setting + prompt prefix, managed id/tag, or setting)
- Pluggable backends behind the AssetCache protocol
- In-memory backend for per-resolver caching, null backend to disable it
"""

from backdrop.core.caching.backends.memory import MemoryAssetCache
from backdrop.core.caching.backends.null import NullAssetCache
from backdrop.core.caching.models import DEFAULT_PROMPT_PREFIX_LENGTH, derive_cache_key
from backdrop.core.caching.protocols import AssetCache

__all__ = [
    # Core
    "AssetCache",
    "derive_cache_key",
    "DEFAULT_PROMPT_PREFIX_LENGTH",
    # Backends
    "MemoryAssetCache",
    "NullAssetCache",
]
