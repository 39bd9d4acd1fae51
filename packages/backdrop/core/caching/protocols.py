"""Protocol for resolved-background cache backends."""

from typing import Protocol


class AssetCache(Protocol):
    """
    Protocol for caches mapping a derived key to an image reference.

    References are opaque strings (URL, path, data URI or gradient). Entries
    live as long as the cache instance; there is no eviction.
    """

    def get(self, key: str) -> str | None:
        """Return the cached reference, or None on miss."""
        ...

    def set(self, key: str, ref: str) -> None:
        """Store a reference under key (overwrites)."""
        ...

    def __contains__(self, key: object) -> bool: ...

    def __len__(self) -> int: ...

    def clear(self) -> None:
        """Drop all entries."""
        ...
