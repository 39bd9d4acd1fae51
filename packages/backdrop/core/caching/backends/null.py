"""No-op cache for disabling caching.

Always reports cache miss, discards all stores.
"""


class NullAssetCache:
    """No-op asset cache. Always misses."""

    def get(self, key: str) -> str | None:
        """Always returns None."""
        return None

    def set(self, key: str, ref: str) -> None:
        """Discard."""
        pass

    def __contains__(self, key: object) -> bool:
        return False

    def __len__(self) -> int:
        return 0

    def clear(self) -> None:
        """No-op."""
        pass
