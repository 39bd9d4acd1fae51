"""In-memory asset cache (per resolver instance)."""


class MemoryAssetCache:
    """
    Dict-backed cache of resolved background references.

    Reads and writes never await, so a check-then-set inside one coroutine
    step is atomic with respect to the event loop.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def set(self, key: str, ref: str) -> None:
        self._entries[key] = ref

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
