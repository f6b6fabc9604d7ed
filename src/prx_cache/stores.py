from __future__ import annotations

from typing import Any

from .cache import CacheStore


class HashMapStore(CacheStore):
    """Unbounded in-process store; never evicts or expires entries."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
