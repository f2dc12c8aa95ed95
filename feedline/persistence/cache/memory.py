"""In-process activity cache."""

import copy
import time
from typing import Any, Optional

from feedline.config import CacheSettings
from feedline.domain.repository import ActivityCache


class InMemoryActivityCache(ActivityCache):
    """Dict-backed cache honouring per-group TTLs.

    Suitable for a single worker and for tests. Values are deep-copied on
    the way in and out so callers never share mutable state with the cache.
    """

    def __init__(self, settings: CacheSettings) -> None:
        self.settings = settings
        self._entries: dict[tuple[str, str], tuple[Any, Optional[float]]] = {}
        self._epochs: dict[str, int] = {}

    async def get(self, group: str, key: str) -> Optional[Any]:
        entry = self._entries.get((group, key))
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self._entries[(group, key)]
            return None
        return copy.deepcopy(value)

    async def set(self, group: str, key: str, value: Any) -> None:
        ttl = self.settings.ttl_for(group)
        expires_at = time.monotonic() + ttl if ttl else None
        self._entries[(group, key)] = (copy.deepcopy(value), expires_at)

    async def delete(self, group: str, key: str) -> None:
        self._entries.pop((group, key), None)

    async def get_epoch(self, group: str) -> int:
        return self._epochs.get(group, 0)

    async def bump_epoch(self, group: str) -> int:
        self._epochs[group] = self._epochs.get(group, 0) + 1
        return self._epochs[group]

    def clear(self) -> None:
        """Drop every entry and epoch."""
        self._entries.clear()
        self._epochs.clear()
