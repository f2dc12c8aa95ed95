"""Activity cache interface."""

import hashlib
from abc import ABC, abstractmethod
from typing import Any, Optional


class ActivityCache(ABC):
    """Grouped key/value cache with per-group epochs.

    Values are JSON-compatible (ids, counts, dumped models). A stored value
    is never None, so None always means a miss.

    Listing results are keyed by the group's current epoch plus a digest of
    the query text. Bumping the epoch orphans every earlier listing entry
    of the group at once.
    """

    @abstractmethod
    async def get(self, group: str, key: str) -> Optional[Any]:
        """Read a value, None on miss."""
        pass

    @abstractmethod
    async def set(self, group: str, key: str, value: Any) -> None:
        """Store a value using the group's TTL."""
        pass

    @abstractmethod
    async def delete(self, group: str, key: str) -> None:
        """Remove a value."""
        pass

    @abstractmethod
    async def get_epoch(self, group: str) -> int:
        """Current epoch of a group (0 if never bumped)."""
        pass

    @abstractmethod
    async def bump_epoch(self, group: str) -> int:
        """Advance a group's epoch; returns the new value."""
        pass

    @staticmethod
    def digest(text: str) -> str:
        """SHA-256 hex digest of query text."""
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    async def get_incremented(self, group: str, text: str) -> Optional[Any]:
        """Read a listing entry keyed by the current epoch and query text."""
        epoch = await self.get_epoch(group)
        return await self.get(group, f"{epoch}:{self.digest(text)}")

    async def set_incremented(self, group: str, text: str, value: Any) -> None:
        """Store a listing entry under the current epoch."""
        epoch = await self.get_epoch(group)
        await self.set(group, f"{epoch}:{self.digest(text)}", value)
