"""Redis-backed activity cache."""

import json
from typing import Any, Optional

import logfire
import redis.asyncio as redis

from feedline.config import CacheSettings
from feedline.domain.repository import ActivityCache


class RedisActivityCache(ActivityCache):
    """Activity cache shared between workers through Redis.

    Values are stored as JSON under ``<prefix>:<group>:<key>``; group epochs
    live under ``<prefix>:epoch:<group>`` and are advanced with INCR.
    """

    def __init__(self, client: redis.Redis, settings: CacheSettings) -> None:
        self.client = client
        self.settings = settings

    def _key(self, group: str, key: str) -> str:
        return f"{self.settings.key_prefix}:{group}:{key}"

    def _epoch_key(self, group: str) -> str:
        return f"{self.settings.key_prefix}:epoch:{group}"

    async def get(self, group: str, key: str) -> Optional[Any]:
        raw = await self.client.get(self._key(group, key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logfire.warn("Discarding unreadable cache entry", group=group, key=key)
            return None

    async def set(self, group: str, key: str, value: Any) -> None:
        payload = json.dumps(value)
        ttl = self.settings.ttl_for(group)
        await self.client.set(self._key(group, key), payload, ex=ttl or None)

    async def delete(self, group: str, key: str) -> None:
        await self.client.delete(self._key(group, key))

    async def get_epoch(self, group: str) -> int:
        raw = await self.client.get(self._epoch_key(group))
        return int(raw) if raw is not None else 0

    async def bump_epoch(self, group: str) -> int:
        epoch = await self.client.incr(self._epoch_key(group))
        logfire.debug("Cache epoch bumped", group=group, epoch=epoch)
        return int(epoch)


def create_redis_client(settings: CacheSettings) -> redis.Redis:
    """Create an asyncio Redis client from cache settings."""
    return redis.from_url(settings.redis_url, decode_responses=True)
