"""Unit tests for RedisActivityCache, backed by fakeredis."""

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from feedline.config import CacheSettings
from feedline.persistence.cache import RedisActivityCache


@pytest_asyncio.fixture
async def redis_client():
    client = FakeRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def cache(redis_client):
    return RedisActivityCache(redis_client, CacheSettings(key_prefix="test"))


class TestRedisActivityCache:
    """Tests for the shared cache."""

    @pytest.mark.asyncio
    async def test_values_are_stored_as_json(self, cache, redis_client):
        """Entries live under prefix:group:key as JSON."""
        # Act
        await cache.set("activity_item", "7", {"id": 7, "content": "Hi"})

        # Assert
        assert await redis_client.get("test:activity_item:7") == (
            '{"id": 7, "content": "Hi"}'
        )
        assert await cache.get("activity_item", "7") == {"id": 7, "content": "Hi"}

    @pytest.mark.asyncio
    async def test_delete(self, cache):
        """Deleted entries miss."""
        # Arrange
        await cache.set("activity_comments", "7", "none")

        # Act
        await cache.delete("activity_comments", "7")

        # Assert
        assert await cache.get("activity_comments", "7") is None

    @pytest.mark.asyncio
    async def test_group_ttls(self, cache, redis_client):
        """Only groups with a TTL get an expiry."""
        # Act
        await cache.set("activity_with_last_activity", "k", [1])
        await cache.set("activity", "k", [1])

        # Assert
        ttl = await redis_client.ttl("test:activity_with_last_activity:k")
        assert 0 < ttl <= 300
        assert await redis_client.ttl("test:activity:k") == -1

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_a_miss(self, cache, redis_client):
        """Garbage under a cache key is treated as a miss."""
        # Arrange
        await redis_client.set("test:activity:broken", "{not json")

        # Act
        value = await cache.get("activity", "broken")

        # Assert
        assert value is None

    @pytest.mark.asyncio
    async def test_epochs(self, cache, redis_client):
        """Epochs start at zero and advance with INCR."""
        # Arrange
        await cache.set_incremented("activity", "SELECT 1", [3])

        # Act
        first = await cache.bump_epoch("activity")
        second = await cache.bump_epoch("activity")

        # Assert
        assert (first, second) == (1, 2)
        assert await cache.get_epoch("activity") == 2
        assert await redis_client.get("test:epoch:activity") == "2"
        assert await cache.get_incremented("activity", "SELECT 1") is None
