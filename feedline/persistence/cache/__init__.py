"""Activity cache implementations."""

from feedline.persistence.cache.memory import InMemoryActivityCache
from feedline.persistence.cache.redis import RedisActivityCache, create_redis_client

__all__ = [
    "InMemoryActivityCache",
    "RedisActivityCache",
    "create_redis_client",
]
