"""Cache infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire

from feedline.config import CacheSettings
from feedline.domain.repository import ActivityCache
from feedline.persistence.cache import (
    InMemoryActivityCache,
    RedisActivityCache,
    create_redis_client,
)
from feedline.util.di.base import ProviderBase
from feedline.util.error import ConfigurationError


class CacheProvider(ProviderBase):
    """Cache component base."""

    __mock_component__ = "cache"


class ProdCacheProvider(CacheProvider):
    """Production cache provider, backend chosen by settings."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_activity_cache(
        self, settings: CacheSettings
    ) -> AsyncIterator[ActivityCache]:
        """Provide the activity cache shared by all requests."""
        if settings.backend == "memory":
            logfire.info("Using in-memory activity cache")
            yield InMemoryActivityCache(settings)
        elif settings.backend == "redis":
            client = create_redis_client(settings)
            logfire.info("Using Redis activity cache", url=settings.redis_url)
            yield RedisActivityCache(client, settings)
            await client.aclose()
        else:
            raise ConfigurationError(f"Unknown cache backend: {settings.backend}")
