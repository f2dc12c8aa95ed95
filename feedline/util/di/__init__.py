"""Dependency injection wiring.

Providers are listed once in PROVIDERS. A provider with subclasses is a
mockable component: its production and mock variants are the subclasses,
told apart by ``__is_mock__``.
"""

from typing import Type

from feedline.util.di.application import ProdApplicationProvider
from feedline.util.di.base import Component, ProviderBase
from feedline.util.di.core import ProdConfigProvider
from feedline.util.di.domain import ProdDomainProvider
from feedline.util.di.infrastructure import (
    CacheProvider,
    PersistenceProvider,
    ProdCacheProvider,
    ProdPersistenceProvider,
)
from feedline.util.error import ConfigurationError

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    CacheProvider,
    PersistenceProvider,
]


def mockable_components() -> dict[Component, Type[ProviderBase]]:
    """Map each mockable component name to its base provider."""
    return {
        base.__mock_component__: base
        for base in PROVIDERS
        if base.__mock_component__ and base.__subclasses__()
    }


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Pick the provider class to instantiate for a PROVIDERS entry.

    Raises:
        ConfigurationError: If a mockable component has no variant of the
            requested kind
    """
    variants = base.__subclasses__()
    if not variants:
        return base

    for variant in variants:
        if variant.__is_mock__ == use_mock:
            return variant

    kind = "mock" if use_mock else "production"
    name = base.__mock_component__ or base.__name__
    raise ConfigurationError(f"No {kind} provider registered for {name}")


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "mockable_components",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "CacheProvider",
    "PersistenceProvider",
    "ProdCacheProvider",
    "ProdPersistenceProvider",
]
