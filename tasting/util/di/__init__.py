"""Dependency injection module."""

from typing import Type

from tasting.util.di.application import ProdApplicationProvider
from tasting.util.di.base import Component, ProviderBase
from tasting.util.di.core import ProdConfigProvider
from tasting.util.di.domain import ProdDomainProvider
from tasting.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
    ProdViewerProvider,
    ViewerProvider,
)
from tasting.util.error import DependencyInjectionError

PROVIDERS: list[Type[ProviderBase]] = [
    # Always the real thing
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    # Swapped out in tests
    PersistenceProvider,
    ViewerProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Pick the provider class to install for ``base``.

    A concrete provider is returned as-is. For a mockable component the
    subclass whose ``__is_mock__`` matches ``use_mock`` is returned.

    Args:
        base: Entry from PROVIDERS
        use_mock: Whether to pick the mock implementation

    Returns:
        Provider class (not instantiated)

    Raises:
        DependencyInjectionError: If the component has no such implementation
    """
    if not base.is_mockable():
        return base

    impl = next(
        (c for c in base.__subclasses__() if c.__is_mock__ == use_mock),
        None,
    )
    if impl is None:
        kind = "mock" if use_mock else "production"
        raise DependencyInjectionError(
            f"No {kind} implementation for {base.label()}",
            component=base.__mock_component__,
        )
    return impl


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "PersistenceProvider",
    "ViewerProvider",
    "ProdPersistenceProvider",
    "ProdViewerProvider",
]
