"""Base classes for dependency injection providers."""

from typing import ClassVar, Literal

from dishka import Provider

# Components that tests can swap for in-memory or static versions
Component = Literal["identity", "persistence"]


class ProviderBase(Provider):
    """Base for all DI providers.

    A provider with subclasses is a mockable component: each subclass is
    either its production or its mock implementation.

    Attributes:
        __mock_component__: Component name, None for concrete providers
        __is_mock__: Whether this is a mock implementation
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False

    @classmethod
    def is_mockable(cls) -> bool:
        return bool(cls.__subclasses__())

    @classmethod
    def label(cls) -> str:
        """Component name if there is one, else the class name."""
        return cls.__mock_component__ or cls.__name__
