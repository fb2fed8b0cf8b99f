"""Base classes for dependency injection providers."""

from typing import ClassVar, Literal

from dishka import Provider

Component = Literal["repository", "identity"]


class ProviderBase(Provider):
    """Base for all DI providers with unified metadata.

    Attributes:
        __mock_component__: Component name (for mockable components, None for concrete providers)
        __is_mock__: Whether this is a mock implementation
        __depends_on__: Components that must also be real when this one is
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
    __depends_on__: ClassVar[set[Component]] = set()
