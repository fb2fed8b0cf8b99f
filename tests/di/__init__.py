"""Mock providers for testing."""

from .identity import TEST_TOKEN, MockIdentityProvider
from .repository import MockRepositoryProvider
from .container import build_test_container

__all__ = [
    "MockIdentityProvider",
    "MockRepositoryProvider",
    "TEST_TOKEN",
    "build_test_container",
]
