"""Infrastructure providers."""

# Import bases
from .identity import IdentityComponentProvider
from .repository import RepositoryProvider

# Import implementations (needed for __subclasses__())
from .identity import ProdIdentityProvider  # noqa: F401
from .repository import ProdRepositoryProvider  # noqa: F401

__all__ = [
    "IdentityComponentProvider",
    "ProdIdentityProvider",
    "ProdRepositoryProvider",
    "RepositoryProvider",
]
