"""Repository interfaces for the comment engine.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the adapter and persistence layers.
"""

from discuss.domain.repository.comment import CommentRepository
from discuss.domain.repository.identity import IdentityProvider

__all__ = [
    "CommentRepository",
    "IdentityProvider",
]
