"""Repository implementations."""

from .inmemory import InMemoryCommentRepository

__all__ = ["InMemoryCommentRepository"]
