"""In-memory repository implementations for testing."""

from .comment import InMemoryCommentRepository

__all__ = ["InMemoryCommentRepository"]
