"""HTTP comment store adapter."""

from .client import HttpCommentRepository

__all__ = ["HttpCommentRepository"]
