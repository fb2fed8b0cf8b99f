"""Domain value objects for the comment engine."""

from discuss.domain.value.identifiers import (
    CommentId,
    InstallmentId,
    SeriesId,
    UserId,
)
from discuss.domain.value.scope import Scope, ViewKey
from discuss.domain.value.types import CommentableType, ScopeKind, SortOrder

__all__ = [
    # Identifiers
    "CommentId",
    "InstallmentId",
    "SeriesId",
    "UserId",
    # Types
    "CommentableType",
    "ScopeKind",
    "SortOrder",
    "Scope",
    "ViewKey",
]
