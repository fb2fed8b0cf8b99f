"""Enumerations shared across the comment engine."""

from enum import Enum


class CommentableType(str, Enum):
    """Entity type a comment is attached to."""

    SERIES = "series"
    INSTALLMENT = "installment"


class SortOrder(str, Enum):
    """Chronological order of a comment page."""

    ASC = "asc"
    DESC = "desc"


class ScopeKind(str, Enum):
    """Query/write context for comments."""

    INSTALLMENT = "installment"
    SERIES = "series"
    AGGREGATE = "aggregate"
