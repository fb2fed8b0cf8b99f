"""Paginated results."""

from datetime import datetime

from pydantic import Field

from discuss.domain.model.comment import RawComment, Reply
from discuss.domain.model.common import DomainModel
from discuss.domain.value import SortOrder


class PagedView(DomainModel):
    """One fetched page of top-level comments for a (scope, sort) pair.

    Replaced wholesale on refetch; never edited in place.
    """

    items: list[RawComment] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0)
    current_page: int = Field(default=1, ge=1)
    total_pages: int = Field(default=1, ge=1)
    sort: SortOrder = SortOrder.DESC
    fetched_at: datetime = Field(default_factory=datetime.now)


class ReplyPage(DomainModel):
    """One page of replies to a single top-level comment."""

    items: list[Reply] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0)
    current_page: int = Field(default=1, ge=1)
    total_pages: int = Field(default=1, ge=1)
