"""Domain model entities for the comment engine."""

from discuss.domain.model.challenge import Challenge
from discuss.domain.model.comment import (
    Author,
    Comment,
    CommentContext,
    InstallmentInfo,
    RawComment,
    Reply,
)
from discuss.domain.model.draft import CommentDraft
from discuss.domain.model.page import PagedView, ReplyPage

__all__ = [
    "Author",
    "Challenge",
    "Comment",
    "CommentDraft",
    "CommentContext",
    "InstallmentInfo",
    "PagedView",
    "RawComment",
    "Reply",
    "ReplyPage",
]
