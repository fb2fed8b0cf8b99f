"""Comment use cases."""

from .delete_comment import (
    DeleteCommentRequest,
    DeleteCommentResponse,
    DeleteCommentUseCase,
)
from .edit_comment import EditCommentRequest, EditCommentResponse, EditCommentUseCase
from .list_comments import (
    CommentItem,
    ListCommentsRequest,
    ListCommentsResponse,
    ListCommentsUseCase,
    ReplyItem,
)
from .list_recent_comments import (
    ListRecentCommentsRequest,
    ListRecentCommentsResponse,
    ListRecentCommentsUseCase,
    RecentCommentItem,
)
from .post_comment import PostCommentRequest, PostCommentResponse, PostCommentUseCase

__all__ = [
    "CommentItem",
    "DeleteCommentRequest",
    "DeleteCommentResponse",
    "DeleteCommentUseCase",
    "EditCommentRequest",
    "EditCommentResponse",
    "EditCommentUseCase",
    "ListCommentsRequest",
    "ListCommentsResponse",
    "ListCommentsUseCase",
    "ListRecentCommentsRequest",
    "ListRecentCommentsResponse",
    "ListRecentCommentsUseCase",
    "PostCommentRequest",
    "PostCommentResponse",
    "PostCommentUseCase",
    "RecentCommentItem",
    "ReplyItem",
]
