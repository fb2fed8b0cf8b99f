"""List recent comments use case."""

from datetime import datetime

from pydantic import BaseModel

from discuss.application.usecase.base import BaseUseCase
from discuss.config import CommentSettings
from discuss.domain.service import CommentService
from discuss.domain.service.sanitize import sanitize_text


class RecentCommentItem(BaseModel):
    """Recent comment item in response."""

    comment_id: str
    author_name: str
    author_avatar_url: str | None
    content: str
    created_at: datetime
    context: str | None  # Where the comment was posted, for display
    series_id: str | None
    installment_id: str | None


class ListRecentCommentsRequest(BaseModel):
    """List recent comments request."""

    limit: int | None = None  # Defaults to comments.recent_page_size


class ListRecentCommentsResponse(BaseModel):
    """List recent comments response."""

    comments: list[RecentCommentItem]


class ListRecentCommentsUseCase(BaseUseCase):
    """Use case for the recent comments feed across all content."""

    def __init__(
        self, comment_service: CommentService, settings: CommentSettings
    ) -> None:
        """Initialize list recent comments use case.

        Args:
            comment_service: Comment domain service
            settings: Comment settings (default feed size)
        """
        self.comment_service = comment_service
        self.settings = settings

    async def execute(
        self, request: ListRecentCommentsRequest
    ) -> ListRecentCommentsResponse:
        """Execute list recent comments flow.

        Args:
            request: Optional feed size

        Returns:
            Most recent comments, newest first
        """
        limit = request.limit or self.settings.recent_page_size
        comments = await self.comment_service.recent(limit)

        return ListRecentCommentsResponse(
            comments=[
                RecentCommentItem(
                    comment_id=c.id,
                    author_name=c.author.name,
                    author_avatar_url=c.author.avatar_url,
                    content=sanitize_text(c.content),
                    created_at=c.created_at,
                    context=c.context.text if c.context else None,
                    series_id=c.context.series_id if c.context else None,
                    installment_id=c.context.installment_id if c.context else None,
                )
                for c in comments
            ]
        )
