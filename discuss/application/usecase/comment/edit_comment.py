"""Edit comment use case."""

from datetime import datetime

from pydantic import BaseModel

from discuss.application.usecase.base import BaseUseCase
from discuss.domain.error import NotFoundError
from discuss.domain.service import CommentService, ScopeAggregator
from discuss.domain.value import CommentId, Scope


class EditCommentRequest(BaseModel):
    """Edit comment request."""

    scope: Scope  # Scope the comment is shown in
    comment_id: str
    content: str


class EditCommentResponse(BaseModel):
    """Edit comment response."""

    comment_id: str
    content: str
    updated_at: datetime | None


class EditCommentUseCase(BaseUseCase):
    """Use case for editing a comment shown in a scope."""

    def __init__(
        self, comment_service: CommentService, aggregator: ScopeAggregator
    ) -> None:
        """Initialize edit comment use case.

        Args:
            comment_service: Comment domain service
            aggregator: Scope aggregator holding the shown comments
        """
        self.comment_service = comment_service
        self.aggregator = aggregator

    async def execute(self, request: EditCommentRequest) -> EditCommentResponse:
        """Execute edit comment flow.

        The comment is looked up in the scope as shown, so the viewer's
        ``can_edit`` flag is checked before anything is sent. The write
        event is tagged with the scope the comment was written to, which
        for an aggregate view is narrower than the view itself.

        Args:
            request: Edit comment request

        Returns:
            Edited comment

        Raises:
            NotFoundError: If the comment is not shown in the scope
            NotAuthorizedError: If the viewer may not edit it
        """
        comment_id = CommentId(request.comment_id)
        comment = self.aggregator.find(request.scope, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)

        written_to = Scope.for_commentable(
            comment.commentable_type, comment.commentable_id, request.scope.series_id
        )
        updated = await self.comment_service.edit(written_to, comment, request.content)

        return EditCommentResponse(
            comment_id=updated.id,
            content=updated.content,
            updated_at=updated.updated_at,
        )
