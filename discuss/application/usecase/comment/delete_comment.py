"""Delete comment use case."""

from pydantic import BaseModel

from discuss.application.usecase.base import BaseUseCase
from discuss.domain.error import NotFoundError
from discuss.domain.service import CommentService, ScopeAggregator
from discuss.domain.value import CommentId, Scope


class DeleteCommentRequest(BaseModel):
    """Delete comment request."""

    scope: Scope  # Scope the comment is shown in
    comment_id: str


class DeleteCommentResponse(BaseModel):
    """Delete comment response."""

    comment_id: str
    deleted: bool


class DeleteCommentUseCase(BaseUseCase):
    """Use case for deleting a comment shown in a scope."""

    def __init__(
        self, comment_service: CommentService, aggregator: ScopeAggregator
    ) -> None:
        """Initialize delete comment use case.

        Args:
            comment_service: Comment domain service
            aggregator: Scope aggregator holding the shown comments
        """
        self.comment_service = comment_service
        self.aggregator = aggregator

    async def execute(self, request: DeleteCommentRequest) -> DeleteCommentResponse:
        """Execute delete comment flow.

        Args:
            request: Delete comment request

        Returns:
            Confirmation of the deletion

        Raises:
            NotFoundError: If the comment is not shown in the scope
            NotAuthorizedError: If the viewer may not delete it
        """
        comment_id = CommentId(request.comment_id)
        comment = self.aggregator.find(request.scope, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)

        written_to = Scope.for_commentable(
            comment.commentable_type, comment.commentable_id, request.scope.series_id
        )
        await self.comment_service.delete(written_to, comment)

        return DeleteCommentResponse(comment_id=comment_id, deleted=True)
