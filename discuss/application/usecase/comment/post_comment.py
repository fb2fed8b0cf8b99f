"""Post comment use case."""

from pydantic import BaseModel

from discuss.application.usecase.base import BaseUseCase
from discuss.domain.error import NotFoundError, ValidationError
from discuss.domain.service import (
    AbuseChallengeMediator,
    AttemptState,
    CompositionAttempt,
    CompositionView,
    ScopeAggregator,
)
from discuss.domain.value import CommentId, Scope


class PostCommentRequest(BaseModel):
    """Post comment request.

    The first submission starts an attempt; resubmissions after a challenge
    pass back ``attempt_id`` together with the answer.
    """

    scope: Scope
    content: str | None = None  # Keeps the attempt's text when omitted
    parent_id: str | None = None  # Comment being replied to
    attempt_id: str | None = None
    answer: str | None = None


class PostCommentResponse(BaseModel):
    """Post comment response."""

    attempt_id: str
    state: AttemptState
    content: str
    challenge_question: str | None = None
    comment_id: str | None = None
    parent_id: str | None = None
    error_kind: str | None = None
    error_message: str | None = None
    refreshed: list[str] = []
    refresh_failed: list[str] = []


class PostCommentUseCase(BaseUseCase):
    """Use case for posting a comment or reply, answering challenges on the way."""

    def __init__(
        self,
        mediator: AbuseChallengeMediator,
        aggregator: ScopeAggregator,
    ) -> None:
        """Initialize post comment use case.

        Args:
            mediator: Abuse challenge mediator
            aggregator: Scope aggregator, used to resolve thread roots
        """
        self.mediator = mediator
        self.aggregator = aggregator

    async def execute(self, request: PostCommentRequest) -> PostCommentResponse:
        """Execute post comment flow.

        Steps:
        1. Resume the attempt, or start one (a reply to a reply is
           retargeted at its thread root, and a reply from the aggregate
           view at the scope that thread was written to)
        2. Submit the content, with the challenge answer if one is held
        3. Forget the attempt once it succeeds

        Args:
            request: Post comment request

        Returns:
            State of the attempt after submission

        Raises:
            NotFoundError: If ``attempt_id`` is unknown, or an aggregate
                reply targets a comment that is not shown
            ValidationError: If a top-level comment targets the aggregate
            InvalidTransitionError: If the attempt is already submitting
        """
        if request.attempt_id is not None:
            attempt = self.mediator.attempt(request.attempt_id)
        else:
            scope, parent_id = self._target(request)
            attempt = self.mediator.begin(scope, parent_id=parent_id)

        view = await attempt.submit(content=request.content, answer=request.answer)
        if view.state == AttemptState.SUCCEEDED:
            self.mediator.finish(attempt.id)

        return self._response(attempt, view)

    def _target(self, request: PostCommentRequest) -> tuple[Scope, CommentId | None]:
        """Scope and thread root a new attempt writes to.

        A reply made from the aggregate view goes to the scope its thread
        was written to. A top-level comment has no such scope there.
        """
        scope = request.scope
        if request.parent_id is None:
            if not scope.writable:
                raise ValidationError(
                    f"Cannot post a top-level comment to {scope}; "
                    "post to an installment or the series"
                )
            return scope, None

        parent_id = CommentId(request.parent_id)
        if scope.writable and not self.aggregator.is_open(scope):
            return scope, parent_id

        root_id = self.aggregator.thread_root(scope, parent_id) or parent_id
        if scope.writable:
            return scope, root_id
        root = self.aggregator.find(scope, root_id)
        if root is None:
            raise NotFoundError("Comment", parent_id)
        written_to = Scope.for_commentable(
            root.commentable_type, root.commentable_id, scope.series_id
        )
        return written_to, root_id

    @staticmethod
    def _response(
        attempt: CompositionAttempt, view: CompositionView
    ) -> PostCommentResponse:
        report = attempt.sync_report
        return PostCommentResponse(
            attempt_id=attempt.id,
            state=view.state,
            content=view.content,
            challenge_question=view.challenge.question if view.challenge else None,
            comment_id=attempt.comment.id if attempt.comment else None,
            parent_id=view.parent_id,
            error_kind=type(view.error).__name__ if view.error else None,
            error_message=str(view.error) if view.error else None,
            refreshed=[str(s) for s in report.refreshed] if report else [],
            refresh_failed=[str(s) for s in report.failed] if report else [],
        )
