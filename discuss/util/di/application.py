"""Application layer DI providers."""

from dishka import Scope, provide

from discuss.application.usecase.comment import (
    DeleteCommentUseCase,
    EditCommentUseCase,
    ListCommentsUseCase,
    ListRecentCommentsUseCase,
    PostCommentUseCase,
)
from discuss.config import CommentSettings
from discuss.domain.service import (
    AbuseChallengeMediator,
    CommentService,
    ScopeAggregator,
)
from discuss.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_list_comments_use_case(
        self, aggregator: ScopeAggregator
    ) -> ListCommentsUseCase:
        """Provide list comments use case."""
        return ListCommentsUseCase(aggregator=aggregator)

    @provide(scope=Scope.REQUEST)
    def get_post_comment_use_case(
        self, mediator: AbuseChallengeMediator, aggregator: ScopeAggregator
    ) -> PostCommentUseCase:
        """Provide post comment use case."""
        return PostCommentUseCase(mediator=mediator, aggregator=aggregator)

    @provide(scope=Scope.REQUEST)
    def get_edit_comment_use_case(
        self, comment_service: CommentService, aggregator: ScopeAggregator
    ) -> EditCommentUseCase:
        """Provide edit comment use case."""
        return EditCommentUseCase(
            comment_service=comment_service, aggregator=aggregator
        )

    @provide(scope=Scope.REQUEST)
    def get_delete_comment_use_case(
        self, comment_service: CommentService, aggregator: ScopeAggregator
    ) -> DeleteCommentUseCase:
        """Provide delete comment use case."""
        return DeleteCommentUseCase(
            comment_service=comment_service, aggregator=aggregator
        )

    @provide(scope=Scope.REQUEST)
    def get_list_recent_comments_use_case(
        self, comment_service: CommentService, settings: CommentSettings
    ) -> ListRecentCommentsUseCase:
        """Provide list recent comments use case."""
        return ListRecentCommentsUseCase(
            comment_service=comment_service, settings=settings
        )
