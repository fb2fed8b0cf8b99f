"""Domain layer DI providers."""

from collections.abc import Iterator

from dishka import Scope, provide
import logfire

from discuss.config import CommentSettings
from discuss.domain.repository import CommentRepository, IdentityProvider
from discuss.domain.service import (
    AbuseChallengeMediator,
    CacheSynchronizer,
    CommentService,
    EventBus,
    ReplyTreeBuilder,
    ScopeAggregator,
    ViewCache,
)
from discuss.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are APP-scoped: one container is one session, and the
    cache and event bus it owns live exactly as long as the container.
    """

    scope = Scope.APP

    @provide
    def get_view_cache(self, settings: CommentSettings) -> Iterator[ViewCache]:
        """Provide the session's page cache, emptied when the session ends."""
        cache = ViewCache(stale_after_seconds=settings.stale_after_seconds)
        yield cache
        logfire.info("View cache released", views=len(cache))
        cache.clear()

    @provide
    def get_event_bus(self) -> Iterator[EventBus]:
        """Provide the session's write event bus."""
        bus = EventBus()
        yield bus
        bus.clear()

    @provide
    def get_reply_tree_builder(self, settings: CommentSettings) -> ReplyTreeBuilder:
        """Provide reply tree builder."""
        return ReplyTreeBuilder(expand_threshold=settings.reply_expand_threshold)

    @provide
    def get_scope_aggregator(
        self,
        comment_repository: CommentRepository,
        cache: ViewCache,
        tree_builder: ReplyTreeBuilder,
        settings: CommentSettings,
    ) -> Iterator[ScopeAggregator]:
        """Provide scope aggregator; closes every mounted scope on teardown."""
        aggregator = ScopeAggregator(
            repository=comment_repository,
            cache=cache,
            tree_builder=tree_builder,
            page_size=settings.page_size,
            reply_page_size=settings.reply_page_size,
        )
        yield aggregator
        aggregator.close_all()

    @provide
    def get_cache_synchronizer(
        self,
        aggregator: ScopeAggregator,
        cache: ViewCache,
        bus: EventBus,
    ) -> Iterator[CacheSynchronizer]:
        """Provide cache synchronizer subscribed to the session's bus."""
        synchronizer = CacheSynchronizer(aggregator=aggregator, cache=cache, bus=bus)
        yield synchronizer
        synchronizer.close()

    @provide
    def get_abuse_challenge_mediator(
        self,
        comment_repository: CommentRepository,
        identity: IdentityProvider,
        bus: EventBus,
        synchronizer: CacheSynchronizer,
        settings: CommentSettings,
    ) -> AbuseChallengeMediator:
        """Provide abuse challenge mediator.

        Depends on the synchronizer so that its subscription exists before
        the first write is published.
        """
        _ = synchronizer
        return AbuseChallengeMediator(
            repository=comment_repository,
            identity=identity,
            bus=bus,
            max_content_length=settings.max_content_length,
        )

    @provide
    def get_comment_service(
        self,
        comment_repository: CommentRepository,
        identity: IdentityProvider,
        bus: EventBus,
        synchronizer: CacheSynchronizer,
        settings: CommentSettings,
    ) -> CommentService:
        """Provide comment domain service."""
        _ = synchronizer
        return CommentService(
            comment_repository=comment_repository,
            identity=identity,
            bus=bus,
            max_content_length=settings.max_content_length,
        )
