"""Cache synchronizer.

Reacts to write events by invalidating every view the write could have
changed, and nothing else.
"""

from dataclasses import dataclass, field

import logfire

from discuss.domain.service.aggregator import FetchFailure, ScopeAggregator
from discuss.domain.service.cache import ViewCache
from discuss.domain.service.events import CommentEvent, CommentPosted, EventBus
from discuss.domain.value import Scope, ViewKey

from .base import Service


@dataclass(frozen=True)
class SyncReport:
    """Outcome of handling one write event."""

    stale: tuple[ViewKey, ...] = ()
    refreshed: tuple[Scope, ...] = ()
    failed: dict[Scope, FetchFailure] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class CacheSynchronizer(Service):
    """Invalidates and refreshes views after successful writes.

    The focused scope is refetched eagerly; any other affected scope is
    only marked stale and refetched by the aggregator on next access.
    """

    def __init__(
        self,
        aggregator: ScopeAggregator,
        cache: ViewCache,
        bus: EventBus,
    ) -> None:
        """Initialize the synchronizer and subscribe it to write events.

        Args:
            aggregator: Aggregator that owns the mounted scopes
            cache: Cache shared with the aggregator
            bus: Bus carrying write events
        """
        self.aggregator = aggregator
        self.cache = cache
        self._unsubscribe = bus.subscribe(CommentEvent, self.handle)

    def close(self) -> None:
        """Stop listening for write events."""
        self._unsubscribe()

    async def handle(self, event: CommentEvent) -> SyncReport:
        """Apply one write event to the cache.

        Args:
            event: Event published after a successful write

        Returns:
            Stale keys, scopes refreshed eagerly, and refresh failures
        """
        affected = list(dict.fromkeys(event.affected))
        with logfire.span(
            "cache_synchronizer.handle",
            event=type(event).__name__,
            scopes=[str(s) for s in affected],
        ):
            stale: list[ViewKey] = []
            for scope in affected:
                stale.extend(self.cache.mark_stale(scope))

            refreshed: list[Scope] = []
            failed: dict[Scope, FetchFailure] = {}
            focused = self.aggregator.focused
            if focused in affected:
                view = await self.aggregator.refresh(focused)
                if view.error is not None:
                    failed[focused] = view.error
                else:
                    refreshed.append(focused)
                    if isinstance(event, CommentPosted):
                        self.aggregator.reconcile(focused, event.comment)

            logfire.info(
                "Write event synchronized",
                event=type(event).__name__,
                stale_views=len(stale),
                refreshed=len(refreshed),
                failed=len(failed),
            )
            return SyncReport(
                stale=tuple(stale), refreshed=tuple(refreshed), failed=failed
            )
