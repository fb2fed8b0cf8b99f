"""Cache of fetched comment pages.

One ViewCache is owned per session and handed to every component that needs
it; there is no module-level cache.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

import logfire

from discuss.domain.model import PagedView
from discuss.domain.value import Scope, ViewKey


@dataclass
class CacheEntry:
    """A cached page and its freshness."""

    page: PagedView
    stored_at: float
    stale: bool = False


class ViewCache:
    """Pages keyed by (scope, sort, page, page size).

    Each scope carries an invalidation generation. A page whose request was
    issued before the latest invalidation of its scope is stored already
    stale, so a response that raced a write can never pass as fresh.
    """

    def __init__(
        self,
        stale_after_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty cache.

        Args:
            stale_after_seconds: Age after which a page is refetched on access
            clock: Monotonic time source
        """
        self.stale_after_seconds = stale_after_seconds
        self._clock = clock
        self._entries: dict[ViewKey, CacheEntry] = {}
        self._generations: dict[Scope, int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: ViewKey) -> bool:
        return key in self._entries

    def get(self, key: ViewKey) -> CacheEntry | None:
        return self._entries.get(key)

    def generation(self, scope: Scope) -> int:
        """Current invalidation generation of a scope."""
        return self._generations.get(scope, 0)

    def put(self, key: ViewKey, page: PagedView, generation: int | None = None) -> None:
        """Store a page, replacing any previous one for the key.

        Args:
            key: Cache key
            page: Fetched page
            generation: Scope generation when the request was issued; an
                older generation stores the page as stale
        """
        stale = generation is not None and generation != self.generation(key.scope)
        self._entries[key] = CacheEntry(page=page, stored_at=self._clock(), stale=stale)

    def update(self, key: ViewKey, page: PagedView) -> None:
        """Swap the page of an existing entry, keeping its freshness."""
        entry = self._entries.get(key)
        if entry is not None:
            entry.page = page

    def is_fresh(self, key: ViewKey) -> bool:
        """Whether the key can be served without a refetch."""
        entry = self._entries.get(key)
        if entry is None or entry.stale:
            return False
        return self._clock() - entry.stored_at <= self.stale_after_seconds

    def is_stale(self, key: ViewKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self.is_fresh(key)

    def keys(self, scope: Scope | None = None) -> list[ViewKey]:
        """Cached keys, optionally restricted to one scope."""
        return [k for k in self._entries if scope is None or k.scope == scope]

    def mark_stale(self, scope: Scope) -> list[ViewKey]:
        """Invalidate every cached view of exactly this scope.

        Marking an already stale view again changes nothing but the
        generation.

        Args:
            scope: Scope to invalidate

        Returns:
            Keys now marked stale
        """
        self._generations[scope] = self.generation(scope) + 1
        keys = self.keys(scope)
        for key in keys:
            self._entries[key].stale = True
        logfire.debug("Scope invalidated", scope=str(scope), views=len(keys))
        return keys

    def drop_scope(self, scope: Scope) -> int:
        """Discard every cached view of a scope.

        Returns:
            Number of views dropped
        """
        keys = self.keys(scope)
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        """Discard everything; used at session teardown."""
        self._entries.clear()
        self._generations.clear()
