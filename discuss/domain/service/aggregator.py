"""Scope aggregator.

Drives the paginated comment queries of every mounted scope and exposes one
view-model per scope.

Ordering: every outgoing request is tagged with a sequence number per scope.
Only a response carrying the latest number for its scope may update the
view; anything else was superseded by a later sort, page or content change
and is dropped. The aggregate scope is queried like any other: its merged
timeline, totals and page boundaries come from the store and are never
recomputed here.
"""

import asyncio
import itertools
from dataclasses import dataclass, field

import logfire

from discuss.domain.error import CommentError, NotFoundError, ValidationError
from discuss.domain.model import Comment, PagedView, RawComment, Reply
from discuss.domain.repository import CommentRepository
from discuss.domain.service.cache import ViewCache
from discuss.domain.service.tree import ReplyTree, ReplyTreeBuilder, ThreadNode
from discuss.domain.value import CommentId, Scope, SortOrder, ViewKey

from .base import Service


@dataclass(frozen=True)
class FetchFailure:
    """Typed read failure attached to a view instead of being raised."""

    kind: str
    message: str

    @classmethod
    def from_error(cls, error: Exception) -> "FetchFailure":
        return cls(kind=type(error).__name__, message=str(error))


@dataclass(frozen=True)
class ScopeView:
    """View-model handed to the presentation layer for one scope."""

    scope: Scope
    sort: SortOrder
    items: tuple[ThreadNode, ...]
    total_count: int
    current_page: int
    total_pages: int
    is_loading: bool
    is_refreshing: bool
    is_stale: bool
    error: FetchFailure | None = None


@dataclass
class _ThreadReplies:
    """Replies fetched beyond those embedded in a page."""

    replies: list[Reply] = field(default_factory=list)
    next_page: int = 1
    total: int = 0
    loading: "asyncio.Task[None] | None" = None


@dataclass
class _ScopeState:
    """Cursor and displayed result of one mounted scope."""

    scope: Scope
    sort: SortOrder
    page: int
    page_size: int
    shown: PagedView | None = None
    shown_key: ViewKey | None = None
    error: FetchFailure | None = None
    expanded: dict[CommentId, bool] = field(default_factory=dict)
    threads: dict[CommentId, _ThreadReplies] = field(default_factory=dict)

    @property
    def key(self) -> ViewKey:
        return ViewKey(
            scope=self.scope, sort=self.sort, page=self.page, page_size=self.page_size
        )


@dataclass
class _Request:
    sequence: int
    generation: int
    task: "asyncio.Task[None]"


class ScopeAggregator(Service):
    """Fetches, caches and exposes comment pages per scope."""

    def __init__(
        self,
        repository: CommentRepository,
        cache: ViewCache,
        tree_builder: ReplyTreeBuilder,
        page_size: int = 10,
        reply_page_size: int = 10,
    ) -> None:
        """Initialize the aggregator.

        Args:
            repository: Comment store
            cache: Session-owned page cache
            tree_builder: Builds render-ready threads from raw pages
            page_size: Default page size for scope queries
            reply_page_size: Page size when loading more replies
        """
        self.repository = repository
        self.cache = cache
        self.tree_builder = tree_builder
        self.page_size = page_size
        self.reply_page_size = reply_page_size
        self._states: dict[Scope, _ScopeState] = {}
        self._counter = itertools.count(1)
        self._latest: dict[Scope, int] = {}
        self._in_flight: dict[ViewKey, _Request] = {}
        self._focused: Scope | None = None

    @property
    def focused(self) -> Scope | None:
        """Scope the user is currently looking at."""
        return self._focused

    def is_open(self, scope: Scope) -> bool:
        return scope in self._states

    def open_scopes(self) -> list[Scope]:
        return list(self._states)

    async def open(
        self,
        scope: Scope,
        sort: SortOrder = SortOrder.DESC,
        page_size: int | None = None,
    ) -> ScopeView:
        """Mount a scope at page 1 and focus it.

        Opening a scope that is already mounted only focuses it (and
        applies ``sort`` through the page-reset rule).
        """
        state = self._states.get(scope)
        if state is not None:
            self._focused = scope
            if state.sort != sort:
                return await self.set_sort(scope, sort)
            return await self._load(state)

        state = _ScopeState(
            scope=scope, sort=sort, page=1, page_size=page_size or self.page_size
        )
        self._states[scope] = state
        self._focused = scope
        logfire.info("Scope opened", scope=str(scope), sort=sort.value)
        return await self._load(state)

    async def set_sort(self, scope: Scope, sort: SortOrder) -> ScopeView:
        """Change the sort order; always goes back to page 1."""
        state = self._require(scope)
        if sort != state.sort:
            state.sort = sort
            state.page = 1
        return await self._load(state)

    async def set_page(self, scope: Scope, page: int) -> ScopeView:
        """Move to another page of the current sort.

        Raises:
            ValidationError: If page is below 1
        """
        if page < 1:
            raise ValidationError(f"Page must be at least 1, got {page}")
        state = self._require(scope)
        state.page = page
        return await self._load(state)

    async def switch(
        self, old_scope: Scope, new_scope: Scope, sort: SortOrder | None = None
    ) -> ScopeView:
        """Replace the content behind a view, starting again at page 1.

        The old scope is closed, so its late responses are discarded. A new
        scope that is already mounted elsewhere also goes back to page 1.
        """
        old = self._require(old_scope)
        sort = sort or old.sort
        page_size = old.page_size
        if old_scope != new_scope:
            self.close(old_scope)
        target = self._states.get(new_scope)
        if target is not None:
            target.page = 1
        return await self.open(new_scope, sort=sort, page_size=page_size)

    async def focus(self, scope: Scope) -> ScopeView:
        """Make a mounted scope the focused one, refetching it if stale."""
        state = self._require(scope)
        self._focused = scope
        return await self._load(state)

    async def refresh(self, scope: Scope) -> ScopeView:
        """Refetch the current page of a scope.

        Joins a request already in flight for the same key and generation
        instead of issuing a duplicate.
        """
        state = self._require(scope)
        await self._fetch(state)
        return self._view(state)

    def close(self, scope: Scope) -> None:
        """Unmount a scope and discard its views.

        A request still in flight may complete, but its result is dropped.
        """
        state = self._states.pop(scope, None)
        if state is None:
            return
        self._latest[scope] = next(self._counter)
        for key in [k for k in self._in_flight if k.scope == scope]:
            del self._in_flight[key]
        dropped = self.cache.drop_scope(scope)
        if self._focused == scope:
            self._focused = None
        logfire.info("Scope closed", scope=str(scope), dropped_views=dropped)

    def close_all(self) -> None:
        for scope in list(self._states):
            self.close(scope)

    def view(self, scope: Scope) -> ScopeView:
        """Current view-model of a mounted scope."""
        return self._view(self._require(scope))

    def _view(self, state: _ScopeState) -> ScopeView:
        pending = state.key in self._in_flight
        shown = state.shown
        return ScopeView(
            scope=state.scope,
            sort=state.sort,
            items=self._tree(state).nodes,
            total_count=shown.total_count if shown else 0,
            current_page=state.page,
            total_pages=shown.total_pages if shown else 1,
            is_loading=pending and shown is None,
            is_refreshing=pending and shown is not None,
            is_stale=state.shown_key is not None and self.cache.is_stale(state.shown_key),
            error=state.error,
        )

    def toggle(self, scope: Scope, comment_id: CommentId) -> ScopeView:
        """Expand or collapse one thread. Local only; issues no request."""
        state = self._require(scope)
        node = self._tree(state).toggle(comment_id).find(comment_id)
        state.expanded[comment_id] = node.expanded
        return self.view(scope)

    def thread_root(self, scope: Scope, comment_id: CommentId) -> CommentId | None:
        """Top-level comment that a reply to ``comment_id`` belongs under."""
        return self._tree(self._require(scope)).thread_root(comment_id)

    def find(self, scope: Scope, comment_id: CommentId) -> Comment | Reply | None:
        """Comment or reply with this id as currently shown in the scope."""
        for node in self._tree(self._require(scope)):
            if node.comment.id == comment_id:
                return node.comment
            for reply in node.comment.replies:
                if reply.id == comment_id:
                    return reply
        return None

    async def load_more_replies(self, scope: Scope, comment_id: CommentId) -> ScopeView:
        """Fetch the next page of replies for a thread shown in this scope.

        A call made while the same thread is already loading joins that load
        instead of fetching the page again. Read failures are attached to the
        view, as for page reads.

        Raises:
            NotFoundError: If the thread is not on the current page
        """
        state = self._require(scope)
        if self._tree(state).find(comment_id) is None:
            raise NotFoundError("Comment", comment_id)

        thread = state.threads.setdefault(comment_id, _ThreadReplies())
        if thread.loading is None or thread.loading.done():
            thread.loading = asyncio.create_task(
                self._load_replies(state, comment_id, thread)
            )
        await asyncio.shield(thread.loading)
        return self._view(state)

    async def _load_replies(
        self, state: _ScopeState, comment_id: CommentId, thread: _ThreadReplies
    ) -> None:
        with logfire.span(
            "scope_aggregator.load_more_replies",
            scope=str(state.scope),
            comment_id=comment_id,
            page=thread.next_page,
        ):
            try:
                page = await self.repository.fetch_replies(
                    comment_id, thread.next_page, self.reply_page_size
                )
            except CommentError as exc:
                logfire.warn(
                    "Loading replies failed",
                    comment_id=comment_id,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                state.error = FetchFailure.from_error(exc)
                return

            # Scope closed or thread pruned by a page change meanwhile
            if (
                self._states.get(state.scope) is not state
                or state.threads.get(comment_id) is not thread
            ):
                return
            thread.replies.extend(page.items)
            thread.total = page.total_count
            thread.next_page = page.current_page + 1
            state.expanded[comment_id] = True
            state.error = None
            logfire.info(
                "Replies loaded",
                comment_id=comment_id,
                loaded=len(page.items),
                total=page.total_count,
            )

    def reconcile(self, scope: Scope, created: RawComment) -> ScopeView:
        """Insert a just-written comment into the freshly fetched page.

        Only used after an invalidation refetch; the page is otherwise never
        edited locally.
        """
        state = self._require(scope)
        if state.shown is None or state.shown_key is None:
            return self.view(scope)
        page = self.tree_builder.insert(state.shown, created)
        if page is not state.shown:
            state.shown = page
            self.cache.update(state.shown_key, page)
            logfire.info(
                "Reconciled new comment into page",
                scope=str(scope),
                comment_id=created.id,
            )
        return self.view(scope)

    async def _load(self, state: _ScopeState) -> ScopeView:
        key = state.key
        if self.cache.is_fresh(key):
            # Served locally; still supersedes anything in flight for the scope
            self._latest[state.scope] = next(self._counter)
            self._show(state, key, self.cache.get(key).page)
            return self._view(state)
        await self._fetch(state)
        return self._view(state)

    async def _fetch(self, state: _ScopeState) -> None:
        key = state.key
        generation = self.cache.generation(key.scope)
        request = self._in_flight.get(key)
        if request is not None and request.generation == generation:
            self._latest[key.scope] = request.sequence
        else:
            sequence = next(self._counter)
            self._latest[key.scope] = sequence
            request = _Request(
                sequence=sequence,
                generation=generation,
                task=asyncio.create_task(self._run(key, sequence, generation)),
            )
            self._in_flight[key] = request
        await asyncio.shield(request.task)

    async def _run(self, key: ViewKey, sequence: int, generation: int) -> None:
        with logfire.span(
            "scope_aggregator.fetch",
            scope=str(key.scope),
            sort=key.sort.value,
            page=key.page,
            sequence=sequence,
        ):
            try:
                page = await self.repository.fetch_page(
                    key.scope, key.page, key.page_size, key.sort
                )
            except CommentError as exc:
                if self._is_current(key, sequence):
                    logfire.warn(
                        "Comment page fetch failed",
                        scope=str(key.scope),
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                    self._states[key.scope].error = FetchFailure.from_error(exc)
                return
            finally:
                request = self._in_flight.get(key)
                if request is not None and request.sequence == sequence:
                    del self._in_flight[key]

            if not self._is_current(key, sequence):
                logfire.info(
                    "Discarded superseded response",
                    scope=str(key.scope),
                    sequence=sequence,
                    latest=self._latest.get(key.scope),
                )
                return

            self.cache.put(key, page, generation)
            self._show(self._states[key.scope], key, page)
            logfire.info(
                "Comment page loaded",
                scope=str(key.scope),
                items=len(page.items),
                total=page.total_count,
            )

    @staticmethod
    def _show(state: _ScopeState, key: ViewKey, page: PagedView) -> None:
        state.shown = page
        state.shown_key = key
        state.error = None
        # Loaded replies only follow threads still on the page
        on_page = {item.id for item in page.items}
        for comment_id in [c for c in state.threads if c not in on_page]:
            del state.threads[comment_id]

    def _is_current(self, key: ViewKey, sequence: int) -> bool:
        state = self._states.get(key.scope)
        return (
            state is not None
            and state.key == key
            and self._latest.get(key.scope) == sequence
        )

    def _tree(self, state: _ScopeState) -> ReplyTree:
        if state.shown is None:
            return ReplyTree()
        tree = self.tree_builder.build(state.shown.items, state.expanded)
        for comment_id, thread in state.threads.items():
            if thread.replies and tree.find(comment_id) is not None:
                tree = self.tree_builder.merge_replies(
                    tree, comment_id, thread.replies, thread.total
                )
        return tree

    def _require(self, scope: Scope) -> _ScopeState:
        state = self._states.get(scope)
        if state is None:
            raise NotFoundError("Open scope", str(scope))
        return state
