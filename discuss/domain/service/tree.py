"""Reply tree builder.

Turns a page of raw top-level comments into render-ready threads that never
nest past one reply level, whatever the store sends.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace

import logfire

from discuss.domain.error import NotFoundError
from discuss.domain.model import Comment, PagedView, RawComment, Reply
from discuss.domain.model.comment import shared_fields
from discuss.domain.service.sanitize import sanitize_text
from discuss.domain.value import CommentId, SortOrder

from .base import Service


@dataclass(frozen=True)
class ThreadNode:
    """A top-level comment annotated with its expand/collapse state."""

    comment: Comment
    expanded: bool

    @property
    def display_content(self) -> str:
        return sanitize_text(self.comment.content)

    @property
    def unloaded_replies(self) -> int:
        """Replies known to exist but not delivered yet."""
        return self.comment.unloaded_replies

    @property
    def has_unloaded_replies(self) -> bool:
        return self.comment.unloaded_replies > 0


@dataclass(frozen=True)
class ReplyTree:
    """Ordered threads of one page."""

    nodes: tuple[ThreadNode, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def find(self, comment_id: CommentId) -> ThreadNode | None:
        """Find the thread whose top-level comment has this id."""
        return next((n for n in self.nodes if n.comment.id == comment_id), None)

    def thread_root(self, comment_id: CommentId) -> CommentId | None:
        """Top-level comment a reply to ``comment_id`` must attach to.

        Replying to a reply lands on the thread root; there is no
        reply-to-a-reply.
        """
        for node in self.nodes:
            if node.comment.id == comment_id:
                return node.comment.id
            if any(r.id == comment_id for r in node.comment.replies):
                return node.comment.id
        return None

    def toggle(self, comment_id: CommentId) -> "ReplyTree":
        """Flip one thread's expanded flag. Pure; never touches the network.

        Raises:
            NotFoundError: If no thread on this page has that id
        """
        if self.find(comment_id) is None:
            raise NotFoundError("Comment", comment_id)
        return ReplyTree(
            nodes=tuple(
                replace(n, expanded=not n.expanded) if n.comment.id == comment_id else n
                for n in self.nodes
            )
        )

    def expansion(self) -> dict[CommentId, bool]:
        """Current expand state keyed by comment id."""
        return {n.comment.id: n.expanded for n in self.nodes}


class ReplyTreeBuilder(Service):
    """Builds depth-bounded reply trees from raw store pages."""

    def __init__(self, expand_threshold: int = 3) -> None:
        """Initialize the builder.

        Args:
            expand_threshold: Threads with at most this many replies start
                expanded; larger threads start collapsed.
        """
        self.expand_threshold = expand_threshold

    def build(
        self,
        items: Sequence[RawComment],
        expanded: Mapping[CommentId, bool] | None = None,
    ) -> ReplyTree:
        """Build a reply tree from one page of top-level comments.

        Args:
            items: Raw top-level comments in page order
            expanded: Explicit expand state from earlier toggles; wins over
                the default for any id it contains

        Returns:
            Threads in the same order as ``items``
        """
        expanded = expanded or {}
        nodes = []
        for raw in items:
            if raw.parent_id is not None:
                logfire.warn(
                    "Dropped reply delivered as top-level comment",
                    comment_id=raw.id,
                    parent_id=raw.parent_id,
                )
                continue
            comment = self.to_comment(raw)
            nodes.append(
                ThreadNode(
                    comment=comment,
                    expanded=expanded.get(comment.id, self._default_expanded(comment)),
                )
            )
        return ReplyTree(nodes=tuple(nodes))

    def to_comment(self, raw: RawComment) -> Comment:
        """Convert a raw top-level comment, flattening anything nested deeper."""
        return Comment(
            **shared_fields(raw),
            replies=self._flatten(raw),
            replies_count=raw.replies_count,
        )

    def merge_replies(
        self,
        tree: ReplyTree,
        comment_id: CommentId,
        replies: Sequence[Reply],
        total: int | None = None,
    ) -> ReplyTree:
        """Append separately fetched replies to one thread.

        Replies already present, or belonging to another thread, are
        skipped. The thread keeps its expand state.

        Args:
            tree: Tree to extend
            comment_id: Top-level comment the replies belong to
            replies: Replies in display order
            total: Authoritative reply count reported with the replies

        Returns:
            New tree; ``tree`` is left untouched

        Raises:
            NotFoundError: If the thread is not on this page
        """
        node = tree.find(comment_id)
        if node is None:
            raise NotFoundError("Comment", comment_id)

        merged = list(node.comment.replies)
        seen = {r.id for r in merged}
        for reply in replies:
            if reply.id in seen or reply.parent_id != comment_id:
                continue
            seen.add(reply.id)
            merged.append(reply)

        count = max(node.comment.replies_count, total or 0)
        comment = Comment(
            **shared_fields(node.comment), replies=merged, replies_count=count
        )
        return ReplyTree(
            nodes=tuple(
                replace(n, comment=comment) if n is node else n
                for n in tree.nodes
            )
        )

    def insert(self, page: PagedView, created: RawComment) -> PagedView:
        """Place a freshly posted comment into a freshly fetched page.

        A no-op when the page already contains the comment or when the
        comment does not belong on this page: a new top-level comment goes
        first on page 1 of a newest-first page, or last on the final page of
        an oldest-first page. A reply goes under its parent if the parent is
        on the page.

        Args:
            page: Page fetched after the write
            created: Comment returned by the write endpoint

        Returns:
            The page, with the comment added where it belongs
        """
        if created.parent_id is not None:
            return self._insert_reply(page, created)

        if any(item.id == created.id for item in page.items):
            return page
        if page.sort == SortOrder.DESC and page.current_page == 1:
            items = [created, *page.items]
        elif page.sort == SortOrder.ASC and page.current_page >= page.total_pages:
            items = [*page.items, created]
        else:
            return page
        return page.model_copy(
            update={"items": items, "total_count": page.total_count + 1}
        )

    def _insert_reply(self, page: PagedView, created: RawComment) -> PagedView:
        items = []
        inserted = False
        for item in page.items:
            if item.id == created.parent_id and not self._contains(item, created.id):
                # A count above the embedded replies already includes this one
                count = item.replies_count
                if count <= len(item.replies):
                    count += 1
                item = item.model_copy(
                    update={"replies": [*item.replies, created], "replies_count": count}
                )
                inserted = True
            items.append(item)
        if not inserted:
            return page
        return page.model_copy(update={"items": items})

    def _default_expanded(self, comment: Comment) -> bool:
        return comment.replies_count <= self.expand_threshold

    def _flatten(self, raw: RawComment) -> list[Reply]:
        """Collect every descendant of ``raw`` as a direct reply.

        Depth-first in payload order, iterative so a hostile payload cannot
        exhaust the stack. Descendants below depth 1 are re-parented to the
        thread root.
        """
        replies: list[Reply] = []
        seen: set[CommentId] = {raw.id}
        flattened = 0
        stack = [(child, 1) for child in reversed(raw.replies)]
        while stack:
            child, depth = stack.pop()
            if child.id in seen:
                continue
            seen.add(child.id)
            if depth > 1:
                flattened += 1
            replies.append(Reply(**shared_fields(child), parent_id=raw.id))
            stack.extend((grandchild, depth + 1) for grandchild in reversed(child.replies))

        if flattened:
            logfire.warn(
                "Flattened replies nested below depth 1",
                comment_id=raw.id,
                flattened=flattened,
            )
        return replies

    @staticmethod
    def _contains(item: RawComment, comment_id: CommentId) -> bool:
        return any(r.id == comment_id for r in item.replies)
