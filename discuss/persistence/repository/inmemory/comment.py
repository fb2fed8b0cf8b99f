"""In-memory comment repository for testing."""

import itertools
from datetime import datetime, timedelta, timezone
from typing import Optional

from discuss.domain.error import (
    ChallengeRequiredError,
    CommentError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from discuss.domain.model import (
    Author,
    Challenge,
    CommentContext,
    CommentDraft,
    PagedView,
    RawComment,
    Reply,
    ReplyPage,
)
from discuss.domain.model.comment import shared_fields
from discuss.domain.repository import CommentRepository, IdentityProvider
from discuss.domain.value import (
    CommentableType,
    CommentId,
    Scope,
    ScopeKind,
    SortOrder,
    UserId,
)


class InMemoryCommentRepository(CommentRepository):
    """In-memory implementation of CommentRepository for testing.

    Behaves like the comment store: aggregates are merged here, replies to
    replies are attached to the thread root, and writes can be gated by a
    challenge that is reissued with a fresh token on every rejection.
    """

    def __init__(
        self,
        viewer: IdentityProvider | None = None,
        embedded_replies: int | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            viewer: Identity whose token fills in the can_edit/can_delete flags
            embedded_replies: How many replies a page embeds per comment;
                the rest are only reachable through fetch_replies
        """
        self.viewer = viewer
        self.embedded_replies = embedded_replies
        self.calls: list[tuple] = []
        self._comments: dict[CommentId, RawComment] = {}
        self._scopes: dict[CommentId, Scope] = {}
        self._owners: dict[CommentId, str] = {}
        self._ids = itertools.count(1)
        self._tokens = itertools.count(1)
        self._epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._gate: Optional[tuple[str, str]] = None
        self._challenge: Optional[Challenge] = None
        self._failures: list[tuple[Optional[str], CommentError]] = []

    def require_challenge(self, question: str, answer: str) -> None:
        """Gate writes until one arrives with the correct answer.

        The next write is rejected with a freshly issued challenge.
        """
        self._gate = (question, answer)
        self._challenge = None

    @property
    def challenge(self) -> Optional[Challenge]:
        """Challenge currently outstanding, if writes are gated."""
        return self._challenge

    def fail_next(self, error: CommentError, method: Optional[str] = None) -> None:
        """Make the next call (to ``method``, if given) raise ``error``."""
        self._failures.append((method, error))

    def seed(
        self,
        scope: Scope,
        content: str,
        author: str = "seed",
        parent_id: Optional[CommentId] = None,
    ) -> RawComment:
        """Store a comment directly, bypassing the write checks."""
        return self._store(scope, content, author, parent_id)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    def stored(self) -> list[RawComment]:
        """Every comment in the store, oldest first."""
        return sorted(self._comments.values(), key=self._position)

    async def fetch_page(
        self,
        scope: Scope,
        page: int,
        page_size: int,
        sort: SortOrder,
    ) -> PagedView:
        """Find one page of top-level comments in a scope."""
        self._record("fetch_page", scope, page, page_size, sort)
        viewer = await self._viewer_token()
        roots = [
            c
            for c in self._comments.values()
            if c.parent_id is None and self._in_scope(c.id, scope)
        ]
        roots.sort(key=self._position, reverse=sort == SortOrder.DESC)

        total = len(roots)
        offset = (page - 1) * page_size
        items = [
            self._with_replies(c, viewer) for c in roots[offset : offset + page_size]
        ]
        return PagedView(
            items=items,
            total_count=total,
            current_page=page,
            total_pages=max(1, -(-total // page_size)),
            sort=sort,
        )

    async def fetch_replies(
        self,
        comment_id: CommentId,
        page: int,
        page_size: int,
    ) -> ReplyPage:
        """Find a page of replies to a top-level comment, oldest first."""
        self._record("fetch_replies", comment_id, page, page_size)
        if comment_id not in self._comments:
            raise NotFoundError("Comment", comment_id)
        viewer = await self._viewer_token()
        replies = self._replies_of(comment_id)
        offset = (page - 1) * page_size
        return ReplyPage(
            items=[
                Reply(**shared_fields(self._flags(r, viewer)), parent_id=comment_id)
                for r in replies[offset : offset + page_size]
            ],
            total_count=len(replies),
            current_page=page,
            total_pages=max(1, -(-len(replies) // page_size)),
        )

    async def create(
        self,
        scope: Scope,
        draft: CommentDraft,
        token: str,
    ) -> RawComment:
        """Save a new comment, enforcing the challenge gate."""
        self._record("create", scope, draft)
        if not scope.writable:
            raise ValidationError(f"Cannot write to read-only scope {scope}")
        if not draft.content.strip():
            raise ValidationError("The content field is required.")

        if self._gate is not None:
            question, answer = self._gate
            passed = (
                self._challenge is not None
                and draft.captcha_token == self._challenge.token
                and draft.captcha_answer == answer
            )
            if not passed:
                # Every rejection invalidates the token that was used
                self._challenge = self._issue(question)
                raise ChallengeRequiredError(self._challenge)
            self._gate = None
            self._challenge = None

        parent_id = draft.parent_id
        if parent_id is not None:
            parent = self._comments.get(parent_id)
            if parent is None:
                raise ValidationError("The selected parent id is invalid.")
            if parent.parent_id is not None:
                parent_id = parent.parent_id
            scope = self._scopes[parent_id]

        created = self._store(scope, draft.content, token, parent_id)
        return self._flags(created, token)

    async def update(
        self,
        comment_id: CommentId,
        content: str,
        token: str,
    ) -> RawComment:
        """Replace the content of a comment owned by ``token``."""
        self._record("update", comment_id, content)
        comment = self._owned(comment_id, token, "edit")
        updated = comment.model_copy(
            update={"content": content, "updated_at": self._now()}
        )
        self._comments[comment_id] = updated
        return self._flags(updated, token)

    async def delete(self, comment_id: CommentId, token: str) -> None:
        """Delete a comment owned by ``token`` and its replies."""
        self._record("delete", comment_id)
        self._owned(comment_id, token, "delete")
        for reply in self._replies_of(comment_id):
            self._forget(reply.id)
        self._forget(comment_id)

    async def fetch_recent(self, limit: int) -> list[RawComment]:
        """Find the most recent comments across all scopes."""
        self._record("fetch_recent", limit)
        viewer = await self._viewer_token()
        comments = sorted(self._comments.values(), key=self._position, reverse=True)
        return [self._flags(c, viewer) for c in comments[:limit]]

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        for index, (target, error) in enumerate(self._failures):
            if target is None or target == method:
                del self._failures[index]
                raise error

    def _issue(self, question: str) -> Challenge:
        return Challenge(question=question, token=f"t{next(self._tokens)}")

    def _now(self) -> datetime:
        return self._epoch + timedelta(seconds=len(self._comments) + len(self.calls))

    def _store(
        self,
        scope: Scope,
        content: str,
        author: str,
        parent_id: Optional[CommentId],
    ) -> RawComment:
        index = next(self._ids)
        comment_id = CommentId(str(index))
        if scope.kind == ScopeKind.INSTALLMENT:
            commentable_type = CommentableType.INSTALLMENT
            commentable_id = scope.installment_id
        else:
            commentable_type = CommentableType.SERIES
            commentable_id = scope.series_id
        comment = RawComment(
            id=comment_id,
            content=content,
            commentable_type=commentable_type,
            commentable_id=commentable_id,
            parent_id=parent_id,
            created_at=self._epoch + timedelta(minutes=index),
            author=Author(id=UserId(author), name=author),
            context=CommentContext(
                type=commentable_type,
                text=str(scope),
                series_slug=scope.series_id,
                installment_slug=scope.installment_id,
                series_id=scope.series_id,
                installment_id=scope.installment_id,
            ),
        )
        self._comments[comment_id] = comment
        self._scopes[comment_id] = scope
        self._owners[comment_id] = author
        return comment

    def _forget(self, comment_id: CommentId) -> None:
        self._comments.pop(comment_id, None)
        self._scopes.pop(comment_id, None)
        self._owners.pop(comment_id, None)

    def _owned(self, comment_id: CommentId, token: str, action: str) -> RawComment:
        comment = self._comments.get(comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        if self._owners[comment_id] != token:
            raise NotAuthorizedError(action, comment_id)
        return comment

    def _in_scope(self, comment_id: CommentId, scope: Scope) -> bool:
        stored = self._scopes[comment_id]
        if scope.kind == ScopeKind.AGGREGATE:
            return stored.series_id == scope.series_id
        return stored == scope

    def _position(self, comment: RawComment) -> tuple[datetime, int]:
        return comment.created_at, int(comment.id)

    def _replies_of(self, comment_id: CommentId) -> list[RawComment]:
        replies = [c for c in self._comments.values() if c.parent_id == comment_id]
        replies.sort(key=self._position)
        return replies

    def _with_replies(self, comment: RawComment, viewer: Optional[str]) -> RawComment:
        replies = [self._flags(r, viewer) for r in self._replies_of(comment.id)]
        embedded = replies[: self.embedded_replies]
        return self._flags(comment, viewer).model_copy(
            update={"replies": embedded, "replies_count": len(replies)}
        )

    def _flags(self, comment: RawComment, viewer: Optional[str]) -> RawComment:
        owns = viewer is not None and self._owners.get(comment.id) == viewer
        return comment.model_copy(update={"can_edit": owns, "can_delete": owns})

    async def _viewer_token(self) -> Optional[str]:
        if self.viewer is None:
            return None
        return await self.viewer.get_token()
