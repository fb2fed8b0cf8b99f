"""Test configuration and fixtures."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

from discuss.domain.model import PagedView, RawComment, ReplyPage
from discuss.domain.repository import CommentRepository
from discuss.domain.value import Scope, SortOrder

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def comment_payload(
    comment_id: int | str,
    content: str | None = None,
    parent_id: int | str | None = None,
    replies: list[dict[str, Any]] | None = None,
    replies_count: int | None = None,
    commentable_type: str = "App\\Models\\Chapter",
    commentable_id: int | str = 10,
    author: str = "reader",
) -> dict[str, Any]:
    """Helper building a comment exactly as the store serializes it.

    Uses the store's field names (``user``, ``avatar_full_url``) so parsing
    is exercised along the way.
    """
    replies = replies or []
    payload: dict[str, Any] = {
        "id": comment_id,
        "content": content if content is not None else f"comment {comment_id}",
        "commentable_type": commentable_type,
        "commentable_id": commentable_id,
        "parent_id": parent_id,
        "created_at": (EPOCH + timedelta(minutes=int(comment_id))).isoformat(),
        "updated_at": None,
        "user": {"id": 1, "name": author, "avatar_full_url": None},
        "replies": replies,
        "replies_count": len(replies) if replies_count is None else replies_count,
        "can_edit": False,
        "can_delete": False,
    }
    return payload


def make_page(
    items: list[dict[str, Any]],
    total: int | None = None,
    page: int = 1,
    total_pages: int = 1,
    sort: SortOrder = SortOrder.DESC,
) -> PagedView:
    """Helper building a parsed page from store payloads."""
    return PagedView(
        items=[RawComment.model_validate(item) for item in items],
        total_count=len(items) if total is None else total,
        current_page=page,
        total_pages=total_pages,
        sort=sort,
    )


class ScriptedRepository(CommentRepository):
    """Repository whose page responses are released by the test.

    Every ``fetch_page`` call parks on its own ``asyncio.Event`` until the
    test calls ``release``, so responses can be delivered in any order.
    """

    def __init__(self) -> None:
        self.requests: list[tuple[Scope, int, int, SortOrder]] = []
        self._gates: list[asyncio.Event] = []
        self._results: dict[int, PagedView | Exception] = {}

    async def fetch_page(self, scope, page, page_size, sort) -> PagedView:
        index = len(self.requests)
        self.requests.append((scope, page, page_size, sort))
        gate = asyncio.Event()
        self._gates.append(gate)
        await gate.wait()
        result = self._results.pop(index)
        if isinstance(result, Exception):
            raise result
        return result

    def release(self, index: int, result: PagedView | Exception) -> None:
        self._results[index] = result
        self._gates[index].set()

    async def wait_for_requests(self, count: int) -> None:
        while len(self.requests) < count:
            await asyncio.sleep(0)

    async def fetch_replies(self, comment_id, page, page_size) -> ReplyPage:
        return ReplyPage()

    async def create(self, scope, draft, token):
        raise NotImplementedError

    async def update(self, comment_id, content, token):
        raise NotImplementedError

    async def delete(self, comment_id, token) -> None:
        raise NotImplementedError

    async def fetch_recent(self, limit):
        return []
