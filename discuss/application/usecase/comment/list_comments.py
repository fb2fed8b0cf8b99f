"""List comments use case."""

from datetime import datetime

from pydantic import BaseModel

from discuss.application.usecase.base import BaseUseCase
from discuss.domain.model import Reply
from discuss.domain.service import ScopeAggregator, ScopeView, ThreadNode
from discuss.domain.service.sanitize import sanitize_text
from discuss.domain.value import CommentId, Scope, SortOrder


class ReplyItem(BaseModel):
    """Reply item in response."""

    comment_id: str
    parent_id: str
    author_id: str
    author_name: str
    author_avatar_url: str | None
    content: str
    created_at: datetime
    updated_at: datetime | None
    can_edit: bool
    can_delete: bool


class CommentItem(BaseModel):
    """Top-level comment item in response."""

    comment_id: str
    author_id: str
    author_name: str
    author_avatar_url: str | None
    content: str
    created_at: datetime
    updated_at: datetime | None
    can_edit: bool
    can_delete: bool
    installment_label: str | None
    replies: list[ReplyItem]
    replies_count: int
    unloaded_replies: int
    expanded: bool


class ListCommentsRequest(BaseModel):
    """List comments request.

    Opens the scope if needed and applies the optional cursor changes in
    order: switch, sort, page, then the thread actions.
    """

    scope: Scope
    sort: SortOrder | None = None
    page: int | None = None
    switch_from: Scope | None = None  # Previous content shown in the same view
    toggle: str | None = None  # Thread to expand or collapse
    load_more: str | None = None  # Thread to fetch more replies for


class ListCommentsResponse(BaseModel):
    """List comments response."""

    scope: str
    sort: SortOrder
    comments: list[CommentItem]
    total: int
    page: int
    total_pages: int
    is_loading: bool
    is_refreshing: bool
    is_stale: bool
    error_kind: str | None = None
    error_message: str | None = None


class ListCommentsUseCase(BaseUseCase):
    """Use case for reading one page of a scope's threaded comments."""

    def __init__(self, aggregator: ScopeAggregator) -> None:
        """Initialize list comments use case.

        Args:
            aggregator: Scope aggregator of the session
        """
        self.aggregator = aggregator

    async def execute(self, request: ListCommentsRequest) -> ListCommentsResponse:
        """Execute list comments flow.

        Args:
            request: Scope and cursor changes

        Returns:
            Current view of the scope; read failures are reported in
            ``error_kind`` rather than raised

        Raises:
            ValidationError: If the requested page is below 1
        """
        scope = request.scope
        if request.switch_from is not None:
            view = await self.aggregator.switch(
                request.switch_from, scope, sort=request.sort
            )
        elif not self.aggregator.is_open(scope):
            view = await self.aggregator.open(scope, sort=request.sort or SortOrder.DESC)
        else:
            # Focusing with the new sort skips a load of the old-sort page
            current = self.aggregator.view(scope).sort
            view = await self.aggregator.open(scope, sort=request.sort or current)

        if request.page is not None and request.page != view.current_page:
            view = await self.aggregator.set_page(scope, request.page)
        if request.toggle is not None:
            view = self.aggregator.toggle(scope, CommentId(request.toggle))
        if request.load_more is not None:
            view = await self.aggregator.load_more_replies(
                scope, CommentId(request.load_more)
            )

        return to_response(view)


def to_response(view: ScopeView) -> ListCommentsResponse:
    return ListCommentsResponse(
        scope=str(view.scope),
        sort=view.sort,
        comments=[_comment_item(node) for node in view.items],
        total=view.total_count,
        page=view.current_page,
        total_pages=view.total_pages,
        is_loading=view.is_loading,
        is_refreshing=view.is_refreshing,
        is_stale=view.is_stale,
        error_kind=view.error.kind if view.error else None,
        error_message=view.error.message if view.error else None,
    )


def _comment_item(node: ThreadNode) -> CommentItem:
    comment = node.comment
    info = comment.installment_info
    return CommentItem(
        comment_id=comment.id,
        author_id=comment.author.id,
        author_name=comment.author.name,
        author_avatar_url=comment.author.avatar_url,
        content=node.display_content,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        can_edit=comment.can_edit,
        can_delete=comment.can_delete,
        installment_label=info.name if info else None,
        replies=[_reply_item(reply) for reply in comment.replies],
        replies_count=comment.replies_count,
        unloaded_replies=node.unloaded_replies,
        expanded=node.expanded,
    )


def _reply_item(reply: Reply) -> ReplyItem:
    return ReplyItem(
        comment_id=reply.id,
        parent_id=reply.parent_id,
        author_id=reply.author.id,
        author_name=reply.author.name,
        author_avatar_url=reply.author.avatar_url,
        content=sanitize_text(reply.content),
        created_at=reply.created_at,
        updated_at=reply.updated_at,
        can_edit=reply.can_edit,
        can_delete=reply.can_delete,
    )
