"""Comment domain service."""

import logfire

from discuss.domain.error import (
    AuthRequiredError,
    NotAuthorizedError,
    ValidationError,
)
from discuss.domain.model import Comment, RawComment, Reply
from discuss.domain.repository import CommentRepository, IdentityProvider
from discuss.domain.service.events import CommentDeleted, CommentEdited, EventBus
from discuss.domain.value import Scope

from .base import Service


class CommentService(Service):
    """Domain service for edits, deletions and the recent-comments feed.

    New comments go through a composition attempt instead, since they may be
    challenged.
    """

    def __init__(
        self,
        comment_repository: CommentRepository,
        identity: IdentityProvider,
        bus: EventBus,
        max_content_length: int = 2000,
    ) -> None:
        """Initialize comment service.

        Args:
            comment_repository: Comment repository
            identity: Source of the viewer's bearer credential
            bus: Bus that write events are published on
            max_content_length: Upper bound on comment content
        """
        self.comment_repository = comment_repository
        self.identity = identity
        self.bus = bus
        self.max_content_length = max_content_length

    async def edit(
        self,
        scope: Scope,
        comment: RawComment | Comment | Reply,
        content: str,
    ) -> RawComment:
        """Replace the content of a comment the viewer may edit.

        Args:
            scope: Scope the comment was written to
            comment: Comment as last shown to the viewer
            content: New content

        Returns:
            Updated comment

        Raises:
            NotAuthorizedError: If the viewer may not edit the comment
            ValidationError: If the content is blank or too long
            AuthRequiredError: If there is no credential
        """
        with logfire.span(
            "comment_service.edit",
            scope=str(scope),
            comment_id=comment.id,
            content_length=len(content),
        ):
            if not comment.can_edit:
                logfire.warn("Edit refused", comment_id=comment.id)
                raise NotAuthorizedError("edit", comment.id)
            self._check_content(content)
            token = await self._token()

            updated = await self.comment_repository.update(comment.id, content, token)
            logfire.info("Comment content updated", comment_id=updated.id)
            await self.bus.publish(
                CommentEdited(scope=scope, comment_id=updated.id, comment=updated)
            )
            return updated

    async def delete(self, scope: Scope, comment: RawComment | Comment | Reply) -> None:
        """Delete a comment the viewer may delete.

        Args:
            scope: Scope the comment was written to
            comment: Comment as last shown to the viewer

        Raises:
            NotAuthorizedError: If the viewer may not delete the comment
            AuthRequiredError: If there is no credential
        """
        with logfire.span(
            "comment_service.delete", scope=str(scope), comment_id=comment.id
        ):
            if not comment.can_delete:
                logfire.warn("Delete refused", comment_id=comment.id)
                raise NotAuthorizedError("delete", comment.id)
            token = await self._token()

            await self.comment_repository.delete(comment.id, token)
            logfire.info("Comment deleted", comment_id=comment.id)
            await self.bus.publish(CommentDeleted(scope=scope, comment_id=comment.id))

    async def recent(self, limit: int) -> list[RawComment]:
        """Get the most recent comments across all content.

        Args:
            limit: Maximum number of comments

        Returns:
            Comments newest first
        """
        if limit < 1:
            raise ValidationError(f"Limit must be at least 1, got {limit}")
        with logfire.span("comment_service.recent", limit=limit):
            comments = await self.comment_repository.fetch_recent(limit)
            logfire.info("Recent comments retrieved", count=len(comments))
            return comments

    def _check_content(self, content: str) -> None:
        if not content.strip():
            raise ValidationError("Comment content cannot be empty")
        if len(content) > self.max_content_length:
            raise ValidationError(
                f"Comment content exceeds {self.max_content_length} characters"
            )

    async def _token(self) -> str:
        token = await self.identity.get_token()
        if not token:
            raise AuthRequiredError()
        return token
