"""Comment repository interface."""

from abc import ABC, abstractmethod

from discuss.domain.model import CommentDraft, PagedView, RawComment, ReplyPage
from discuss.domain.value import CommentId, Scope, SortOrder


class CommentRepository(ABC):
    """Contract of the comment store.

    The store is an external collaborator; implementations live in the
    adapter (HTTP) and persistence (in-memory) layers. Every failure is
    raised as a ``discuss.domain.error.CommentError`` subclass.
    """

    @abstractmethod
    async def fetch_page(
        self,
        scope: Scope,
        page: int,
        page_size: int,
        sort: SortOrder,
    ) -> PagedView:
        """Fetch one page of top-level comments for a scope.

        For an aggregate scope the store computes the merged timeline,
        totals and page boundaries over the series and all installments.

        Args:
            scope: Scope to read
            page: 1-based page number
            page_size: Items per page
            sort: Chronological order

        Returns:
            The page, with replies embedded in each item
        """
        pass

    @abstractmethod
    async def fetch_replies(
        self,
        comment_id: CommentId,
        page: int,
        page_size: int,
    ) -> ReplyPage:
        """Fetch a page of replies to a top-level comment, oldest first.

        Args:
            comment_id: Top-level comment ID
            page: 1-based page number
            page_size: Items per page

        Returns:
            The reply page
        """
        pass

    @abstractmethod
    async def create(
        self,
        scope: Scope,
        draft: CommentDraft,
        token: str,
    ) -> RawComment:
        """Create a comment or reply in a writable scope.

        Args:
            scope: Installment or series scope
            draft: Content, parent and (optionally) challenge answer
            token: Bearer credential of the author

        Returns:
            The created comment

        Raises:
            ChallengeRequiredError: The write is gated; carries a new challenge
        """
        pass

    @abstractmethod
    async def update(
        self,
        comment_id: CommentId,
        content: str,
        token: str,
    ) -> RawComment:
        """Replace the content of a comment.

        Args:
            comment_id: Comment ID
            content: New content
            token: Bearer credential of the author

        Returns:
            The updated comment
        """
        pass

    @abstractmethod
    async def delete(self, comment_id: CommentId, token: str) -> None:
        """Delete a comment.

        Args:
            comment_id: Comment ID
            token: Bearer credential of the author
        """
        pass

    @abstractmethod
    async def fetch_recent(self, limit: int) -> list[RawComment]:
        """Fetch the most recent comments across all content.

        Args:
            limit: Maximum number of comments

        Returns:
            Comments newest first, each carrying its context
        """
        pass
