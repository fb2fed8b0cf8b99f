"""Unit tests for EditCommentUseCase and DeleteCommentUseCase."""

import pytest

from discuss.application.usecase.comment import (
    DeleteCommentRequest,
    DeleteCommentUseCase,
    EditCommentRequest,
    EditCommentUseCase,
    ListCommentsRequest,
    ListCommentsUseCase,
)
from discuss.domain.error import NotAuthorizedError, NotFoundError
from discuss.domain.service import ViewCache
from discuss.domain.value import Scope, SortOrder, ViewKey
from discuss.persistence.repository.inmemory import InMemoryCommentRepository
from tests.di import TEST_TOKEN
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()

INSTALLMENT = Scope.installment("c1", "m1")
AGGREGATE = Scope.aggregate("m1")


class TestEditComment:
    """Tests for editing through a shown scope."""

    @pytest.mark.asyncio
    async def test_edit_from_aggregate_invalidates_narrow_scope(self, unit_env):
        """An edit made in the aggregate view also stales the installment."""
        # Arrange
        repo = await unit_env.get(InMemoryCommentRepository)
        cache = await unit_env.get(ViewCache)
        list_comments = await unit_env.get(ListCommentsUseCase)
        use_case = await unit_env.get(EditCommentUseCase)
        comment = repo.seed(INSTALLMENT, "typo", author=TEST_TOKEN)
        await list_comments.execute(ListCommentsRequest(scope=INSTALLMENT))
        await list_comments.execute(ListCommentsRequest(scope=AGGREGATE))

        # Act
        response = await use_case.execute(
            EditCommentRequest(scope=AGGREGATE, comment_id=comment.id, content="fixed")
        )

        # Assert
        assert response.content == "fixed"
        key = ViewKey(scope=INSTALLMENT, sort=SortOrder.DESC, page=1, page_size=10)
        assert cache.is_stale(key)
        listed = await list_comments.execute(ListCommentsRequest(scope=AGGREGATE))
        assert listed.comments[0].content == "fixed"

    @pytest.mark.asyncio
    async def test_edit_comment_not_shown(self, unit_env):
        list_comments = await unit_env.get(ListCommentsUseCase)
        use_case = await unit_env.get(EditCommentUseCase)
        await list_comments.execute(ListCommentsRequest(scope=INSTALLMENT))

        with pytest.raises(NotFoundError):
            await use_case.execute(
                EditCommentRequest(scope=INSTALLMENT, comment_id="99", content="x")
            )

    @pytest.mark.asyncio
    async def test_edit_someone_elses_comment(self, unit_env):
        repo = await unit_env.get(InMemoryCommentRepository)
        list_comments = await unit_env.get(ListCommentsUseCase)
        use_case = await unit_env.get(EditCommentUseCase)
        comment = repo.seed(INSTALLMENT, "theirs", author="someone-else")
        await list_comments.execute(ListCommentsRequest(scope=INSTALLMENT))

        with pytest.raises(NotAuthorizedError):
            await use_case.execute(
                EditCommentRequest(scope=INSTALLMENT, comment_id=comment.id, content="x")
            )


class TestDeleteComment:
    """Tests for deleting through a shown scope."""

    @pytest.mark.asyncio
    async def test_delete_reply(self, unit_env):
        # Arrange
        repo = await unit_env.get(InMemoryCommentRepository)
        list_comments = await unit_env.get(ListCommentsUseCase)
        use_case = await unit_env.get(DeleteCommentUseCase)
        root = repo.seed(INSTALLMENT, "root")
        reply = repo.seed(INSTALLMENT, "mine", author=TEST_TOKEN, parent_id=root.id)
        await list_comments.execute(ListCommentsRequest(scope=INSTALLMENT))

        # Act
        response = await use_case.execute(
            DeleteCommentRequest(scope=INSTALLMENT, comment_id=reply.id)
        )

        # Assert
        assert response.deleted
        listed = await list_comments.execute(ListCommentsRequest(scope=INSTALLMENT))
        assert listed.comments[0].replies == []
