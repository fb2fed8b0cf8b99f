"""Unit tests for CommentService."""

import pytest

from discuss.adapter.identity import StaticIdentityProvider
from discuss.domain.error import (
    AuthRequiredError,
    NotAuthorizedError,
    ValidationError,
)
from discuss.domain.service import CommentService, ScopeAggregator
from discuss.domain.value import Scope
from discuss.persistence.repository.inmemory import InMemoryCommentRepository
from tests.di import TEST_TOKEN
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()

INSTALLMENT = Scope.installment("c1", "m1")


class TestEdit:
    """Tests for editing a comment."""

    @pytest.mark.asyncio
    async def test_edit_own_comment(self, unit_env):
        """Editing replaces content and refreshes the focused scope."""
        # Arrange
        repo = await unit_env.get(InMemoryCommentRepository)
        service = await unit_env.get(CommentService)
        aggregator = await unit_env.get(ScopeAggregator)
        repo.seed(INSTALLMENT, "first draft", author=TEST_TOKEN)
        view = await aggregator.open(INSTALLMENT)
        comment = view.items[0].comment
        assert comment.can_edit

        # Act
        updated = await service.edit(INSTALLMENT, comment, "final text")

        # Assert
        assert updated.content == "final text"
        assert aggregator.view(INSTALLMENT).items[0].comment.content == "final text"

    @pytest.mark.asyncio
    async def test_edit_refused_without_permission(self, unit_env):
        repo = await unit_env.get(InMemoryCommentRepository)
        service = await unit_env.get(CommentService)
        aggregator = await unit_env.get(ScopeAggregator)
        repo.seed(INSTALLMENT, "not mine", author="someone-else")
        view = await aggregator.open(INSTALLMENT)

        with pytest.raises(NotAuthorizedError):
            await service.edit(INSTALLMENT, view.items[0].comment, "mine now")

        assert repo.count("update") == 0

    @pytest.mark.asyncio
    async def test_edit_rejects_blank_content(self, unit_env):
        repo = await unit_env.get(InMemoryCommentRepository)
        service = await unit_env.get(CommentService)
        aggregator = await unit_env.get(ScopeAggregator)
        repo.seed(INSTALLMENT, "text", author=TEST_TOKEN)
        view = await aggregator.open(INSTALLMENT)

        with pytest.raises(ValidationError):
            await service.edit(INSTALLMENT, view.items[0].comment, "   ")

    @pytest.mark.asyncio
    async def test_edit_requires_credential(self, unit_env):
        # Arrange
        repo = await unit_env.get(InMemoryCommentRepository)
        service = await unit_env.get(CommentService)
        aggregator = await unit_env.get(ScopeAggregator)
        identity = await unit_env.get(StaticIdentityProvider)
        repo.seed(INSTALLMENT, "text", author=TEST_TOKEN)
        view = await aggregator.open(INSTALLMENT)
        identity.sign_out()

        # Act / Assert
        with pytest.raises(AuthRequiredError):
            await service.edit(INSTALLMENT, view.items[0].comment, "new")


class TestDelete:
    """Tests for deleting a comment."""

    @pytest.mark.asyncio
    async def test_delete_own_comment(self, unit_env):
        # Arrange
        repo = await unit_env.get(InMemoryCommentRepository)
        service = await unit_env.get(CommentService)
        aggregator = await unit_env.get(ScopeAggregator)
        repo.seed(INSTALLMENT, "keep", author="someone-else")
        repo.seed(INSTALLMENT, "remove me", author=TEST_TOKEN)
        view = await aggregator.open(INSTALLMENT)

        # Act
        await service.delete(INSTALLMENT, view.items[0].comment)

        # Assert
        shown = aggregator.view(INSTALLMENT)
        assert [n.comment.content for n in shown.items] == ["keep"]
        assert shown.total_count == 1

    @pytest.mark.asyncio
    async def test_delete_refused_without_permission(self, unit_env):
        repo = await unit_env.get(InMemoryCommentRepository)
        service = await unit_env.get(CommentService)
        aggregator = await unit_env.get(ScopeAggregator)
        repo.seed(INSTALLMENT, "not mine", author="someone-else")
        view = await aggregator.open(INSTALLMENT)

        with pytest.raises(NotAuthorizedError):
            await service.delete(INSTALLMENT, view.items[0].comment)


class TestRecent:
    """Tests for the recent-comments feed."""

    @pytest.mark.asyncio
    async def test_recent_newest_first(self, unit_env):
        repo = await unit_env.get(InMemoryCommentRepository)
        service = await unit_env.get(CommentService)
        repo.seed(INSTALLMENT, "old")
        repo.seed(Scope.series("m2"), "new")

        comments = await service.recent(limit=5)

        assert [c.content for c in comments] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_recent_limit_must_be_positive(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(ValidationError):
            await service.recent(limit=0)
