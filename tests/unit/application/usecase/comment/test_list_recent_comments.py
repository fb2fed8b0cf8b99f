"""Unit tests for ListRecentCommentsUseCase."""

import pytest

from discuss.application.usecase.comment import (
    ListRecentCommentsRequest,
    ListRecentCommentsUseCase,
)
from discuss.domain.value import Scope
from discuss.persistence.repository.inmemory import InMemoryCommentRepository
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()


class TestListRecentComments:
    """Tests for the recent comments feed."""

    @pytest.mark.asyncio
    async def test_default_limit_from_settings(self, unit_env):
        # Arrange
        repo = await unit_env.get(InMemoryCommentRepository)
        use_case = await unit_env.get(ListRecentCommentsUseCase)
        for i in range(8):
            repo.seed(Scope.installment(f"c{i}", "m1"), f"comment {i}")

        # Act
        response = await use_case.execute(ListRecentCommentsRequest())

        # Assert
        assert len(response.comments) == 5
        first = response.comments[0]
        assert first.content == "comment 7"
        assert first.series_id == "m1"
        assert first.installment_id == "c7"

    @pytest.mark.asyncio
    async def test_explicit_limit_and_markup_stripped(self, unit_env):
        repo = await unit_env.get(InMemoryCommentRepository)
        use_case = await unit_env.get(ListRecentCommentsUseCase)
        repo.seed(Scope.series("m1"), "<script>x</script><i>nice</i>")

        response = await use_case.execute(ListRecentCommentsRequest(limit=1))

        assert response.comments[0].content == "nice"
        assert response.comments[0].installment_id is None
