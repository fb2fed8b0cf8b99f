"""Unit tests for provider selection and the test container."""

import pytest

from discuss.adapter.http import HttpCommentRepository
from discuss.domain.repository import CommentRepository, IdentityProvider
from discuss.persistence.repository.inmemory import InMemoryCommentRepository
from discuss.util.di import RepositoryProvider, get_provider
from discuss.util.di.infrastructure import ProdRepositoryProvider
from discuss.util.error import DependencyInjectionError
from tests.di import MockRepositoryProvider, build_test_container


class TestProviderSelection:
    """Tests for mock/production provider lookup."""

    def test_mock_selected_by_flag(self):
        assert get_provider(RepositoryProvider, use_mock=True) is MockRepositoryProvider
        assert get_provider(RepositoryProvider, use_mock=False) is ProdRepositoryProvider

    def test_unknown_component_rejected(self):
        with pytest.raises(DependencyInjectionError):
            build_test_container(unmock={"database"})


class TestContainer:
    """Tests for containers built with selective unmocking."""

    @pytest.mark.asyncio
    async def test_default_container_uses_in_memory_store(self):
        container = build_test_container()

        repository = await container.get(CommentRepository)
        identity = await container.get(IdentityProvider)

        assert isinstance(repository, InMemoryCommentRepository)
        assert await identity.get_token() == "test-user"
        await container.close()

    @pytest.mark.asyncio
    async def test_unmocked_repository_uses_http_client(self):
        """Building the real repository opens a client but sends nothing."""
        container = build_test_container(unmock={"repository"})

        repository = await container.get(CommentRepository)

        assert isinstance(repository, HttpCommentRepository)
        assert str(repository.client.base_url).startswith("http")
        await container.close()
