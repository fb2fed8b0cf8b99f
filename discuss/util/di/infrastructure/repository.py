"""Comment store infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import httpx
import logfire

from discuss.adapter.http import HttpCommentRepository
from discuss.config import ApiSettings
from discuss.domain.repository import CommentRepository, IdentityProvider
from discuss.util.di.base import ProviderBase


class RepositoryProvider(ProviderBase):
    """Comment store component base."""

    __mock_component__ = "repository"


class ProdRepositoryProvider(RepositoryProvider):
    """Production comment store provider using the REST API."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_http_client(
        self, settings: ApiSettings
    ) -> AsyncIterator[httpx.AsyncClient]:
        """Provide the HTTP client, closed when the session ends."""
        async with httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            headers={"Accept": "application/json"},
        ) as client:
            logfire.info("Comment API client opened", base_url=settings.base_url)
            yield client
        logfire.info("Comment API client closed")

    @provide(scope=Scope.APP)
    def get_comment_repository(
        self, client: httpx.AsyncClient, identity: IdentityProvider
    ) -> CommentRepository:
        """Provide Comment repository."""
        return HttpCommentRepository(client=client, identity=identity)
