"""HTTP comment store client.

Talks to the comment REST API. Every response is wrapped in an envelope::

    {"success": true, "data": ..., "meta": {"pagination": {...}}}

and every failure is translated into a ``CommentError`` subclass here, so
nothing above this module ever sees an httpx exception.
"""

from typing import Any
from urllib.parse import quote

import httpx
import logfire
from pydantic import ValidationError as PydanticValidationError

from discuss.domain.error import (
    AuthRequiredError,
    ChallengeRequiredError,
    CommentError,
    NetworkError,
    NotFoundError,
    UnknownServerError,
    ValidationError,
)
from discuss.domain.model import (
    Challenge,
    CommentDraft,
    PagedView,
    RawComment,
    Reply,
    ReplyPage,
)
from discuss.domain.repository import CommentRepository, IdentityProvider
from discuss.domain.value import CommentId, Scope, ScopeKind, SortOrder


class HttpCommentRepository(CommentRepository):
    """Comment repository backed by the comment REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        identity: IdentityProvider | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            client: HTTP client configured with the API base URL and timeout
            identity: Optional credential source; reads carry the bearer
                token when one is available so viewer flags are filled in
        """
        self.client = client
        self.identity = identity

    async def fetch_page(
        self,
        scope: Scope,
        page: int,
        page_size: int,
        sort: SortOrder,
    ) -> PagedView:
        params: dict[str, Any] = {
            "page": page,
            "per_page": page_size,
            "sort": sort.value,
        }
        if scope.kind != ScopeKind.INSTALLMENT:
            # The series endpoint serves both the series-only and merged lists
            params["type"] = "all" if scope.kind == ScopeKind.AGGREGATE else "manga"

        body = await self._request(
            "GET",
            self._scope_path(scope),
            params=params,
            headers=await self._read_headers(),
        )
        items = self._list(body)
        pagination = self._pagination(body, page, page_size, len(items))
        try:
            return PagedView(
                items=[RawComment.model_validate(item) for item in items],
                total_count=pagination["total"],
                current_page=pagination["current_page"],
                total_pages=max(1, pagination["last_page"]),
                sort=sort,
            )
        except PydanticValidationError as e:
            raise self._malformed("comment page", e)

    async def fetch_replies(
        self,
        comment_id: CommentId,
        page: int,
        page_size: int,
    ) -> ReplyPage:
        body = await self._request(
            "GET",
            f"/api/comments/{comment_id}/replies",
            params={"page": page, "per_page": page_size},
            headers=await self._read_headers(),
        )
        items = self._list(body)
        pagination = self._pagination(body, page, page_size, len(items))
        try:
            return ReplyPage(
                items=[
                    Reply.model_validate({**item, "parent_id": comment_id})
                    for item in items
                ],
                total_count=pagination["total"],
                current_page=pagination["current_page"],
                total_pages=max(1, pagination["last_page"]),
            )
        except PydanticValidationError as e:
            raise self._malformed("reply page", e)

    async def create(
        self,
        scope: Scope,
        draft: CommentDraft,
        token: str,
    ) -> RawComment:
        if not scope.writable:
            raise ValidationError(f"Cannot write to read-only scope {scope}")
        body = await self._request(
            "POST",
            self._scope_path(scope),
            json=draft.model_dump(exclude_none=True),
            headers=self._auth_headers(token),
        )
        return self._comment(body)

    async def update(
        self,
        comment_id: CommentId,
        content: str,
        token: str,
    ) -> RawComment:
        body = await self._request(
            "PUT",
            f"/api/comments/{comment_id}",
            json={"content": content},
            headers=self._auth_headers(token),
        )
        return self._comment(body)

    async def delete(self, comment_id: CommentId, token: str) -> None:
        await self._request(
            "DELETE",
            f"/api/comments/{comment_id}",
            headers=self._auth_headers(token),
            expect_body=False,
        )

    async def fetch_recent(self, limit: int) -> list[RawComment]:
        body = await self._request(
            "GET", "/api/comments/recent", params={"per_page": limit}
        )
        try:
            return [RawComment.model_validate(item) for item in self._list(body)]
        except PydanticValidationError as e:
            raise self._malformed("recent comments", e)

    @staticmethod
    def _scope_path(scope: Scope) -> str:
        """Store path of a scope.

        The store calls a series "manga" and an installment "chapter".
        """
        series = quote(scope.series_id, safe="")
        if scope.kind == ScopeKind.INSTALLMENT:
            installment = quote(scope.installment_id, safe="")
            return f"/api/comments/chapter/{series}/{installment}"
        return f"/api/comments/manga/{series}"

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    async def _read_headers(self) -> dict[str, str]:
        if self.identity is None:
            return {}
        token = await self.identity.get_token()
        return self._auth_headers(token) if token else {}

    async def _request(
        self,
        method: str,
        path: str,
        expect_body: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send a request and unwrap the response envelope.

        Raises:
            CommentError: Translated from the transport error or status code
        """
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logfire.warn("Comment API timed out", method=method, path=path)
            raise NetworkError(f"Request timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            logfire.warn(
                "Comment API unreachable", method=method, path=path, error=str(e)
            )
            raise NetworkError(f"Request failed: {e}") from e

        if not response.is_success:
            raise self._error(response, path)
        if not expect_body or not response.content:
            return {}

        try:
            body = response.json()
        except ValueError as e:
            raise UnknownServerError(
                "Response body is not JSON", response.status_code
            ) from e
        if not isinstance(body, dict) or body.get("success") is False:
            raise UnknownServerError("Invalid response envelope", response.status_code)
        return body

    def _error(self, response: httpx.Response, path: str) -> CommentError:
        status = response.status_code
        body = self._error_body(response)
        message = body.get("message") or f"HTTP {status}"
        logfire.warn(
            "Comment API request rejected",
            path=path,
            status_code=status,
            message=message,
        )

        if status == 429:
            captcha = body.get("captcha")
            if body.get("captcha_required") and isinstance(captcha, dict):
                try:
                    return ChallengeRequiredError(Challenge.model_validate(captcha))
                except PydanticValidationError:
                    return UnknownServerError("Malformed challenge", status)
            return UnknownServerError(message, status)
        if status in (401, 403):
            return AuthRequiredError(message)
        if status in (400, 422):
            errors = body.get("errors")
            if isinstance(errors, dict):
                details = "; ".join(
                    f"{field}: {', '.join(map(str, msgs))}"
                    for field, msgs in errors.items()
                    if isinstance(msgs, list)
                )
                if details:
                    message = f"{message} ({details})"
            return ValidationError(message)
        if status == 404:
            return NotFoundError("Resource", path)
        return UnknownServerError(message, status)

    @staticmethod
    def _error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _list(body: dict[str, Any]) -> list[dict[str, Any]]:
        data = body.get("data")
        if not isinstance(data, list):
            raise UnknownServerError("Expected a list of comments")
        return data

    @staticmethod
    def _pagination(
        body: dict[str, Any], page: int, page_size: int, count: int
    ) -> dict[str, int]:
        # Some endpoints omit meta; treat the response as the only page
        pagination = (body.get("meta") or {}).get("pagination") or {}
        try:
            return {
                "current_page": int(pagination.get("current_page", page)),
                "last_page": int(pagination.get("last_page", 1)),
                "per_page": int(pagination.get("per_page", page_size)),
                "total": int(pagination.get("total", count)),
            }
        except (TypeError, ValueError) as e:
            raise UnknownServerError("Malformed pagination") from e

    def _comment(self, body: dict[str, Any]) -> RawComment:
        data = body.get("data")
        if not isinstance(data, dict):
            raise UnknownServerError("Expected a comment")
        try:
            return RawComment.model_validate(data)
        except PydanticValidationError as e:
            raise self._malformed("comment", e)

    @staticmethod
    def _malformed(what: str, error: PydanticValidationError) -> UnknownServerError:
        logfire.error(
            "Malformed comment API response",
            what=what,
            error_count=error.error_count(),
        )
        return UnknownServerError(f"Malformed {what}")
