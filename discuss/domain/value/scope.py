"""Comment scopes.

A scope names the set of comments a query reads or a write lands in:

- installment(id): comments on one installment
- series(id): comments attached directly to the series
- aggregate(series_id): the server-merged timeline of the series and all of
  its installments

Every scope knows its owning series so that a write can be fanned out to the
aggregate it belongs to.
"""

from pydantic import model_validator

from discuss.domain.value.common import ValueObject
from discuss.domain.value.identifiers import InstallmentId, SeriesId
from discuss.domain.value.types import CommentableType, ScopeKind, SortOrder


class Scope(ValueObject):
    """Immutable, hashable scope identifier."""

    kind: ScopeKind
    series_id: SeriesId
    installment_id: InstallmentId | None = None

    @model_validator(mode="after")
    def check_installment(self) -> "Scope":
        """Only installment scopes carry an installment id."""
        if self.kind == ScopeKind.INSTALLMENT and not self.installment_id:
            raise ValueError("Installment scope requires an installment id")
        if self.kind != ScopeKind.INSTALLMENT and self.installment_id is not None:
            raise ValueError(f"{self.kind.value} scope cannot carry an installment id")
        return self

    @classmethod
    def installment(cls, installment_id: str, series_id: str) -> "Scope":
        return cls(
            kind=ScopeKind.INSTALLMENT,
            series_id=SeriesId(series_id),
            installment_id=InstallmentId(installment_id),
        )

    @classmethod
    def series(cls, series_id: str) -> "Scope":
        return cls(kind=ScopeKind.SERIES, series_id=SeriesId(series_id))

    @classmethod
    def aggregate(cls, series_id: str) -> "Scope":
        return cls(kind=ScopeKind.AGGREGATE, series_id=SeriesId(series_id))

    @classmethod
    def for_commentable(
        cls, commentable_type: CommentableType, commentable_id: str, series_id: str
    ) -> "Scope":
        """Scope a comment was written to, from its commentable reference."""
        if commentable_type == CommentableType.INSTALLMENT:
            return cls.installment(commentable_id, series_id)
        return cls.series(series_id)

    @property
    def writable(self) -> bool:
        """The aggregate is a read-only view; writes target a narrow scope."""
        return self.kind != ScopeKind.AGGREGATE

    def affected_scopes(self) -> tuple["Scope", ...]:
        """Scopes whose content changes when this scope is written to."""
        if self.kind == ScopeKind.AGGREGATE:
            return (self,)
        return (self, Scope.aggregate(self.series_id))

    def __str__(self) -> str:
        if self.kind == ScopeKind.INSTALLMENT:
            return f"installment:{self.series_id}/{self.installment_id}"
        return f"{self.kind.value}:{self.series_id}"


class ViewKey(ValueObject):
    """Cache key of one fetched page."""

    scope: Scope
    sort: SortOrder
    page: int
    page_size: int

    def __str__(self) -> str:
        return f"{self.scope}?sort={self.sort.value}&page={self.page}&per_page={self.page_size}"
