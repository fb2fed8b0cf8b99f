"""Comment entities.

Discussions are bounded to one reply level. The store hands back
``RawComment`` records which may nest arbitrarily; the reply tree builder
turns them into the two-tier ``Comment`` / ``Reply`` structure, where a reply
has no ``replies`` field at all. Depth 1 is therefore a property of the
types, not a convention.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import (
    AliasChoices,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from discuss.domain.model.common import DomainModel
from discuss.domain.value import CommentableType, CommentId, UserId


def _coerce_commentable_type(value: Any) -> Any:
    """Accept the store's model class names as well as the plain enum values.

    The store reports e.g. ``App\\Models\\Chapter`` for installment comments.
    """
    if isinstance(value, CommentableType) or not isinstance(value, str):
        return value
    lowered = value.lower().rsplit("\\", 1)[-1]
    if lowered in ("manga", "series"):
        return CommentableType.SERIES
    if lowered in ("chapter", "installment"):
        return CommentableType.INSTALLMENT
    return value


def _coerce_id(value: Any) -> Any:
    # Numeric ids from the store are kept opaque
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


StoreId = Annotated[str, BeforeValidator(_coerce_id)]
StoreCommentId = Annotated[CommentId, BeforeValidator(_coerce_id)]
StoreCommentableType = Annotated[
    CommentableType, BeforeValidator(_coerce_commentable_type)
]


class Author(DomainModel):
    """Author reference embedded in a comment."""

    id: Annotated[UserId, BeforeValidator(_coerce_id)]
    name: str
    avatar_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("avatar_url", "avatar_full_url")
    )


class InstallmentInfo(DomainModel):
    """Label for an installment comment shown in the aggregate view."""

    id: StoreId
    name: str
    number: Optional[float] = None
    slug: str


class CommentContext(DomainModel):
    """Provenance of a comment in aggregate and recent views."""

    type: StoreCommentableType
    text: str
    series_slug: str = Field(validation_alias=AliasChoices("series_slug", "manga_slug"))
    installment_slug: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("installment_slug", "chapter_slug")
    )
    series_id: StoreId = Field(validation_alias=AliasChoices("series_id", "manga_id"))
    installment_id: Optional[StoreId] = Field(
        default=None, validation_alias=AliasChoices("installment_id", "chapter_id")
    )


class _CommentFields(DomainModel):
    """Fields shared by every comment, whatever its depth."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",  # A reply payload's stray "replies" is dropped here
        populate_by_name=True,
    )

    id: StoreCommentId
    content: str
    commentable_type: StoreCommentableType
    commentable_id: StoreId
    created_at: datetime
    updated_at: Optional[datetime] = None
    author: Author = Field(validation_alias=AliasChoices("author", "user"))
    can_edit: bool = False
    can_delete: bool = False
    installment_info: Optional[InstallmentInfo] = Field(
        default=None, validation_alias=AliasChoices("installment_info", "chapter_info")
    )
    context: Optional[CommentContext] = None


class RawComment(_CommentFields):
    """Comment record exactly as the store returns it.

    ``replies`` may nest to any depth here; nothing outside the reply tree
    builder should render a RawComment.
    """

    parent_id: Optional[StoreCommentId] = None
    replies: list["RawComment"] = Field(default_factory=list)
    replies_count: int = Field(default=0, ge=0)

    @field_validator("replies", mode="before")
    @classmethod
    def null_replies_are_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class Reply(_CommentFields):
    """Depth-1 comment. Structurally cannot own replies."""

    parent_id: StoreCommentId

    @property
    def depth(self) -> int:
        return 1


class Comment(_CommentFields):
    """Top-level (depth 0) comment with its materialized replies.

    ``replies_count`` is authoritative and may exceed ``len(replies)`` when
    the store has not delivered every reply.
    """

    parent_id: Literal[None] = None
    replies: list[Reply] = Field(default_factory=list)
    replies_count: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def count_covers_replies(cls, data: Any) -> Any:
        """Never report fewer replies than are actually present."""
        if isinstance(data, dict):
            replies = data.get("replies") or []
            if data.get("replies_count", 0) < len(replies):
                data = {**data, "replies_count": len(replies)}
        return data

    @property
    def depth(self) -> int:
        return 0

    @property
    def unloaded_replies(self) -> int:
        """Replies the store reports but has not delivered."""
        return self.replies_count - len(self.replies)


def shared_fields(comment: _CommentFields) -> dict[str, Any]:
    """Depth-independent fields of a comment, for re-typing it at another depth."""
    return {name: getattr(comment, name) for name in _CommentFields.model_fields}
