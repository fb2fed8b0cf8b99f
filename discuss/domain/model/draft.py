"""Write payload for a new comment."""

from typing import Optional

from pydantic import Field, model_validator

from discuss.domain.model.common import DomainModel
from discuss.domain.value import CommentId


class CommentDraft(DomainModel):
    """Content submitted to the write endpoint.

    The challenge token and answer travel together or not at all.
    """

    content: str = Field(min_length=1)
    parent_id: Optional[CommentId] = None
    captcha_token: Optional[str] = None
    captcha_answer: Optional[str] = None

    @model_validator(mode="after")
    def challenge_fields_paired(self) -> "CommentDraft":
        if (self.captcha_token is None) != (self.captcha_answer is None):
            raise ValueError("captcha_token and captcha_answer must be sent together")
        return self

    @property
    def answers_challenge(self) -> bool:
        return self.captcha_token is not None
