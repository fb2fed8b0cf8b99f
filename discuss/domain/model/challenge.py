"""Anti-abuse challenge."""

from pydantic import Field

from discuss.domain.model.common import DomainModel


class Challenge(DomainModel):
    """Server-issued "are you human" puzzle.

    The token is single use: every rejection comes with a fresh one, and only
    the most recently issued token may be resubmitted.
    """

    question: str = Field(min_length=1)
    token: str = Field(min_length=1)
