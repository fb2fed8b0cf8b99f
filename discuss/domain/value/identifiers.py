"""Strongly typed identifiers for discussion entities.

The comment store hands out opaque string identifiers; NewType keeps a
series id from being passed where an installment id is expected.
"""

from typing import NewType

CommentId = NewType("CommentId", str)
SeriesId = NewType("SeriesId", str)
InstallmentId = NewType("InstallmentId", str)
UserId = NewType("UserId", str)
