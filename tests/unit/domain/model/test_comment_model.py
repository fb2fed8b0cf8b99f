"""Unit tests for comment entities."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from discuss.domain.model import Comment, CommentDraft, RawComment, Reply
from discuss.domain.model.comment import shared_fields
from discuss.domain.value import CommentableType
from tests.conftest import comment_payload


class TestRawComment:
    """Tests for parsing store payloads."""

    def test_store_aliases_are_accepted(self):
        """Store field names map onto the domain names."""
        # Arrange
        payload = comment_payload(7, author="ana")
        payload["user"]["avatar_full_url"] = "https://cdn.example/ana.png"
        payload["chapter_info"] = {"id": 10, "name": "Chapter 3", "number": 3, "slug": "ch-3"}

        # Act
        raw = RawComment.model_validate(payload)

        # Assert
        assert raw.id == "7"
        assert raw.commentable_type == CommentableType.INSTALLMENT
        assert raw.commentable_id == "10"
        assert raw.author.name == "ana"
        assert raw.author.avatar_url == "https://cdn.example/ana.png"
        assert raw.installment_info.name == "Chapter 3"

    def test_series_model_name_maps_to_series(self):
        payload = comment_payload(1, commentable_type="App\\Models\\Manga")

        raw = RawComment.model_validate(payload)

        assert raw.commentable_type == CommentableType.SERIES

    def test_null_replies_become_empty_list(self):
        payload = comment_payload(1)
        payload["replies"] = None

        raw = RawComment.model_validate(payload)

        assert raw.replies == []


class TestDepthBound:
    """The two-tier types cannot express depth 2."""

    def test_reply_has_no_replies_field(self):
        """A reply payload's nested replies are dropped on parse."""
        # Arrange
        payload = comment_payload(2, parent_id=1, replies=[comment_payload(3, parent_id=2)])

        # Act
        reply = Reply.model_validate(payload)

        # Assert
        assert reply.depth == 1
        assert not hasattr(reply, "replies")

    def test_reply_requires_parent(self):
        with pytest.raises(PydanticValidationError):
            Reply.model_validate(comment_payload(2))

    def test_comment_rejects_parent(self):
        raw = RawComment.model_validate(comment_payload(2, parent_id=1))

        with pytest.raises(PydanticValidationError):
            Comment(**shared_fields(raw), parent_id=raw.parent_id)

    def test_replies_count_raised_to_delivered_replies(self):
        """replies_count never undercounts the replies actually present."""
        # Arrange
        raw = RawComment.model_validate(comment_payload(1))
        reply = Reply(**shared_fields(RawComment.model_validate(comment_payload(2))), parent_id="1")

        # Act
        comment = Comment(**shared_fields(raw), replies=[reply], replies_count=0)

        # Assert
        assert comment.replies_count == 1
        assert comment.unloaded_replies == 0


class TestCommentDraft:
    """Tests for the write payload."""

    def test_challenge_fields_must_be_paired(self):
        with pytest.raises(PydanticValidationError):
            CommentDraft(content="hi", captcha_token="t1")

    def test_answers_challenge(self):
        draft = CommentDraft(content="hi", captcha_token="t1", captcha_answer="4")

        assert draft.answers_challenge is True
        assert CommentDraft(content="hi").answers_challenge is False
