"""Unit tests for ReplyTreeBuilder."""

import pytest

from discuss.domain.error import NotFoundError
from discuss.domain.model import RawComment, Reply
from discuss.domain.model.comment import shared_fields
from discuss.domain.service import ReplyTreeBuilder
from discuss.domain.value import SortOrder
from tests.conftest import comment_payload, make_page


def raw(payload) -> RawComment:
    return RawComment.model_validate(payload)


class TestBuild:
    """Tests for building threads from a page."""

    def test_depth_two_payload_is_flattened_to_thread_root(self):
        """Replies nested under a reply land in the root's reply list."""
        # Arrange
        nested = comment_payload(3, parent_id=2, replies=[comment_payload(4, parent_id=3)])
        root = comment_payload(1, replies=[comment_payload(2, parent_id=1, replies=[nested])])
        builder = ReplyTreeBuilder()

        # Act
        tree = builder.build([raw(root)])

        # Assert
        comment = tree.find("1").comment
        assert [r.id for r in comment.replies] == ["2", "3", "4"]
        assert all(r.parent_id == "1" for r in comment.replies)
        assert all(isinstance(r, Reply) and r.depth == 1 for r in comment.replies)

    def test_duplicate_replies_are_dropped(self):
        root = comment_payload(
            1,
            replies=[
                comment_payload(2, parent_id=1, replies=[comment_payload(3, parent_id=2)]),
                comment_payload(3, parent_id=1),
            ],
        )

        tree = ReplyTreeBuilder().build([raw(root)])

        assert [r.id for r in tree.find("1").comment.replies] == ["2", "3"]

    def test_top_level_item_with_parent_is_dropped(self):
        items = [raw(comment_payload(1)), raw(comment_payload(2, parent_id=1))]

        tree = ReplyTreeBuilder().build(items)

        assert [n.comment.id for n in tree] == ["1"]

    def test_page_order_is_kept(self):
        items = [raw(comment_payload(i)) for i in (5, 3, 9)]

        tree = ReplyTreeBuilder().build(items)

        assert [n.comment.id for n in tree] == ["5", "3", "9"]

    def test_default_expansion_follows_threshold(self):
        """Small threads start expanded, large ones collapsed."""
        # Arrange
        small = comment_payload(1, replies=[comment_payload(2, parent_id=1)])
        large = comment_payload(3, replies_count=12)
        builder = ReplyTreeBuilder(expand_threshold=3)

        # Act
        tree = builder.build([raw(small), raw(large)])

        # Assert
        assert tree.find("1").expanded is True
        assert tree.find("3").expanded is False

    def test_explicit_expansion_wins(self):
        large = comment_payload(3, replies_count=12)

        tree = ReplyTreeBuilder().build([raw(large)], expanded={"3": True})

        assert tree.find("3").expanded is True

    def test_unloaded_replies_reported(self):
        """Divergence between count and delivered replies is surfaced."""
        payload = comment_payload(1, replies=[comment_payload(2, parent_id=1)], replies_count=5)

        node = ReplyTreeBuilder().build([raw(payload)]).find("1")

        assert node.unloaded_replies == 4
        assert node.has_unloaded_replies is True

    def test_display_content_is_sanitized(self):
        payload = comment_payload(1, content="<b>bold</b> &amp; <script>x()</script>plain")

        node = ReplyTreeBuilder().build([raw(payload)]).find("1")

        assert node.display_content == "bold & plain"
        assert node.comment.content.startswith("<b>")


class TestToggle:
    """Tests for expand/collapse."""

    def test_toggle_flips_only_one_thread(self):
        tree = ReplyTreeBuilder().build([raw(comment_payload(1)), raw(comment_payload(2))])

        toggled = tree.toggle("1")

        assert toggled.find("1").expanded is False
        assert toggled.find("2").expanded is True
        assert tree.find("1").expanded is True

    def test_toggle_unknown_thread_raises(self):
        tree = ReplyTreeBuilder().build([raw(comment_payload(1))])

        with pytest.raises(NotFoundError):
            tree.toggle("99")


class TestThreadRoot:
    def test_reply_to_reply_targets_root(self):
        root = comment_payload(1, replies=[comment_payload(2, parent_id=1)])
        tree = ReplyTreeBuilder().build([raw(root)])

        assert tree.thread_root("2") == "1"
        assert tree.thread_root("1") == "1"
        assert tree.thread_root("42") is None


class TestMergeReplies:
    def test_merge_dedupes_and_keeps_expand_state(self):
        """Fetched replies append after the embedded ones, without duplicates."""
        # Arrange
        root = comment_payload(1, replies=[comment_payload(2, parent_id=1)], replies_count=8)
        builder = ReplyTreeBuilder()
        tree = builder.build([raw(root)])
        fetched = [
            Reply(**shared_fields(raw(comment_payload(i, parent_id=1))), parent_id="1")
            for i in (2, 3, 4)
        ]

        # Act
        merged = builder.merge_replies(tree, "1", fetched, total=8)

        # Assert
        node = merged.find("1")
        assert [r.id for r in node.comment.replies] == ["2", "3", "4"]
        assert node.unloaded_replies == 5
        assert node.expanded is False

    def test_merge_into_unknown_thread_raises(self):
        builder = ReplyTreeBuilder()
        tree = builder.build([raw(comment_payload(1))])

        with pytest.raises(NotFoundError):
            builder.merge_replies(tree, "9", [])


class TestInsert:
    """Tests for reconciling a posted comment into a refetched page."""

    def test_new_comment_prepended_on_first_desc_page(self):
        page = make_page([comment_payload(2), comment_payload(1)], sort=SortOrder.DESC)
        created = raw(comment_payload(3))

        result = ReplyTreeBuilder().insert(page, created)

        assert [c.id for c in result.items] == ["3", "2", "1"]
        assert result.total_count == 3

    def test_new_comment_appended_on_last_asc_page(self):
        page = make_page(
            [comment_payload(1), comment_payload(2)],
            total=12,
            page=2,
            total_pages=2,
            sort=SortOrder.ASC,
        )
        created = raw(comment_payload(13))

        result = ReplyTreeBuilder().insert(page, created)

        assert [c.id for c in result.items][-1] == "13"

    def test_comment_not_inserted_on_other_pages(self):
        page = make_page([comment_payload(1)], page=2, total_pages=3, sort=SortOrder.DESC)

        result = ReplyTreeBuilder().insert(page, raw(comment_payload(50)))

        assert result is page

    def test_already_present_comment_is_not_duplicated(self):
        page = make_page([comment_payload(3), comment_payload(2)])

        result = ReplyTreeBuilder().insert(page, raw(comment_payload(3)))

        assert result is page

    def test_reply_inserted_under_parent(self):
        page = make_page([comment_payload(1)])
        created = raw(comment_payload(5, parent_id=1))

        result = ReplyTreeBuilder().insert(page, created)

        assert [r.id for r in result.items[0].replies] == ["5"]
        assert result.items[0].replies_count == 1

    def test_reply_already_counted_by_store_keeps_count(self):
        """The refetched count can include a reply the page does not embed."""
        page = make_page(
            [comment_payload(1, replies=[comment_payload(2, parent_id=1)], replies_count=2)]
        )
        created = raw(comment_payload(5, parent_id=1))

        result = ReplyTreeBuilder().insert(page, created)

        assert [r.id for r in result.items[0].replies] == ["2", "5"]
        assert result.items[0].replies_count == 2
