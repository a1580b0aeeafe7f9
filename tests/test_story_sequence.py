"""StorySequence construction, queries and navigation."""

import pytest

from story_sequence import (
    EmptySequenceError,
    ImagePayload,
    OutOfRangeError,
    StoryItem,
    StorySequence,
    TextPayload,
    VideoPayload,
)


def _items(n, shown=False):
    return [StoryItem.text(f"page {i}", duration=1.0, shown=shown) for i in range(n)]


class TestConstruction:
    def test_empty_list_is_rejected(self):
        with pytest.raises(EmptySequenceError):
            StorySequence([])

    def test_only_blank_slots_is_rejected(self):
        with pytest.raises(EmptySequenceError):
            StorySequence([None, None])

    def test_items_from_start_index_are_reset(self):
        items = _items(4, shown=True)
        seq = StorySequence(items, start_index=2)
        assert [it.shown for it in seq] == [True, True, False, False]
        assert seq.current_item() is items[2]

    def test_start_index_is_clamped(self):
        items = _items(3, shown=True)
        seq = StorySequence(items, start_index=99)
        assert seq.start_index == 2
        assert seq.current_item() is items[2]

        seq = StorySequence(_items(3), start_index=-5)
        assert seq.start_index == 0

    def test_blank_start_slot_resets_everything(self):
        items = _items(3, shown=True)
        seq = StorySequence([items[0], None, items[1], items[2]], start_index=1)
        assert len(seq) == 3
        assert all(not it.shown for it in seq)
        assert seq.current_item() is items[0]

    def test_starting_at_marks_earlier_stories_seen(self):
        items = _items(4)
        seq = StorySequence.starting_at(items, 2)
        assert [it.shown for it in seq] == [True, True, False, False]
        assert seq.current_item() is items[2]

    def test_starting_at_past_the_end_plays_the_last_story(self):
        items = _items(3)
        seq = StorySequence.starting_at(items, 99)
        assert [it.shown for it in seq] == [True, True, False]

    def test_starting_at_blank_slot_plays_from_the_top(self):
        items = _items(2)
        seq = StorySequence.starting_at([items[0], None, items[1]], 1)
        assert seq.current_item() is items[0]


class TestQueries:
    def test_current_item_is_first_unshown(self):
        items = _items(3)
        seq = StorySequence(items)
        seq.mark_shown(items[0])
        assert seq.current_item() is items[1]
        assert seq.first_unshown() is items[1]

    def test_current_item_defaults_to_last_when_exhausted(self):
        items = _items(3)
        seq = StorySequence(items)
        for it in items:
            seq.mark_shown(it)
        assert seq.first_unshown() is None
        assert seq.all_shown()
        assert seq.current_item() is items[-1]

    def test_items_are_compared_by_identity(self):
        a = StoryItem(TextPayload("same"), 1.0)
        b = StoryItem(TextPayload("same"), 1.0)
        seq = StorySequence([a, b])
        assert seq.index_of(b) == 1
        seq.mark_shown(a)
        assert seq.current_item() is b

    def test_reset_helpers(self):
        items = _items(4)
        seq = StorySequence(items)
        for it in items:
            seq.mark_shown(it)
        seq.reset_from(2)
        assert [it.shown for it in seq] == [True, True, False, False]
        seq.reset(items[0])
        assert seq.current_item() is items[0]
        seq.reset_all()
        assert not any(it.shown for it in seq)


class TestNavigation:
    def test_neighbours(self):
        items = _items(3)
        seq = StorySequence(items)
        assert seq.item_after(items[0]) is items[1]
        assert seq.item_before(items[2]) is items[1]
        assert seq.is_first(items[0]) and seq.is_last(items[2])

    def test_before_first_is_out_of_range(self):
        items = _items(2)
        seq = StorySequence(items)
        with pytest.raises(OutOfRangeError):
            seq.item_before(items[0])

    def test_after_last_is_out_of_range(self):
        items = _items(2)
        seq = StorySequence(items)
        with pytest.raises(OutOfRangeError):
            seq.item_after(items[1])

    def test_foreign_item_is_out_of_range(self):
        seq = StorySequence(_items(2))
        with pytest.raises(OutOfRangeError):
            seq.index_of(StoryItem.text("stranger"))

    def test_out_of_range_is_an_index_error(self):
        assert issubclass(OutOfRangeError, IndexError)


def test_factories_carry_payloads():
    img = StoryItem.page_image("a.png", caption="hi")
    vid = StoryItem.page_video("b.mp4", duration=7.5)
    assert isinstance(img.payload, ImagePayload) and img.payload.caption == "hi"
    assert isinstance(vid.payload, VideoPayload) and vid.duration == 7.5
    assert img.duration == pytest.approx(3.0)
