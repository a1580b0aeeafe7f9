import pytest

from events         import ControlChannel
from overlays       import IndicatorHeight, ProgressPosition, info_lines, segment_fills
from story_player   import StoryPlayer
from story_sequence import StoryItem, StorySequence


@pytest.fixture
def playing(fake_time):
    items = [StoryItem.text(f"page {i}", duration=2.0) for i in range(3)]
    seq = StorySequence(items)
    player = StoryPlayer(seq, ControlChannel(), now=fake_time)
    player.start()
    fake_time.advance(2.0)
    player.tick()
    fake_time.advance(1.0)
    return seq, player


def test_segments_show_shown_active_and_pending(playing):
    seq, player = playing
    fills = segment_fills(seq, player.snapshot())
    assert fills == [1.0, pytest.approx(0.5), 0.0]


def test_info_panel_lists_upcoming(playing):
    seq, player = playing
    lines = info_lines(seq, player.snapshot(), holding=False)
    assert lines[0].startswith("Story  2/3")
    assert "page 1" in lines[1]
    assert lines[-1].startswith("page 2")


def test_config_names_parse():
    assert ProgressPosition("bottom") is ProgressPosition.BOTTOM
    assert IndicatorHeight.parse("small").value == 2
