"""Folder scanning, duration probing and the JSON cache."""

import json

import pytest

import story_builder
from events         import ControlChannel
from story_player   import StoryPlayer
from story_sequence import ImagePayload, StorySequence, TextPayload, VideoPayload


@pytest.fixture
def folder(tmp_path):
    (tmp_path / "10.txt").write_text("tenth", encoding="utf-8")
    (tmp_path / "2.txt").write_text("second\nline two", encoding="utf-8")
    (tmp_path / "1.png").write_bytes(b"not really a png")
    (tmp_path / "3.mp4").write_bytes(b"not really a video")
    (tmp_path / "notes.md").write_text("ignored", encoding="utf-8")
    return tmp_path


@pytest.fixture
def probe(monkeypatch):
    calls = []

    def fake(fp):
        calls.append(fp)
        return 12.5

    monkeypatch.setattr(story_builder, "probe_seconds", fake)
    return calls


def test_stories_are_naturally_sorted_and_typed(folder, probe):
    items = story_builder.build_stories(str(folder))
    kinds = [type(it.payload) for it in items]
    assert kinds == [ImagePayload, TextPayload, VideoPayload, TextPayload]
    assert items[1].payload.title == "second\nline two"
    assert items[2].duration == 12.5
    assert items[0].duration == pytest.approx(3.0)


def test_cache_is_written_and_reused(folder, probe, monkeypatch):
    story_builder.build_cache(str(folder))
    assert len(probe) == 1
    data = json.loads((folder / story_builder.CACHE_NAME).read_text())
    assert set(data["stories"]) == {"1.png", "2.txt", "3.mp4", "10.txt"}

    def boom(fp):
        raise AssertionError("should come from cache")

    monkeypatch.setattr(story_builder, "probe_seconds", boom)
    entries = story_builder.build_cache(str(folder))
    assert entries["3.mp4"]["duration"] == 12.5


def test_unreadable_video_is_skipped(folder, monkeypatch):
    monkeypatch.setattr(story_builder, "probe_seconds", lambda fp: 0.0)
    entries = story_builder.build_cache(str(folder))
    assert "3.mp4" not in entries


def test_corrupt_cache_is_ignored(folder, probe):
    (folder / story_builder.CACHE_NAME).write_text("{not json")
    entries = story_builder.build_cache(str(folder))
    assert "3.mp4" in entries


def test_probe_of_garbage_returns_zero(folder):
    assert story_builder.probe_seconds(str(folder / "3.mp4")) == 0.0


def test_undecodable_text_is_skipped(tmp_path):
    (tmp_path / "a.txt").write_bytes(b"\xff\xfe bad")
    (tmp_path / "b.txt").write_text("fine", encoding="utf-8")
    items = story_builder.build_stories(str(tmp_path))
    assert [it.payload.title for it in items] == ["fine"]


def test_start_index_reaches_the_player(tmp_path, fake_time):
    for i in range(4):
        (tmp_path / f"{i}.txt").write_text(f"page {i}", encoding="utf-8")
    items = story_builder.build_stories(str(tmp_path))

    shown = []
    player = StoryPlayer(StorySequence.starting_at(items, 2), ControlChannel(),
                         on_item_shown=lambda item, idx: shown.append(idx),
                         now=fake_time)
    player.start()
    assert shown == [2]
    assert player.snapshot().item.payload.title == "page 2"
