"""Web remote: commands reach the channel, state serialises."""

import json
import threading
import urllib.error
import urllib.request
from types import SimpleNamespace

import pytest

import web_remote
from events         import ControlChannel, PlaybackState
from story_player   import StoryPlayer
from story_sequence import StoryItem, StorySequence


@pytest.fixture
def viewer(fake_time):
    seq = StorySequence([StoryItem.text("a", duration=2.0),
                         StoryItem.text("b", duration=2.0)])
    channel = ControlChannel()
    player = StoryPlayer(seq, channel, now=fake_time)
    player.start()
    actions = []
    return SimpleNamespace(sequence=seq, channel=channel, player=player,
                           post_action=actions.append, actions=actions)


@pytest.fixture
def server(viewer):
    httpd = web_remote.ReusableTCPServer(("127.0.0.1", 0), web_remote.RemoteHandler)
    httpd.viewer = viewer
    t = threading.Thread(target=httpd.serve_forever, daemon=True)
    t.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}"
    httpd.shutdown()
    httpd.server_close()


def test_state_dict(viewer, fake_time):
    fake_time.advance(1.0)
    st = web_remote.state_dict(viewer)
    assert st["index"] == 0
    assert st["count"] == 2
    assert st["state"] == "playing"
    assert st["progress"] == pytest.approx(0.5)
    assert st["shown"] == [False, False]


def test_action_posts_to_channel(server, viewer):
    sub = viewer.channel.subscribe()
    for cmd in ("pause", "play", "next", "prev"):
        with urllib.request.urlopen(f"{server}/action?cmd={cmd}") as resp:
            assert resp.status == 204
    got = []
    while (c := sub.poll()) is not None:
        got.append(c)
    assert got == [PlaybackState.PAUSE, PlaybackState.PLAY,
                   PlaybackState.NEXT, PlaybackState.PREVIOUS]


def test_quit_goes_to_viewer(server, viewer):
    urllib.request.urlopen(f"{server}/action?cmd=quit").close()
    assert viewer.actions == [{"type": "quit"}]


def test_unknown_command_is_400(server):
    with pytest.raises(urllib.error.HTTPError) as exc:
        urllib.request.urlopen(f"{server}/action?cmd=rewind")
    assert exc.value.code == 400


def test_state_endpoint(server):
    with urllib.request.urlopen(f"{server}/state") as resp:
        body = json.loads(resp.read())
    assert body["count"] == 2
