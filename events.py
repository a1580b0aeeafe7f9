#!/usr/bin/env python3
"""
events.py  – control channel

• `ControlChannel` carries PlaybackState commands from any producer
  (keyboard, web remote, tests) to whoever subscribed.  It is created by
  the caller and handed to the player; there is no global instance.
• Each `Subscription` is its own thread-safe FIFO, so commands arrive in
  the order they were posted and the consumer drains them on its own loop.
• Translates raw Pygame key events to viewer actions.
"""

from __future__ import annotations

import enum
import logging
import queue
import threading

from pygame.locals import *

log = logging.getLogger(__name__)

Action = dict      # alias for readability


class PlaybackState(enum.Enum):
    PLAY     = "play"
    PAUSE    = "pause"
    NEXT     = "next"
    PREVIOUS = "previous"


class SwipeDirection(enum.Enum):
    UP   = "up"
    DOWN = "down"


class Subscription:
    """One consumer's view of a channel: a private command queue."""

    def __init__(self, channel: "ControlChannel"):
        self._channel = channel
        self._fifo: "queue.Queue[PlaybackState]" = queue.Queue()
        self.cancelled = False

    def _deliver(self, cmd: PlaybackState) -> None:
        self._fifo.put(cmd)

    def poll(self) -> PlaybackState | None:
        """Return next queued command or None (non-blocking)."""
        if self.cancelled:
            return None
        try:
            return self._fifo.get_nowait()
        except queue.Empty:
            return None

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._channel._detach(self)
        while not self._fifo.empty():
            self._fifo.get_nowait()


class ControlChannel:
    """Fan-out of playback commands to every live subscription."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subs: list[Subscription] = []

    def subscribe(self) -> Subscription:
        sub = Subscription(self)
        with self._lock:
            self._subs.append(sub)
        return sub

    def _detach(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subs:
                self._subs.remove(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subs)

    # ── producer path ──────────────────────────────────────────────────
    def post(self, cmd: PlaybackState | str) -> None:
        """
        Any thread may call this, e.g.:
            channel.post(PlaybackState.NEXT)
            channel.post("pause")
        """
        cmd = PlaybackState(cmd)
        with self._lock:
            subs = list(self._subs)
        log.debug("post %s → %d subscriber(s)", cmd.value, len(subs))
        for sub in subs:
            sub._deliver(cmd)

    def play(self) -> None:
        self.post(PlaybackState.PLAY)

    def pause(self) -> None:
        self.post(PlaybackState.PAUSE)

    def next(self) -> None:
        self.post(PlaybackState.NEXT)

    def previous(self) -> None:
        self.post(PlaybackState.PREVIOUS)


# ── keyboard translator ────────────────────────────────────────────────────
def translate_key(event, paused: bool = False) -> Action | None:
    """Translate one Pygame event → action dict (or None)."""
    if event.type == QUIT:
        return {"type": "quit"}

    if event.type == KEYDOWN:
        if event.key in (K_ESCAPE, K_q):
            return {"type": "quit"}
        if event.key == K_SPACE:
            cmd = PlaybackState.PLAY if paused else PlaybackState.PAUSE
            return {"type": "playback", "cmd": cmd}
        if event.key == K_RIGHT:
            return {"type": "playback", "cmd": PlaybackState.NEXT}
        if event.key == K_LEFT:
            return {"type": "playback", "cmd": PlaybackState.PREVIOUS}
        if event.key in (K_UP, K_DOWN):
            direction = SwipeDirection.UP if event.key == K_UP else SwipeDirection.DOWN
            return {"type": "swipe", "direction": direction}
        if event.key == K_i:
            return {"type": "toggle_overlay"}
        if event.key == K_f:
            return {"type": "toggle_fullscreen"}

    return None
