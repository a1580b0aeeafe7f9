#!/usr/bin/env python3
"""
story_player.py – playback engine

Drives one StorySequence: binds a StoryClock to the current story, advances
when it runs out, and reacts to PlaybackState commands drained from its
ControlChannel subscription.  Everything happens on the caller's thread,
inside `start()`, `tick()` and the command methods.

Only one clock is ever bound.  A replaced clock is disposed before the next
one is created, and a completion callback from any clock that is no longer
the bound one is dropped.

Resume policy: PAUSE freezes the clock, PLAY continues the same story's
remaining time (the story is not restarted and `on_item_shown` is not
fired again).
"""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import config
from events         import ControlChannel, PlaybackState, SwipeDirection
from story_sequence import OutOfRangeError, StoryItem, StorySequence
from timing         import StoryClock, TimeSource

log = logging.getLogger(__name__)


class PlayerState(enum.Enum):
    IDLE      = "idle"        # no clock bound yet
    PLAYING   = "playing"
    PAUSED    = "paused"
    COMPLETED = "completed"   # last story done; left only by repeat/previous


@dataclass
class Snapshot:
    """What a renderer needs for one frame."""
    item: StoryItem
    index: int
    progress: float
    state: PlayerState


class StoryPlayer:
    def __init__(self,
                 sequence: StorySequence,
                 channel: ControlChannel,
                 *,
                 repeat: bool = False,
                 on_item_shown: Optional[Callable[[StoryItem, int], None]] = None,
                 on_complete: Optional[Callable[[], None]] = None,
                 on_vertical_swipe: Optional[Callable[[SwipeDirection], None]] = None,
                 hold_sec: float = config.PAUSE_HOLD_SEC,
                 fast_forward_sec: float = config.FAST_FORWARD_SEC,
                 now: TimeSource = time.monotonic):
        self.sequence = sequence
        self.repeat   = repeat
        self.on_item_shown     = on_item_shown
        self.on_complete       = on_complete
        self.on_vertical_swipe = on_vertical_swipe
        self.hold_sec          = hold_sec
        self.fast_forward_sec  = fast_forward_sec
        self._now = now

        self._sub = channel.subscribe()
        self._clock: Optional[StoryClock] = None
        self._hold_until: Optional[float] = None
        self.active_item: Optional[StoryItem] = None
        self.state    = PlayerState.IDLE
        self.cycles   = 0             # completed passes over the sequence
        self._disposed = False

    # ── read-outs ----------------------------------------------------------
    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def clock(self) -> Optional[StoryClock]:
        return self._clock

    @property
    def holding(self) -> bool:
        """True while the pause guard window is open."""
        return self._hold_until is not None

    @property
    def progress(self) -> float:
        clock = self._clock           # read once; the web remote polls from its own thread
        return clock.progress if clock is not None else 0.0

    def snapshot(self) -> Snapshot:
        item = self.active_item or self.sequence.current_item()
        return Snapshot(item, self.sequence.index_of(item), self.progress, self.state)

    # ── lifecycle ----------------------------------------------------------
    def start(self) -> None:
        if self._disposed:
            return
        log.info("starting %d stor%s at #%d", len(self.sequence),
                 "y" if len(self.sequence) == 1 else "ies",
                 self.sequence.start_index)
        self._advance()

    def tick(self) -> None:
        """Drain queued commands in arrival order, then poll the clock."""
        if self._disposed:
            return
        while (cmd := self._sub.poll()) is not None:
            self.dispatch(cmd)
            if self._disposed:
                return

        if self._hold_until is not None and self._now() >= self._hold_until:
            self._hold_until = None
        if self._clock is not None:
            self._clock.tick()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._sub.cancel()
        self._drop_clock()
        self._hold_until = None
        log.info("player disposed after %d cycle(s)", self.cycles)

    # ── commands -----------------------------------------------------------
    def dispatch(self, cmd: PlaybackState | str) -> None:
        cmd = PlaybackState(cmd)
        log.debug("command %s in %s", cmd.value, self.state.value)
        if cmd is PlaybackState.PLAY:
            self.play()
        elif cmd is PlaybackState.PAUSE:
            self.pause()
        elif cmd is PlaybackState.NEXT:
            self.next()
        elif cmd is PlaybackState.PREVIOUS:
            self.previous()

    def play(self) -> None:
        if self._disposed:
            return
        self._hold_until = None
        if self.state is PlayerState.IDLE:
            self.start()
        elif self.state is PlayerState.PAUSED and self._clock is not None:
            self._clock.resume()
            self.state = PlayerState.PLAYING

    def pause(self) -> None:
        if self._disposed:
            return
        if self._clock is not None:
            self._clock.stop()
        self._hold_until = self._now() + self.hold_sec
        if self.state is PlayerState.PLAYING:
            self.state = PlayerState.PAUSED

    def next(self) -> None:
        if self._disposed:
            return
        self._hold_until = None
        if self.state is PlayerState.IDLE:
            self.start()                # nothing on screen yet to skip
            return
        current = self.sequence.first_unshown()

        if current is None:
            return                      # exhausted; nothing left to skip
        if not self.sequence.is_last(current):
            self._stop_clock()
            self.sequence.mark_shown(current)
            self._advance()
            return

        # last story: let the progress bar run out instead of cutting away
        if self._clock is not None:
            self._clock.fast_forward_to_end(self.fast_forward_sec)
            if self._clock.running:
                self.state = PlayerState.PLAYING

    def previous(self) -> None:
        if self._disposed:
            return
        self._hold_until = None
        self._stop_clock()

        if self.sequence.first_unshown() is None:
            self.sequence.reset(self.sequence.last)

        current = self.sequence.current_item()
        if not self.sequence.is_first(current):
            self.sequence.reset(current)
            try:
                self.sequence.reset(self.sequence.item_before(current))
            except OutOfRangeError:
                log.debug("previous: %r has no predecessor", current)
        self._advance()

    def swipe(self, direction: SwipeDirection) -> None:
        if self._disposed or self.on_vertical_swipe is None:
            return
        self.on_vertical_swipe(SwipeDirection(direction))

    # ── transitions --------------------------------------------------------
    def _advance(self) -> None:
        """Bind a fresh clock to the first unshown story and start it."""
        if self._disposed:
            return
        self._drop_clock()
        self._hold_until = None

        item = self.sequence.first_unshown()
        if item is None:
            self._complete()
            return

        idx = self.sequence.index_of(item)
        self.active_item = item
        self._clock = StoryClock(self._on_clock_finished, now=self._now)
        self._clock.start(item.duration)
        self.state = PlayerState.PLAYING
        log.debug("showing #%d (%.2fs)", idx, item.duration)

        if self.on_item_shown is not None:
            self.on_item_shown(item, idx)

    def _on_clock_finished(self, clock: StoryClock) -> None:
        if self._disposed or clock is not self._clock:
            log.debug("dropping completion from stale %r", clock)
            return
        item = self.active_item
        self.sequence.mark_shown(item)
        if self.sequence.is_last(item):
            self._complete()
        else:
            self._advance()

    def _complete(self) -> None:
        self.state = PlayerState.COMPLETED
        self.cycles += 1
        log.info("sequence complete (cycle %d)", self.cycles)

        if self.on_complete is not None:
            self.pause()
            self.on_complete()

        if self.repeat and not self._disposed:
            self.sequence.reset_all()
            self._advance()

    # ── clock housekeeping -------------------------------------------------
    def _stop_clock(self) -> None:
        if self._clock is not None:
            self._clock.stop()

    def _drop_clock(self) -> None:
        if self._clock is not None:
            self._clock.dispose()
            self._clock = None
