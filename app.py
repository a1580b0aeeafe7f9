#!/usr/bin/env python3
"""
app.py – pygame story viewer

Owns the window, the ControlChannel and one StoryPlayer.  Every frame it
turns key presses into commands, lets the player drain and react to them,
then draws the current story and its progress bars.  Non-playback actions
(quit, overlay, fullscreen) from other threads go through `post_action`.
"""
from __future__ import annotations

import logging
import queue
from typing import Optional

import pygame

import config
from events         import ControlChannel, SwipeDirection, translate_key
from overlays       import IndicatorHeight, ProgressPosition, draw_info, draw_progress
from renderer       import render_item
from story_builder  import build_stories
from story_player   import PlayerState, StoryPlayer
from story_sequence import StoryItem, StorySequence

log = logging.getLogger(__name__)


# ── main application ───────────────────────────────────────────────────────
class StoryViewer:
    def __init__(self,
                 items: Optional[list[StoryItem]] = None,
                 start_index: int = config.START_INDEX,
                 repeat: bool = config.REPEAT):
        # window ----------------------------------------------------------
        pygame.init()
        self.screen = pygame.display.set_mode(
            (0, 0) if config.FULLSCREEN else config.WINDOWED_SIZE,
            pygame.FULLSCREEN if config.FULLSCREEN else 0,
        )
        pygame.display.set_caption("stories")
        self.clock = pygame.time.Clock()

        # core state ------------------------------------------------------
        if items is None:
            items = build_stories(config.STORIES_PATH)
        self.sequence = StorySequence.starting_at(items, start_index)
        self.channel  = ControlChannel()
        self.player   = StoryPlayer(
            self.sequence,
            self.channel,
            repeat=repeat,
            on_item_shown=self._on_item_shown,
            on_complete=self._on_complete,
            on_vertical_swipe=self._on_swipe,
        )

        # overlay / outside actions --------------------------------------
        self._actions: "queue.Queue[dict]" = queue.Queue()
        self.show_info = config.SHOW_OVERLAYS
        self.position  = ProgressPosition(config.PROGRESS_POSITION)
        self.height    = IndicatorHeight.parse(config.INDICATOR_HEIGHT)
        self.running   = False

    # ── observers ----------------------------------------------------------
    def _on_item_shown(self, item: StoryItem, index: int):
        log.info("story %d/%d: %r", index + 1, len(self.sequence), item.payload)

    def _on_complete(self):
        log.info("all stories shown")

    def _on_swipe(self, direction: SwipeDirection):
        if direction is SwipeDirection.DOWN:
            self.post_action({"type": "quit"})
        else:
            self.show_info ^= True

    # ── external path ------------------------------------------------------
    def post_action(self, action: dict) -> None:
        """Thread-safe: queue a viewer action such as {"type": "quit"}."""
        self._actions.put(action)

    def _handle(self, act: dict) -> None:
        t = act["type"]
        if t == "quit":
            self.running = False
        elif t == "playback":
            self.channel.post(act["cmd"])
        elif t == "swipe":
            self.player.swipe(act["direction"])
        elif t == "toggle_overlay":
            self.show_info ^= True
        elif t == "toggle_fullscreen":
            config.FULLSCREEN ^= True
            self.screen = pygame.display.set_mode(
                (0, 0) if config.FULLSCREEN else config.WINDOWED_SIZE,
                pygame.FULLSCREEN if config.FULLSCREEN else 0)

    # ── main loop ---------------------------------------------------------
    def run(self):
        self.running = True
        self.player.start()
        try:
            while self.running:
                paused = self.player.state is PlayerState.PAUSED
                for e in pygame.event.get():
                    act = translate_key(e, paused)
                    if act:
                        self._handle(act)

                # drain external queue (non-blocking)
                while True:
                    try:
                        self._handle(self._actions.get_nowait())
                    except queue.Empty:
                        break

                self.player.tick()

                snap = self.player.snapshot()
                render_item(self.screen, snap.item.payload)
                draw_progress(self.screen, self.sequence, snap,
                              self.position, self.height)
                if self.show_info:
                    draw_info(self.screen, self.sequence, snap, self.player.holding)

                pygame.display.flip()
                self.clock.tick(config.FPS)
        finally:
            self.player.dispose()
            pygame.quit()


if __name__ == "__main__":
    StoryViewer().run()
