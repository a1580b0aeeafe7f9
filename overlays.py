"""
overlays.py

Pygame progress indicator and info panel for the story viewer.
"""

from __future__ import annotations

import enum
import os

import pygame

import config
from story_player   import Snapshot
from story_sequence import StorySequence

# ── colours ────────────────────────────────────────────────────────────────
WHITE = (255, 255, 255)
GREEN = (0, 255, 0)
BG    = (0, 0, 0, 180)


class ProgressPosition(enum.Enum):
    TOP    = "top"
    BOTTOM = "bottom"
    NONE   = "none"


class IndicatorHeight(enum.Enum):
    SMALL  = 2
    MEDIUM = 5
    LARGE  = 8

    @classmethod
    def parse(cls, name: str) -> "IndicatorHeight":
        return cls[name.upper()]


# ── helpers ────────────────────────────────────────────────────────────────
def _fmt_ms(sec: float) -> str:
    sec = int(max(0, sec))
    m, s = divmod(sec, 60)
    return f"{m:02d}:{s:02d}"


def segment_fills(sequence: StorySequence, snap: Snapshot) -> list[float]:
    """Fill fraction of each progress segment, left to right."""
    fills = []
    for i, item in enumerate(sequence):
        if i == snap.index:
            fills.append(snap.progress)
        else:
            fills.append(1.0 if item.shown else 0.0)
    return fills


# ── progress bars ──────────────────────────────────────────────────────────
def draw_progress(
    surface: pygame.Surface,
    sequence: StorySequence,
    snap: Snapshot,
    position: ProgressPosition = ProgressPosition(config.PROGRESS_POSITION),
    height: IndicatorHeight = IndicatorHeight.parse(config.INDICATOR_HEIGHT),
) -> None:
    if position is ProgressPosition.NONE:
        return

    sw, sh = surface.get_size()
    pad_x, pad_y = config.INDICATOR_PADDING
    gap    = 4
    n      = len(sequence)
    seg_w  = max(1, (sw - 2 * pad_x - gap * (n - 1)) // n)
    bar_h  = height.value
    y      = pad_y if position is ProgressPosition.TOP else sh - pad_y - bar_h

    track = pygame.Surface((seg_w, bar_h), pygame.SRCALPHA)
    track.fill(config.INDICATOR_BG)

    x = pad_x
    for fill in segment_fills(sequence, snap):
        surface.blit(track, (x, y))
        fw = int(seg_w * fill)
        if fw:
            pygame.draw.rect(surface, config.INDICATOR_COLOR, (x, y, fw, bar_h))
        x += seg_w + gap


# ── info panel ─────────────────────────────────────────────────────────────
def _label(item) -> str:
    p = item.payload
    if hasattr(p, "path"):
        return os.path.basename(p.path)
    if hasattr(p, "title"):
        return p.title.splitlines()[0][:32] if p.title else "(text)"
    return type(p).__name__


def info_lines(sequence: StorySequence, snap: Snapshot, holding: bool) -> list[str]:
    cur   = snap.item
    remain = max(0.0, cur.duration * (1.0 - snap.progress))
    lines = [
        f"Story  {snap.index + 1}/{len(sequence)}  [{snap.state.value}]",
        f"Current  {_label(cur)}",
        f"   rem   {_fmt_ms(remain)} / {_fmt_ms(cur.duration)}",
    ]
    if holding:
        lines.append("   (pause hold)")
    lines.append("——  upcoming  ——")
    for item in sequence[snap.index + 1:]:
        lines.append(f"{_label(item)}  {item.duration:.1f}s")
    return lines


def draw_info(surface: pygame.Surface, sequence: StorySequence,
              snap: Snapshot, holding: bool = False) -> None:
    sw, sh = surface.get_size()
    tiny_pt = max(12, sh // 60)
    FT = pygame.font.SysFont("monospace", tiny_pt)

    lines  = info_lines(sequence, snap, holding)
    widest = max(FT.size(t)[0] for t in lines)
    pbg = pygame.Surface(
        (widest + 20, len(lines) * (FT.get_linesize() + 2) + 10),
        pygame.SRCALPHA,
    )
    pbg.fill(BG)
    y = 5
    for i, t in enumerate(lines):
        pbg.blit(FT.render(t, True, GREEN if i == 0 else WHITE), (10, y))
        y += FT.get_linesize() + 2
    surface.blit(pbg, (10, 40))
