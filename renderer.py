"""
renderer.py – draws one story's payload onto the screen.

Decoded images and video posters are cached by path, so a story that is
on screen for many frames is loaded once.
"""
from __future__ import annotations

import logging

import pygame

from story_builder  import poster_frame
from story_sequence import ImagePayload, TextPayload, VideoPayload

log = logging.getLogger(__name__)

_cache: dict[str, pygame.Surface | None] = {}


def _blit_fitted(screen: pygame.Surface, surf: pygame.Surface, sar: float = 1.0):
    """Scale and letter-/pillar-box `surf` onto `screen`."""
    sw, sh = screen.get_size()
    vw, vh = surf.get_size()
    scale = min(sw / (vw * sar), sh / vh)
    surf = pygame.transform.scale(
        surf,
        (int(vw * scale * sar), int(vh * scale))
    )
    screen.fill((0, 0, 0))
    x = (sw - surf.get_width()) // 2
    y = (sh - surf.get_height()) // 2
    screen.blit(surf, (x, y))


def _load(path: str, loader) -> pygame.Surface | None:
    if path not in _cache:
        try:
            _cache[path] = loader(path)
        except (pygame.error, OSError) as exc:
            log.warning("cannot load %s: %s", path, exc)
            _cache[path] = None
    return _cache[path]


def _poster_surface(path: str) -> pygame.Surface | None:
    frame = poster_frame(path)
    if frame is None:
        return None
    return pygame.image.frombuffer(frame.tobytes(), frame.shape[1::-1], "RGB").copy()


def _wrap(text: str, font: pygame.font.Font, width: int) -> list[str]:
    lines: list[str] = []
    for para in text.splitlines() or [""]:
        cur = ""
        for word in para.split():
            trial = f"{cur} {word}".strip()
            if cur and font.size(trial)[0] > width:
                lines.append(cur)
                cur = word
            else:
                cur = trial
        lines.append(cur)
    return lines


def render_text(screen: pygame.Surface, payload: TextPayload):
    w, h = screen.get_size()
    screen.fill(payload.background)
    font  = pygame.font.SysFont("sans", max(18, h // 24))
    lines = _wrap(payload.title, font, int(w * 0.85))
    total = len(lines) * font.get_linesize()
    y     = (h - total) // 2
    for ln in lines:
        txt = font.render(ln, True, payload.color)
        screen.blit(txt, ((w - txt.get_width()) // 2, y))
        y += font.get_linesize()


def _draw_caption(screen: pygame.Surface, caption: str | None):
    if not caption:
        return
    w, h = screen.get_size()
    font = pygame.font.SysFont("sans", max(14, h // 40))
    txt  = font.render(caption, True, (255, 255, 255))
    bg   = pygame.Surface((w, txt.get_height() + 16), pygame.SRCALPHA)
    bg.fill((0, 0, 0, 140))
    bg.blit(txt, ((w - txt.get_width()) // 2, 8))
    screen.blit(bg, (0, h - bg.get_height() - 24))


def render_missing(screen: pygame.Surface, label: str):
    render_text(screen, TextPayload(f"Missing: {label}", (40, 0, 0)))


def render_item(screen: pygame.Surface, payload) -> None:
    """Draw whatever the story carries; unknown payloads show their repr."""
    if isinstance(payload, TextPayload):
        render_text(screen, payload)
        return
    if isinstance(payload, ImagePayload):
        surf = _load(payload.path, pygame.image.load)
    elif isinstance(payload, VideoPayload):
        surf = _load(payload.path, _poster_surface)
    else:
        render_text(screen, TextPayload(str(payload)))
        return

    if surf is None:
        render_missing(screen, payload.path)
    else:
        _blit_fitted(screen, surf)
    _draw_caption(screen, payload.caption)
