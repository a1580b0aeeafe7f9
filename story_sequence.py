"""
story_sequence.py

Ordered list of story items for one playback session.

The "current" story is never stored: it is always the first item whose
`shown` flag is False (or the last item once everything has been shown).
Navigation helpers raise `OutOfRangeError` at the ends; the player clamps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Tuple

import config


# ── Errors ──────────────────────────────────────────────────────────────────
class EmptySequenceError(ValueError):
    """A story sequence needs at least one item."""


class OutOfRangeError(IndexError):
    """Navigation past the first or last story."""


# ── Payloads (opaque to the player) ─────────────────────────────────────────
@dataclass
class TextPayload:
    title: str
    background: Tuple[int, int, int] = (0, 0, 0)
    color: Tuple[int, int, int] = (255, 255, 255)


@dataclass
class ImagePayload:
    path: str
    caption: Optional[str] = None


@dataclass
class VideoPayload:
    path: str
    caption: Optional[str] = None


# ── Items ───────────────────────────────────────────────────────────────────
@dataclass(eq=False)
class StoryItem:
    """One page of a story.  Compared by identity, never by value."""
    payload: Any
    duration: float = config.DEFAULT_STORY_SEC        # seconds
    shown: bool = False

    @classmethod
    def text(cls, title: str, *,
             background: Tuple[int, int, int] = (0, 0, 0),
             duration: float = config.DEFAULT_STORY_SEC,
             shown: bool = False) -> "StoryItem":
        return cls(TextPayload(title, background), duration, shown)

    @classmethod
    def page_image(cls, path: str, *, caption: Optional[str] = None,
                   duration: float = config.DEFAULT_STORY_SEC,
                   shown: bool = False) -> "StoryItem":
        return cls(ImagePayload(path, caption), duration, shown)

    @classmethod
    def page_video(cls, path: str, *, duration: float,
                   caption: Optional[str] = None,
                   shown: bool = False) -> "StoryItem":
        return cls(VideoPayload(path, caption), duration, shown)


# ── Sequence ────────────────────────────────────────────────────────────────
class StorySequence:
    """Owns the items and their `shown` flags; answers positional queries."""

    # ---------------------------------------------------------------- init
    def __init__(self, items: Iterable[Optional[StoryItem]], start_index: int = 0) -> None:
        slots = list(items)
        if not any(it is not None for it in slots):
            raise EmptySequenceError("story sequence has no items")

        self.start_index = max(0, min(start_index, len(slots) - 1))

        # everything from the start slot on plays again; a blank start slot
        # means start over completely
        first = slots[self.start_index]
        if first is None:
            tail = slots
        else:
            tail = slots[self.start_index:]
        for it in tail:
            if it is not None:
                it.shown = False

        self.items: List[StoryItem] = [it for it in slots if it is not None]

    @classmethod
    def starting_at(cls, items: Iterable[Optional[StoryItem]], start_index: int) -> "StorySequence":
        """Sequence whose playback begins at *start_index*: earlier stories count as seen."""
        slots = list(items)
        for it in slots[:max(0, start_index)]:
            if it is not None:
                it.shown = True
        return cls(slots, start_index)

    # ------------------------------------------------------------ container
    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[StoryItem]:
        return iter(self.items)

    def __getitem__(self, idx: int) -> StoryItem:
        return self.items[idx]

    @property
    def first(self) -> StoryItem:
        return self.items[0]

    @property
    def last(self) -> StoryItem:
        return self.items[-1]

    def is_first(self, item: Optional[StoryItem]) -> bool:
        return item is self.items[0]

    def is_last(self, item: Optional[StoryItem]) -> bool:
        return item is self.items[-1]

    # -------------------------------------------------------------- queries
    def first_unshown(self) -> Optional[StoryItem]:
        """First item not yet shown, or None once the sequence is exhausted."""
        for it in self.items:
            if not it.shown:
                return it
        return None

    def current_item(self) -> StoryItem:
        """The story on screen: first unshown, else the last one."""
        it = self.first_unshown()
        return it if it is not None else self.items[-1]

    def all_shown(self) -> bool:
        return self.first_unshown() is None

    # ------------------------------------------------------------ navigation
    def index_of(self, item: StoryItem) -> int:
        for i, it in enumerate(self.items):
            if it is item:
                return i
        raise OutOfRangeError("item is not part of this sequence")

    def item_before(self, item: StoryItem) -> StoryItem:
        i = self.index_of(item)
        if i == 0:
            raise OutOfRangeError("no story before the first one")
        return self.items[i - 1]

    def item_after(self, item: StoryItem) -> StoryItem:
        i = self.index_of(item)
        if i == len(self.items) - 1:
            raise OutOfRangeError("no story after the last one")
        return self.items[i + 1]

    # ------------------------------------------------------------- mutation
    def mark_shown(self, item: StoryItem) -> None:
        item.shown = True

    def reset(self, item: StoryItem) -> None:
        item.shown = False

    def reset_from(self, index: int) -> None:
        for it in self.items[max(0, index):]:
            it.shown = False

    def reset_all(self) -> None:
        self.reset_from(0)

    def __repr__(self) -> str:
        flags = "".join("x" if it.shown else "." for it in self.items)
        return f"<StorySequence [{flags}]>"
