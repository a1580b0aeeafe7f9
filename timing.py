# =========  timing.py  =========
"""
Poll-driven countdown clock for a single story.

Nothing here owns a thread: the frame loop calls `tick()` and the clock
fires its callback from inside that call.  The time source is injectable
so tests can step time by hand.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

import config

TimeSource = Callable[[], float]


class StoryClock:
    """Tracks elapsed time against one duration and signals completion once."""

    def __init__(self,
                 on_finished: Callable[["StoryClock"], None],
                 now: TimeSource = time.monotonic):
        self._on_finished: Optional[Callable[["StoryClock"], None]] = on_finished
        self._now      = now
        self.duration  = 0.0
        self._elapsed  = 0.0                  # banked while stopped
        self._since: Optional[float] = None   # wall time of last (re)start
        self._finished = False
        self._disposed = False

        # fast-forward ramp: progress goes _ff_from → 1.0 over _ff_span s
        self._ff       = False
        self._ff_from  = 0.0
        self._ff_span  = 0.0
        self._ff_start = 0.0

    # ── state ---------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._since is not None

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def fast_forwarding(self) -> bool:
        return self._ff

    @property
    def elapsed(self) -> float:
        if self._since is None:
            return self._elapsed
        return self._elapsed + (self._now() - self._since)

    @property
    def progress(self) -> float:
        """Fraction 0.0 → 1.0 for progress bars."""
        if self._finished:
            return 1.0
        if self._ff:
            return self._ramp(self._now()) if self.running else self._ff_from
        if self.duration <= 0:
            return 0.0
        return min(1.0, self.elapsed / self.duration)

    def _ramp(self, now: float) -> float:
        if self._ff_span <= 0:
            return 1.0
        t = max(0.0, now - self._ff_start) / self._ff_span
        return min(1.0, self._ff_from + (1.0 - self._ff_from) * t)

    # ── control ------------------------------------------------------------
    def start(self, duration: float) -> None:
        """Bind *duration* (seconds) and count from zero."""
        if self._disposed:
            return
        self.duration  = max(0.0, float(duration))
        self._elapsed  = 0.0
        self._finished = False
        self._ff       = False
        self._since    = self._now()

    def resume(self) -> None:
        """Continue counting from the retained elapsed position."""
        if self._disposed or self._finished or self._since is not None:
            return
        self._since = self._now()
        if self._ff:
            self._ff_start = self._since

    def stop(self) -> None:
        if self._since is None:
            return
        now = self._now()
        self._elapsed += now - self._since
        self._since = None
        if self._ff:
            # freeze the ramp where it is; resume() carries on from here
            self._ff_from = self._ramp(now)
            self._ff_span = max(0.0, self._ff_span - (now - self._ff_start))

    def fast_forward_to_end(self, within: float = config.FAST_FORWARD_SEC) -> None:
        """Finish after *within* seconds, ramping progress up to 1.0."""
        if self._disposed or self._finished:
            return
        self._ff_from = self.progress
        self._ff_span = max(0.0, within)
        self._ff      = True
        now = self._now()
        if self._since is None:
            self._since = now
        self._ff_start = now

    def dispose(self) -> None:
        self._since = None
        self._ff = False
        self._on_finished = None
        self._disposed = True

    # ── polling ------------------------------------------------------------
    def tick(self, now: Optional[float] = None) -> bool:
        """
        Fire `on_finished` if the countdown is over.  Returns True when it
        fired.  A stopped, finished or disposed clock never fires.
        """
        if self._disposed or self._finished or self._since is None:
            return False
        now = self._now() if now is None else now

        if self._ff:
            done = now - self._ff_start >= self._ff_span
        else:
            done = self._elapsed + (now - self._since) >= self.duration
        if not done:
            return False

        self._elapsed  = max(self.duration, self._elapsed + (now - self._since))
        self._since    = None
        self._ff       = False
        self._finished = True
        cb = self._on_finished
        if cb is not None:
            cb(self)
        return True

    def __repr__(self) -> str:
        st = ("disposed" if self._disposed else
              "finished" if self._finished else
              "running"  if self.running   else "stopped")
        return f"<StoryClock {self.elapsed:.3f}/{self.duration:.3f}s {st}>"
