"""Progress ticks for multi-step batches.

A batch reports ``Progress(current, total, message)`` through an optional
callback. ``current`` never decreases and the last tick of a batch has
``current == total``; an empty batch emits a single ``(0, 0)`` tick.
"""

from __future__ import annotations

from typing import Callable, Optional

from altslots.models import Progress

ProgressCallback = Callable[[Progress], None]


class Ticker:
    """Emit monotonic progress ticks towards a known total."""

    def __init__(self, callback: Optional[ProgressCallback], total: int) -> None:
        self.callback = callback
        self.total = total
        self.current = 0

    def __call__(self, message: str) -> None:
        self.current += 1
        self.total = max(self.total, self.current)
        self._emit(message)

    def _emit(self, message: str) -> None:
        if self.callback is not None:
            self.callback(Progress(current=self.current, total=self.total, message=message))

    def forward(self, tick: Progress) -> None:
        """Re-emit the ticks of a nested step as ticks of this batch."""
        if tick.total:
            self(tick.message)

    def done(self, message: str = "nothing to do") -> None:
        """Close the batch: emit the empty tick, or jump to the total."""
        if self.total == 0 or self.current < self.total:
            self.current = self.total
            self._emit(message)


__all__ = ["ProgressCallback", "Ticker"]
