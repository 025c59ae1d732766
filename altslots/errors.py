"""Custom exceptions raised by the slot engine.

Every condition that can drop a request from a batch derives from
:class:`SlotError` so callers can catch the whole family in one place while
still distinguishing the individual causes.
"""

from __future__ import annotations


class SlotError(RuntimeError):
    """Base class for every slot-engine failure."""

    pass


class MalformedSlotId(SlotError, ValueError):
    """Raised when a string is neither ``c<N>`` nor ``disabled_c<N>_<ts>``."""

    pass


class BaseSlotLocked(SlotError):
    """Raised when a request would move, disable or replace the base slot."""

    def __init__(self, slot: str, reason: str = "base slot is immutable") -> None:
        self.slot = slot
        super().__init__(f"{slot}: {reason}")


class SlotOccupied(SlotError):
    """Raised when a restore target already holds different content."""

    def __init__(self, slot: str, path: str | None = None) -> None:
        self.slot = slot
        self.path = path
        where = f" ({path})" if path else ""
        super().__init__(f"{slot} is occupied{where}")


class CycleError(SlotError):
    """Raised when a rename mapping cannot be ordered without data loss."""

    pass


class BatchInProgress(SlotError):
    """Raised when a second batch is started on a session that is still busy."""

    pass


__all__ = [
    "SlotError",
    "MalformedSlotId",
    "BaseSlotLocked",
    "SlotOccupied",
    "CycleError",
    "BatchInProgress",
]
