"""
Domain-level data models shared across the engine, session, and CLI layers.

The module provides:

* **Slot-id helpers** (`slot_id`, `parse_slot`, `slot_number`, …) that
  enforce the two identifier spellings understood by the engine: live slots
  ``c<N>`` and archived slots ``disabled_c<N>_<timestamp>``.
* **Inventory models** (`Slot`, `DisabledSlotRecord`, `SlotInventory`) that
  describe what a filesystem scan found.
* **Plan and batch models** (`PendingImport`, `MappingPlan`, `MoveOp`,
  `ApplyRequest`, `ApplyResult`, …) used as transport objects between the
  mapping computer, the resolver and the apply engine.

Value objects inherit from :class:`pydantic.BaseModel` with ``frozen=True``;
the batch *result* objects stay mutable because the engines fill them in
step by step.
"""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from altslots.errors import MalformedSlotId

# --------------------------------------------------------------------------- #
# 1 – Slot identifiers
# --------------------------------------------------------------------------- #

_LIVE_RE = re.compile(r"^c(\d+)$")
_DISABLED_ID_RE = re.compile(r"^disabled_(c\d+)_(\d+)$")
_ARCHIVE_RE = re.compile(r"^(c\d+)_(\d+)$")


def slot_id(num: int) -> str:
    """Return the live identifier for slot number *num*.

    At least two digits are used, as in the game files: ``120`` → ``c120``,
    ``3`` → ``c03``.
    """
    if num < 0:
        raise MalformedSlotId(f"slot numbers are non-negative, got {num}")
    return f"c{num:02d}"


def is_live_slot(value: str) -> bool:
    """Return ``True`` when *value* looks like ``c<digits>``."""
    return bool(_LIVE_RE.match(value))


def is_disabled_id(value: str) -> bool:
    """Return ``True`` when *value* looks like ``disabled_c<digits>_<digits>``."""
    return bool(_DISABLED_ID_RE.match(value))


def parse_slot(value: str) -> int:
    """Return the number of a live slot id.

    Raises:
        MalformedSlotId: If *value* is not ``c<digits>``.
    """
    m = _LIVE_RE.match(value)
    if not m:
        raise MalformedSlotId(f"malformed slot id {value!r}")
    return int(m.group(1))


def original_slot(value: str) -> str:
    """Return the live id a slot identifier refers to.

    ``c121`` stays ``c121``; ``disabled_c121_1700000000000`` becomes ``c121``.
    """
    if is_live_slot(value):
        return value
    m = _DISABLED_ID_RE.match(value)
    if not m:
        raise MalformedSlotId(f"malformed slot id {value!r}")
    return m.group(1)


def slot_number(value: str) -> int:
    """Return the numeric part of a live or disabled identifier."""
    return parse_slot(original_slot(value))


def now_ms() -> str:
    """Return the current time as a millisecond epoch string."""
    return str(int(time.time() * 1000))


def disabled_id(slot: str, timestamp: str) -> str:
    """Return ``disabled_<slot>_<timestamp>`` for the live id *slot*."""
    parse_slot(slot)
    return f"disabled_{slot}_{timestamp}"


def parse_archive_folder(name: str) -> Optional["DisabledSlotRecord"]:
    """Interpret an archive folder name.

    Two spellings are recognised:

    * ``c<N>_<ts>`` – a live slot that was disabled;
    * ``disabled_c<N>_<ts>`` – content imported straight into the archive.

    Returns:
        A :class:`DisabledSlotRecord` or ``None`` when *name* matches
        neither pattern.
    """
    m = _DISABLED_ID_RE.match(name)
    if m:
        return DisabledSlotRecord(
            original_slot=m.group(1),
            archive_folder=name,
            disabled_slot_id=name,
            timestamp=m.group(2),
            imported=True,
        )
    m = _ARCHIVE_RE.match(name)
    if m:
        return DisabledSlotRecord(
            original_slot=m.group(1),
            archive_folder=name,
            disabled_slot_id=f"disabled_{m.group(1)}_{m.group(2)}",
            timestamp=m.group(2),
        )
    return None


# --------------------------------------------------------------------------- #
# 2 – Import descriptors
# --------------------------------------------------------------------------- #


class ImportSource(BaseModel, frozen=True):
    """One alt offered by a foreign mod folder.

    Attributes
    ----------
    root
        Root directory of the foreign mod.
    slot_id
        Folder id of the alt inside the foreign mod (``c104``, ``c03`` …).
    alt_index
        Zero-based alt number relative to the foreign base slot.
    base_slot_num
        Base slot number detected for the foreign mod.
    codename
        Internal fighter folder name of the foreign mod.
    display_name
        Name used inside the foreign UI texture filenames.
    ui_file
        UI texture of the alt, when one was found.
    """

    root: Path
    slot_id: str
    alt_index: int
    base_slot_num: int
    codename: str
    display_name: Optional[str] = None
    ui_file: Optional[Path] = None


class PendingImport(BaseModel, frozen=True):
    """Foreign content to be copied into ``target_slot_id`` during an apply."""

    target_slot_id: str
    source_root: Path
    source_slot_id: str
    source_alt_index: int
    source_base_slot_num: int
    source_codename: str
    source_display_name: Optional[str] = None
    archive: bool = False

    @classmethod
    def from_source(
        cls, target_slot_id: str, source: ImportSource, *, archive: bool = False
    ) -> "PendingImport":
        """Build a descriptor that copies *source* into *target_slot_id*."""
        return cls(
            target_slot_id=target_slot_id,
            source_root=source.root,
            source_slot_id=source.slot_id,
            source_alt_index=source.alt_index,
            source_base_slot_num=source.base_slot_num,
            source_codename=source.codename,
            source_display_name=source.display_name,
            archive=archive,
        )


# --------------------------------------------------------------------------- #
# 3 – Inventory
# --------------------------------------------------------------------------- #


class Slot(BaseModel, frozen=True):
    """One entry of the visual slot list."""

    id: str
    enabled: bool
    alt_index: int
    content_ref: Union[Path, PendingImport, None] = None
    disabled_timestamp: Optional[str] = None
    ui_file: Optional[Path] = None


class DisabledSlotRecord(BaseModel, frozen=True):
    """An archived slot living under the archive directory.

    Attributes
    ----------
    original_slot
        Live id the content occupied before it was archived.
    archive_folder
        Folder name below the archive directory.
    disabled_slot_id
        Identifier used in enabled/disabled sequences; always
        ``disabled_<slot>_<timestamp>``.
    timestamp
        Millisecond timestamp embedded in the folder name.
    imported
        ``True`` for content imported straight into the archive.
    """

    original_slot: str
    archive_folder: str
    disabled_slot_id: str
    timestamp: str
    imported: bool = False

    def path(self, mod_root: Path, archive_dir: str) -> Path:
        """Return the absolute archive folder of this record."""
        return mod_root / archive_dir / self.archive_folder


class SlotInventory(BaseModel, frozen=True):
    """Ground-truth slot set reconstructed from one filesystem scan."""

    mod_root: Path
    codename: str
    display_name: Optional[str] = None
    base_slot_num: Optional[int] = None
    enabled: List[Slot] = Field(default_factory=list)
    disabled: List[DisabledSlotRecord] = Field(default_factory=list)

    @property
    def enabled_ids(self) -> List[str]:
        """Live ids in on-disk order."""
        return [s.id for s in self.enabled]

    @property
    def disabled_ids(self) -> List[str]:
        """``disabled_*`` ids of every archived slot."""
        return [r.disabled_slot_id for r in self.disabled]

    @property
    def base_slot_id(self) -> Optional[str]:
        """Identifier of the base slot, or ``None`` when nothing was detected."""
        return None if self.base_slot_num is None else slot_id(self.base_slot_num)

    def record_for(self, disabled_id: str) -> Optional[DisabledSlotRecord]:
        """Return the archive record matching *disabled_id*."""
        for rec in self.disabled:
            if rec.disabled_slot_id == disabled_id or rec.archive_folder == disabled_id:
                return rec
        return None

    def visual_order(self) -> List[Slot]:
        """Merge enabled and disabled slots; disabled ones come last."""
        base = self.base_slot_num or 0
        archived = [
            Slot(
                id=rec.disabled_slot_id,
                enabled=False,
                alt_index=slot_number(rec.original_slot) - base,
                content_ref=Path(rec.archive_folder),
                disabled_timestamp=rec.timestamp,
            )
            for rec in self.disabled
        ]
        return [*self.enabled, *archived]


# --------------------------------------------------------------------------- #
# 4 – Plans, moves and batches
# --------------------------------------------------------------------------- #


class MappingPlan(BaseModel, frozen=True):
    """Output of the mapping computer.

    Attributes
    ----------
    enabled
        Live ids once the plan is applied, in visual order.
    disabled
        Ids leaving the live set (live ids) or staying archived.
    mapping
        Rename instructions, old id → new id. Never contains identities.
    imports
        Content to copy in once the renames are done.
    errors
        Requests dropped while computing the plan.
    """

    enabled: List[str] = Field(default_factory=list)
    disabled: List[str] = Field(default_factory=list)
    mapping: Dict[str, str] = Field(default_factory=dict)
    imports: List[PendingImport] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """``True`` when applying the plan would not touch the filesystem."""
        newly_disabled = [d for d in self.disabled if is_live_slot(d)]
        return not (self.mapping or self.imports or newly_disabled)


class MoveOp(BaseModel, frozen=True):
    """One ordered rename produced by the resolver."""

    source: str
    destination: str
    staged: bool = False


class Progress(BaseModel, frozen=True):
    """Discrete progress tick emitted during a batch."""

    current: int
    total: int
    message: str = ""


class ApplyRequest(BaseModel, frozen=True):
    """Batch input of :func:`altslots.apply.apply`."""

    mod_root: Path
    enabled_slots: List[str] = Field(default_factory=list)
    disabled_slots: List[str] = Field(default_factory=list)
    slot_mapping: Dict[str, str] = Field(default_factory=dict)
    pending_imports: List[PendingImport] = Field(default_factory=list)
    base_slot_num: int
    fighter_codename: str
    display_name: Optional[str] = None

    @classmethod
    def from_plan(cls, inventory: SlotInventory, plan: MappingPlan) -> "ApplyRequest":
        """Build the batch request that realises *plan* on *inventory*."""
        if inventory.base_slot_num is None:
            raise ValueError("cannot apply changes without a detected base slot")
        return cls(
            mod_root=inventory.mod_root,
            enabled_slots=list(plan.enabled),
            disabled_slots=list(plan.disabled),
            slot_mapping=dict(plan.mapping),
            pending_imports=list(plan.imports),
            base_slot_num=inventory.base_slot_num,
            fighter_codename=inventory.codename,
            display_name=inventory.display_name,
        )


class ApplyResult(BaseModel):
    """What an apply batch actually achieved."""

    imported: List[str] = Field(default_factory=list)
    disabled: List[str] = Field(default_factory=list)
    restored: List[str] = Field(default_factory=list)
    reordered: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """``True`` when no step reported an error."""
        return not self.errors

    @property
    def changed(self) -> bool:
        """``True`` when at least one step touched the filesystem."""
        return bool(self.imported or self.disabled or self.restored or self.reordered)

    def merge(self, other: "ApplyResult") -> None:
        """Append the lists of *other* to this result."""
        self.imported.extend(other.imported)
        self.disabled.extend(other.disabled)
        self.restored.extend(other.restored)
        self.reordered.extend(other.reordered)
        self.errors.extend(other.errors)


class RestoreRequest(BaseModel, frozen=True):
    """Batch input of :func:`altslots.archive.restore_disabled`."""

    mod_root: Path
    base_slot_num: int
    fighter_codename: str
    display_name: Optional[str] = None
    enabled_slots: List[str] = Field(default_factory=list)
    disabled_slots: List[str] = Field(default_factory=list)


class RestoreResult(BaseModel):
    """Ids restored by a restore batch plus the failures."""

    restored: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class PurgeRequest(BaseModel, frozen=True):
    """Batch input of :func:`altslots.archive.purge_all`."""

    mod_root: Path


class PurgeResult(BaseModel):
    """Number of archive folders deleted plus the failures."""

    deleted: int = 0
    errors: List[str] = Field(default_factory=list)


__all__ = [
    "slot_id",
    "is_live_slot",
    "is_disabled_id",
    "parse_slot",
    "original_slot",
    "slot_number",
    "now_ms",
    "disabled_id",
    "parse_archive_folder",
    "ImportSource",
    "PendingImport",
    "Slot",
    "DisabledSlotRecord",
    "SlotInventory",
    "MappingPlan",
    "MoveOp",
    "Progress",
    "ApplyRequest",
    "ApplyResult",
    "RestoreRequest",
    "RestoreResult",
    "PurgeRequest",
    "PurgeResult",
]
