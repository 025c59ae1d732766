"""Per-mod-root session object.

A :class:`ModSession` is created once a mod folder is selected. It owns the
detected fighter identity (codename, display name, base slot), the validated
configuration and the latest :class:`SlotInventory`. Every mutating method
runs as one *batch*:

* batches are serialized by a non-reentrant lock; starting a second one while
  the first is still running raises :class:`BatchInProgress`;
* after every batch the inventory is replaced by a fresh scan, whatever the
  outcome.

Example:
    >>> session = ModSession.open(Path("~/mods/(Moveset) Mario").expanduser())
    >>> plan = session.plan_toggle("c121")
    >>> result = session.apply_plan(plan)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import structlog

from altslots import archive
from altslots.apply import apply
from altslots.config import ConfigSchema, load_config
from altslots.errors import BaseSlotLocked, BatchInProgress, SlotError
from altslots.fsops import LocalFileSystem
from altslots.inventory import detect_base_slot, detect_codename, detect_display_name, scan
from altslots.mapping import (
    Insertion,
    compute_add_import,
    compute_disable,
    compute_insert_at,
    compute_reorder,
    compute_toggle,
)
from altslots.models import (
    ApplyRequest,
    ApplyResult,
    ImportSource,
    MappingPlan,
    PurgeRequest,
    PurgeResult,
    RestoreRequest,
    RestoreResult,
    SlotInventory,
    is_live_slot,
    parse_slot,
)
from altslots.progress import ProgressCallback, Ticker

log = structlog.get_logger()

Replacement = Tuple[ImportSource, str]


class ModSession:
    """Slot management for one mod folder."""

    def __init__(
        self,
        mod_root: Path,
        *,
        codename: str,
        display_name: Optional[str],
        base_slot_num: Optional[int],
        config: ConfigSchema,
        fs: Optional[LocalFileSystem] = None,
    ) -> None:
        self.mod_root = Path(mod_root)
        self.codename = codename
        self.display_name = display_name
        self.base_slot_num = base_slot_num
        self.config = config
        self.fs = fs or LocalFileSystem()
        self._lock = threading.Lock()
        self._inventory: Optional[SlotInventory] = None

    # ------------------------------------------------------------------ #
    # construction / state
    # ------------------------------------------------------------------ #
    @classmethod
    def open(
        cls,
        mod_root: Path,
        *,
        config_path: Optional[Path] = None,
        codename: Optional[str] = None,
        fs: Optional[LocalFileSystem] = None,
    ) -> "ModSession":
        """Detect the fighter of *mod_root* and take a first inventory."""
        mod_root = Path(mod_root).expanduser().resolve()
        fs = fs or LocalFileSystem()
        config = load_config(config_path=config_path, mod_root=mod_root)
        display = detect_display_name(mod_root, config=config, fs=fs)
        codename = codename or detect_codename(mod_root, display_name=display, fs=fs)
        base = detect_base_slot(mod_root, codename, config=config, fs=fs)
        log.info("session_open", mod_root=str(mod_root), codename=codename, display=display, base=base)

        session = cls(
            mod_root,
            codename=codename,
            display_name=display,
            base_slot_num=base,
            config=config,
            fs=fs,
        )
        session.rescan()
        return session

    @property
    def inventory(self) -> SlotInventory:
        """Latest scan result; taken lazily on first access."""
        if self._inventory is None:
            return self.rescan()
        return self._inventory

    @property
    def busy(self) -> bool:
        """``True`` while a batch is running."""
        return self._lock.locked()

    def rescan(self) -> SlotInventory:
        """Replace the inventory with a fresh filesystem scan."""
        inventory = scan(
            self.mod_root,
            self.codename,
            self.base_slot_num,
            display_name=self.display_name,
            config=self.config,
            fs=self.fs,
        )
        if self.base_slot_num is None:
            self.base_slot_num = inventory.base_slot_num
        self._inventory = inventory
        return inventory

    @contextmanager
    def _batch(self, name: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise BatchInProgress(f"{self.mod_root}: another batch is still running")
        log.debug("batch_start", batch=name)
        try:
            yield
        finally:
            try:
                self.rescan()
            finally:
                self._lock.release()
                log.debug("batch_end", batch=name)

    # ------------------------------------------------------------------ #
    # planning (pure)
    # ------------------------------------------------------------------ #
    def plan_reorder(self, sequence: Sequence[str]) -> MappingPlan:
        """Plan for a new visual order."""
        return compute_reorder(self.inventory, sequence)

    def plan_toggle(self, slot: str) -> MappingPlan:
        """Plan for enabling or disabling *slot*."""
        return compute_toggle(self.inventory, slot)

    def plan_add(self, insertions: Sequence[Insertion]) -> MappingPlan:
        """Plan for inserting foreign alts."""
        return compute_add_import(self.inventory, insertions)

    # ------------------------------------------------------------------ #
    # batches
    # ------------------------------------------------------------------ #
    def _apply(self, plan: MappingPlan, progress: Optional[ProgressCallback]) -> ApplyResult:
        request = ApplyRequest.from_plan(self.inventory, plan)
        result = apply(request, fs=self.fs, config=self.config, progress=progress)
        result.errors[:0] = plan.errors
        return result

    def apply_plan(
        self, plan: MappingPlan, *, progress: Optional[ProgressCallback] = None
    ) -> ApplyResult:
        """Apply a plan computed against the current inventory."""
        with self._batch("apply"):
            return self._apply(plan, progress)

    def reorder(
        self, sequence: Sequence[str], *, progress: Optional[ProgressCallback] = None
    ) -> ApplyResult:
        """Renumber the slots into *sequence*."""
        return self.apply_plan(self.plan_reorder(sequence), progress=progress)

    def toggle(self, slot: str, *, progress: Optional[ProgressCallback] = None) -> ApplyResult:
        """Disable an enabled slot, or re-enable an archived one at the end."""
        return self.apply_plan(self.plan_toggle(slot), progress=progress)

    def add_import(
        self,
        insertions: Sequence[Insertion],
        *,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyResult:
        """Insert foreign alts at the requested positions."""
        return self.apply_plan(self.plan_add(insertions), progress=progress)

    def replace_import(
        self,
        replacements: Sequence[Replacement],
        *,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyResult:
        """Replace the content of existing slots with foreign alts.

        Each replacement disables the target (later slots move down), scans
        the disk again, then inserts the new content at the vacated number
        (later slots move back up). Targets are handled highest number first
        and the disk is re-scanned before every phase. A target whose disable
        phase fails is skipped.

        Args:
            replacements: ``(source, target_slot)`` pairs.
            progress: Receives the ticks of every phase as one batch.

        Returns:
            The merged :class:`ApplyResult` of all phases.
        """
        total = ApplyResult()
        base_id = self.inventory.base_slot_id
        accepted: list[Replacement] = []
        seen: set[str] = set()
        for source, target in replacements:
            if not is_live_slot(target):
                total.errors.append(f"{target}: malformed slot id")
            elif target == base_id:
                total.errors.append(str(BaseSlotLocked(target, "the base slot cannot be replaced")))
            elif target in seen:
                total.errors.append(f"{target}: listed more than once")
            else:
                seen.add(target)
                accepted.append((source, target))
        accepted.sort(key=lambda pair: parse_slot(pair[1]), reverse=True)

        with self._batch("replace"):
            tick = Ticker(progress, self._replace_steps(target for _, target in accepted))
            for source, target in accepted:
                inventory = self.rescan()
                if target not in inventory.enabled_ids:
                    total.errors.append(f"{target}: not an enabled slot")
                    continue
                log.info("replace_disable", target=target)
                try:
                    phase = self._apply(compute_disable(inventory, target), tick.forward)
                except SlotError as exc:
                    total.errors.append(str(exc))
                    continue
                total.merge(phase)
                if not phase.ok:
                    continue

                inventory = self.rescan()
                log.info("replace_import", target=target, source=source.slot_id)
                try:
                    plan = compute_insert_at(inventory, parse_slot(target), source)
                except SlotError as exc:
                    total.errors.append(str(exc))
                    continue
                total.merge(self._apply(plan, tick.forward))
            tick.done("replace finished")
        return total

    def _replace_steps(self, targets: Iterable[str]) -> int:
        # disable + moves down, then moves up + import
        enabled = self.inventory.enabled_ids
        steps = 0
        for target in targets:
            if target in enabled:
                later = len(enabled) - enabled.index(target) - 1
                steps += 2 * (later + 1)
        return steps

    def restore(
        self,
        slot_ids: Optional[List[str]] = None,
        *,
        progress: Optional[ProgressCallback] = None,
    ) -> RestoreResult:
        """Move archived slots back to their original ids (all by default)."""
        inventory = self.inventory
        if inventory.base_slot_num is None:
            return RestoreResult(errors=["no base slot detected; nothing can be restored"])
        request = RestoreRequest(
            mod_root=self.mod_root,
            base_slot_num=inventory.base_slot_num,
            fighter_codename=self.codename,
            display_name=self.display_name,
            enabled_slots=inventory.enabled_ids,
            disabled_slots=list(slot_ids or []),
        )
        with self._batch("restore"):
            return archive.restore_disabled(
                request, config=self.config, fs=self.fs, progress=progress
            )

    def purge(
        self, *, dry: bool = False, progress: Optional[ProgressCallback] = None
    ) -> PurgeResult:
        """Permanently delete the whole archive."""
        with self._batch("purge"):
            return archive.purge_all(
                PurgeRequest(mod_root=self.mod_root),
                dry=dry,
                config=self.config,
                fs=self.fs,
                progress=progress,
            )


__all__ = ["ModSession", "Replacement"]
