"""Pure computation of rename plans.

Every function here takes an inventory snapshot plus one user intent and
returns a :class:`~altslots.models.MappingPlan`. Nothing touches the
filesystem; :mod:`altslots.apply` is the only place where a plan becomes
real.

Numbering rules shared by all intents:

* position *i* of the enabled sequence corresponds to ``c<base + i>``;
* the base slot is pinned to position 0 and never appears in a mapping;
* identity entries are never emitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import structlog

from altslots.errors import BaseSlotLocked, MalformedSlotId, SlotError
from altslots.models import (
    ImportSource,
    MappingPlan,
    PendingImport,
    SlotInventory,
    disabled_id,
    is_disabled_id,
    is_live_slot,
    now_ms,
    parse_slot,
    slot_id,
)

log = structlog.get_logger()

Insertion = Tuple[ImportSource, Optional[int]]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _require_base(inventory: SlotInventory) -> int:
    if inventory.base_slot_num is None:
        raise ValueError(f"no base slot detected under {inventory.mod_root}")
    return inventory.base_slot_num


def _check_sequence(inventory: SlotInventory, sequence: Sequence[str]) -> None:
    """Reject malformed, unknown and duplicated ids."""
    known = set(inventory.enabled_ids) | set(inventory.disabled_ids)
    seen: set[str] = set()
    for sid in sequence:
        if not (is_live_slot(sid) or is_disabled_id(sid)):
            raise MalformedSlotId(f"malformed slot id {sid!r}")
        if sid not in known:
            raise SlotError(f"{sid} is not part of the current inventory")
        if sid in seen:
            raise SlotError(f"{sid} appears twice in the requested order")
        seen.add(sid)


# --------------------------------------------------------------------------- #
# Toggle / reorder
# --------------------------------------------------------------------------- #


def toggle(inventory: SlotInventory, sequence: Sequence[str], slot: str) -> List[str]:
    """Flip *slot* inside a working copy of the enabled sequence.

    An enabled id is removed, a disabled (or previously removed) id is
    appended. The result still has to go through :func:`compute_reorder`.

    Raises:
        BaseSlotLocked: When *slot* is the base slot.
        SlotError: When *slot* is unknown to the inventory.
    """
    if slot == inventory.base_slot_id:
        raise BaseSlotLocked(slot, "the base slot cannot be disabled")
    result = list(sequence)
    if slot in result:
        result.remove(slot)
    elif slot in inventory.enabled_ids or slot in inventory.disabled_ids:
        result.append(slot)
    else:
        raise SlotError(f"{slot} is not part of the current inventory")
    return result


def compute_reorder(inventory: SlotInventory, sequence: Sequence[str]) -> MappingPlan:
    """Return the plan that gives *sequence* dense numbers from the base.

    Args:
        inventory: Current ground truth.
        sequence: Requested visual order. Live ids missing from it are
            disabled; ``disabled_*`` ids present in it are restored.

    Raises:
        BaseSlotLocked: *sequence* does not start with the base slot.
        MalformedSlotId: An id is neither live nor disabled.
        SlotError: An id is unknown or listed twice.
    """
    base = _require_base(inventory)
    _check_sequence(inventory, sequence)
    base_id = slot_id(base)
    if not sequence or sequence[0] != base_id:
        raise BaseSlotLocked(base_id, "must stay at position 0")

    mapping: dict[str, str] = {}
    for i, sid in enumerate(sequence):
        expected = slot_id(base + i)
        if sid != expected:
            mapping[sid] = expected

    kept = set(sequence)
    removed = [sid for sid in inventory.enabled_ids if sid not in kept]
    archived = [sid for sid in inventory.disabled_ids if sid not in kept]
    plan = MappingPlan(
        enabled=[slot_id(base + i) for i in range(len(sequence))],
        disabled=[*removed, *archived],
        mapping=mapping,
    )
    log.debug("reorder_plan", mapping=plan.mapping, disabled=removed)
    return plan


def compute_toggle(inventory: SlotInventory, slot: str) -> MappingPlan:
    """Enable or disable one slot and renumber the rest."""
    return compute_reorder(inventory, toggle(inventory, inventory.enabled_ids, slot))


def compute_disable(inventory: SlotInventory, slot: str) -> MappingPlan:
    """Remove *slot* from the live set; every later slot moves down by one.

    Raises:
        BaseSlotLocked: When *slot* is the base slot.
        SlotError: When *slot* is not enabled.
    """
    if slot == inventory.base_slot_id:
        raise BaseSlotLocked(slot, "the base slot cannot be disabled")
    if slot not in inventory.enabled_ids:
        raise SlotError(f"{slot} is not an enabled slot")
    return compute_reorder(inventory, [s for s in inventory.enabled_ids if s != slot])


# --------------------------------------------------------------------------- #
# Imports
# --------------------------------------------------------------------------- #


@dataclass
class _Entry:
    """One position of the working sequence while insertions are applied."""

    num: int
    origin: Optional[str] = None
    source: Optional[ImportSource] = None


def _ordered(
    insertions: Iterable[Insertion], length: int
) -> List[Tuple[int, ImportSource, int]]:
    """Sort positioned insertions highest position first.

    Positions past the end are clamped to *length* (append). Ties are
    processed last-listed first so they end up in listed order.
    """
    indexed = [
        (idx, src, min(pos, length))
        for idx, (src, pos) in enumerate(insertions)
        if pos is not None
    ]
    return sorted(indexed, key=lambda t: (t[2], t[0]), reverse=True)


def compute_add_import(
    inventory: SlotInventory,
    insertions: Sequence[Insertion],
    *,
    timestamp: Optional[str] = None,
) -> MappingPlan:
    """Insert foreign alts into the enabled sequence.

    Args:
        inventory: Current ground truth.
        insertions: ``(source, position)`` pairs against the current enabled
            sequence. ``position >= len(enabled)`` appends; ``None`` imports
            straight into the archive without touching live numbering.
        timestamp: Timestamp used for archive imports, ``now`` by default.

    Returns:
        A plan whose mapping is expressed in original on-disk ids, with one
        :class:`PendingImport` per accepted insertion. Insertions at position
        0 (or below) are dropped and reported in ``errors``.
    """
    base = _require_base(inventory)
    entries = [_Entry(num=parse_slot(sid), origin=sid) for sid in inventory.enabled_ids]
    errors: list[str] = []

    for idx, source, pos in _ordered(insertions, len(entries)):
        if pos <= 0:
            err = BaseSlotLocked(slot_id(base), "nothing can be inserted before the base slot")
            log.warning("insert_dropped", source=source.slot_id, position=pos, reason=str(err))
            errors.append(f"insertion #{idx + 1} ({source.slot_id}): {err}")
            continue
        if pos >= len(entries):
            num = entries[-1].num + 1 if entries else base
            entries.append(_Entry(num=num, source=source))
            continue
        num = entries[pos].num
        for entry in entries[pos:]:
            entry.num += 1
        entries.insert(pos, _Entry(num=num, source=source))

    mapping = {
        e.origin: slot_id(e.num)
        for e in entries
        if e.origin is not None and e.origin != slot_id(e.num)
    }
    imports = [
        PendingImport.from_source(slot_id(e.num), e.source)
        for e in entries
        if e.source is not None
    ]

    archived: list[str] = []
    ts = timestamp or now_ms()
    next_num = entries[-1].num + 1 if entries else base
    for source, pos in insertions:
        if pos is not None:
            continue
        target = disabled_id(slot_id(next_num), ts)
        imports.append(PendingImport.from_source(target, source, archive=True))
        archived.append(target)
        next_num += 1

    plan = MappingPlan(
        enabled=[slot_id(e.num) for e in entries],
        disabled=[*inventory.disabled_ids, *archived],
        mapping=mapping,
        imports=imports,
        errors=errors,
    )
    log.debug("add_import_plan", mapping=plan.mapping, imports=len(plan.imports))
    return plan


def compute_insert_at(
    inventory: SlotInventory, slot_num: int, source: ImportSource
) -> MappingPlan:
    """Import *source* into ``c<slot_num>``, shifting ``N >= slot_num`` up.

    This is the second half of a replacement: once the replaced slot has been
    disabled (and everything after it moved down), the same number is opened
    again for the new content.

    Raises:
        BaseSlotLocked: When *slot_num* is the base slot.
    """
    base = _require_base(inventory)
    target = slot_id(slot_num)
    if slot_num <= base:
        raise BaseSlotLocked(target, "the base slot cannot be replaced")

    mapping: dict[str, str] = {}
    enabled: list[str] = []
    inserted = False
    for sid in inventory.enabled_ids:
        num = parse_slot(sid)
        if num >= slot_num:
            if not inserted:
                enabled.append(target)
                inserted = True
            mapping[sid] = slot_id(num + 1)
            enabled.append(slot_id(num + 1))
        else:
            enabled.append(sid)
    if not inserted:
        enabled.append(target)

    return MappingPlan(
        enabled=enabled,
        disabled=list(inventory.disabled_ids),
        mapping=mapping,
        imports=[PendingImport.from_source(target, source)],
    )


__all__ = [
    "Insertion",
    "toggle",
    "compute_reorder",
    "compute_toggle",
    "compute_disable",
    "compute_add_import",
    "compute_insert_at",
]
