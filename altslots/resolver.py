"""Order a rename mapping into collision-free moves.

A mapping such as ``{c125: c126, c126: c127}`` cannot be executed in
arbitrary order: moving ``c125`` first would land on top of the still
present ``c126``. :func:`resolve` performs a topological sort over the
relation *"the destination must be vacated before the move runs"*.

Genuine cycles (``c120 → c121 → c122 → c120``) have no valid order. The
resolver then parks the pending source with the highest slot number under a
staging id (``tmp_c122``), lets the rest of the cycle drain, and finally
moves the staged content to its real destination. Staging ids therefore
never survive a successful batch.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Tuple

import structlog

from altslots.errors import CycleError, MalformedSlotId
from altslots.models import MoveOp, slot_number

log = structlog.get_logger()


def _order_key(value: str, prefix: str) -> Tuple[int, str]:
    """Sort key: slot number first, raw id as tie-breaker."""
    raw = value[len(prefix):] if value.startswith(prefix) else value
    try:
        return slot_number(raw), value
    except MalformedSlotId:
        return -1, value


def _check(pending: Dict[str, str], prefix: str) -> None:
    seen: dict[str, str] = {}
    for src, dst in pending.items():
        if dst in seen:
            raise CycleError(
                f"{seen[dst]} and {src} are both mapped to {dst}; one of them would be lost"
            )
        seen[dst] = src

    ids = set(pending) | set(pending.values())
    for src in pending:
        stage = f"{prefix}{src}"
        if stage in ids:
            raise CycleError(f"staging id {stage} collides with a slot of the mapping")


def resolve(mapping: Mapping[str, str], *, staging_prefix: str = "tmp_") -> List[MoveOp]:
    """Return the moves that realise *mapping* without overwriting anything.

    Args:
        mapping: Rename instructions, current id → new id. Identity entries
            are ignored.
        staging_prefix: Prefix of the temporary ids used to break cycles.

    Returns:
        Ordered :class:`MoveOp` list. Moves that became executable in the same
        round are emitted highest source first; a staged move appears twice,
        once towards the staging id (``staged=True``) and once from it.

    Raises:
        CycleError: Two sources share a destination, or a staging id would
            collide with an id of the mapping. Nothing has been touched at
            that point, so callers abort the whole batch.
    """
    pending = {src: dst for src, dst in mapping.items() if src != dst}
    _check(pending, staging_prefix)

    ops: list[MoveOp] = []
    while pending:
        ready = [src for src, dst in pending.items() if dst not in pending]
        if ready:
            for src in sorted(ready, key=lambda s: _order_key(s, staging_prefix), reverse=True):
                ops.append(MoveOp(source=src, destination=pending.pop(src)))
            continue

        # Every remaining move waits on another one: break the cycle.
        src = max(pending, key=lambda s: _order_key(s, staging_prefix))
        stage = f"{staging_prefix}{src}"
        pending[stage] = pending.pop(src)
        ops.append(MoveOp(source=src, destination=stage, staged=True))
        log.debug("cycle_staged", source=src, staging=stage)

    log.debug("resolved", moves=len(ops), mapping=len(mapping))
    return ops


__all__ = ["resolve"]
