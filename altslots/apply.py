"""Execute a slot batch against the filesystem.

:func:`apply` is the only function (together with the archive helpers) that
mutates a mod folder. One call processes one :class:`ApplyRequest` in four
strictly ordered stages:

1. **Validation** – requests touching the base slot or carrying malformed ids
   are dropped and reported; the rest of the batch proceeds.
2. **Resolution** – the rename mapping is ordered by
   :func:`altslots.resolver.resolve` *before* anything is touched. A
   :class:`CycleError` aborts the batch with no mutation at all.
3. **Disables, moves, imports** – in that order. Each step relocates every
   slot-scoped domain independently; failures are collected in
   ``ApplyResult.errors`` and never stop the batch.
4. **Progress** – one :class:`Progress` tick per disable, move and import.

There is no rollback. After a partially failed batch the caller re-scans
the mod folder, which is the authoritative state.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import structlog

from altslots.archive import archive_slot, find_record, restore_record
from altslots.config import ConfigSchema, load_config
from altslots.domains import Domain, SlotContext, build_domains, conflicts, relocate
from altslots.errors import BaseSlotLocked, CycleError
from altslots.fsops import LocalFileSystem
from altslots.inventory import find_body_dir
from altslots.models import (
    ApplyRequest,
    ApplyResult,
    MoveOp,
    PendingImport,
    is_disabled_id,
    is_live_slot,
    original_slot,
    slot_id,
)
from altslots.progress import ProgressCallback, Ticker
from altslots.resolver import resolve

log = structlog.get_logger()


# --------------------------------------------------------------------------- #
# Validation
# --------------------------------------------------------------------------- #


def _validate(
    request: ApplyRequest, result: ApplyResult
) -> Tuple[List[str], Dict[str, str], List[PendingImport]]:
    """Return the disables, mapping and imports that survive validation."""
    base_id = slot_id(request.base_slot_num)

    disables: list[str] = []
    for sid in request.disabled_slots:
        if is_disabled_id(sid):
            continue  # already archived
        if not is_live_slot(sid):
            result.errors.append(f"{sid}: malformed slot id")
        elif sid == base_id:
            result.errors.append(str(BaseSlotLocked(sid, "the base slot cannot be disabled")))
        else:
            disables.append(sid)

    mapping: dict[str, str] = {}
    for src, dst in request.slot_mapping.items():
        if not (is_live_slot(src) or is_disabled_id(src)) or not is_live_slot(dst):
            result.errors.append(f"{src} → {dst}: malformed slot id")
        elif base_id in (src, dst):
            result.errors.append(str(BaseSlotLocked(base_id, f"cannot move {src} → {dst}")))
        elif src in disables:
            result.errors.append(f"{src} → {dst}: slot is being disabled in the same batch")
        else:
            mapping[src] = dst

    imports: list[PendingImport] = []
    for imp in request.pending_imports:
        target = imp.target_slot_id
        valid = is_disabled_id(target) if imp.archive else is_live_slot(target)
        if not valid:
            result.errors.append(f"import into {target}: malformed slot id")
        elif target == base_id:
            result.errors.append(str(BaseSlotLocked(target, "the base slot cannot be replaced")))
        else:
            imports.append(imp)
    return disables, mapping, imports


# --------------------------------------------------------------------------- #
# Steps
# --------------------------------------------------------------------------- #


def _move(
    fs: LocalFileSystem,
    domains: List[Domain],
    ctx: SlotContext,
    op: MoveOp,
    config: ConfigSchema,
    result: ApplyResult,
) -> None:
    if is_disabled_id(op.source):
        record = find_record(ctx.root, op.source, config=config, fs=fs)
        if record is None:
            result.errors.append(f"{op.source}: archive folder not found")
            return
        count, errors = restore_record(
            fs, domains, ctx, record, op.destination, archive_dir=config.archive_dir
        )
        result.errors.extend(errors)
        if count:
            result.restored.append(op.source)
        return

    count, errors = relocate(fs, domains, ctx, op.source, ctx, op.destination)
    result.errors.extend(errors)
    if count == 0 and not errors:
        result.errors.append(f"{op.source} → {op.destination}: no content found")
    elif count and not op.staged:
        prefix = config.staging_prefix
        src = op.source[len(prefix):] if op.source.startswith(prefix) else op.source
        result.reordered.append(src)


def _import(
    fs: LocalFileSystem,
    domains: List[Domain],
    ctx: SlotContext,
    imp: PendingImport,
    config: ConfigSchema,
    result: ApplyResult,
) -> None:
    src = SlotContext(
        Path(imp.source_root),
        imp.source_codename,
        imp.source_base_slot_num,
        imp.source_display_name,
    )
    if imp.archive:
        folder = ctx.root / config.archive_dir / imp.target_slot_id
        if fs.file_exists(folder):
            result.errors.append(f"import into {imp.target_slot_id}: archive folder exists")
            return
        dst, dst_slot = ctx.with_root(folder), original_slot(imp.target_slot_id)
    else:
        dst, dst_slot = ctx, imp.target_slot_id
        body = find_body_dir(ctx.root, ctx.codename, config=config, fs=fs)
        taken = conflicts(fs, domains, src, imp.source_slot_id, dst, dst_slot)
        if body is not None and fs.file_exists(body / dst_slot):
            taken.append(body / dst_slot)
        if taken:
            result.errors.append(f"import into {dst_slot}: target already exists ({taken[0]})")
            return

    count, errors = relocate(fs, domains, src, imp.source_slot_id, dst, dst_slot, copy=True)
    result.errors.extend(errors)
    if count:
        result.imported.append(imp.target_slot_id)
    elif not errors:
        result.errors.append(
            f"import {imp.source_slot_id} from {imp.source_root}: no content found"
        )


# --------------------------------------------------------------------------- #
# Public entry-point
# --------------------------------------------------------------------------- #


def apply(
    request: ApplyRequest,
    *,
    fs: Optional[LocalFileSystem] = None,
    config: Optional[ConfigSchema] = None,
    progress: Optional[ProgressCallback] = None,
) -> ApplyResult:
    """Run one batch and report what happened.

    Args:
        request: Disables, renames and imports to perform.
        fs: Filesystem primitives.
        config: Validated configuration; loaded from the mod root if omitted.
        progress: Receives one :class:`Progress` per processed step.

    Returns:
        :class:`ApplyResult` listing disabled, restored, reordered and
        imported ids next to every error met on the way.
    """
    fs = fs or LocalFileSystem()
    config = config or load_config(mod_root=request.mod_root)
    result = ApplyResult()

    base_id = slot_id(request.base_slot_num)
    if request.enabled_slots and request.enabled_slots[0] != base_id:
        err = BaseSlotLocked(base_id, f"must stay first, got {request.enabled_slots[0]}")
        log.error("apply_rejected", reason=str(err))
        result.errors.append(str(err))
        return result

    disables, mapping, imports = _validate(request, result)
    try:
        ops = resolve(mapping, staging_prefix=config.staging_prefix)
    except CycleError as exc:
        log.error("apply_aborted", reason=str(exc))
        result.errors.append(f"batch aborted before any change: {exc}")
        return result

    ctx = SlotContext(
        Path(request.mod_root),
        request.fighter_codename,
        request.base_slot_num,
        request.display_name,
    )
    domains = build_domains(config)
    tick = Ticker(progress, len(disables) + len(ops) + len(imports))
    log.info(
        "apply_start",
        mod_root=str(ctx.root),
        disables=len(disables),
        moves=len(ops),
        imports=len(imports),
    )

    for sid in disables:
        disabled, errors = archive_slot(fs, domains, ctx, sid, archive_dir=config.archive_dir)
        result.errors.extend(errors)
        if disabled is not None:
            result.disabled.append(sid)
        tick(f"Disabled {sid}")

    for op in ops:
        _move(fs, domains, ctx, op, config, result)
        tick(f"Moved {op.source} → {op.destination}")

    for imp in imports:
        _import(fs, domains, ctx, imp, config, result)
        tick(f"Imported {imp.source_slot_id} → {imp.target_slot_id}")

    tick.done()
    log.info(
        "apply_done",
        disabled=len(result.disabled),
        restored=len(result.restored),
        reordered=len(result.reordered),
        imported=len(result.imported),
        errors=len(result.errors),
    )
    return result


__all__ = ["ProgressCallback", "apply"]
