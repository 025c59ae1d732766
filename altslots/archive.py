"""Helpers around the disabled-slot archive.

Archived slots live in ``<mod_root>/<archive_dir>/<folder>/`` where
``<folder>`` is ``<slot>_<timestamp>`` for slots that were disabled and
``disabled_<slot>_<timestamp>`` for content imported straight into the
archive. Inside the folder every slot-scoped file keeps its mod-relative
path, so archiving and restoring are plain relocations between two roots.

Public helpers:

* :func:`archive_slot` – move one live slot into a fresh archive folder.
* :func:`restore_record` – move an archive folder back to a live slot.
* :func:`restore` – same, but refuses with :class:`SlotOccupied` *before*
  touching anything when the target is taken.
* :func:`restore_disabled` – batch variant collecting failures.
* :func:`purge_all` – delete every archive folder (irreversible).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from altslots.config import ConfigSchema, load_config
from altslots.domains import Domain, SlotContext, build_domains, conflicts, relocate
from altslots.errors import SlotError, SlotOccupied
from altslots.fsops import LocalFileSystem
from altslots.inventory import find_body_dir, scan_archive
from altslots.models import (
    DisabledSlotRecord,
    PurgeRequest,
    PurgeResult,
    RestoreRequest,
    RestoreResult,
    now_ms,
    slot_number,
)
from altslots.progress import ProgressCallback, Ticker

log = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Internal primitives
# ─────────────────────────────────────────────────────────────────────────────


def _rm_dir(fs: LocalFileSystem, path: Path, *, dry: bool) -> bool:
    """Recursively remove *path*; dry-run only logs what would happen."""
    if dry:
        log.info("[dry-run] would delete directory %s", path)
        return False
    fs.delete_directory(path)
    return True


def _drop_if_empty(fs: LocalFileSystem, folder: Path) -> bool:
    """Delete an archive folder once no file is left inside it."""
    if not fs.file_exists(folder):
        return True
    if fs.scan_directory(folder):
        log.warning("Archive folder %s still holds files; kept", folder)
        return False
    fs.delete_directory(folder)
    return True


def find_record(
    mod_root: Path,
    disabled_slot_id: str,
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> Optional[DisabledSlotRecord]:
    """Return the archive record whose id or folder is *disabled_slot_id*."""
    for rec in scan_archive(mod_root, config=config, fs=fs):
        if disabled_slot_id in (rec.disabled_slot_id, rec.archive_folder):
            return rec
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Disable / restore
# ─────────────────────────────────────────────────────────────────────────────


def archive_slot(
    fs: LocalFileSystem,
    domains: Sequence[Domain],
    ctx: SlotContext,
    slot: str,
    *,
    archive_dir: str,
    timestamp: Optional[str] = None,
) -> Tuple[Optional[str], List[str]]:
    """Move every domain of *slot* into ``<archive_dir>/<slot>_<ts>/``.

    Returns:
        ``(disabled_id, errors)``. ``disabled_id`` is ``None`` when nothing
        at all could be archived.
    """
    ts = timestamp or now_ms()
    folder = f"{slot}_{ts}"
    dst = ctx.with_root(ctx.root / archive_dir / folder)
    if fs.file_exists(dst.root):
        return None, [f"{slot}: archive folder {folder} already exists"]

    count, errors = relocate(fs, domains, ctx, slot, dst, slot)
    if count == 0:
        errors.append(f"{slot}: no content found to disable")
        return None, errors
    log.info("Disabled %s → %s/%s (%d paths)", slot, archive_dir, folder, count)
    return f"disabled_{slot}_{ts}", errors


def restore_record(
    fs: LocalFileSystem,
    domains: Sequence[Domain],
    ctx: SlotContext,
    record: DisabledSlotRecord,
    target: str,
    *,
    archive_dir: str,
) -> Tuple[int, List[str]]:
    """Move archived content into the live slot *target*.

    The archive folder is removed once empty. No occupancy check is done
    here; :func:`restore` is the guarded variant.
    """
    folder = record.path(ctx.root, archive_dir)
    src = ctx.with_root(folder)
    count, errors = relocate(fs, domains, src, record.original_slot, ctx, target)
    if not errors and not _drop_if_empty(fs, folder):
        errors.append(f"{record.disabled_slot_id}: leftover files in {folder}")
    if count:
        log.info("Restored %s → %s (%d paths)", record.archive_folder, target, count)
    return count, errors


def _occupancy(
    fs: LocalFileSystem,
    domains: Sequence[Domain],
    ctx: SlotContext,
    record: DisabledSlotRecord,
    target: str,
    config: ConfigSchema,
) -> List[Path]:
    taken: list[Path] = []
    body = find_body_dir(ctx.root, ctx.codename, config=config, fs=fs)
    if body is not None and fs.file_exists(body / target):
        taken.append(body / target)
    src = ctx.with_root(record.path(ctx.root, config.archive_dir))
    for path in conflicts(fs, domains, src, record.original_slot, ctx, target):
        if path not in taken:
            taken.append(path)
    return taken


def restore(
    mod_root: Path,
    record: DisabledSlotRecord,
    *,
    codename: str,
    base_slot_num: int,
    display_name: Optional[str] = None,
    target: Optional[str] = None,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> int:
    """Move *record* back to its original slot (or *target*).

    Returns:
        Number of relocated paths.

    Raises:
        SlotOccupied: Some target path already exists. Nothing was moved.
        SlotError: Some domain failed after the relocation started; the
            message lists every failure.
    """
    fs = fs or LocalFileSystem()
    config = config or load_config(mod_root=mod_root)
    domains = build_domains(config)
    ctx = SlotContext(Path(mod_root), codename, base_slot_num, display_name)
    target = target or record.original_slot

    taken = _occupancy(fs, domains, ctx, record, target, config)
    if taken:
        raise SlotOccupied(target, str(taken[0]))

    count, errors = restore_record(
        fs, domains, ctx, record, target, archive_dir=config.archive_dir
    )
    if errors:
        raise SlotError("; ".join(errors))
    return count


def restore_disabled(
    request: RestoreRequest,
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
    progress: Optional[ProgressCallback] = None,
) -> RestoreResult:
    """Restore archived slots to their original ids.

    ``request.disabled_slots`` selects the records by ``disabled_*`` id or
    archive folder name; an empty list restores every record. Records are
    handled in ascending original slot order and each failure only drops
    that record. *progress* receives one tick per selected record.
    """
    fs = fs or LocalFileSystem()
    config = config or load_config(mod_root=request.mod_root)
    result = RestoreResult()

    records = scan_archive(request.mod_root, config=config, fs=fs)
    if request.disabled_slots:
        wanted = set(request.disabled_slots)
        selected = [
            r for r in records if r.disabled_slot_id in wanted or r.archive_folder in wanted
        ]
        found = {r.disabled_slot_id for r in selected} | {r.archive_folder for r in selected}
        for missing in sorted(wanted - found):
            result.errors.append(f"{missing}: no such archived slot")
    else:
        selected = records

    selected = sorted(selected, key=lambda r: (slot_number(r.original_slot), r.timestamp))
    tick = Ticker(progress, len(selected))
    for rec in selected:
        try:
            restore(
                request.mod_root,
                rec,
                codename=request.fighter_codename,
                base_slot_num=request.base_slot_num,
                display_name=request.display_name,
                config=config,
                fs=fs,
            )
        except SlotError as exc:
            log.error("Could not restore %s: %s", rec.archive_folder, exc)
            result.errors.append(f"{rec.disabled_slot_id}: {exc}")
            tick(f"Skipped {rec.archive_folder}")
            continue
        result.restored.append(rec.disabled_slot_id)
        tick(f"Restored {rec.archive_folder} → {rec.original_slot}")
    tick.done()
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Purge
# ─────────────────────────────────────────────────────────────────────────────


def purge_all(
    request: PurgeRequest,
    *,
    dry: bool = False,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
    progress: Optional[ProgressCallback] = None,
) -> PurgeResult:
    """Permanently delete every folder of the archive directory.

    Args:
        request: Names the mod root.
        dry: Log what would be deleted without deleting anything.
        config: Validated configuration.
        fs: Filesystem primitives.
        progress: Receives one tick per archive folder.

    Returns:
        :class:`PurgeResult` with the number of folders deleted and one
        message per folder that could not be removed.
    """
    fs = fs or LocalFileSystem()
    config = config or load_config(mod_root=request.mod_root)
    archive = Path(request.mod_root) / config.archive_dir
    result = PurgeResult()

    folders = [n for n in fs.list_directory(archive) if fs.is_directory(archive / n)]
    tick = Ticker(progress, len(folders))
    for name in folders:
        path = archive / name
        try:
            if _rm_dir(fs, path, dry=dry):
                result.deleted += 1
        except OSError as exc:
            log.error("Could not delete %s: %s", path, exc)
            result.errors.append(f"{name}: {exc}")
        tick(f"Deleted {name}" if not dry else f"Would delete {name}")
    tick.done()

    if not dry and not result.errors and fs.file_exists(archive) and not fs.list_directory(archive):
        fs.delete_directory(archive)
    return result


__all__ = [
    "find_record",
    "archive_slot",
    "restore_record",
    "restore",
    "restore_disabled",
    "purge_all",
]
