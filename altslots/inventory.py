"""Reconstruct the slot inventory of a mod folder from the filesystem.

The filesystem is the only source of truth: :func:`scan` is called before
every computation and after every batch, and the resulting
:class:`~altslots.models.SlotInventory` is rebuilt wholesale each time.

Besides the scan itself the module hosts the detection heuristics that
figure out *which* fighter a mod targets:

* :func:`detect_display_name` – name embedded in UI texture filenames, or the
  ``(Moveset) Name`` folder convention, or the folder name itself;
* :func:`detect_codename` – the internal folder below ``fighter/``;
* :func:`detect_base_slot` – the lowest ``c<N>`` folder of the body tree.

Detection failures never raise. They degrade to placeholder values and a
warning so that the caller can still show an (empty) inventory.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from altslots.config import ConfigSchema, load_config
from altslots.fsops import LocalFileSystem
from altslots.models import (
    DisabledSlotRecord,
    Slot,
    SlotInventory,
    is_live_slot,
    parse_archive_folder,
    parse_slot,
    slot_id,
    slot_number,
)

log = structlog.get_logger()

UNKNOWN_CODENAME = "unknown_codename"
UNKNOWN_DISPLAY = "unknown_display"

_UI_NAME_RE = re.compile(r"chara_\d+_([\w-]+?)_\d{2}\.(bntx|nutexb)$", re.IGNORECASE)
_FOLDER_NAME_RE = re.compile(r"\((?:Moveset|Character)\)\s*([\w\s-]+)", re.IGNORECASE)
_ALT_SUFFIX_RE = re.compile(r"_(\d{2})(\.[A-Za-z0-9]+)$")

# Folders that live next to fighters but never hold one.
_NON_FIGHTER_DIRS = {"common"}


def _fs(fs: Optional[LocalFileSystem]) -> LocalFileSystem:
    return fs or LocalFileSystem()


# --------------------------------------------------------------------------- #
# Detection
# --------------------------------------------------------------------------- #


def detect_display_name(
    mod_root: Path,
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> str:
    """Return the fighter name used inside UI texture filenames.

    Strategies, first hit wins:

    1. ``chara_<k>_<name>_<NN>.bntx`` files under the UI replacement root;
    2. a folder named like ``(Moveset) Name``;
    3. the folder name itself, lower-cased.
    """
    fs = _fs(fs)
    config = config or ConfigSchema()
    ui_root = mod_root / config.ui_dir

    for k in range(config.chara_folders):
        for path in fs.scan_directory(ui_root / f"chara_{k}"):
            m = _UI_NAME_RE.search(path.name)
            if m:
                name = m.group(1).lower()
                log.debug("display_name", source="ui", file=path.name, name=name)
                return name

    folder = mod_root.name
    m = _FOLDER_NAME_RE.search(folder)
    if m:
        name = m.group(1).strip().lower()
        log.debug("display_name", source="folder_format", name=name)
        return name

    name = re.sub(r"^\(moveset\)\s*", "", folder.lower()).strip()
    if not name:
        log.warning("display_name_unknown", mod_root=str(mod_root))
        return UNKNOWN_DISPLAY
    log.debug("display_name", source="folder", name=name)
    return name


def detect_codename(
    mod_root: Path,
    *,
    display_name: Optional[str] = None,
    fs: Optional[LocalFileSystem] = None,
) -> str:
    """Return the fighter folder name below ``fighter/``.

    A folder qualifies when it has a ``model`` sub-directory or directly
    contains ``c<N>`` folders. With several candidates the one equal to
    *display_name* wins, otherwise the first one (alphabetically).
    """
    fs = _fs(fs)
    fighter_dir = mod_root / "fighter"
    if not fs.file_exists(fighter_dir):
        log.warning("fighter_dir_missing", path=str(fighter_dir))
        return UNKNOWN_CODENAME

    candidates: list[str] = []
    for name in fs.list_directory(fighter_dir):
        if name in _NON_FIGHTER_DIRS:
            continue
        item = fighter_dir / name
        if fs.file_exists(item / "model"):
            candidates.append(name)
        elif any(is_live_slot(sub) for sub in fs.list_directory(item)):
            candidates.append(name)

    if not candidates:
        log.warning("codename_unknown", path=str(fighter_dir))
        return UNKNOWN_CODENAME
    if len(candidates) > 1:
        log.warning("codename_ambiguous", candidates=candidates)
        wanted = (display_name or "").lower()
        for name in candidates:
            if name.lower() == wanted:
                return name
    return candidates[0]


def find_body_dir(
    mod_root: Path,
    codename: str,
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> Optional[Path]:
    """Return the first existing canonical slot directory, if any."""
    fs = _fs(fs)
    config = config or ConfigSchema()
    for rel in config.body_candidates(codename):
        path = mod_root / rel
        if fs.file_exists(path):
            return path
    return None


def live_slot_ids(
    mod_root: Path,
    codename: str,
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> List[str]:
    """Return the ``c<N>`` folders of the body directory, ascending by N."""
    fs = _fs(fs)
    body = find_body_dir(mod_root, codename, config=config, fs=fs)
    if body is None:
        return []
    ids = [name for name in fs.list_directory(body) if is_live_slot(name)]
    return sorted(ids, key=parse_slot)


def detect_base_slot(
    mod_root: Path,
    codename: str,
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> Optional[int]:
    """Return the lowest slot number found, or ``None`` when there is none."""
    ids = live_slot_ids(mod_root, codename, config=config, fs=fs)
    if not ids:
        log.warning("base_slot_unknown", mod_root=str(mod_root), codename=codename)
        return None
    return parse_slot(ids[0])


# --------------------------------------------------------------------------- #
# UI textures
# --------------------------------------------------------------------------- #


def find_ui_files(
    mod_root: Path,
    display_name: Optional[str],
    base_slot_num: Optional[int],
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> Dict[str, Path]:
    """Map slot ids to their UI texture.

    Only the ``chara_<k>`` folder holding the most matching textures is used
    so that every slot shows artwork of the same kind.
    """
    fs = _fs(fs)
    config = config or ConfigSchema()
    if not display_name or base_slot_num is None:
        return {}

    ui_root = mod_root / config.ui_dir
    tag = f"_{display_name.lower()}_"

    def _matching(folder: Path) -> list[Path]:
        return [
            p
            for p in fs.scan_directory(folder)
            if p.suffix.lower() in config.texture_extensions and tag in p.name.lower()
        ]

    best: list[Path] = []
    for k in range(config.chara_folders):
        files = _matching(ui_root / f"chara_{k}")
        if len(files) > len(best):
            best = files

    found: dict[str, Path] = {}
    for path in best:
        m = _ALT_SUFFIX_RE.search(path.name)
        if not m:
            continue
        alt = int(m.group(1))
        if f"{tag}{alt:02d}." in path.name.lower():
            found[slot_id(base_slot_num + alt)] = path
    return found


# --------------------------------------------------------------------------- #
# Archive
# --------------------------------------------------------------------------- #


def scan_archive(
    mod_root: Path,
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> List[DisabledSlotRecord]:
    """Return every recognised archive folder, sorted by original slot."""
    fs = _fs(fs)
    config = config or ConfigSchema()
    archive = mod_root / config.archive_dir
    records: list[DisabledSlotRecord] = []
    for name in fs.list_directory(archive):
        if not fs.is_directory(archive / name):
            continue
        rec = parse_archive_folder(name)
        if rec is None:
            log.debug("archive_folder_ignored", folder=name)
            continue
        records.append(rec)
    return sorted(records, key=lambda r: (slot_number(r.original_slot), r.timestamp))


# --------------------------------------------------------------------------- #
# Public entry-point
# --------------------------------------------------------------------------- #


def scan(
    mod_root: Path,
    codename: str,
    base_slot_num: Optional[int] = None,
    *,
    display_name: Optional[str] = None,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> SlotInventory:
    """Rebuild the slot inventory of *mod_root*.

    Args:
        mod_root: Root of the mod folder.
        codename: Fighter folder name below ``fighter/``.
        base_slot_num: Base slot; detected as the lowest slot when ``None``.
        display_name: Name used in UI textures; enables ``ui_file`` lookup.
        config: Validated configuration; loaded from *mod_root* when omitted.
        fs: Filesystem primitives.

    Returns:
        A fresh :class:`SlotInventory`. A missing body directory yields an
        empty enabled list together with a logged warning.
    """
    fs = _fs(fs)
    mod_root = Path(mod_root)
    config = config or load_config(mod_root=mod_root)

    body = find_body_dir(mod_root, codename, config=config, fs=fs)
    if body is None:
        log.warning("body_dir_missing", mod_root=str(mod_root), codename=codename)
        ids: list[str] = []
    else:
        ids = live_slot_ids(mod_root, codename, config=config, fs=fs)

    if base_slot_num is None and ids:
        base_slot_num = parse_slot(ids[0])

    ui_files = find_ui_files(mod_root, display_name, base_slot_num, config=config, fs=fs)
    base = base_slot_num if base_slot_num is not None else 0
    enabled = [
        Slot(
            id=sid,
            enabled=True,
            alt_index=parse_slot(sid) - base,
            content_ref=body / sid if body is not None else None,
            ui_file=ui_files.get(sid),
        )
        for sid in ids
    ]

    inventory = SlotInventory(
        mod_root=mod_root,
        codename=codename,
        display_name=display_name,
        base_slot_num=base_slot_num,
        enabled=enabled,
        disabled=scan_archive(mod_root, config=config, fs=fs),
    )
    log.info(
        "scanned",
        mod_root=str(mod_root),
        enabled=len(inventory.enabled),
        disabled=len(inventory.disabled),
        base=inventory.base_slot_id,
    )
    return inventory


__all__ = [
    "UNKNOWN_CODENAME",
    "UNKNOWN_DISPLAY",
    "detect_display_name",
    "detect_codename",
    "find_body_dir",
    "live_slot_ids",
    "detect_base_slot",
    "find_ui_files",
    "scan_archive",
    "scan",
]
