"""Enumerate the alts a foreign mod folder can contribute.

The foreign folder goes through the same detection as the target mod. Each
live slot becomes an :class:`ImportSource` that keeps its *actual* folder id
(``c03`` for a vanilla-numbered skin, ``c104`` for a moveset slot), so the
apply engine copies exactly what exists on disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import structlog

from altslots.config import ConfigSchema, load_config
from altslots.fsops import LocalFileSystem
from altslots.inventory import (
    UNKNOWN_CODENAME,
    detect_codename,
    detect_display_name,
    find_ui_files,
    live_slot_ids,
)
from altslots.models import ImportSource, parse_slot

log = structlog.get_logger()


def scan_import_source(
    folder: Path,
    *,
    config: Optional[ConfigSchema] = None,
    fs: Optional[LocalFileSystem] = None,
) -> List[ImportSource]:
    """Return every alt found in *folder*, ascending by slot number.

    An unrecognisable folder yields an empty list and a warning.
    """
    fs = fs or LocalFileSystem()
    folder = Path(folder).expanduser().resolve()
    config = config or load_config(mod_root=folder)

    display = detect_display_name(folder, config=config, fs=fs)
    codename = detect_codename(folder, display_name=display, fs=fs)
    if codename == UNKNOWN_CODENAME:
        log.warning("import_source_unknown", folder=str(folder))
        return []

    ids = live_slot_ids(folder, codename, config=config, fs=fs)
    if not ids:
        log.warning("import_source_empty", folder=str(folder), codename=codename)
        return []

    base = parse_slot(ids[0])
    ui_files = find_ui_files(folder, display, base, config=config, fs=fs)
    sources = [
        ImportSource(
            root=folder,
            slot_id=sid,
            alt_index=parse_slot(sid) - base,
            base_slot_num=base,
            codename=codename,
            display_name=display,
            ui_file=ui_files.get(sid),
        )
        for sid in ids
    ]
    log.info("import_source", folder=str(folder), codename=codename, alts=len(sources))
    return sources


def pick(sources: List[ImportSource], alt: int) -> ImportSource:
    """Return the source with alt index *alt*.

    Raises:
        KeyError: When the folder offers no such alt.
    """
    for src in sources:
        if src.alt_index == alt:
            return src
    raise KeyError(f"alt {alt} not found (available: {[s.alt_index for s in sources]})")


__all__ = ["scan_import_source", "pick"]
