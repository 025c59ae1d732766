"""Thin wrapper around the external texture-to-PNG converter.

The converter (``ultimate_tex_cli`` by default) is invoked as
``<tool> <input> <output>``. Nothing in *altslots* depends on the preview
images, so every failure is returned as a :class:`ConversionResult` instead
of being raised.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from altslots.config import ConfigSchema
from altslots.inventory import find_ui_files
from altslots.models import SlotInventory, slot_number

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one conversion."""

    success: bool
    output: Optional[Path] = None
    error: Optional[str] = None


def _which(tool: str) -> Optional[str]:
    """Return an executable path for *tool* (name on $PATH or explicit path)."""
    candidate = Path(tool).expanduser()
    if candidate.is_file():
        return str(candidate)
    return shutil.which(tool)


def convert_texture(src: Path, dst: Path, *, tool: Optional[str] = None) -> ConversionResult:
    """Render the texture *src* to the image *dst*.

    Args:
        src: ``.bntx`` / ``.nutexb`` texture.
        dst: Output image path; parent directories are created.
        tool: Converter executable, ``ultimate_tex_cli`` when omitted.

    Returns:
        :class:`ConversionResult`. A missing converter, a missing input, a
        non-zero exit status or a missing output file all yield
        ``success=False`` with a readable ``error``.
    """
    tool = tool or ConfigSchema().preview.tool
    if not src.is_file():
        return ConversionResult(False, error=f"{src} does not exist")
    exe = _which(tool)
    if exe is None:
        return ConversionResult(False, error=f"{tool} not found on $PATH")

    dst.parent.mkdir(parents=True, exist_ok=True)
    cmd = [exe, str(src), str(dst)]
    log.debug("converter cmd: %s", " ".join(cmd))
    try:
        res = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as exc:
        return ConversionResult(False, error=f"{tool} could not be started: {exc}")

    if res.returncode != 0:
        msg = (res.stderr or res.stdout).strip()
        log.warning("Conversion of %s failed (code=%s): %s", src.name, res.returncode, msg)
        return ConversionResult(False, error=f"{tool} failed (code={res.returncode}): {msg}")
    if not dst.exists():
        return ConversionResult(False, error=f"{tool} reported success but wrote no {dst.name}")
    return ConversionResult(True, output=dst)


def render_previews(
    inventory: SlotInventory,
    out_dir: Path,
    *,
    tool: Optional[str] = None,
    config: Optional[ConfigSchema] = None,
) -> Dict[str, ConversionResult]:
    """Convert the UI textures of the inventory to PNG previews.

    Enabled slots are written to ``alt_<k>.png`` and keyed by slot id.
    Archived slots are looked up inside their archive folder, written to
    ``disabled_alt_<k>.png`` and keyed by their ``disabled_*`` id; ``<k>``
    is the alt index the slot had before it was archived. Slots without a
    UI texture are skipped.
    """
    config = config or ConfigSchema()
    results: dict[str, ConversionResult] = {}
    for slot in inventory.enabled:
        if slot.ui_file is None:
            continue
        dst = out_dir / f"alt_{slot.alt_index}.png"
        results[slot.id] = convert_texture(slot.ui_file, dst, tool=tool)

    base = inventory.base_slot_num
    records = inventory.disabled if base is not None else []
    used: set[str] = set()
    for rec in records:
        folder = rec.path(inventory.mod_root, config.archive_dir)
        ui_files = find_ui_files(folder, inventory.display_name, base, config=config)
        src = ui_files.get(rec.original_slot)
        if src is None:
            continue
        name = f"disabled_alt_{slot_number(rec.original_slot) - base}"
        if name in used:
            name = f"{name}_{rec.timestamp}"
        used.add(name)
        results[rec.disabled_slot_id] = convert_texture(src, out_dir / f"{name}.png", tool=tool)

    done = sum(r.success for r in results.values())
    log.info("Rendered %d/%d previews into %s", done, len(results), out_dir)
    return results


__all__ = ["ConversionResult", "convert_texture", "render_previews"]
