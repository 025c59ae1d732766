"""Builders for throw-away mod folders used across the test-suite.

Every slot gets one file in each domain and every file holds a marker
string naming the slot it was created for, so tests can follow content
through renames with :func:`body_marker`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from altslots.models import slot_id


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def add_slot(
    root: Path,
    num: int,
    *,
    base: int,
    codename: str = "mario",
    display: str = "mario",
    tag: str | None = None,
) -> None:
    """Create every domain of slot *num* below *root*."""
    sid = slot_id(num)
    tag = tag or f"{root.name}:{sid}"
    alt = f"{num - base:02d}"
    _write(root / "fighter" / codename / "model" / "body" / sid / "model.numdlb", tag)
    _write(root / "fighter" / codename / "model" / "hair" / sid / "hair.nutexb", tag)
    _write(root / "fighter" / codename / "motion" / "body" / sid / "motion_list.bin", tag)
    _write(root / "camera" / "fighter" / codename / sid / "j02win1.nuanmb", tag)
    _write(root / "effect" / "fighter" / codename / "model" / sid / "ef.numdlb", tag)
    _write(root / "sound" / "bank" / "fighter_voice" / f"vc_{codename}_{sid}.nus3audio", tag)
    _write(root / "ui" / "replace" / "chara" / "chara_0" / f"chara_0_{display}_{alt}.bntx", tag)
    _write(root / "ui" / "replace" / "chara" / "chara_3" / f"chara_3_{display}_{alt}.bntx", tag)


def make_mod(
    root: Path,
    slots: Iterable[int] = (120, 121, 122),
    *,
    codename: str = "mario",
    display: str = "mario",
) -> Path:
    """Build a mod folder with one complete slot per entry of *slots*."""
    slots = list(slots)
    base = min(slots)
    root.mkdir(parents=True, exist_ok=True)
    for num in slots:
        add_slot(root, num, base=base, codename=codename, display=display)
    return root


def body_marker(root: Path, sid: str, codename: str = "mario") -> str:
    """Return the marker stored in the body model of *sid*."""
    path = root / "fighter" / codename / "model" / "body" / sid / "model.numdlb"
    return path.read_text(encoding="utf-8")


def ui_marker(root: Path, alt: int, display: str = "mario") -> str:
    """Return the marker stored in the ``chara_0`` texture of *alt*."""
    path = root / "ui" / "replace" / "chara" / "chara_0" / f"chara_0_{display}_{alt:02d}.bntx"
    return path.read_text(encoding="utf-8")


def snapshot(root: Path) -> dict[str, str]:
    """Return ``{relative path: content}`` for every file below *root*."""
    return {
        str(p.relative_to(root)): p.read_text(encoding="utf-8")
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }
