"""Slot-scoped file domains.

A slot is not a single folder: its assets are spread over several trees of
the mod and every rename must carry all of them along. Each
:class:`Domain` knows how to *locate* the files or folders that belong to a
slot inside one root and where they must *land* for another slot, possibly
inside another root (the archive directory, or a foreign mod during an
import).

Domains
-------
* ``fighter`` – every directory named ``<slot>`` under
  ``fighter/<codename>/`` (model parts, motion parts, …).
* ``camera`` – ``camera/fighter/<codename>/<slot>``.
* ``effect`` – ``effect/fighter/<codename>/model/<slot>`` and
  ``effect/fighter/<codename>/effect/<slot>``.
* ``sound`` – files under ``sound/`` whose name contains
  ``_<codename>_<slot>.``.
* ``ui`` – textures under the UI replacement root named
  ``…_<display>_<NN>.<ext>`` where ``NN`` is the zero-padded alt index.

:func:`relocate` drives the domains for one move and records failures per
path instead of raising, so one broken domain never blocks the others.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import structlog

from altslots.config.schema import ConfigSchema
from altslots.fsops import LocalFileSystem
from altslots.models import is_live_slot, parse_slot

log = structlog.get_logger()


@dataclass(frozen=True)
class SlotContext:
    """Where slot content lives and how its names are spelled there.

    Attributes mirror the naming inputs of every domain: the root the paths
    are relative to, the fighter codename, the base slot used to derive alt
    indices, and the display name embedded in UI texture filenames.
    """

    root: Path
    codename: str
    base_slot_num: int
    display_name: Optional[str] = None

    def with_root(self, root: Path) -> "SlotContext":
        """Return a copy pointing at another root."""
        return SlotContext(root, self.codename, self.base_slot_num, self.display_name)


def ui_token(ctx: SlotContext, slot: str) -> Optional[str]:
    """Return the alt token used in UI texture names for *slot*.

    Live slots map to their zero-padded alt index (``c121`` with base 120 →
    ``01``); staging ids are used verbatim. Slots below the base have no
    texture name and yield ``None``.
    """
    if not is_live_slot(slot):
        return slot
    alt = parse_slot(slot) - ctx.base_slot_num
    if alt < 0:
        return None
    return f"{alt:02d}"


# --------------------------------------------------------------------------- #
# Domain implementations
# --------------------------------------------------------------------------- #


class Domain:
    """Base class; subclasses implement :meth:`locate` and :meth:`target`."""

    name = "domain"
    is_directory = True

    def locate(self, fs: LocalFileSystem, ctx: SlotContext, slot: str) -> List[Path]:
        """Return every path under ``ctx.root`` that belongs to *slot*."""
        raise NotImplementedError

    def target(
        self,
        path: Path,
        src: SlotContext,
        src_slot: str,
        dst: SlotContext,
        dst_slot: str,
    ) -> Optional[Path]:
        """Return where *path* lands for *dst_slot*, or ``None`` if it cannot."""
        raise NotImplementedError


class FighterTreeDomain(Domain):
    """Every ``<slot>`` directory below ``fighter/<codename>/``."""

    name = "fighter"

    def locate(self, fs: LocalFileSystem, ctx: SlotContext, slot: str) -> List[Path]:
        base = ctx.root / "fighter" / ctx.codename
        if not fs.file_exists(base):
            return []
        found: list[Path] = []
        for cur, dirs, _files in os.walk(base):
            if slot in dirs:
                found.append(Path(cur) / slot)
            # Never descend into slot folders – nested ids belong to the parent.
            dirs[:] = [d for d in dirs if d != slot and not is_live_slot(d)]
        return sorted(found)

    def target(self, path, src, src_slot, dst, dst_slot):
        rel = path.relative_to(src.root / "fighter" / src.codename)
        return dst.root / "fighter" / dst.codename / rel.parent / dst_slot


class TemplateDomain(Domain):
    """Fixed directory templates such as ``camera/fighter/{codename}/{slot}``."""

    def __init__(self, name: str, templates: Sequence[str]) -> None:
        self.name = name
        self.templates = tuple(templates)

    def _render(self, tmpl: str, ctx: SlotContext, slot: str) -> Path:
        return ctx.root / tmpl.format(codename=ctx.codename, slot=slot)

    def locate(self, fs, ctx, slot):
        found: list[Path] = []
        for tmpl in self.templates:
            path = self._render(tmpl, ctx, slot)
            if fs.file_exists(path):
                found.append(path)
        return found

    def target(self, path, src, src_slot, dst, dst_slot):
        for tmpl in self.templates:
            if self._render(tmpl, src, src_slot) == path:
                return self._render(tmpl, dst, dst_slot)
        return None


class SoundDomain(Domain):
    """Files under ``sound/`` tagged ``_<codename>_<slot>.`` in their name."""

    name = "sound"
    is_directory = False

    @staticmethod
    def _tag(codename: str, slot: str) -> str:
        return f"_{codename}_{slot}."

    def locate(self, fs, ctx, slot):
        tag = self._tag(ctx.codename, slot)
        return [p for p in fs.scan_directory(ctx.root / "sound") if tag in p.name]

    def target(self, path, src, src_slot, dst, dst_slot):
        rel = path.relative_to(src.root)
        name = rel.name.replace(
            self._tag(src.codename, src_slot), self._tag(dst.codename, dst_slot), 1
        )
        return dst.root / rel.parent / name


class UiTextureDomain(Domain):
    """UI textures keyed by display name and zero-padded alt index."""

    name = "ui"
    is_directory = False

    def __init__(self, ui_dir: str, extensions: Sequence[str]) -> None:
        self.ui_dir = ui_dir
        self.extensions = tuple(e.lower() for e in extensions)

    def _pattern(self, display: str, token: str) -> re.Pattern[str]:
        exts = "|".join(re.escape(e) for e in self.extensions)
        return re.compile(
            rf"_{re.escape(display)}_{re.escape(token)}(?P<ext>{exts})$", re.IGNORECASE
        )

    def locate(self, fs, ctx, slot):
        token = ui_token(ctx, slot)
        if token is None or not ctx.display_name:
            return []
        pat = self._pattern(ctx.display_name, token)
        return [p for p in fs.scan_directory(ctx.root / self.ui_dir) if pat.search(p.name)]

    def target(self, path, src, src_slot, dst, dst_slot):
        src_token = ui_token(src, src_slot)
        dst_token = ui_token(dst, dst_slot)
        if src_token is None or dst_token is None or not src.display_name:
            return None
        m = self._pattern(src.display_name, src_token).search(path.name)
        if not m:
            return None
        display = dst.display_name or src.display_name
        name = f"{path.name[: m.start()]}_{display}_{dst_token}{path.name[m.start('ext'):]}"
        rel = path.relative_to(src.root)
        return dst.root / rel.parent / name


def build_domains(config: ConfigSchema) -> List[Domain]:
    """Return the domain set described by *config*, in execution order."""
    return [
        FighterTreeDomain(),
        TemplateDomain("camera", ["camera/fighter/{codename}/{slot}"]),
        TemplateDomain(
            "effect",
            [
                "effect/fighter/{codename}/model/{slot}",
                "effect/fighter/{codename}/effect/{slot}",
            ],
        ),
        SoundDomain(),
        UiTextureDomain(config.ui_dir, config.texture_extensions),
    ]


# --------------------------------------------------------------------------- #
# Driving the domains
# --------------------------------------------------------------------------- #


def plan_relocation(
    fs: LocalFileSystem,
    domains: Sequence[Domain],
    src: SlotContext,
    src_slot: str,
    dst: SlotContext,
    dst_slot: str,
) -> List[Tuple[Domain, Path, Optional[Path]]]:
    """Return ``(domain, source, target)`` triples for one slot relocation."""
    pairs: list[Tuple[Domain, Path, Optional[Path]]] = []
    for domain in domains:
        for path in domain.locate(fs, src, src_slot):
            pairs.append((domain, path, domain.target(path, src, src_slot, dst, dst_slot)))
    return pairs


def conflicts(
    fs: LocalFileSystem,
    domains: Sequence[Domain],
    src: SlotContext,
    src_slot: str,
    dst: SlotContext,
    dst_slot: str,
) -> List[Path]:
    """Return the targets of a relocation that already exist on disk."""
    return [
        t
        for _d, _p, t in plan_relocation(fs, domains, src, src_slot, dst, dst_slot)
        if t is not None and fs.file_exists(t)
    ]


def relocate(
    fs: LocalFileSystem,
    domains: Sequence[Domain],
    src: SlotContext,
    src_slot: str,
    dst: SlotContext,
    dst_slot: str,
    *,
    copy: bool = False,
) -> Tuple[int, List[str]]:
    """Move (or copy) every domain of *src_slot* to *dst_slot*.

    Args:
        fs: Filesystem primitives.
        domains: Domains to process, each attempted independently.
        src: Context the content currently lives in.
        src_slot: Slot id inside *src*.
        dst: Context the content must land in.
        dst_slot: Slot id inside *dst*.
        copy: Copy instead of move (imports leave the foreign mod intact).

    Returns:
        ``(count, errors)`` – number of paths relocated and one message per
        failed path.
    """
    count = 0
    errors: list[str] = []
    verb = "copy" if copy else "move"
    for domain in domains:
        try:
            located = domain.locate(fs, src, src_slot)
        except OSError as exc:
            errors.append(f"{src_slot} [{domain.name}]: scan failed: {exc}")
            continue
        for path in located:
            dest = domain.target(path, src, src_slot, dst, dst_slot)
            if dest is None:
                errors.append(
                    f"{src_slot} → {dst_slot} [{domain.name}]: no target name for {path.name}"
                )
                continue
            try:
                if domain.is_directory:
                    (fs.copy_directory if copy else fs.move_directory)(path, dest)
                else:
                    (fs.copy_file if copy else fs.move_file)(path, dest)
                count += 1
            except OSError as exc:
                log.error(
                    "relocate_failed",
                    domain=domain.name,
                    src=str(path),
                    dst=str(dest),
                    error=str(exc),
                )
                errors.append(f"{src_slot} → {dst_slot} [{domain.name}]: {verb} failed: {exc}")
    log.debug("relocated", src=src_slot, dst=dst_slot, paths=count, copy=copy)
    return count, errors


__all__ = [
    "SlotContext",
    "ui_token",
    "Domain",
    "FighterTreeDomain",
    "TemplateDomain",
    "SoundDomain",
    "UiTextureDomain",
    "build_domains",
    "plan_relocation",
    "conflicts",
    "relocate",
]
