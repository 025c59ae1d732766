"""Filesystem primitives used by the slot engine.

Every read and write the engine performs goes through one
:class:`LocalFileSystem` instance. Keeping the primitives in one place makes
the engine trivial to test: unit-tests build a throw-away mod tree with
``tmp_path``, run an operation, and assert on the filesystem afterwards, or
hand the engine a subclass that fails on purpose.

Semantics shared by all write primitives:
    * Each call either fully succeeds or raises :class:`OSError` leaving the
      destination untouched. No atomicity is promised across calls.
    * Moves and copies **never** overwrite: an existing destination raises
      :class:`FileExistsError`.
    * Missing parent directories of a destination are created on demand.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List

log = logging.getLogger(__name__)


class LocalFileSystem:
    """Read and write primitives backed by :mod:`pathlib` and :mod:`shutil`."""

    # ------------------------------------------------------------------ #
    # read primitives
    # ------------------------------------------------------------------ #
    def scan_directory(self, path: Path) -> List[Path]:
        """Return every file below *path* (recursive, sorted).

        A missing directory yields an empty list.
        """
        if not path.is_dir():
            return []
        return sorted(p for p in path.rglob("*") if p.is_file())

    def list_directory(self, path: Path) -> List[str]:
        """Return the names of the immediate children of *path* (sorted)."""
        if not path.is_dir():
            return []
        return sorted(os.listdir(path))

    def file_exists(self, path: Path) -> bool:
        """Return ``True`` when *path* exists (file or directory)."""
        return path.exists()

    def is_directory(self, path: Path) -> bool:
        """Return ``True`` when *path* is an existing directory."""
        return path.is_dir()

    # ------------------------------------------------------------------ #
    # write primitives
    # ------------------------------------------------------------------ #
    def _refuse_existing(self, dst: Path) -> None:
        if dst.exists():
            raise FileExistsError(f"destination already exists: {dst}")

    def create_directory(self, path: Path) -> None:
        """Create *path* and its parents; existing directories are fine."""
        path.mkdir(parents=True, exist_ok=True)

    def move_file(self, src: Path, dst: Path) -> None:
        """Move one file, refusing to overwrite *dst*."""
        if not src.is_file():
            raise FileNotFoundError(f"source file missing: {src}")
        self._refuse_existing(dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))
        log.debug("Moved %s → %s", src, dst)

    def move_directory(self, src: Path, dst: Path) -> None:
        """Move a directory tree, refusing to overwrite *dst*."""
        if not src.is_dir():
            raise FileNotFoundError(f"source directory missing: {src}")
        self._refuse_existing(dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))
        log.debug("Moved directory %s → %s", src, dst)

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy one file with metadata, refusing to overwrite *dst*."""
        if not src.is_file():
            raise FileNotFoundError(f"source file missing: {src}")
        self._refuse_existing(dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
        log.debug("Copied %s → %s", src, dst)

    def copy_directory(self, src: Path, dst: Path) -> None:
        """Copy a directory tree, refusing to overwrite *dst*."""
        if not src.is_dir():
            raise FileNotFoundError(f"source directory missing: {src}")
        self._refuse_existing(dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(src, dst)
        log.debug("Copied directory %s → %s", src, dst)

    def delete_file(self, path: Path) -> None:
        """Unlink *path*; a missing file raises :class:`FileNotFoundError`."""
        path.unlink()
        log.info("Deleted %s", path)

    def delete_directory(self, path: Path) -> None:
        """Recursively remove *path* via :func:`shutil.rmtree`."""
        shutil.rmtree(path)
        log.info("Deleted directory %s", path)

    def prune_empty_dirs(self, path: Path, *, stop: Path) -> None:
        """Remove *path* and its empty parents up to (excluding) *stop*."""
        stop = stop.resolve()
        cur = path
        while cur.resolve() != stop and stop in cur.resolve().parents:
            try:
                cur.rmdir()
            except OSError:
                return
            cur = cur.parent


__all__ = ["LocalFileSystem"]
