"""Import alts from another mod folder.

Commands
--------
* ``altslots-cli add SOURCE --alt 2@1 --alt 3`` – copy alt 2 of *SOURCE* to
  position 1 (later slots shift up) and append alt 3. ``--alt 4@archive``
  imports straight into the archive.
* ``altslots-cli replace SOURCE --alt 2=c121`` – disable ``c121`` and put
  alt 2 of *SOURCE* in its place. Every other slot keeps its number.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import click

from altslots.cli._common import finish, open_session, run_plan, slot_errors
from altslots.importer import pick, scan_import_source
from altslots.models import ImportSource
from altslots.utils.display import echo_progress, echo_section


def _sources(ctx: click.Context, folder: Path) -> List[ImportSource]:
    session = open_session(ctx)
    sources = scan_import_source(folder, config=session.config)
    if not sources:
        raise click.ClickException(f"no importable alts found in {folder}")
    return sources


def _pick(sources: List[ImportSource], alt: str) -> ImportSource:
    try:
        return pick(sources, int(alt))
    except ValueError as exc:
        raise click.BadParameter(f"alt must be a number, got {alt!r}") from exc
    except KeyError as exc:
        raise click.BadParameter(str(exc.args[0])) from exc


def _parse_add(spec: str, length: int) -> Tuple[str, Optional[int]]:
    """``N`` → append, ``N@POS`` → insert, ``N@archive`` → archive only."""
    alt, _, where = spec.partition("@")
    if not where:
        return alt, length
    if where.lower() == "archive":
        return alt, None
    try:
        return alt, int(where)
    except ValueError as exc:
        raise click.BadParameter(f"bad position in {spec!r}") from exc


@click.command(name="add", help="Insert alts from another mod folder.")
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--alt",
    "alts",
    multiple=True,
    required=True,
    metavar="N[@POS|@archive]",
    help="Alt index of SOURCE and where to insert it (default: append).",
)
@click.option("--dry-run", is_flag=True, help="Show the plan without touching the file-system.")
@click.pass_context
def add(ctx: click.Context, source: Path, alts: Tuple[str, ...], dry_run: bool) -> None:
    session = open_session(ctx)
    sources = _sources(ctx, source)
    length = len(session.inventory.enabled)

    insertions = []
    for spec in alts:
        alt, pos = _parse_add(spec, length)
        insertions.append((_pick(sources, alt), pos))

    with slot_errors():
        plan = session.plan_add(insertions)
    run_plan(ctx, session, plan, dry_run=dry_run)


@click.command(name="replace", help="Replace existing slots with alts from another mod folder.")
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--alt",
    "alts",
    multiple=True,
    required=True,
    metavar="N=SLOT",
    help="Alt index of SOURCE and the slot it replaces.",
)
@click.option("--dry-run", is_flag=True, help="List the replacements without applying them.")
@click.pass_context
def replace(ctx: click.Context, source: Path, alts: Tuple[str, ...], dry_run: bool) -> None:
    session = open_session(ctx)
    sources = _sources(ctx, source)

    pairs = []
    for spec in alts:
        alt, sep, target = spec.partition("=")
        if not sep or not target:
            raise click.BadParameter(f"expected N=SLOT, got {spec!r}")
        pairs.append((_pick(sources, alt), target))

    echo_section("replacements")
    for src, target in pairs:
        click.echo(f"  • {target} ← {src.slot_id} ({src.root.name})")
    if dry_run:
        return

    with slot_errors():
        result = session.replace_import(pairs, progress=echo_progress)
    finish(ctx, result)


__all__ = ["add", "replace"]
