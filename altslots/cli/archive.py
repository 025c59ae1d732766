"""Restore or purge archived slots.

* ``altslots-cli restore [ID …]`` – move archived slots back to their
  original ids (all of them when no id is given). A slot whose number has
  been taken in the meantime is reported, not overwritten.
* ``altslots-cli purge`` – delete the whole archive. Irreversible, so a
  confirmation prompt is shown unless ``--yes`` is passed.
"""

from __future__ import annotations

from typing import Tuple

import click
import structlog

from altslots.cli._common import ask_yes_no, open_session, slot_errors
from altslots.utils.display import echo_banner, echo_errors, echo_progress, echo_success

log = structlog.get_logger()


@click.command(name="restore", help="Move archived slots back to their original ids.")
@click.argument("ids", nargs=-1)
@click.pass_context
def restore(ctx: click.Context, ids: Tuple[str, ...]) -> None:
    session = open_session(ctx)
    echo_banner("Restore")
    with slot_errors():
        result = session.restore(list(ids) or None, progress=echo_progress)
    if result.restored:
        echo_success(f"Restored {len(result.restored)} slot(s): {', '.join(result.restored)}")
    elif not result.errors:
        click.echo("No disabled slots found to restore.")
    echo_errors(result.errors)
    if result.errors:
        ctx.exit(1)


@click.command(name="purge", help="Permanently delete every archived slot.")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted.")
@click.pass_context
def purge(ctx: click.Context, yes: bool, dry_run: bool) -> None:
    session = open_session(ctx)
    records = session.inventory.disabled
    echo_banner("Purge")
    if not records:
        click.echo("Archive is empty.")
        return
    for rec in records:
        click.echo(f"  • {rec.archive_folder}")

    if not (yes or dry_run) and not ask_yes_no(f"Delete {len(records)} archived slot(s)?"):
        click.echo("Aborted.")
        return

    with slot_errors():
        result = session.purge(dry=dry_run, progress=echo_progress)
    log.info("purged", deleted=result.deleted, dry=dry_run)
    if not dry_run:
        echo_success(f"Deleted {result.deleted} archive folder(s)")
    echo_errors(result.errors)
    if result.errors:
        ctx.exit(1)


__all__ = ["restore", "purge"]
