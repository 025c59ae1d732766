"""Print the slot inventory of the selected mod folder.

Exposed as ``altslots-cli scan``. Read-only.
"""

from __future__ import annotations

import click

from altslots.cli._common import open_session
from altslots.utils.display import echo_inventory


@click.command(name="scan", help="Show enabled and disabled slots.")
@click.pass_context
def cli(ctx: click.Context) -> None:
    session = open_session(ctx)
    echo_inventory(session.inventory)
    if session.inventory.base_slot_num is None:
        click.secho("No slot folders detected.", fg="yellow", err=True)


__all__ = ["cli"]
