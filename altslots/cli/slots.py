"""Reorder, disable and enable slots of the selected mod folder.

Commands
--------
* ``altslots-cli reorder c120 c122 c121`` – new visual order. Live slots left
  out are disabled, ``disabled_*`` ids listed are re-enabled.
* ``altslots-cli disable c121 [c123 …]`` – archive slots; later slots move
  down to close the gap.
* ``altslots-cli enable disabled_c121_<ts> [...]`` – bring archived slots back
  at the end of the live sequence.

Every command prints its plan first; ``--dry-run`` stops there.
"""

from __future__ import annotations

from typing import List, Tuple

import click

from altslots.cli._common import open_session, run_plan, slot_errors
from altslots.errors import BaseSlotLocked
from altslots.models import MappingPlan

_dry_run = click.option(
    "--dry-run", is_flag=True, help="Show the plan without touching the file-system."
)


def _with_errors(plan: MappingPlan, refused: List[str]) -> MappingPlan:
    """Attach ids dropped on the command line to *plan* so they get reported."""
    if not refused:
        return plan
    return plan.model_copy(update={"errors": [*refused, *plan.errors]})


@click.command(name="reorder", help="Renumber slots into the given order.")
@click.argument("sequence", nargs=-1, required=True)
@_dry_run
@click.pass_context
def reorder(ctx: click.Context, sequence: Tuple[str, ...], dry_run: bool) -> None:
    session = open_session(ctx)
    with slot_errors():
        plan = session.plan_reorder(list(sequence))
    run_plan(ctx, session, plan, dry_run=dry_run)


@click.command(name="disable", help="Move slots into the archive and close the gaps.")
@click.argument("slots", nargs=-1, required=True)
@_dry_run
@click.pass_context
def disable(ctx: click.Context, slots: Tuple[str, ...], dry_run: bool) -> None:
    session = open_session(ctx)
    inv = session.inventory
    targets: set[str] = set()
    refused: list[str] = []
    for sid in slots:
        if sid == inv.base_slot_id:
            refused.append(str(BaseSlotLocked(sid, "the base slot cannot be disabled")))
        elif sid not in inv.enabled_ids:
            refused.append(f"{sid} is not an enabled slot")
        else:
            targets.add(sid)
    with slot_errors():
        plan = session.plan_reorder([s for s in inv.enabled_ids if s not in targets])
    run_plan(ctx, session, _with_errors(plan, refused), dry_run=dry_run)


@click.command(name="enable", help="Re-enable archived slots at the end of the sequence.")
@click.argument("ids", nargs=-1, required=True)
@_dry_run
@click.pass_context
def enable(ctx: click.Context, ids: Tuple[str, ...], dry_run: bool) -> None:
    session = open_session(ctx)
    inv = session.inventory
    known = [d for d in ids if d in inv.disabled_ids]
    refused = [f"{d} is not an archived slot" for d in ids if d not in inv.disabled_ids]
    with slot_errors():
        plan = session.plan_reorder([*inv.enabled_ids, *known])
    run_plan(ctx, session, _with_errors(plan, refused), dry_run=dry_run)


__all__ = ["reorder", "disable", "enable"]
