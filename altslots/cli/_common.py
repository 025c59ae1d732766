"""Helpers shared by the sub-command modules."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import click

from altslots.errors import SlotError
from altslots.models import ApplyResult, MappingPlan
from altslots.session import ModSession
from altslots.utils.display import echo_plan, echo_progress, echo_result


def open_session(ctx: click.Context) -> ModSession:
    """Open (once per invocation) the session of the selected mod root."""
    obj = ctx.find_root().obj
    if "session" not in obj:
        try:
            obj["session"] = ModSession.open(
                obj["root"], config_path=obj["config_path"], codename=obj["codename"]
            )
        except (RuntimeError, FileNotFoundError) as exc:
            raise click.ClickException(str(exc)) from exc
    return obj["session"]


@contextmanager
def slot_errors() -> Iterator[None]:
    """Turn engine errors into clean CLI errors."""
    try:
        yield
    except (SlotError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


def ask_yes_no(msg: str) -> bool:
    """Interactive *Y/N* prompt."""
    while True:
        ans = click.prompt(f"{msg} [Y/N]", default="", show_default=False).strip().lower()
        if ans in {"y", "yes"}:
            return True
        if ans in {"n", "no"}:
            return False
        click.echo("Please answer Y or N.", err=True)


def finish(ctx: click.Context, result: ApplyResult) -> None:
    """Print *result* and exit non-zero when it carries errors."""
    echo_result(result)
    if not result.ok:
        ctx.exit(1)


def run_plan(ctx: click.Context, session: ModSession, plan: MappingPlan, *, dry_run: bool) -> None:
    """Show *plan*, then apply it unless this is a dry run or it is empty."""
    echo_plan(plan)
    if dry_run or plan.is_empty:
        if plan.errors:
            ctx.exit(1)
        return
    with slot_errors():
        result = session.apply_plan(plan, progress=echo_progress)
    finish(ctx, result)
