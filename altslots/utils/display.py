"""Utility functions to print formatted CLI messages for slot batches."""

from __future__ import annotations

from typing import Iterable

import click

from altslots.models import ApplyResult, MappingPlan, Progress, SlotInventory, is_live_slot

__all__ = [
    "echo_banner",
    "echo_success",
    "echo_section",
    "echo_inventory",
    "echo_plan",
    "echo_progress",
    "echo_errors",
    "echo_result",
]


def echo_banner(text: str) -> None:
    """Print a colourful banner announcing a processing step."""
    click.secho(f"\n=== {text} ===", fg="cyan")


def echo_success(text: str) -> None:
    """Echo a green success message prefixed with a tick."""
    click.secho(f"✓ {text}", fg="green")


def echo_section(text: str) -> None:
    """Echo a purple section header."""
    click.secho(f"\n  — {text} —", fg="magenta")


def echo_inventory(inv: SlotInventory) -> None:
    """Print enabled slots first, then the archive."""
    echo_banner(f"{inv.display_name or '?'} ({inv.codename}) – base {inv.base_slot_id or 'n/a'}")
    echo_section("enabled")
    if not inv.enabled:
        click.echo("  (none)")
    for slot in inv.enabled:
        ui = f"  [{slot.ui_file.name}]" if slot.ui_file else ""
        click.echo(f"  • {slot.id}  alt {slot.alt_index:02d}{ui}")
    echo_section("disabled")
    if not inv.disabled:
        click.echo("  (none)")
    for rec in inv.disabled:
        kind = " (imported)" if rec.imported else ""
        click.echo(f"  • {rec.disabled_slot_id}{kind}")


def echo_plan(plan: MappingPlan) -> None:
    """Print the renames, disables and imports of *plan*."""
    echo_section("plan")
    if plan.is_empty:
        click.echo("  nothing to do")
    for src, dst in plan.mapping.items():
        click.echo(f"  • {src} → {dst}")
    for sid in plan.disabled:
        if is_live_slot(sid):
            click.echo(f"  • disable {sid}")
    for imp in plan.imports:
        click.echo(f"  • import {imp.source_slot_id} ({imp.source_root.name}) → {imp.target_slot_id}")
    echo_errors(plan.errors)


def echo_progress(tick: Progress) -> None:
    """Progress callback printing ``[current/total] message``."""
    click.echo(f"  [{tick.current}/{tick.total}] {tick.message}")


def echo_errors(errors: Iterable[str]) -> None:
    """Print every error in red."""
    for err in errors:
        click.secho(f"✗ {err}", fg="red", err=True)


def echo_result(result: ApplyResult) -> None:
    """Summarise a batch result."""
    parts = [
        f"{len(result.disabled)} disabled",
        f"{len(result.restored)} restored",
        f"{len(result.reordered)} reordered",
        f"{len(result.imported)} imported",
    ]
    if result.ok:
        echo_success(", ".join(parts))
    else:
        click.secho(", ".join(parts), fg="yellow")
        echo_errors(result.errors)
