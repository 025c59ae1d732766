"""Render PNG previews of the UI textures of enabled and archived slots.

Exposed as ``altslots-cli previews``. The converter is configured in the
``preview`` section of the YAML configuration and can be overridden with
``--tool``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from altslots.cli._common import open_session
from altslots.preview import render_previews
from altslots.utils.display import echo_banner, echo_errors, echo_success


@click.command(name="previews", help="Convert slot UI textures to PNG previews.")
@click.option(
    "-o",
    "--out",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output folder (default: preview.output_dir from the configuration).",
)
@click.option("--tool", help="Converter executable (default: preview.tool).")
@click.pass_context
def cli(ctx: click.Context, out: Optional[Path], tool: Optional[str]) -> None:
    session = open_session(ctx)
    out = out or Path(session.config.preview.output_dir)
    echo_banner(f"Previews → {out}")

    results = render_previews(
        session.inventory,
        out,
        tool=tool or session.config.preview.tool,
        config=session.config,
    )
    if not results:
        click.echo("No UI textures found.")
        return
    for sid, res in results.items():
        if res.success:
            click.echo(f"  • {sid} → {res.output}")
    errors = [f"{sid}: {res.error}" for sid, res in results.items() if not res.success]
    done = len(results) - len(errors)
    echo_success(f"{done}/{len(results)} previews written")
    echo_errors(errors)


__all__ = ["cli"]
