"""Expose the project-wide Click group for the ``altslots-cli`` script.

The module:

* declares a single Click *group* called :pyfunc:`main`;
* wires common global flags (mod root, YAML override, verbosity, etc.);
* sets up logging via :pyfunc:`altslots.utils.logging.setup_logging`;
* validates that the mod root looks like a fighter mod;
* registers every sub-command located in sibling modules (imported lazily).

Sub-commands open their :class:`altslots.session.ModSession` on demand via
:func:`altslots.cli._common.open_session`.
"""

from __future__ import annotations

import importlib
import os
from pathlib import Path
from typing import Any, Dict

import click

from altslots import __version__
from altslots.utils.logging import setup_logging


class LazyGroup(click.Group):
    """Click group that imports sub-commands lazily."""

    def __init__(self, *args, **kwargs):
        self._lazy: dict[str, str] = {}
        super().__init__(*args, **kwargs)

    def set_lazy_command(self, name: str, target: str) -> None:
        """Register *name* to be imported from ``target`` on first use."""
        self._lazy[name] = target

    def list_commands(self, ctx):
        return sorted({*super().list_commands(ctx), *self._lazy})

    def get_command(self, ctx, cmd_name):  # noqa: D401 - Click signature
        """Resolve *cmd_name* from the eager map or import table."""
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd
        target = self._lazy.get(cmd_name)
        if not target:
            return None
        module_name, attr = target.split(":", 1)
        module = importlib.import_module(module_name)
        cmd = getattr(module, attr)
        self.add_command(cmd, name=cmd_name)
        return cmd


# ─────────────────────────────────────────────────────────────────────────────
# Context settings shared by the entire Click hierarchy
# ─────────────────────────────────────────────────────────────────────────────
_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)


@click.group(
    cls=LazyGroup,
    context_settings=_CTX,
    help="""\b
altslots-cli – enable, disable, reorder and import fighter skin slots.

""",
)
@click.version_option(__version__)
@click.option(
    "-r",
    "--mod-root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Mod folder (contains fighter/). Falls back to $ALTSLOTS_MOD_ROOT or '.'.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Explicit YAML configuration.",
)
@click.option("--codename", help="Fighter folder name; detected when omitted.")
@click.option("-v", "--verbose", is_flag=True, help="INFO-level console output.")
@click.option("--debug", is_flag=True, help="DEBUG console output.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror console output into this plain-text file.",
)
@click.pass_context
def main(  # noqa: D401 – Click requires the callback to be named “main”.
    ctx: click.Context,
    mod_root: Path | None,
    config_path: Path | None,
    codename: str | None,
    verbose: bool,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Root command executed by *altslots-cli*.

    Raises:
        click.ClickException: When the mod root has no ``fighter/`` folder.
    """
    root = (mod_root or Path(os.environ.get("ALTSLOTS_MOD_ROOT", "."))).expanduser().resolve()

    if not (root / "fighter").is_dir():
        raise click.ClickException(f"{root} is not a fighter mod – no fighter/ folder found")

    setup_logging(verbose=verbose, debug=debug, extra_text_log=save_logfile)

    ctx.obj = {
        "root": root,
        "config_path": config_path,
        "codename": codename,
        "verbose": verbose,
        "debug": debug,
    }


main.set_lazy_command("scan", "altslots.cli.scan:cli")
main.set_lazy_command("reorder", "altslots.cli.slots:reorder")
main.set_lazy_command("disable", "altslots.cli.slots:disable")
main.set_lazy_command("enable", "altslots.cli.slots:enable")
main.set_lazy_command("add", "altslots.cli.imports:add")
main.set_lazy_command("replace", "altslots.cli.imports:replace")
main.set_lazy_command("restore", "altslots.cli.archive:restore")
main.set_lazy_command("purge", "altslots.cli.archive:purge")
main.set_lazy_command("previews", "altslots.cli.previews:cli")

cli = main
__all__: list[str] = ["main"]
