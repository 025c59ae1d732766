"""Logging for the ``altslots-cli`` process.

Console records go through :class:`rich.logging.RichHandler`. Every record
from INFO up is also kept in a rotating JSON log below :func:`log_dir`, and
``--save-logfile`` adds a plain-text copy of what the console shows.

Log files never go into the mod folder: the game loads whatever it finds
there.
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import os
from pathlib import Path
from typing import List, Optional

import structlog
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer
from structlog.stdlib import LoggerFactory

__all__ = ["setup_logging", "log_dir"]

LOG_DIR_ENV = "ALTSLOTS_LOG_DIR"
LOG_FILE = "altslots.log"


def log_dir() -> Path:
    """``$ALTSLOTS_LOG_DIR`` or ``logs/`` next to the package."""
    configured = os.environ.get(LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path(__file__).resolve().parents[1] / "logs"


def _handlers(console_lvl: int, file_lvl: int, mirror: Optional[Path]) -> List[logging.Handler]:
    console = RichHandler(level=console_lvl, rich_tracebacks=True, markup=False)

    folder = log_dir()
    folder.mkdir(parents=True, exist_ok=True)
    rotating = logging.handlers.RotatingFileHandler(
        folder / LOG_FILE, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
    )
    rotating.setLevel(file_lvl)

    handlers: list[logging.Handler] = [console, rotating]
    if mirror is not None:
        mirror = mirror.expanduser().resolve()
        mirror.parent.mkdir(parents=True, exist_ok=True)
        text = logging.FileHandler(mirror, mode="a", encoding="utf-8")
        text.setLevel(console_lvl)
        text.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        atexit.register(text.close)
        handlers.append(text)
    return handlers


def setup_logging(
    *,
    verbose: bool = False,
    debug: bool = False,
    extra_text_log: Optional[Path] = None,
) -> None:
    """Route stdlib and structlog records to the console and the log files.

    Args:
        verbose: Show INFO records on the console (WARNING otherwise).
        debug: Show DEBUG records everywhere.
        extra_text_log: Plain-text copy of the console records.
    """
    if debug:
        console_lvl = file_lvl = logging.DEBUG
    else:
        console_lvl = logging.INFO if verbose else logging.WARNING
        file_lvl = logging.INFO

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=_handlers(console_lvl, file_lvl, extra_text_log),
        force=True,
    )

    # engine events: readable key=value on a terminal, JSON lines otherwise
    renderer = ConsoleRenderer() if verbose or debug else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min(console_lvl, file_lvl)),
        logger_factory=LoggerFactory(),
    )
