"""
Public façade for the *utils* package.

Anything imported here becomes part of the *stable* public API.
Internal helpers live in their own modules and are **not** re-exported.
"""

from __future__ import annotations

# ─── console output ──────────────────────────────────────────────────────
from .display import (
    echo_banner,
    echo_errors,
    echo_inventory,
    echo_plan,
    echo_progress,
    echo_result,
    echo_section,
    echo_success,
)

# ─── logging ─────────────────────────────────────────────────────────────
from .logging import log_dir, setup_logging

# ------------------------------------------------------------------------
__all__: list[str] = [
    "echo_banner",
    "echo_errors",
    "echo_inventory",
    "echo_plan",
    "echo_progress",
    "echo_result",
    "echo_section",
    "echo_success",
    "log_dir",
    "setup_logging",
]
