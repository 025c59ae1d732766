"""
YAML configuration loader.

This helper locates, reads, and validates the *altslots* configuration before
returning a :class:`altslots.config.schema.ConfigSchema` instance.

Search precedence (first match wins)
1. An explicit path argument (``--config`` on the CLI).
2. ``<mod_root>/.altslots.yaml`` – mod-local override.
3. The packaged default shipped inside the wheel.

All resolution logic is concentrated here so the rest of *altslots* treats
configuration as an already-validated object.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from importlib.resources import as_file, files

from .schema import ConfigSchema

LOCAL_NAME = ".altslots.yaml"

# --------------------------------------------------------------------------- #
# Wheel-internal fallback (works even from a zipped wheel)                    #
# --------------------------------------------------------------------------- #
try:
    _DEFAULT_CONFIG = files("altslots.resources") / "default_config.yaml"
except ModuleNotFoundError:
    _DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "resources" / "default_config.yaml"

# --------------------------------------------------------------------------- #
# Helper functions                                                            #
# --------------------------------------------------------------------------- #


def _mod_local(root: Optional[str | Path]) -> Optional[Path]:
    """Return ``<root>/.altslots.yaml`` or *None* if *root* is ``None``."""
    if root is None:
        return None
    return Path(root).expanduser().resolve() / LOCAL_NAME


def _first_existing(*candidates: Optional[Path]) -> Optional[Path]:
    """Return the first path in *candidates* that exists on disk."""
    for p in candidates:
        if p is not None and p.exists():
            return p
    return None


def _load_yaml(path: Path) -> dict:
    """Read a YAML file; an empty document yields an empty dict."""
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def load_config(
    *,
    config_path: Optional[str | Path] = None,
    mod_root: Optional[str | Path] = None,
) -> ConfigSchema:
    """Return a fully validated :class:`ConfigSchema`.

    Args:
        config_path: Explicit YAML path. ``None`` triggers the search
            sequence described in the module doc-string.
        mod_root: Root of the mod folder, used for the local override.

    Returns:
        A :class:`ConfigSchema` object ready for downstream use.

    Raises:
        FileNotFoundError: When *config_path* is given but missing.
        RuntimeError: When the YAML fails to parse or validate.
    """
    explicit = Path(config_path).expanduser().resolve() if config_path else None
    if explicit is not None and not explicit.exists():
        raise FileNotFoundError(f"Configuration file {explicit} does not exist")

    resolved = _first_existing(explicit, _mod_local(mod_root))
    try:
        if resolved is None:
            with as_file(_DEFAULT_CONFIG) as p:
                data = _load_yaml(Path(p))
        else:
            data = _load_yaml(resolved)
        return ConfigSchema(**data)
    except Exception as exc:  # pydantic.ValidationError or YAML issues
        raise RuntimeError(f"Invalid configuration – {exc}") from exc
