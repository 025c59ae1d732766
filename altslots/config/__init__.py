"""
Configuration package façade.

Exports the small, stable surface that external callers rely on:

* :func:`load_config` – Locate, parse and validate the YAML configuration.
* :class:`ConfigSchema` – Pydantic model of the validated configuration.

Anything not imported here is considered private implementation detail.
"""

from .loader import load_config  # noqa: F401

from .schema import ConfigSchema, PreviewSection  # noqa: F401

__all__: list[str] = ["load_config", "ConfigSchema", "PreviewSection"]
