"""
Pydantic models that mirror the YAML configuration consumed by *altslots*.

The classes in this module define a strongly-typed representation of the
configuration file so that the rest of the codebase can work with validated
objects instead of ad-hoc dictionaries.

Notes:
* ``body_dirs`` entries are templates; ``{codename}`` is the only placeholder
  and is substituted with the detected fighter folder name.
"""

from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel, Field, field_validator

# --------------------------------------------------------------------------- #
# 1.  Leaf models                                                             #
# --------------------------------------------------------------------------- #

_RE_TEMPLATE = re.compile(r"{(.*?)}")
_ALLOWED_TOKENS = {"codename"}


class PreviewSection(BaseModel):
    """Settings of the external texture-to-image converter.

    Attributes:
        tool: Executable name or absolute path of the converter.
        output_dir: Directory receiving the rendered previews. Relative paths
            are resolved against the current working directory.
    """

    tool: str = "ultimate_tex_cli"
    output_dir: str = "temp_previews"


# --------------------------------------------------------------------------- #
# 2.  Top-level model – complete validated config                             #
# --------------------------------------------------------------------------- #


class ConfigSchema(BaseModel):
    """Root configuration object consumed by the rest of *altslots*.

    Attributes:
        version: Version string of the configuration schema.
        archive_dir: Folder below the mod root that stores disabled slots.
        body_dirs: Candidate slot directories, first existing one wins.
        ui_dir: Root of the UI texture replacements.
        chara_folders: Number of ``chara_<k>`` folders scanned for textures.
        texture_extensions: Extensions recognised as UI textures.
        staging_prefix: Prefix of temporary ids used to break rename cycles.
        preview: Texture converter settings.
    """

    version: str = "1.0"
    archive_dir: str = ".disabled"
    body_dirs: List[str] = Field(
        default_factory=lambda: [
            "fighter/{codename}/model/body",
            "fighter/{codename}/body",
            "fighter/{codename}",
        ]
    )
    ui_dir: str = "ui/replace/chara"
    chara_folders: int = Field(8, ge=1)
    texture_extensions: List[str] = Field(default_factory=lambda: [".bntx", ".nutexb"])
    staging_prefix: str = "tmp_"
    preview: PreviewSection = Field(default_factory=PreviewSection)

    # --------------------------- validators ------------------------------ #

    @field_validator("body_dirs")
    @classmethod
    def _tokens_are_known(cls, value: List[str]) -> List[str]:
        """Ensure every ``{placeholder}`` in ``body_dirs`` is known."""
        tokens = {m.group(1) for v in value for m in _RE_TEMPLATE.finditer(v)}
        unknown = tokens - _ALLOWED_TOKENS
        if unknown:
            raise ValueError("Unknown placeholder(s): " + ", ".join(sorted(unknown)))
        if not value:
            raise ValueError("body_dirs must list at least one directory")
        return value

    @field_validator("texture_extensions")
    @classmethod
    def _normalise_extensions(cls, value: List[str]) -> List[str]:
        """Lower-case extensions and make sure they start with a dot."""
        return [v.lower() if v.startswith(".") else f".{v.lower()}" for v in value]

    @field_validator("staging_prefix")
    @classmethod
    def _staging_is_not_a_slot(cls, value: str) -> str:
        """Reject prefixes that could produce a live or archived slot id."""
        if not value or value[0] == "c" or value.startswith("disabled_"):
            raise ValueError("staging_prefix must be non-empty and must not look like a slot id")
        return value

    # --------------------------- convenience ----------------------------- #

    def body_candidates(self, codename: str) -> List[str]:
        """Return ``body_dirs`` rendered for *codename*."""
        return [d.format(codename=codename) for d in self.body_dirs]
