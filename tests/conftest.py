"""Pytest configuration for altslots tests."""

from pathlib import Path

import pytest

from altslots.config import ConfigSchema

from ._modtree import make_mod


@pytest.fixture(autouse=True)
def _log_dir(tmp_path_factory, monkeypatch):
    """Keep rotating log files out of the source tree."""
    monkeypatch.setenv("ALTSLOTS_LOG_DIR", str(tmp_path_factory.mktemp("logs")))


@pytest.fixture
def config() -> ConfigSchema:
    """Default configuration."""
    return ConfigSchema()


@pytest.fixture
def mod(tmp_path: Path) -> Path:
    """Mod folder with slots c120, c121 and c122."""
    return make_mod(tmp_path / "mod")


@pytest.fixture
def source_mod(tmp_path: Path) -> Path:
    """Foreign mod offering vanilla-numbered alts c00 to c03."""
    return make_mod(tmp_path / "source", slots=range(0, 4))
