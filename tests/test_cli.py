from pathlib import Path

from click.testing import CliRunner

from altslots.cli import main as cli_main

from ._modtree import body_marker, snapshot


def _invoke(mod: Path, *args: str, **kwargs):
    return CliRunner().invoke(cli_main, ["-r", str(mod), *args], **kwargs)


def test_scan(mod: Path) -> None:
    """Verify scan lists the slots of the mod."""
    result = _invoke(mod, "scan")
    assert result.exit_code == 0, result.output
    for sid in ("c120", "c121", "c122"):
        assert sid in result.output
    assert "chara_0_mario_01.bntx" in result.output


def test_not_a_mod(tmp_path: Path) -> None:
    """Verify a folder without fighter/ is refused."""
    result = _invoke(tmp_path, "scan")
    assert result.exit_code != 0
    assert "no fighter/ folder" in result.output


def test_mod_root_from_env(mod: Path, monkeypatch) -> None:
    """Verify $ALTSLOTS_MOD_ROOT is used when -r is omitted."""
    monkeypatch.setenv("ALTSLOTS_MOD_ROOT", str(mod))
    result = CliRunner().invoke(cli_main, ["scan"])
    assert result.exit_code == 0, result.output
    assert "c122" in result.output


def test_disable_dry_run(mod: Path) -> None:
    """Verify --dry-run prints the plan and touches nothing."""
    before = snapshot(mod)
    result = _invoke(mod, "disable", "c121", "--dry-run")
    assert result.exit_code == 0, result.output
    assert "c122 → c121" in result.output
    assert "disable c121" in result.output
    assert snapshot(mod) == before


def test_disable_and_enable(mod: Path) -> None:
    """Verify disable closes the gap and enable appends the slot again."""
    result = _invoke(mod, "disable", "c121")
    assert result.exit_code == 0, result.output
    assert "1 disabled" in result.output
    assert body_marker(mod, "c121") == "mod:c122"

    (folder,) = list((mod / ".disabled").iterdir())
    result = _invoke(mod, "enable", f"disabled_{folder.name}")
    assert result.exit_code == 0, result.output
    assert "1 restored" in result.output
    assert body_marker(mod, "c122") == "mod:c121"


def test_disable_base_is_refused(mod: Path) -> None:
    """Verify the base slot cannot be disabled from the CLI."""
    before = snapshot(mod)
    result = _invoke(mod, "disable", "c120")
    assert result.exit_code == 1
    assert "c120: the base slot cannot be disabled" in result.output
    assert snapshot(mod) == before


def test_disable_skips_refused_ids(mod: Path) -> None:
    """Verify the base and unknown ids are reported while the others still run."""
    result = _invoke(mod, "disable", "c120", "c130", "c122")

    assert result.exit_code == 1
    assert "c120: the base slot cannot be disabled" in result.output
    assert "c130 is not an enabled slot" in result.output
    assert "1 disabled" in result.output
    assert body_marker(mod, "c120") == "mod:c120"
    assert not (mod / "fighter/mario/model/body/c122").exists()
    (folder,) = list((mod / ".disabled").iterdir())
    assert folder.name.startswith("c122_")


def test_reorder(mod: Path) -> None:
    """Verify reorder renumbers the slots."""
    result = _invoke(mod, "reorder", "c120", "c122", "c121")
    assert result.exit_code == 0, result.output
    assert body_marker(mod, "c121") == "mod:c122"


def test_add(mod: Path, source_mod: Path) -> None:
    """Verify add inserts and appends alts of another folder."""
    result = _invoke(mod, "add", str(source_mod), "--alt", "2@1", "--alt", "0")
    assert result.exit_code == 0, result.output
    assert body_marker(mod, "c121") == "source:c02"
    assert body_marker(mod, "c122") == "mod:c121"
    assert body_marker(mod, "c123") == "mod:c122"
    assert body_marker(mod, "c124") == "source:c00"


def test_add_unknown_alt(mod: Path, source_mod: Path) -> None:
    """Verify an alt the source does not have is a usage error."""
    result = _invoke(mod, "add", str(source_mod), "--alt", "9")
    assert result.exit_code == 2
    assert "alt 9 not found" in result.output


def test_replace(mod: Path, source_mod: Path) -> None:
    """Verify replace swaps content in place."""
    result = _invoke(mod, "replace", str(source_mod), "--alt", "3=c122")
    assert result.exit_code == 0, result.output
    assert body_marker(mod, "c122") == "source:c03"
    assert body_marker(mod, "c121") == "mod:c121"


def test_restore_and_purge(mod: Path) -> None:
    """Verify restore and a confirmed purge."""
    _invoke(mod, "disable", "c122")
    result = _invoke(mod, "restore")
    assert result.exit_code == 0, result.output
    assert "Restored 1 slot(s)" in result.output
    assert body_marker(mod, "c122") == "mod:c122"

    _invoke(mod, "disable", "c122")
    result = _invoke(mod, "purge", input="n\n")
    assert "Aborted." in result.output
    assert (mod / ".disabled").exists()

    result = _invoke(mod, "purge", "--yes")
    assert result.exit_code == 0, result.output
    assert "Deleted 1 archive folder(s)" in result.output
    assert not (mod / ".disabled").exists()
