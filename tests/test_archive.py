from pathlib import Path

import pytest

from altslots.archive import archive_slot, purge_all, restore, restore_disabled
from altslots.domains import SlotContext, build_domains
from altslots.errors import SlotOccupied
from altslots.fsops import LocalFileSystem
from altslots.inventory import scan_archive
from altslots.models import PurgeRequest, RestoreRequest

from ._modtree import add_slot, body_marker, snapshot


def _archive(mod: Path, sid: str, ts: str, config):
    ctx = SlotContext(mod, "mario", 120, "mario")
    return archive_slot(
        LocalFileSystem(), build_domains(config), ctx, sid, archive_dir=config.archive_dir, timestamp=ts
    )


def _restore_request(mod: Path, *ids: str) -> RestoreRequest:
    return RestoreRequest(
        mod_root=mod,
        base_slot_num=120,
        fighter_codename="mario",
        display_name="mario",
        disabled_slots=list(ids),
    )


def test_archive_slot(mod: Path, config) -> None:
    """Verify archiving moves every domain below one timestamped folder."""
    did, errors = _archive(mod, "c122", "5", config)

    assert (did, errors) == ("disabled_c122_5", [])
    folder = mod / ".disabled" / "c122_5"
    assert body_marker(folder, "c122") == "mod:c122"
    assert (folder / "sound/bank/fighter_voice/vc_mario_c122.nus3audio").exists()
    assert not (mod / "fighter/mario/model/body/c122").exists()


def test_archive_slot_refuses_existing_folder(mod: Path, config) -> None:
    """Verify an existing archive folder is never merged into."""
    (mod / ".disabled" / "c122_5").mkdir(parents=True)
    did, errors = _archive(mod, "c122", "5", config)
    assert did is None
    assert "already exists" in errors[0]
    assert body_marker(mod, "c122") == "mod:c122"


def test_archive_missing_slot(mod: Path, config) -> None:
    """Verify archiving an absent slot reports it instead of creating a folder."""
    did, errors = _archive(mod, "c130", "5", config)
    assert did is None
    assert "no content" in errors[-1]
    assert scan_archive(mod, config=config) == []


def test_restore_round_trip(mod: Path, config) -> None:
    """Verify restore puts content back and drops the empty archive folder."""
    before = snapshot(mod)
    _archive(mod, "c122", "5", config)
    (record,) = scan_archive(mod, config=config)

    count = restore(
        mod, record, codename="mario", base_slot_num=120, display_name="mario", config=config
    )

    assert count == 8
    assert not (mod / ".disabled" / "c122_5").exists()
    assert snapshot(mod) == before


def test_restore_refuses_occupied_slot(mod: Path, config) -> None:
    """Verify SlotOccupied is raised before anything moves."""
    _archive(mod, "c122", "5", config)
    add_slot(mod, 122, base=120, tag="newcomer")
    (record,) = scan_archive(mod, config=config)
    before = snapshot(mod)

    with pytest.raises(SlotOccupied) as exc:
        restore(mod, record, codename="mario", base_slot_num=120, display_name="mario", config=config)

    assert exc.value.slot == "c122"
    assert snapshot(mod) == before
    assert body_marker(mod, "c122") == "newcomer"


def test_restore_to_other_target(mod: Path, config) -> None:
    """Verify an archived slot can come back under another id."""
    _archive(mod, "c122", "5", config)
    (record,) = scan_archive(mod, config=config)
    restore(
        mod,
        record,
        codename="mario",
        base_slot_num=120,
        display_name="mario",
        target="c125",
        config=config,
    )
    assert body_marker(mod, "c125") == "mod:c122"
    assert (mod / "ui/replace/chara/chara_0/chara_0_mario_05.bntx").read_text() == "mod:c122"


def test_restore_disabled_all(mod: Path, config) -> None:
    """Verify every record is restored, lowest slot first."""
    _archive(mod, "c122", "2", config)
    _archive(mod, "c121", "1", config)

    result = restore_disabled(_restore_request(mod), config=config)

    assert result.restored == ["disabled_c121_1", "disabled_c122_2"]
    assert result.errors == []
    assert body_marker(mod, "c121") == "mod:c121"
    assert not list((mod / ".disabled").iterdir())


def test_restore_disabled_selection(mod: Path, config) -> None:
    """Verify selection by folder name or id and reporting of unknown ids."""
    _archive(mod, "c121", "1", config)
    _archive(mod, "c122", "2", config)

    result = restore_disabled(
        _restore_request(mod, "c122_2", "disabled_c130_9"), config=config
    )

    assert result.restored == ["disabled_c122_2"]
    assert result.errors == ["disabled_c130_9: no such archived slot"]
    assert [r.archive_folder for r in scan_archive(mod, config=config)] == ["c121_1"]


def test_restore_disabled_collects_failures(mod: Path, config) -> None:
    """Verify an occupied slot drops only its own record."""
    _archive(mod, "c121", "1", config)
    _archive(mod, "c122", "2", config)
    add_slot(mod, 121, base=120, tag="newcomer")

    result = restore_disabled(_restore_request(mod), config=config)

    assert result.restored == ["disabled_c122_2"]
    assert len(result.errors) == 1 and "c121" in result.errors[0]
    assert body_marker(mod, "c121") == "newcomer"


def test_restore_disabled_progress(mod: Path, config) -> None:
    """Verify one tick per record, failed ones included, ending at the total."""
    _archive(mod, "c121", "1", config)
    _archive(mod, "c122", "2", config)
    add_slot(mod, 121, base=120, tag="newcomer")
    ticks = []

    restore_disabled(_restore_request(mod), config=config, progress=ticks.append)

    assert [(t.current, t.total) for t in ticks] == [(1, 2), (2, 2)]
    assert ticks[0].message == "Skipped c121_1"
    assert ticks[1].message == "Restored c122_2 → c122"

    ticks.clear()
    restore_disabled(_restore_request(mod, "c122_2"), config=config, progress=ticks.append)
    assert [(t.current, t.total) for t in ticks] == [(0, 0)]


def test_purge(mod: Path, config) -> None:
    """Verify purge deletes every archive folder and the empty archive itself."""
    _archive(mod, "c121", "1", config)
    _archive(mod, "c122", "2", config)
    (mod / ".disabled" / "junk").mkdir()

    result = purge_all(PurgeRequest(mod_root=mod), config=config)

    assert (result.deleted, result.errors) == (3, [])
    assert not (mod / ".disabled").exists()
    assert body_marker(mod, "c120") == "mod:c120"


def test_purge_dry_run(mod: Path, config) -> None:
    """Verify a dry purge leaves the archive in place."""
    _archive(mod, "c121", "1", config)
    before = snapshot(mod)

    result = purge_all(PurgeRequest(mod_root=mod), dry=True, config=config)

    assert result.deleted == 0
    assert snapshot(mod) == before


def test_purge_keeps_stray_files(mod: Path, config) -> None:
    """Verify loose files in the archive directory survive a purge."""
    _archive(mod, "c121", "1", config)
    (mod / ".disabled" / "notes.txt").write_text("keep")

    result = purge_all(PurgeRequest(mod_root=mod), config=config)

    assert result.deleted == 1
    assert (mod / ".disabled" / "notes.txt").read_text() == "keep"


def test_purge_progress(mod: Path, config) -> None:
    """Verify one tick per archive folder; stray files are not counted."""
    _archive(mod, "c121", "1", config)
    _archive(mod, "c122", "2", config)
    (mod / ".disabled" / "notes.txt").write_text("keep")
    ticks = []

    purge_all(PurgeRequest(mod_root=mod), dry=True, config=config, progress=ticks.append)
    assert [(t.current, t.total, t.message) for t in ticks] == [
        (1, 2, "Would delete c121_1"),
        (2, 2, "Would delete c122_2"),
    ]

    ticks.clear()
    purge_all(PurgeRequest(mod_root=mod), config=config, progress=ticks.append)
    assert [t.message for t in ticks] == ["Deleted c121_1", "Deleted c122_2"]
    assert ticks[-1].current == ticks[-1].total == 2
