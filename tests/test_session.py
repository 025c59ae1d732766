from pathlib import Path

import pytest

from altslots.errors import BatchInProgress
from altslots.importer import pick, scan_import_source
from altslots.session import ModSession

from ._modtree import body_marker, snapshot, ui_marker


@pytest.fixture
def session(mod: Path) -> ModSession:
    """Session opened on the fixture mod."""
    return ModSession.open(mod)


def test_open_detects_fighter(session: ModSession, mod: Path) -> None:
    """Verify detection and the first inventory."""
    assert session.codename == "mario"
    assert session.display_name == "mario"
    assert session.base_slot_num == 120
    assert session.mod_root == mod.resolve()
    assert session.inventory.enabled_ids == ["c120", "c121", "c122"]
    assert not session.busy


def test_toggle_off_and_on(session: ModSession, mod: Path) -> None:
    """Verify a disabled slot comes back at the end of the sequence."""
    result = session.toggle("c121")
    assert result.ok, result.errors
    assert session.inventory.enabled_ids == ["c120", "c121"]
    (did,) = session.inventory.disabled_ids

    result = session.toggle(did)
    assert result.ok, result.errors
    assert result.restored == [did]
    assert session.inventory.enabled_ids == ["c120", "c121", "c122"]
    assert session.inventory.disabled == []
    assert body_marker(mod, "c121") == "mod:c122"
    assert body_marker(mod, "c122") == "mod:c121"


def test_reorder(session: ModSession, mod: Path) -> None:
    """Verify a reorder through the session refreshes the inventory."""
    session.reorder(["c120", "c122", "c121"])
    assert body_marker(mod, "c121") == "mod:c122"
    assert session.inventory.enabled_ids == ["c120", "c121", "c122"]


def test_add_import(session: ModSession, source_mod: Path, mod: Path) -> None:
    """Verify appended imports become new live slots."""
    sources = scan_import_source(source_mod, config=session.config)
    result = session.add_import([(pick(sources, 0), 3), (pick(sources, 1), 3)])

    assert result.imported == ["c123", "c124"]
    assert session.inventory.enabled_ids == ["c120", "c121", "c122", "c123", "c124"]
    assert body_marker(mod, "c124") == "source:c01"


def test_replace_keeps_numbering(session: ModSession, source_mod: Path, mod: Path) -> None:
    """Verify a replacement swaps content but keeps the set of live ids."""
    source = pick(scan_import_source(source_mod, config=session.config), 3)

    result = session.replace_import([(source, "c121")])

    assert result.ok, result.errors
    assert result.disabled == ["c121"]
    assert result.imported == ["c121"]
    assert session.inventory.enabled_ids == ["c120", "c121", "c122"]
    assert body_marker(mod, "c120") == "mod:c120"
    assert body_marker(mod, "c121") == "source:c03"
    assert body_marker(mod, "c122") == "mod:c122"
    assert ui_marker(mod, 1) == "source:c03"
    (record,) = session.inventory.disabled
    assert record.original_slot == "c121"
    assert body_marker(mod / ".disabled" / record.archive_folder, "c121") == "mod:c121"


def test_replace_several_targets(session: ModSession, source_mod: Path, mod: Path) -> None:
    """Verify several replacements in one batch each land on their target."""
    sources = scan_import_source(source_mod, config=session.config)
    result = session.replace_import([(pick(sources, 1), "c121"), (pick(sources, 2), "c122")])

    assert result.ok, result.errors
    assert session.inventory.enabled_ids == ["c120", "c121", "c122"]
    assert body_marker(mod, "c121") == "source:c01"
    assert body_marker(mod, "c122") == "source:c02"
    assert len(session.inventory.disabled) == 2


def test_replace_progress_is_one_batch(session: ModSession, source_mod: Path) -> None:
    """Verify both phases of a replacement share one monotonic run of ticks."""
    sources = scan_import_source(source_mod, config=session.config)
    ticks = []

    session.replace_import([(pick(sources, 3), "c121")], progress=ticks.append)

    assert [(t.current, t.total) for t in ticks] == [(1, 4), (2, 4), (3, 4), (4, 4)]


def test_replace_progress_spans_targets(session: ModSession, source_mod: Path) -> None:
    """Verify the ticks of several targets add up to one batch total."""
    sources = scan_import_source(source_mod, config=session.config)
    ticks = []

    session.replace_import(
        [(pick(sources, 1), "c121"), (pick(sources, 2), "c122")], progress=ticks.append
    )
    currents = [t.current for t in ticks]
    assert currents == list(range(1, 7))
    assert {t.total for t in ticks} == {6}


def test_replace_rejects_base_and_duplicates(
    session: ModSession, source_mod: Path, mod: Path
) -> None:
    """Verify invalid replacement targets are reported and nothing moves."""
    source = pick(scan_import_source(source_mod, config=session.config), 0)
    before = snapshot(mod)
    ticks = []

    result = session.replace_import(
        [(source, "c120"), (source, "x1"), (source, "c130")], progress=ticks.append
    )

    assert len(result.errors) == 3
    assert not result.changed
    assert snapshot(mod) == before
    assert [(t.current, t.total) for t in ticks] == [(0, 0)]


def test_second_batch_is_refused(session: ModSession) -> None:
    """Verify batches cannot overlap and the lock is released afterwards."""

    def reenter(_tick) -> None:
        session.toggle("c122")

    with pytest.raises(BatchInProgress):
        session.toggle("c121", progress=reenter)
    assert not session.busy


def test_restore_and_purge(session: ModSession, mod: Path) -> None:
    """Verify restore brings archived slots back and purge empties the archive."""
    session.toggle("c122")
    result = session.restore()
    assert result.restored and not result.errors
    assert session.inventory.enabled_ids == ["c120", "c121", "c122"]

    session.toggle("c122")
    assert len(session.inventory.disabled) == 1
    purged = session.purge()
    assert purged.deleted == 1
    assert session.inventory.disabled == []
    assert not (mod / ".disabled").exists()


def test_restore_and_purge_progress(session: ModSession) -> None:
    """Verify restore and purge tick once per archived slot."""
    session.toggle("c122")
    ticks = []
    session.restore(progress=ticks.append)
    assert [(t.current, t.total) for t in ticks] == [(1, 1)]

    session.toggle("c122")
    ticks.clear()
    session.purge(progress=ticks.append)
    assert [(t.current, t.total) for t in ticks] == [(1, 1)]
