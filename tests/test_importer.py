from pathlib import Path

import pytest

from altslots.importer import pick, scan_import_source

from ._modtree import make_mod


def test_scan_import_source(source_mod: Path, config) -> None:
    """Verify every alt of a vanilla-numbered mod is offered with its own id."""
    sources = scan_import_source(source_mod, config=config)

    assert [s.slot_id for s in sources] == ["c00", "c01", "c02", "c03"]
    assert [s.alt_index for s in sources] == [0, 1, 2, 3]
    assert {s.base_slot_num for s in sources} == {0}
    assert {s.codename for s in sources} == {"mario"}
    assert sources[2].ui_file.name == "chara_0_mario_02.bntx"
    assert sources[0].root == source_mod.resolve()


def test_moveset_numbering(tmp_path: Path, config) -> None:
    """Verify alt indices are relative to the lowest slot of the source."""
    root = make_mod(tmp_path / "(Moveset) Dr", slots=(104, 105), codename="mariod", display="dr")
    sources = scan_import_source(root, config=config)
    assert [(s.slot_id, s.alt_index) for s in sources] == [("c104", 0), ("c105", 1)]
    assert sources[0].display_name == "dr"


def test_unrecognised_folder(tmp_path: Path, config) -> None:
    """Verify folders without fighter content yield nothing."""
    assert scan_import_source(tmp_path, config=config) == []
    (tmp_path / "fighter" / "mario" / "model" / "body").mkdir(parents=True)
    assert scan_import_source(tmp_path, config=config) == []


def test_pick(source_mod: Path, config) -> None:
    """Verify lookup by alt index."""
    sources = scan_import_source(source_mod, config=config)
    assert pick(sources, 3).slot_id == "c03"
    with pytest.raises(KeyError):
        pick(sources, 7)
