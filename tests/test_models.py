"""Unit tests for models – independent of external I/O."""

from pathlib import Path

import pytest

from altslots.errors import MalformedSlotId
from altslots.models import (
    ApplyResult,
    DisabledSlotRecord,
    MappingPlan,
    Slot,
    SlotInventory,
    disabled_id,
    is_disabled_id,
    is_live_slot,
    original_slot,
    parse_archive_folder,
    parse_slot,
    slot_id,
    slot_number,
)


def test_slot_id_round_trip():
    """Slot numbers and ids convert both ways; small numbers are padded."""
    assert slot_id(120) == "c120"
    assert slot_id(3) == "c03"
    assert parse_slot("c120") == 120
    assert parse_slot("c03") == 3


@pytest.mark.parametrize("bad", ["120", "c", "cx1", "C120", "c120_1", "tmp_c120"])
def test_parse_slot_rejects_malformed(bad):
    """Anything but ``c<digits>`` raises MalformedSlotId."""
    with pytest.raises(MalformedSlotId):
        parse_slot(bad)


def test_disabled_ids():
    """Disabled ids resolve to the live id they came from."""
    did = disabled_id("c121", "1700000000000")
    assert did == "disabled_c121_1700000000000"
    assert is_disabled_id(did)
    assert not is_live_slot(did)
    assert original_slot(did) == "c121"
    assert slot_number(did) == 121
    with pytest.raises(MalformedSlotId):
        original_slot("disabled_c121")


def test_parse_archive_folder_patterns():
    """Both archive spellings are recognised, anything else is ignored."""
    rec = parse_archive_folder("c121_1700000000000")
    assert rec.original_slot == "c121"
    assert rec.disabled_slot_id == "disabled_c121_1700000000000"
    assert rec.timestamp == "1700000000000"
    assert rec.imported is False

    imp = parse_archive_folder("disabled_c125_42")
    assert imp.original_slot == "c125"
    assert imp.archive_folder == imp.disabled_slot_id == "disabled_c125_42"
    assert imp.imported is True

    assert parse_archive_folder("notes") is None
    assert parse_archive_folder("c121") is None


def test_visual_order_puts_disabled_last():
    """Merged list keeps enabled order and appends archived slots."""
    inv = SlotInventory(
        mod_root=Path("/mods/x"),
        codename="mario",
        base_slot_num=120,
        enabled=[
            Slot(id="c120", enabled=True, alt_index=0),
            Slot(id="c121", enabled=True, alt_index=1),
        ],
        disabled=[parse_archive_folder("c122_5")],
    )
    ids = [s.id for s in inv.visual_order()]
    assert ids == ["c120", "c121", "disabled_c122_5"]
    last = inv.visual_order()[-1]
    assert last.enabled is False
    assert last.alt_index == 2
    assert last.disabled_timestamp == "5"
    assert inv.record_for("c122_5") == inv.record_for("disabled_c122_5")


def test_record_path(tmp_path):
    """Archive records resolve below the archive directory."""
    rec = DisabledSlotRecord(
        original_slot="c121", archive_folder="c121_1", disabled_slot_id="disabled_c121_1", timestamp="1"
    )
    assert rec.path(tmp_path, ".disabled") == tmp_path / ".disabled" / "c121_1"


def test_plan_is_empty_ignores_archived_ids():
    """Slots that merely stay archived do not make a plan non-empty."""
    assert MappingPlan(disabled=["disabled_c121_1"]).is_empty
    assert not MappingPlan(disabled=["c121"]).is_empty
    assert not MappingPlan(mapping={"c122": "c121"}).is_empty


def test_apply_result_merge():
    """Merging concatenates every list."""
    a = ApplyResult(disabled=["c121"])
    b = ApplyResult(reordered=["c122"], errors=["boom"])
    a.merge(b)
    assert a.disabled == ["c121"]
    assert a.reordered == ["c122"]
    assert not a.ok
    assert a.changed
