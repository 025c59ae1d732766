from pathlib import Path

import pytest

from altslots.domains import (
    SlotContext,
    SoundDomain,
    UiTextureDomain,
    build_domains,
    conflicts,
    plan_relocation,
    relocate,
    ui_token,
)
from altslots.fsops import LocalFileSystem

from ._modtree import body_marker, snapshot


@pytest.fixture
def ctx(mod: Path) -> SlotContext:
    """Context of the fixture mod."""
    return SlotContext(mod, "mario", 120, "mario")


def test_ui_token(ctx: SlotContext) -> None:
    """Verify live ids map to alt indices and staging ids are kept."""
    assert ui_token(ctx, "c120") == "00"
    assert ui_token(ctx, "c131") == "11"
    assert ui_token(ctx, "tmp_c121") == "tmp_c121"
    assert ui_token(ctx, "c119") is None


def test_every_domain_is_located(ctx: SlotContext, config) -> None:
    """Verify one slot is found in all five domains."""
    pairs = plan_relocation(LocalFileSystem(), build_domains(config), ctx, "c121", ctx, "c125")
    by_domain: dict[str, list[str]] = {}
    for domain, src, dst in pairs:
        by_domain.setdefault(domain.name, []).append(str(dst.relative_to(ctx.root)))

    assert sorted(by_domain["fighter"]) == [
        "fighter/mario/model/body/c125",
        "fighter/mario/model/hair/c125",
        "fighter/mario/motion/body/c125",
    ]
    assert by_domain["camera"] == ["camera/fighter/mario/c125"]
    assert by_domain["effect"] == ["effect/fighter/mario/model/c125"]
    assert by_domain["sound"] == ["sound/bank/fighter_voice/vc_mario_c125.nus3audio"]
    assert sorted(by_domain["ui"]) == [
        "ui/replace/chara/chara_0/chara_0_mario_05.bntx",
        "ui/replace/chara/chara_3/chara_3_mario_05.bntx",
    ]


def test_relocate_moves_everything(mod: Path, ctx: SlotContext, config) -> None:
    """Verify a move carries every domain along."""
    count, errors = relocate(LocalFileSystem(), build_domains(config), ctx, "c122", ctx, "c125")

    assert (count, errors) == (8, [])
    assert body_marker(mod, "c125") == "mod:c122"
    assert not (mod / "fighter/mario/model/body/c122").exists()
    assert (mod / "sound/bank/fighter_voice/vc_mario_c125.nus3audio").read_text() == "mod:c122"
    assert not list(mod.rglob("*_c122*"))


def test_relocate_never_overwrites(mod: Path, ctx: SlotContext, config) -> None:
    """Verify occupied targets are reported per path and left untouched."""
    fs = LocalFileSystem()
    domains = build_domains(config)
    before = snapshot(mod)

    assert len(conflicts(fs, domains, ctx, "c121", ctx, "c122")) == 8
    count, errors = relocate(fs, domains, ctx, "c121", ctx, "c122")

    assert count == 0
    assert len(errors) == 8
    assert all("move failed" in e for e in errors)
    assert snapshot(mod) == before


def test_copy_into_other_root_renames_display(source_mod: Path, mod: Path, config) -> None:
    """Verify an import copies across roots, codenames and display names."""
    src = SlotContext(source_mod, "mario", 0, "doctor")
    (source_mod / "ui/replace/chara/chara_0/chara_0_mario_03.bntx").rename(
        source_mod / "ui/replace/chara/chara_0/chara_0_doctor_03.bntx"
    )
    dst = SlotContext(mod, "mario", 120, "mario")

    count, errors = relocate(
        LocalFileSystem(), build_domains(config), src, "c03", dst, "c125", copy=True
    )

    assert errors == []
    assert count == 7
    assert (mod / "ui/replace/chara/chara_0/chara_0_mario_05.bntx").read_text() == "source:c03"
    assert body_marker(source_mod, "c03") == "source:c03"


def test_sound_target_swaps_codename_and_slot(tmp_path: Path) -> None:
    """Verify sound files are renamed by their tag only."""
    src = SlotContext(tmp_path / "a", "luigi", 0)
    dst = SlotContext(tmp_path / "b", "mario", 120)
    path = tmp_path / "a/sound/bank/se_luigi_c03.nus3bank"
    assert SoundDomain().target(path, src, "c03", dst, "c121") == (
        tmp_path / "b/sound/bank/se_mario_c121.nus3bank"
    )


def test_ui_target_below_base_is_refused(tmp_path: Path) -> None:
    """Verify a slot below the base has no texture name."""
    ctx = SlotContext(tmp_path, "mario", 120, "mario")
    domain = UiTextureDomain("ui/replace/chara", [".bntx"])
    path = tmp_path / "ui/replace/chara/chara_0/chara_0_mario_01.bntx"
    assert domain.target(path, ctx, "c121", ctx, "c119") is None
    assert domain.locate(LocalFileSystem(), ctx, "c119") == []
