from __future__ import annotations

import pytest

from .engine import compute_placements
from .models import DRingArtwork, PlacementConfig, WireArtwork
from .state import (
    add_artwork,
    next_artwork_id,
    remove_artwork,
    set_configuration,
    switch_mounting,
    toggle_units,
    update_artwork,
    update_layout,
)


def _two() -> PlacementConfig:
    return PlacementConfig(
        configuration="vertical",
        artworks=[WireArtwork(id=1, width=40, height=30), DRingArtwork(id=2, width=50, height=20)],
    )


def test_add_artwork_uses_next_free_id():
    cfg = add_artwork(_two())
    assert [a.id for a in cfg.artworks] == [1, 2, 3]
    assert cfg.artworks[-1].hanger_offset == 2.54


def test_add_artwork_in_inches_uses_inch_hanger_default():
    cfg = add_artwork(PlacementConfig(units="inches", artworks=[WireArtwork(id=1, hanger_offset=1.0)]))
    assert cfg.artworks[-1].hanger_offset == 1.0


def test_next_id_skips_string_ids():
    cfg = PlacementConfig(artworks=[WireArtwork(id="a"), WireArtwork(id=4)])
    assert next_artwork_id(cfg) == 5


def test_remove_artwork_keeps_last():
    cfg = remove_artwork(_two(), 2)
    assert [a.id for a in cfg.artworks] == [1]
    assert remove_artwork(cfg, 1) is cfg


def test_switch_mounting_carries_shared_fields():
    wire = WireArtwork(id=7, width=40, height=30, wire_offset=5, hanger_offset=3)
    ring = switch_mounting(wire, "dring")
    assert isinstance(ring, DRingArtwork)
    assert (ring.id, ring.width, ring.height) == (7, 40, 30)
    assert ring.mounting_vertical_offset == 0.0
    assert ring.retained_hardware == {"wire_offset": 5.0, "hanger_offset": 3.0}
    back = switch_mounting(ring, "wire")
    assert (back.wire_offset, back.hanger_offset) == (5.0, 3.0)
    with pytest.raises(ValueError):
        switch_mounting(wire, "cleat")


def test_update_artwork_coerces_and_copies():
    before = _two()
    after = update_artwork(before, 1, "width", "55.5")
    assert after.artworks[0].width == 55.5
    assert before.artworks[0].width == 40
    assert update_artwork(after, 1, "height", "").artworks[0].height == 0.0


def test_update_artwork_switches_mounting():
    cfg = update_artwork(_two(), 1, "mounting_type", "dring")
    assert isinstance(cfg.artworks[0], DRingArtwork)


def test_update_artwork_parks_other_mount_fields():
    cfg = update_artwork(_two(), 2, "wire_offset", "3")
    ring = cfg.artworks[1]
    assert isinstance(ring, DRingArtwork)
    assert ring.retained_hardware == {"wire_offset": 3.0}
    cfg = update_artwork(cfg, 2, "mounting_type", "wire")
    assert cfg.artworks[1].wire_offset == 3.0


def test_update_artwork_rejects_unknown_field():
    with pytest.raises(ValueError):
        update_artwork(_two(), 2, "colour", 3)
    with pytest.raises(ValueError):
        update_artwork(_two(), 1, "retained_hardware", {})


def test_update_layout_validates():
    cfg = update_layout(_two(), rows="0", cols=3, horizontal_gap="x")
    assert (cfg.layout.rows, cfg.layout.cols, cfg.layout.horizontal_gap) == (1, 3, 0.0)
    assert cfg.layout.vertical_gap == 10.0


def test_set_configuration_single_truncates():
    cfg = set_configuration(_two(), "single")
    assert cfg.configuration == "single"
    assert [a.id for a in cfg.artworks] == [1]


def test_set_configuration_multi_adds_second_artwork():
    cfg = set_configuration(PlacementConfig(), "horizontal")
    assert len(cfg.artworks) == 2
    assert cfg.artworks[1].id == 2


def test_set_configuration_rejects_unknown():
    with pytest.raises(ValueError):
        set_configuration(_two(), "diagonal")


def test_toggle_units_round_trip():
    cfg = PlacementConfig(wall_width=254, artworks=[WireArtwork(id=1, width=50.8, height=0)])
    inches = toggle_units(cfg)
    assert inches.units == "inches"
    assert inches.wall_width == 100.0
    assert inches.artworks[0].height == 0.0
    back = toggle_units(inches)
    assert back.units == "cm"
    assert back.wall_width == 254.0
    assert back.artworks[0].width == 50.8


def test_mounting_round_trip_keeps_both_hardware_sets():
    cfg = PlacementConfig(artworks=[WireArtwork(id=1, width=40, height=30, wire_offset=5, hanger_offset=3)])
    cfg = update_artwork(cfg, 1, "mounting_type", "dring")
    cfg = update_artwork(cfg, 1, "mounting_vertical_offset", 4)
    cfg = update_artwork(cfg, 1, "mounting_type", "wire")
    wire = cfg.artworks[0]
    assert (wire.wire_offset, wire.hanger_offset) == (5.0, 3.0)
    assert wire.retained_hardware == {"mounting_vertical_offset": 4.0, "mounting_horizontal_offset": 0.0}
    ring = update_artwork(cfg, 1, "mounting_type", "dring").artworks[0]
    assert ring.mounting_vertical_offset == 4.0


def test_switch_to_wire_in_inches_uses_inch_hanger_default():
    cfg = PlacementConfig(units="inches", artworks=[DRingArtwork(id=1, width=20, height=16)])
    wire = update_artwork(cfg, 1, "mounting_type", "wire").artworks[0]
    assert wire.hanger_offset == 1.0
    assert switch_mounting(DRingArtwork(), "wire", "cm").hanger_offset == 2.54


def test_retained_hardware_follows_unit_toggle():
    cfg = PlacementConfig(artworks=[WireArtwork(id=1, wire_offset=5.08, hanger_offset=2.54)])
    cfg = update_artwork(cfg, 1, "mounting_type", "dring")
    inches = toggle_units(cfg)
    assert inches.artworks[0].retained_hardware == {"wire_offset": 2.0, "hanger_offset": 1.0}
    wire = update_artwork(inches, 1, "mounting_type", "wire").artworks[0]
    assert (wire.wire_offset, wire.hanger_offset) == (2.0, 1.0)


def test_retained_hardware_ignored_by_placement():
    plain = PlacementConfig(wall_width=100, artworks=[DRingArtwork(id=1, width=40, height=30, mounting_vertical_offset=3)])
    parked = update_artwork(plain, 1, "wire_offset", 12)
    assert compute_placements(parked) == compute_placements(plain)
