from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from .calc_trace import CalcTrace, TraceMeta, compute_input_hash
from .engine import compute_placements, compute_placements_with_trace
from .formatter import round_result, usage_hint
from .models import DRingArtwork, Layout, PlacementConfig, WireArtwork, round_half_up, to_number_or_zero
from .mounts import dring_nail_height, dring_nail_xs, wire_nail_height
from .units import conversion_factor, convert_length, convert_units


def _trace() -> CalcTrace:
    meta = TraceMeta(
        tool_id="art_placement",
        tool_version="test",
        report_version="test",
        timestamp="2000-01-01T00:00:00",
        units_system="cm",
        input_hash="testhash",
    )
    return CalcTrace(meta=meta)


# --- input coercion


@pytest.mark.parametrize("raw", ["", None, "abc", float("nan"), float("inf"), "  "])
def test_invalid_numbers_become_zero(raw) -> None:
    assert to_number_or_zero(raw) == 0.0


def test_numeric_strings_are_parsed() -> None:
    assert to_number_or_zero("12.5") == 12.5
    assert to_number_or_zero(" 3 ") == 3.0


def test_artwork_fields_coerced() -> None:
    a = WireArtwork(width="", height="abc", wire_offset=None, hanger_offset=float("nan"))
    assert (a.width, a.height, a.wire_offset, a.hanger_offset) == (0.0, 0.0, 0.0, 0.0)


def test_layout_rows_cols_clamped() -> None:
    lay = Layout(rows=0, cols="")
    assert lay.rows == 1 and lay.cols == 1
    assert Layout(rows=-4, cols=3).rows == 1


def test_artwork_without_mounting_type_is_wire() -> None:
    cfg = PlacementConfig(artworks=[{"width": 10, "height": 20}])
    assert isinstance(cfg.artworks[0], WireArtwork)


def test_unknown_configuration_rejected() -> None:
    with pytest.raises(ValidationError):
        PlacementConfig(configuration="diagonal")


def test_units_aliases() -> None:
    assert PlacementConfig(units="in").units == "inches"
    assert PlacementConfig(units="CM").units == "cm"


# --- mount geometry


def test_wire_nail_height_formula() -> None:
    a = WireArtwork(width=50, height=70, wire_offset=10, hanger_offset=2.54)
    assert wire_nail_height(a, 152.4) == pytest.approx(152.4 + 35 - 10 + 2.54)


def test_dring_nail_geometry() -> None:
    a = DRingArtwork(width=60, height=40, mounting_vertical_offset=6, mounting_horizontal_offset=5)
    assert dring_nail_height(a, 100.0) == pytest.approx(114.0)
    assert dring_nail_xs(a, 20.0) == pytest.approx((25.0, 75.0))


# --- unit conversion


def test_conversion_factor() -> None:
    assert conversion_factor("inches", "cm") == 2.54
    assert conversion_factor("cm", "inches") == pytest.approx(1 / 2.54)
    assert conversion_factor("cm", "cm") == 1.0


def test_convert_units_scales_every_length() -> None:
    cfg = PlacementConfig(
        target_centroid=152.4,
        wall_width=0,
        artworks=[
            WireArtwork(id=1, width=50.8, height=25.4, wire_offset=0, hanger_offset=2.54),
            DRingArtwork(id=2, width=30, height=20, mounting_vertical_offset=5, mounting_horizontal_offset=2.54),
        ],
        layout=Layout(rows=2, cols=3, horizontal_gap=10, vertical_gap=0),
    )
    out = convert_units(cfg, "inches")

    assert out.units == "inches"
    assert out.target_centroid == 60.0
    assert out.wall_width == 0.0
    wire, ring = out.artworks
    assert (wire.width, wire.height, wire.wire_offset, wire.hanger_offset) == (20.0, 10.0, 0.0, 1.0)
    assert ring.mounting_horizontal_offset == 1.0
    assert ring.mounting_vertical_offset == 2.0
    assert (out.layout.rows, out.layout.cols) == (2, 3)
    assert out.layout.horizontal_gap == 3.9
    assert out.layout.vertical_gap == 0.0
    assert [a.id for a in out.artworks] == [1, 2]
    # input untouched
    assert cfg.units == "cm" and cfg.target_centroid == 152.4


def test_convert_to_same_units_is_noop() -> None:
    cfg = PlacementConfig()
    assert convert_units(cfg, "cm") is cfg


@pytest.mark.parametrize("value", [0.1, 1.0, 2.54, 33.3, 152.4, 987.6])
def test_unit_round_trip_within_rounding(value: float) -> None:
    inches = convert_length(value, 1 / 2.54)
    back = convert_length(inches, 2.54)
    # half a 0.1 in step scaled back to cm, plus half a 0.1 cm step
    assert abs(back - value) <= 0.05 * 2.54 + 0.05 + 1e-9


def test_zero_survives_conversion_both_ways() -> None:
    assert convert_length(0.0, 2.54) == 0.0
    assert convert_length(0.0, 1 / 2.54) == 0.0


@pytest.mark.parametrize(
    "value, decimals, expected",
    [(0.125, 2, 0.13), (2.675, 2, 2.68), (1.005, 2, 1.01), (-0.125, 2, -0.13), (0.25, 1, 0.3), (0.35, 1, 0.4)],
)
def test_halves_round_up_like_the_printed_digits(value: float, decimals: int, expected: float) -> None:
    assert round_half_up(value, decimals) == expected


def test_result_and_conversion_rounding_are_half_up() -> None:
    assert round_result(0.125) == 0.13
    assert round_result(-0.001) == 0.0
    assert convert_length(0.25, 1.0) == 0.3


def test_half_up_nail_height_in_results() -> None:
    # 100 + 0.25/2 = 100.125 exactly
    (r,) = compute_placements(PlacementConfig(target_centroid=100, artworks=[WireArtwork(height=0.25, hanger_offset=0)]))
    assert r.nail_height == 100.13
    assert r.equation.endswith("= 100.13cm")


# --- engine scenarios


def test_single_wire_scenario() -> None:
    cfg = PlacementConfig(
        wall_width=200,
        target_centroid=152.4,
        artworks=[WireArtwork(width=50, height=70, wire_offset=10, hanger_offset=2.54)],
    )
    (r,) = compute_placements(cfg)
    assert r.nail_height == 179.94
    assert r.centroid == 152.4
    assert r.horizontal_distance == 100.0
    assert r.horizontal_reference == "center"
    assert r.horizontal_distance_2 is None
    assert "179.94cm" in r.equation
    assert "100.00cm" in r.horizontal_equation


@pytest.mark.parametrize(
    "wall, width, inset",
    [(200.0, 60.0, 5.0), (0.0, 40.0, 5.0), (150.0, 150.0, 0.0), (90.5, 33.3, 4.4)],
)
def test_single_dring_nails_symmetric(wall: float, width: float, inset: float) -> None:
    cfg = PlacementConfig(
        wall_width=wall,
        artworks=[DRingArtwork(width=width, height=30, mounting_vertical_offset=4, mounting_horizontal_offset=inset)],
    )
    (r,) = compute_placements(cfg)
    assert r.horizontal_reference == "left"
    assert r.horizontal_distance + r.horizontal_distance_2 == pytest.approx(2 * ((wall - width) / 2) + width, abs=0.011)


def test_single_uses_only_first_artwork() -> None:
    cfg = PlacementConfig(artworks=[WireArtwork(height=10), WireArtwork(height=99)])
    assert len(compute_placements(cfg)) == 1


def test_no_artworks_gives_no_results() -> None:
    for mode in ("single", "vertical", "horizontal", "custom"):
        assert compute_placements(PlacementConfig(configuration=mode, artworks=[])) == []


def test_vertical_stack_scenario() -> None:
    cfg = PlacementConfig(
        configuration="vertical",
        target_centroid=150,
        wall_width=200,
        artworks=[
            WireArtwork(width=40, height=50, wire_offset=5, hanger_offset=2),
            DRingArtwork(width=60, height=30, mounting_vertical_offset=4, mounting_horizontal_offset=6),
        ],
        layout=Layout(vertical_gap=10),
    )
    first, second = compute_placements(cfg)

    assert first.centroid == 130.0
    assert second.centroid == 180.0
    assert first.nail_height == 152.0
    assert second.nail_height == 191.0
    # wire on the wall centre line, D-ring piece centred on its own width
    assert (first.horizontal_distance, first.horizontal_reference) == (100.0, "center")
    assert (second.horizontal_distance, second.horizontal_distance_2) == (76.0, 124.0)
    assert "GroupC = 90.00 / 2 = 45.00" in first.equation
    assert "Offset = 150.00 - 45.00 = 105.00" in first.equation


@pytest.mark.parametrize("heights", [[10.0], [50.0, 30.0], [12.5, 40.0, 7.25, 33.0]])
def test_vertical_stack_height_weighted_centroid_is_target(heights) -> None:
    # contiguous stack: the height-weighted mean of the pieces is the stack centroid
    cfg = PlacementConfig(
        configuration="vertical",
        target_centroid=140,
        artworks=[WireArtwork(width=10, height=h) for h in heights],
        layout=Layout(vertical_gap=0),
    )
    placed = compute_placements(cfg)
    weighted = sum(r.centroid * h for r, h in zip(placed, heights)) / sum(heights)
    assert weighted == pytest.approx(140.0, abs=0.01)


def test_vertical_stack_extent_centred_with_gaps() -> None:
    heights = [50.0, 30.0, 20.0]
    cfg = PlacementConfig(
        configuration="vertical",
        target_centroid=150,
        artworks=[WireArtwork(height=h) for h in heights],
        layout=Layout(vertical_gap=7),
    )
    placed = compute_placements(cfg)
    bottom = placed[0].centroid - heights[0] / 2
    top = placed[-1].centroid + heights[-1] / 2
    assert (bottom + top) / 2 == pytest.approx(150.0)


def test_horizontal_stack() -> None:
    cfg = PlacementConfig(
        configuration="horizontal",
        target_centroid=150,
        wall_width=300,
        artworks=[
            WireArtwork(width=50, height=40, wire_offset=5, hanger_offset=2),
            DRingArtwork(width=70, height=60, mounting_vertical_offset=8, mounting_horizontal_offset=5),
        ],
        layout=Layout(horizontal_gap=10),
    )
    wire, ring = compute_placements(cfg)

    assert wire.centroid == ring.centroid == 150.0
    assert wire.nail_height == 167.0
    assert ring.nail_height == 172.0
    assert (wire.horizontal_distance, wire.horizontal_reference) == (110.0, "left")
    assert (ring.horizontal_distance, ring.horizontal_distance_2) == (150.0, 210.0)
    assert "GroupStart = (300.00 - 130.00)/2 = 85.00cm" in wire.horizontal_equation


def test_custom_grid_scenario() -> None:
    cfg = PlacementConfig(
        configuration="custom",
        target_centroid=100,
        artworks=[WireArtwork(width=30, height=40), WireArtwork(width=30, height=60)],
        layout=Layout(rows=2, cols=1, vertical_gap=5),
    )
    first, second = compute_placements(cfg)
    assert first.centroid == 67.5
    assert second.centroid == 122.5
    assert (first.position, second.position) == ("Row 1, Col 1", "Row 2, Col 1")
    assert "GridC = 105.00 / 2 = 52.50" in first.equation


def test_custom_grid_cells_left_aligned_and_partial_rows() -> None:
    cfg = PlacementConfig(
        configuration="custom",
        target_centroid=150,
        wall_width=220,
        artworks=[
            WireArtwork(width=40, height=30),
            WireArtwork(width=60, height=20),
            WireArtwork(width=50, height=40),
        ],
        layout=Layout(rows=2, cols=2, horizontal_gap=10, vertical_gap=10),
    )
    a1, a2, a3 = compute_placements(cfg)

    # columns 50 and 60 wide -> grid 120 wide starting at 50
    assert a1.horizontal_distance == 70.0  # 50 + 40/2, not centred in the 50-wide column
    assert a2.horizontal_distance == 140.0
    assert a3.horizontal_distance == 75.0
    # rows 30 and 40 tall -> grid 80 tall, offset 110
    assert (a1.centroid, a2.centroid, a3.centroid) == (125.0, 120.0, 170.0)
    assert a3.position == "Row 2, Col 1"


def test_custom_grid_truncates_to_capacity() -> None:
    cfg = PlacementConfig(
        configuration="custom",
        artworks=[WireArtwork(width=10, height=10) for _ in range(5)],
        layout=Layout(rows=2, cols=2),
    )
    results = compute_placements(cfg)
    assert [r.artwork for r in results] == [1, 2, 3, 4]


@pytest.mark.parametrize(
    "artwork",
    [
        WireArtwork(width=50, height=70, wire_offset=10, hanger_offset=2.54),
        DRingArtwork(width=45, height=35, mounting_vertical_offset=5, mounting_horizontal_offset=4),
    ],
)
def test_one_by_one_grid_matches_single(artwork) -> None:
    base = dict(wall_width=180, target_centroid=145, artworks=[artwork])
    (single,) = compute_placements(PlacementConfig(configuration="single", **base))
    (grid,) = compute_placements(PlacementConfig(configuration="custom", layout=Layout(rows=1, cols=1), **base))
    assert grid.nail_height == single.nail_height
    assert grid.centroid == single.centroid
    assert grid.horizontal_distance == single.horizontal_distance
    assert grid.horizontal_distance_2 == single.horizontal_distance_2


def test_degenerate_geometry_is_finite() -> None:
    for mode in ("single", "vertical", "horizontal", "custom"):
        cfg = PlacementConfig(
            configuration=mode,
            wall_width=0,
            target_centroid=0,
            artworks=[WireArtwork(hanger_offset=0), DRingArtwork()],
            layout=Layout(horizontal_gap=0, vertical_gap=0),
        )
        for r in compute_placements(cfg):
            values = [r.nail_height, r.centroid, r.horizontal_distance, r.horizontal_distance_2 or 0.0]
            assert all(math.isfinite(v) for v in values)
            assert all(v == 0.0 for v in values)


def test_engine_does_not_mutate_input() -> None:
    cfg = PlacementConfig(configuration="vertical", artworks=[WireArtwork(height=10), WireArtwork(height=20)])
    before = cfg.model_dump()
    compute_placements(cfg)
    assert cfg.model_dump() == before


def test_engine_accepts_plain_dict() -> None:
    (r,) = compute_placements({"target_centroid": 100, "artworks": [{"height": 20}]})
    assert r.nail_height == pytest.approx(112.54)


def test_inches_label_in_equations() -> None:
    cfg = PlacementConfig(units="inches", target_centroid=60, wall_width=100, artworks=[WireArtwork(height=20)])
    (r,) = compute_placements(cfg)
    assert r.equation.endswith("in")
    assert r.horizontal_equation.endswith("50.00in")


# --- usage hint


def test_usage_hint_variants() -> None:
    wire = compute_placements(PlacementConfig(artworks=[WireArtwork()]))
    ring = compute_placements(PlacementConfig(artworks=[DRingArtwork()]))
    row = compute_placements(PlacementConfig(configuration="horizontal", artworks=[WireArtwork(), WireArtwork()]))
    assert "center of your wall" in usage_hint(wire)
    assert "left and right distances" in usage_hint(ring)
    assert "left edge of your wall" in usage_hint(row)
    assert usage_hint([])


# --- calc trace


def test_input_hash_deterministic() -> None:
    a = {"b": 2.0, "a": {"y": 1.0, "x": [1.0, 2.0]}}
    b = {"a": {"x": [1.0, 2.0], "y": 1.0}, "b": 2.0}
    assert compute_input_hash(a) == compute_input_hash(b)


def test_trace_steps_match_results() -> None:
    tr = _trace()
    cfg = PlacementConfig(
        configuration="vertical",
        target_centroid=150,
        artworks=[WireArtwork(height=50, wire_offset=5, hanger_offset=2), DRingArtwork(width=60, height=30)],
        layout=Layout(vertical_gap=10),
    )
    results = compute_placements_with_trace(tr, cfg)
    steps = {s.id: s for s in tr.steps}

    assert steps["G1"].result_rounded.value == 45.0
    assert steps["G2"].result_rounded.value == 105.0
    assert steps["A1.1"].result_rounded.value == results[0].centroid
    assert steps["A1.2"].result_rounded.value == results[0].nail_height
    assert steps["A2.2"].result_rounded.value == results[1].nail_height
    assert steps["A2.4"].result_rounded.value == results[1].horizontal_distance
    assert steps["A2.5"].result_rounded.value == results[1].horizontal_distance_2
    assert "150" in steps["G2"].substitution_latex
    assert tr.tables["layout"]["arrangement"] == "vertical"
    assert results == compute_placements(cfg)


def test_trace_for_empty_config() -> None:
    tr = _trace()
    assert compute_placements_with_trace(tr, PlacementConfig(artworks=[])) == []
    assert tr.steps == []


def test_trace_inputs_flattened() -> None:
    cfg = PlacementConfig(artworks=[WireArtwork(id=1, width=20)])
    tr = CalcTrace.new(tool_id="t", tool_version="0", inputs=cfg.model_dump(), units_system="cm")
    ids = {i.id: i for i in tr.inputs}
    assert ids["artworks.1.width"].units == "cm"
    assert ids["layout.rows"].units == "-"
    assert ids["configuration"].value == "single"
