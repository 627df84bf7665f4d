from __future__ import annotations

from typing import List, Sequence

from .arrangements import PlacedArtwork
from .constants import RESULT_DECIMALS
from .models import PlacementResult, Units, round_half_up


def unit_label(units: Units) -> str:
    return "cm" if units == "cm" else "in"


def round_result(x: float) -> float:
    return round_half_up(x, RESULT_DECIMALS)


def _n(x: float) -> str:
    return f"{round_result(x):.{RESULT_DECIMALS}f}"


def vertical_equation(p: PlacedArtwork, u: str) -> str:
    art = p.artwork
    half_h = art.height / 2.0
    if p.is_dring:
        nail = f"Nail = {_n(p.centroid)} + {_n(half_h)} - {_n(art.mounting_vertical_offset)} = {_n(p.nail_height)}{u}"
    else:
        nail = (
            f"Nail = {_n(p.centroid)} + {_n(half_h)} - {_n(art.wire_offset)} + {_n(art.hanger_offset)}"
            f" = {_n(p.nail_height)}{u}"
        )

    f = p.frame
    if f.offset is None or p.y_before is None:
        return nail

    tag = "GridC" if f.kind == "grid" else "GroupC"
    return (
        f"{tag} = {_n(f.total_height)} / 2 = {_n(f.centroid)}; "
        f"Offset = {_n(f.target_centroid)} - {_n(f.centroid)} = {_n(f.offset)}; "
        f"Centroid = {_n(p.y_before)} + {_n(half_h)} + {_n(f.offset)} = {_n(p.centroid)}{u}; "
        f"{nail}"
    )


def horizontal_equation(p: PlacedArtwork, u: str) -> str:
    art = p.artwork
    f = p.frame
    wall = _n(f.wall_width)

    if p.centering == "wall":
        return f"Horizontal = {wall} / 2 = {_n(p.nail_xs[0])}{u}"

    if p.centering == "artwork":
        # D-ring piece centred on the wall by itself
        w = _n(art.width)
        m = _n(art.mounting_horizontal_offset)
        left, right = p.nail_xs
        return (
            f"Left = ({wall} - {w})/2 + {m} = {_n(left)}{u}; "
            f"Right = ({wall} - {w})/2 + {w} - {m} = {_n(right)}{u}"
        )

    tag = "GridStart" if f.kind == "grid" else "GroupStart"
    start = f"{tag} = ({wall} - {_n(f.total_width)})/2 = {_n(f.start_x)}{u}; "
    base = f"{_n(f.start_x)} + {_n(p.x_before)}"
    if p.is_dring:
        left, right = p.nail_xs
        m = _n(art.mounting_horizontal_offset)
        return (
            start
            + f"Left = {base} + {m} = {_n(left)}{u}; "
            + f"Right = {base} + {_n(art.width)} - {m} = {_n(right)}{u}"
        )
    return start + f"Center = {base} + {_n(art.width / 2.0)} = {_n(p.nail_xs[0])}{u}"


def format_result(p: PlacedArtwork, units: Units) -> PlacementResult:
    u = unit_label(units)
    return PlacementResult(
        artwork=p.index,
        position=p.position,
        mounting_type=p.artwork.mounting_type,
        nail_height=round_result(p.nail_height),
        centroid=round_result(p.centroid),
        horizontal_distance=round_result(p.nail_xs[0]),
        horizontal_distance_2=round_result(p.nail_xs[1]) if p.is_dring else None,
        horizontal_reference=p.reference,
        equation=vertical_equation(p, u),
        horizontal_equation=horizontal_equation(p, u),
    )


def format_results(placed: Sequence[PlacedArtwork], units: Units) -> List[PlacementResult]:
    return [format_result(p, units) for p in placed]


def usage_hint(results: Sequence[PlacementResult]) -> str:
    """The "how to use" sentence shown under a result list, keyed on the first result."""
    if not results:
        return "Add an artwork to see where the nails go."
    first = results[0]
    if first.is_dring:
        return (
            "Mark the left and right distances from the left edge of the wall, "
            "then measure up to the nail height for both points."
        )
    if first.horizontal_reference == "center":
        return "Measure to the center of your wall, mark the horizontal distance, then measure up to the nail height."
    return "Measure from the left edge of your wall the shown horizontal distance, then measure up to the nail height."


def describe_result(r: PlacementResult, units: Units) -> List[str]:
    """Plain-text lines for one result, as printed by the command line."""
    u = unit_label(units)
    lines = [r.label, f"  Centroid: {r.centroid:.2f}{u} from floor", f"  Nail height: {r.nail_height:.2f}{u} from floor"]
    if r.is_dring:
        lines.append(f"  Left nail: {r.horizontal_distance:.2f}{u} from left edge")
        lines.append(f"  Right nail: {r.horizontal_distance_2:.2f}{u} from left edge")
    elif r.horizontal_reference == "center":
        lines.append(f"  Horizontal: {r.horizontal_distance:.2f}{u} (wall center)")
    else:
        lines.append(f"  Horizontal: {r.horizontal_distance:.2f}{u} from left edge")
    lines.append(f"  Vertical calculation: {r.equation}")
    lines.append(f"  Horizontal calculation: {r.horizontal_equation}")
    return lines
