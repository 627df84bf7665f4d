"""
Placement engine entry points.

- compute_placements(config) -> List[PlacementResult]       (pure, used on every edit)
- compute_placements_with_trace(trace, config) -> same list  (also records calc steps)
"""
from __future__ import annotations

from typing import Any, Dict, List, Union

from .arrangements import PlacedArtwork, arrange
from .calc_trace import CalcTrace, CalcVar, Reference, compute_step
from .constants import RESULT_DECIMALS
from .formatter import format_results, unit_label
from .models import PlacementConfig, PlacementResult


def _as_config(config: Union[PlacementConfig, Dict[str, Any]]) -> PlacementConfig:
    if isinstance(config, PlacementConfig):
        return config
    return PlacementConfig.model_validate(config)


def compute_placements(config: Union[PlacementConfig, Dict[str, Any]]) -> List[PlacementResult]:
    """Nail placements for `config`, ordered by artwork index (row-major for grids)."""
    cfg = _as_config(config)
    return format_results(arrange(cfg), cfg.units)


def _var(symbol: str, description: str, value: Any, units: str, source: str) -> CalcVar:
    return CalcVar(symbol=symbol, description=description, value=value, units=units, source=source)


def _derived(ref: str) -> List[Reference]:
    return [Reference(type="derived", ref=ref)]


def _record_group(trace: CalcTrace, placed: List[PlacedArtwork], u: str) -> None:
    f = placed[0].frame
    if f.offset is not None:
        compute_step(
            trace,
            id="G1",
            section="Composition",
            title="Composition centroid above its base",
            output_symbol="C_{grp}",
            output_description="Half the total composition height",
            equation_latex=r"C_{grp} = \dfrac{H_{grp}}{2}",
            variables=[_var("H_{grp}", "Total composition height incl. gaps", f.total_height, u, "derived:layout")],
            compute_fn=lambda: f.total_height / 2.0,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived(f"arrangements.arrange:{f.kind}"),
        )
        compute_step(
            trace,
            id="G2",
            section="Composition",
            title="Vertical offset placing the composition centroid on the target",
            output_symbol=r"\Delta_{C}",
            output_description="Height of the composition base above the floor",
            equation_latex=r"\Delta_{C} = C_{tgt} - C_{grp}",
            variables=[
                _var("C_{tgt}", "Target centroid height", f.target_centroid, u, "input:target_centroid"),
                _var("C_{grp}", "Composition centroid", f.centroid, u, "step:G1"),
            ],
            compute_fn=lambda: f.target_centroid - f.centroid,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived(f"arrangements.arrange:{f.kind}"),
        )
    if f.kind in ("horizontal", "grid"):
        compute_step(
            trace,
            id="G3",
            section="Composition",
            title="Left edge of the composition centred on the wall",
            output_symbol="x_{0}",
            output_description="Composition start from the wall's left edge",
            equation_latex=r"x_{0} = \dfrac{W_{wall} - W_{grp}}{2}",
            variables=[
                _var("W_{wall}", "Wall width", f.wall_width, u, "input:wall_width"),
                _var("W_{grp}", "Total composition width incl. gaps", f.total_width, u, "derived:layout"),
            ],
            compute_fn=lambda: (f.wall_width - f.total_width) / 2.0,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived("arrangements.group_start_x"),
        )


def _record_artwork(trace: CalcTrace, p: PlacedArtwork, u: str) -> None:
    art = p.artwork
    f = p.frame
    sid = f"A{p.index}"
    section = p.position or f"Artwork {p.index}"
    src = f"input:artworks.{p.index}"
    ref = _derived(f"arrangements.arrange:{f.kind}")

    if f.offset is not None and p.y_before is not None:
        y_below = p.y_before
        compute_step(
            trace,
            id=f"{sid}.1",
            section=section,
            title="Artwork centroid height",
            output_symbol="C_{art}",
            output_description="Vertical centre of the artwork above the floor",
            equation_latex=r"C_{art} = y_{below} + \dfrac{H_{art}}{2} + \Delta_{C}",
            variables=[
                _var("y_{below}", "Stack height below this artwork incl. gaps", y_below, u, "derived:layout"),
                _var("H_{art}", "Artwork height", art.height, u, f"{src}.height"),
                _var(r"\Delta_{C}", "Composition offset", f.offset, u, "step:G2"),
            ],
            compute_fn=lambda: y_below + art.height / 2.0 + f.offset,
            units=u,
            decimals=RESULT_DECIMALS,
            references=ref,
        )
    else:
        compute_step(
            trace,
            id=f"{sid}.1",
            section=section,
            title="Artwork centroid height",
            output_symbol="C_{art}",
            output_description="Vertical centre of the artwork above the floor",
            equation_latex="C_{art} = C_{tgt}",
            variables=[_var("C_{tgt}", "Target centroid height", f.target_centroid, u, "input:target_centroid")],
            compute_fn=lambda: f.target_centroid,
            units=u,
            decimals=RESULT_DECIMALS,
            references=ref,
        )

    centroid = p.centroid
    if p.is_dring:
        compute_step(
            trace,
            id=f"{sid}.2",
            section=section,
            title="D-ring nail height",
            output_symbol="N_{nail}",
            output_description="Height of both D-ring nails above the floor",
            equation_latex=r"N_{nail} = C_{art} + \dfrac{H_{art}}{2} - o_{ring}",
            variables=[
                _var("C_{art}", "Artwork centroid", centroid, u, f"step:{sid}.1"),
                _var("H_{art}", "Artwork height", art.height, u, f"{src}.height"),
                _var("o_{ring}", "Top edge to D-ring hole", art.mounting_vertical_offset, u, f"{src}.mounting_vertical_offset"),
            ],
            compute_fn=lambda: centroid + art.height / 2.0 - art.mounting_vertical_offset,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived("mounts.dring_nail_height"),
        )
    else:
        compute_step(
            trace,
            id=f"{sid}.2",
            section=section,
            title="Wire nail height",
            output_symbol="N_{nail}",
            output_description="Height of the nail above the floor",
            equation_latex=r"N_{nail} = C_{art} + \dfrac{H_{art}}{2} - o_{wire} + o_{hang}",
            variables=[
                _var("C_{art}", "Artwork centroid", centroid, u, f"step:{sid}.1"),
                _var("H_{art}", "Artwork height", art.height, u, f"{src}.height"),
                _var("o_{wire}", "Top edge to taut wire", art.wire_offset, u, f"{src}.wire_offset"),
                _var("o_{hang}", "Nail above taut wire", art.hanger_offset, u, f"{src}.hanger_offset"),
            ],
            compute_fn=lambda: centroid + art.height / 2.0 - art.wire_offset + art.hanger_offset,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived("mounts.wire_nail_height"),
        )

    if p.centering == "wall":
        compute_step(
            trace,
            id=f"{sid}.3",
            section=section,
            title="Nail on the wall centre line",
            output_symbol="x_{nail}",
            output_description="Horizontal nail position from the wall's left edge",
            equation_latex=r"x_{nail} = \dfrac{W_{wall}}{2}",
            variables=[_var("W_{wall}", "Wall width", f.wall_width, u, "input:wall_width")],
            compute_fn=lambda: f.wall_width / 2.0,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived("arrangements._place"),
        )
        return

    if p.centering == "artwork":
        edge = compute_step(
            trace,
            id=f"{sid}.3",
            section=section,
            title="Artwork left edge, centred on the wall",
            output_symbol="x_{edge}",
            output_description="Artwork left edge from the wall's left edge",
            equation_latex=r"x_{edge} = \dfrac{W_{wall} - W_{art}}{2}",
            variables=[
                _var("W_{wall}", "Wall width", f.wall_width, u, "input:wall_width"),
                _var("W_{art}", "Artwork width", art.width, u, f"{src}.width"),
            ],
            compute_fn=lambda: (f.wall_width - art.width) / 2.0,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived("arrangements.group_start_x"),
        )
    else:
        x_before = p.x_before
        edge = compute_step(
            trace,
            id=f"{sid}.3",
            section=section,
            title="Artwork left edge within the composition",
            output_symbol="x_{edge}",
            output_description="Artwork left edge from the wall's left edge",
            equation_latex=r"x_{edge} = x_{0} + x_{before}",
            variables=[
                _var("x_{0}", "Composition start", f.start_x, u, "step:G3"),
                _var("x_{before}", "Widths (and gaps) to the left of this artwork", x_before, u, "derived:layout"),
            ],
            compute_fn=lambda: f.start_x + x_before,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived(f"arrangements.arrange:{f.kind}"),
        )

    left_x = p.left_x
    if p.is_dring:
        inset = art.mounting_horizontal_offset
        compute_step(
            trace,
            id=f"{sid}.4",
            section=section,
            title="Left D-ring nail",
            output_symbol="x_{L}",
            output_description="Left nail from the wall's left edge",
            equation_latex=r"x_{L} = x_{edge} + o_{side}",
            variables=[
                _var("x_{edge}", "Artwork left edge", edge, u, f"step:{sid}.3"),
                _var("o_{side}", "Side edge to D-ring hole", inset, u, f"{src}.mounting_horizontal_offset"),
            ],
            compute_fn=lambda: left_x + inset,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived("mounts.dring_nail_xs"),
        )
        compute_step(
            trace,
            id=f"{sid}.5",
            section=section,
            title="Right D-ring nail",
            output_symbol="x_{R}",
            output_description="Right nail from the wall's left edge",
            equation_latex=r"x_{R} = x_{edge} + W_{art} - o_{side}",
            variables=[
                _var("x_{edge}", "Artwork left edge", edge, u, f"step:{sid}.3"),
                _var("W_{art}", "Artwork width", art.width, u, f"{src}.width"),
                _var("o_{side}", "Side edge to D-ring hole", inset, u, f"{src}.mounting_horizontal_offset"),
            ],
            compute_fn=lambda: left_x + art.width - inset,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived("mounts.dring_nail_xs"),
        )
    else:
        compute_step(
            trace,
            id=f"{sid}.4",
            section=section,
            title="Wire nail at the artwork's horizontal centre",
            output_symbol="x_{nail}",
            output_description="Nail position from the wall's left edge",
            equation_latex=r"x_{nail} = x_{edge} + \dfrac{W_{art}}{2}",
            variables=[
                _var("x_{edge}", "Artwork left edge", edge, u, f"step:{sid}.3"),
                _var("W_{art}", "Artwork width", art.width, u, f"{src}.width"),
            ],
            compute_fn=lambda: left_x + art.width / 2.0,
            units=u,
            decimals=RESULT_DECIMALS,
            references=_derived("mounts.center_x"),
        )


def layout_table(placed: List[PlacedArtwork]) -> Dict[str, Any]:
    """Composition extents for the report's tables section."""
    if not placed:
        return {}
    f = placed[0].frame
    table: Dict[str, Any] = {
        "arrangement": f.kind,
        "total_width": f.total_width,
        "total_height": f.total_height,
        "start_x": f.start_x,
    }
    if f.offset is not None:
        table["group_centroid"] = f.centroid
        table["offset"] = f.offset
    if f.kind == "grid":
        table["col_widths"] = list(f.col_widths)
        table["row_heights"] = list(f.row_heights)
    return table


def compute_placements_with_trace(
    trace: CalcTrace, config: Union[PlacementConfig, Dict[str, Any]]
) -> List[PlacementResult]:
    cfg = _as_config(config)
    placed = arrange(cfg)
    u = unit_label(cfg.units)
    if placed:
        _record_group(trace, placed, u)
        for p in placed:
            _record_artwork(trace, p, u)
        trace.tables["layout"] = layout_table(placed)
    return format_results(placed, cfg.units)
