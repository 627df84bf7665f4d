"""
Arrangement strategies.

Each strategy derives every artwork's vertical centroid and left edge on the
wall, then hands the geometry to the mount formulas. Coordinate system:
  x = 0 at the wall's left edge, +x to the right
  y = 0 at the floor, +y up

Stack and grid positions accumulate upward from the base of the composition,
so artwork 1 (and grid row 1) sits lowest.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional, Sequence

from loguru import logger

from .models import Artwork, Configuration, DRingArtwork, HorizontalReference, PlacementConfig
from .mounts import center_x, dring_nail_xs, nail_height

# How the horizontal position of one artwork was derived:
#   wall    - wire nail on the wall centre line
#   artwork - artwork centred on the wall by itself
#   group   - artwork offset from the start of a centred composite
Centering = Literal["wall", "artwork", "group"]


@dataclass(frozen=True)
class GroupFrame:
    """Extents of the whole composition, shared by every artwork in it."""

    kind: Literal["single", "horizontal", "vertical", "grid"]
    wall_width: float
    target_centroid: float
    total_width: float
    total_height: float
    start_x: float
    # Vertical centring (vertical stack and grid only)
    centroid: Optional[float] = None
    offset: Optional[float] = None
    col_widths: tuple = ()
    row_heights: tuple = ()


@dataclass(frozen=True)
class PlacedArtwork:
    index: int
    artwork: Artwork
    frame: GroupFrame
    centroid: float
    left_x: float
    x_before: float
    y_before: Optional[float]
    centering: Centering
    reference: HorizontalReference
    nail_height: float
    nail_xs: tuple
    position: Optional[str] = None

    @property
    def is_dring(self) -> bool:
        return isinstance(self.artwork, DRingArtwork)


def group_start_x(wall_width: float, total_width: float) -> float:
    """Left edge of a composite centred on the wall (may be negative on a narrow or zero-width wall)."""
    return (wall_width - total_width) / 2.0


def stack_extent(sizes: Sequence[float], gap: float) -> float:
    if not sizes:
        return 0.0
    return sum(sizes) + (len(sizes) - 1) * gap


def _place(
    *,
    index: int,
    artwork: Artwork,
    frame: GroupFrame,
    centroid: float,
    left_x: float,
    x_before: float = 0.0,
    y_before: Optional[float] = None,
    centering: Centering,
    position: Optional[str] = None,
) -> PlacedArtwork:
    is_dring = isinstance(artwork, DRingArtwork)
    if is_dring:
        nail_xs = dring_nail_xs(artwork, left_x)
        reference: HorizontalReference = "left"
    elif centering == "wall":
        nail_xs = (frame.wall_width / 2.0,)
        reference = "center"
    else:
        nail_xs = (center_x(artwork, left_x),)
        reference = "left"
    return PlacedArtwork(
        index=index,
        artwork=artwork,
        frame=frame,
        centroid=centroid,
        left_x=left_x,
        x_before=x_before,
        y_before=y_before,
        centering=centering,
        reference=reference,
        nail_height=nail_height(artwork, centroid),
        nail_xs=nail_xs,
        position=position,
    )


def arrange_single(config: PlacementConfig) -> List[PlacedArtwork]:
    art = config.artworks[0]
    start_x = group_start_x(config.wall_width, art.width)
    frame = GroupFrame(
        kind="single",
        wall_width=config.wall_width,
        target_centroid=config.target_centroid,
        total_width=art.width,
        total_height=art.height,
        start_x=start_x,
    )
    return [
        _place(
            index=1,
            artwork=art,
            frame=frame,
            centroid=config.target_centroid,
            left_x=start_x,
            centering="artwork" if isinstance(art, DRingArtwork) else "wall",
        )
    ]


def arrange_horizontal(config: PlacementConfig) -> List[PlacedArtwork]:
    arts = config.artworks
    gap = config.layout.horizontal_gap
    total_w = stack_extent([a.width for a in arts], gap)
    start_x = group_start_x(config.wall_width, total_w)
    frame = GroupFrame(
        kind="horizontal",
        wall_width=config.wall_width,
        target_centroid=config.target_centroid,
        total_width=total_w,
        total_height=max((a.height for a in arts), default=0.0),
        start_x=start_x,
    )
    logger.debug(f"Horizontal stack: n={len(arts)} total_width={total_w:.4g} start_x={start_x:.4g}")

    placed: List[PlacedArtwork] = []
    cum = 0.0
    for i, a in enumerate(arts):
        placed.append(
            _place(
                index=i + 1,
                artwork=a,
                frame=frame,
                # every artwork shares the target centroid; no vertical offsetting in a row
                centroid=config.target_centroid,
                left_x=start_x + cum,
                x_before=cum,
                centering="group",
            )
        )
        cum += a.width + gap
    return placed


def arrange_vertical(config: PlacementConfig) -> List[PlacedArtwork]:
    arts = config.artworks
    gap = config.layout.vertical_gap
    total_h = stack_extent([a.height for a in arts], gap)
    group_c = total_h / 2.0
    offset = config.target_centroid - group_c
    widest = max((a.width for a in arts), default=0.0)
    frame = GroupFrame(
        kind="vertical",
        wall_width=config.wall_width,
        target_centroid=config.target_centroid,
        total_width=widest,
        total_height=total_h,
        start_x=group_start_x(config.wall_width, widest),
        centroid=group_c,
        offset=offset,
    )
    logger.debug(f"Vertical stack: n={len(arts)} total_height={total_h:.4g} offset={offset:.4g}")

    placed: List[PlacedArtwork] = []
    cum = 0.0
    for i, a in enumerate(arts):
        is_dring = isinstance(a, DRingArtwork)
        placed.append(
            _place(
                index=i + 1,
                artwork=a,
                frame=frame,
                centroid=cum + a.height / 2.0 + offset,
                # D-ring pieces are each centred on the wall on their own width
                left_x=group_start_x(config.wall_width, a.width),
                y_before=cum,
                centering="artwork" if is_dring else "wall",
            )
        )
        cum += a.height + gap
    return placed


def arrange_custom(config: PlacementConfig) -> List[PlacedArtwork]:
    rows = max(1, config.layout.rows)
    cols = max(1, config.layout.cols)
    h_gap = config.layout.horizontal_gap
    v_gap = config.layout.vertical_gap
    items = list(config.artworks[: rows * cols])
    n = len(items)

    # Column width / row height come only from the cells actually filled.
    col_widths = [
        max((items[r * cols + c].width for r in range(rows) if r * cols + c < n), default=0.0)
        for c in range(cols)
    ]
    row_heights = [
        max((items[r * cols + c].height for c in range(cols) if r * cols + c < n), default=0.0)
        for r in range(rows)
    ]
    total_w = stack_extent(col_widths, h_gap)
    total_h = stack_extent(row_heights, v_gap)
    start_x = group_start_x(config.wall_width, total_w)
    grid_c = total_h / 2.0
    offset = config.target_centroid - grid_c
    frame = GroupFrame(
        kind="grid",
        wall_width=config.wall_width,
        target_centroid=config.target_centroid,
        total_width=total_w,
        total_height=total_h,
        start_x=start_x,
        centroid=grid_c,
        offset=offset,
        col_widths=tuple(col_widths),
        row_heights=tuple(row_heights),
    )
    logger.debug(
        f"Custom grid {rows}x{cols}: placed={n} total={total_w:.4g}x{total_h:.4g} "
        f"start_x={start_x:.4g} offset={offset:.4g}"
    )

    placed: List[PlacedArtwork] = []
    for idx, a in enumerate(items):
        r, c = divmod(idx, cols)
        height_below = sum(row_heights[:r]) + r * v_gap
        width_to_left = sum(col_widths[:c]) + c * h_gap
        # smaller pieces sit at the left/bottom of their cell rather than centred in it
        placed.append(
            _place(
                index=idx + 1,
                artwork=a,
                frame=frame,
                centroid=height_below + a.height / 2.0 + offset,
                left_x=start_x + width_to_left,
                x_before=width_to_left,
                y_before=height_below,
                centering="group",
                position=f"Row {r + 1}, Col {c + 1}",
            )
        )
    return placed


STRATEGIES: Dict[str, Callable[[PlacementConfig], List[PlacedArtwork]]] = {
    "single": arrange_single,
    "horizontal": arrange_horizontal,
    "vertical": arrange_vertical,
    "custom": arrange_custom,
}


def arrange(config: PlacementConfig) -> List[PlacedArtwork]:
    """Dispatch to the strategy named by `config.configuration`."""
    if not config.artworks:
        return []
    configuration: Configuration = config.configuration
    logger.debug(f"Arranging {len(config.artworks)} artwork(s) as '{configuration}'")
    return STRATEGIES[configuration](config)
