"""
Mount geometry: where the nail(s) go for one artwork, given its vertical
centroid and (for D-rings) its left edge on the wall.

Vertical values are measured up from the floor. Half the artwork height
above the centroid is the top edge; the hardware offsets are measured down
from that top edge.
"""
from __future__ import annotations

from typing import Tuple

from .models import DRingArtwork, WireArtwork


def top_edge(artwork: WireArtwork | DRingArtwork, centroid: float) -> float:
    return centroid + artwork.height / 2.0


def wire_nail_height(artwork: WireArtwork, centroid: float) -> float:
    # taut wire rests wire_offset below the top; the nail sits hanger_offset above that
    return top_edge(artwork, centroid) - artwork.wire_offset + artwork.hanger_offset


def dring_nail_height(artwork: DRingArtwork, centroid: float) -> float:
    return top_edge(artwork, centroid) - artwork.mounting_vertical_offset


def dring_nail_xs(artwork: DRingArtwork, left_x: float) -> Tuple[float, float]:
    """(left, right) nail positions for an artwork whose left edge is at left_x."""
    inset = artwork.mounting_horizontal_offset
    return left_x + inset, left_x + artwork.width - inset


def nail_height(artwork: WireArtwork | DRingArtwork, centroid: float) -> float:
    if isinstance(artwork, DRingArtwork):
        return dring_nail_height(artwork, centroid)
    return wire_nail_height(artwork, centroid)


def center_x(artwork: WireArtwork | DRingArtwork, left_x: float) -> float:
    return left_x + artwork.width / 2.0
