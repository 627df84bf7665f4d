"""Art placement tool: where to drive the nails for one or more artworks."""
from __future__ import annotations

from typing import Any

from .engine import compute_placements, compute_placements_with_trace
from .models import DRingArtwork, Layout, PlacementConfig, PlacementResult, WireArtwork
from .units import convert_units


def __getattr__(name: str) -> Any:
    if name == "TOOL":
        from .tool import TOOL

        return TOOL
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "TOOL",
    "compute_placements",
    "compute_placements_with_trace",
    "convert_units",
    "DRingArtwork",
    "Layout",
    "PlacementConfig",
    "PlacementResult",
    "WireArtwork",
]
