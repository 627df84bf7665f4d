from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_GAP, DEFAULT_HANGER_OFFSET_CM, DEFAULT_TARGET_CENTROID_CM, DEFAULT_UNITS

Units = Literal["cm", "inches"]
Configuration = Literal["single", "vertical", "horizontal", "custom"]
MountingType = Literal["wire", "dring"]
HorizontalReference = Literal["left", "center"]

_UNIT_ALIASES = {"cm": "cm", "centimeters": "cm", "in": "inches", "inch": "inches", "inches": "inches"}


def to_number_or_zero(v: Any) -> float:
    """Coerce form input to a finite float; blank, invalid or non-finite input becomes 0."""
    if v is None:
        return 0.0
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return 0.0
    try:
        n = float(v)
    except (TypeError, ValueError):
        return 0.0
    return n if math.isfinite(n) else 0.0


def round_half_up(x: float, decimals: int) -> float:
    """Half away from zero on the shortest decimal form of `x` (0.125 -> 0.13, 2.675 -> 2.68)."""
    if not math.isfinite(x) or abs(x) >= 1e15:
        # no fractional digits left to round at this magnitude
        return float(x) + 0.0
    q = Decimal(repr(float(x))).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    # + 0.0 folds -0.0 into 0.0
    return float(q) + 0.0


class _ArtworkBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Only used by callers for list diffing; never part of the math.
    id: Optional[Union[int, str]] = None
    width: float = Field(0.0, description="Artwork width.")
    height: float = Field(0.0, description="Artwork height.")
    # Hardware values of the other mounting type, kept across a type switch.
    # Lengths in the config units; never read by the placement math.
    retained_hardware: Dict[str, float] = Field(default_factory=dict)

    @field_validator("width", "height", mode="before")
    @classmethod
    def _coerce_dims(cls, v: Any) -> float:
        return to_number_or_zero(v)

    @field_validator("retained_hardware", mode="before")
    @classmethod
    def _coerce_retained(cls, v: Any) -> Dict[str, float]:
        if not isinstance(v, dict):
            return {}
        return {str(k): to_number_or_zero(x) for k, x in v.items()}


class WireArtwork(_ArtworkBase):
    """Artwork hung from a single nail on a rear wire."""

    mounting_type: Literal["wire"] = "wire"
    wire_offset: float = Field(0.0, description="Top edge down to the taut wire's resting point.")
    hanger_offset: float = Field(
        DEFAULT_HANGER_OFFSET_CM, description="Extra height of the nail above the taut wire (wire sag)."
    )

    @field_validator("wire_offset", "hanger_offset", mode="before")
    @classmethod
    def _coerce_offsets(cls, v: Any) -> float:
        return to_number_or_zero(v)


class DRingArtwork(_ArtworkBase):
    """Artwork hung from two symmetric D-rings, one nail each."""

    mounting_type: Literal["dring"] = "dring"
    mounting_vertical_offset: float = Field(0.0, description="Top edge down to each D-ring hole.")
    mounting_horizontal_offset: float = Field(0.0, description="Side edge in to each D-ring hole.")

    @field_validator("mounting_vertical_offset", "mounting_horizontal_offset", mode="before")
    @classmethod
    def _coerce_offsets(cls, v: Any) -> float:
        return to_number_or_zero(v)


Artwork = Annotated[Union[WireArtwork, DRingArtwork], Field(discriminator="mounting_type")]

ARTWORK_TYPES = {"wire": WireArtwork, "dring": DRingArtwork}

# Mount-specific length fields per variant
HARDWARE_FIELDS = {
    "wire": ("wire_offset", "hanger_offset"),
    "dring": ("mounting_vertical_offset", "mounting_horizontal_offset"),
}


class Layout(BaseModel):
    model_config = ConfigDict(frozen=True)

    rows: int = Field(1, ge=1, description="Grid rows (custom grid only).")
    cols: int = Field(1, ge=1, description="Grid columns (custom grid only).")
    horizontal_gap: float = Field(DEFAULT_GAP, description="Spacing between horizontally adjacent artworks.")
    vertical_gap: float = Field(DEFAULT_GAP, description="Spacing between vertically adjacent artworks.")

    @field_validator("rows", "cols", mode="before")
    @classmethod
    def _clamp_count(cls, v: Any) -> int:
        return max(1, int(to_number_or_zero(v)))

    @field_validator("horizontal_gap", "vertical_gap", mode="before")
    @classmethod
    def _coerce_gap(cls, v: Any) -> float:
        return to_number_or_zero(v)


class PlacementConfig(BaseModel):
    """
    Everything the placement engine needs, passed in whole on every call.

    All lengths are in `units`; the math itself is unit-agnostic. Vertical
    values are measured up from the floor, horizontal values from the wall's
    left edge.
    """

    model_config = ConfigDict(frozen=True)

    units: Units = DEFAULT_UNITS
    target_centroid: float = Field(
        DEFAULT_TARGET_CENTROID_CM, description="Desired vertical midpoint of the composition, from the floor."
    )
    wall_width: float = Field(0.0, description="Wall width used to centre compositions horizontally.")
    configuration: Configuration = "single"
    artworks: List[Artwork] = Field(default_factory=lambda: [WireArtwork(id=1)])
    layout: Layout = Field(default_factory=Layout)

    @field_validator("units", mode="before")
    @classmethod
    def _normalize_units(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _UNIT_ALIASES.get(v.strip().lower(), v)
        return v

    @field_validator("configuration", mode="before")
    @classmethod
    def _normalize_configuration(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("target_centroid", "wall_width", mode="before")
    @classmethod
    def _coerce_lengths(cls, v: Any) -> float:
        return to_number_or_zero(v)

    @field_validator("artworks", mode="before")
    @classmethod
    def _default_mounting_type(cls, v: Any) -> Any:
        # Plain dicts without a mounting type are wire-hung.
        if isinstance(v, (list, tuple)):
            return [
                {**a, "mounting_type": "wire"} if isinstance(a, dict) and "mounting_type" not in a else a
                for a in v
            ]
        return v


class PlacementResult(BaseModel):
    """One hanging point set: a single wire nail or a D-ring nail pair."""

    model_config = ConfigDict(frozen=True)

    artwork: int = Field(..., ge=1, description="1-based artwork index.")
    position: Optional[str] = Field(None, description="Grid position label (custom grid only).")
    mounting_type: MountingType
    nail_height: float
    centroid: float
    horizontal_distance: float
    horizontal_distance_2: Optional[float] = Field(None, description="Right D-ring nail distance.")
    horizontal_reference: HorizontalReference
    equation: str
    horizontal_equation: str

    @property
    def is_dring(self) -> bool:
        return self.mounting_type == "dring"

    @property
    def label(self) -> str:
        return self.position or f"Artwork {self.artwork}"
