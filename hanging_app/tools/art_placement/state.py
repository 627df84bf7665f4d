"""
Copy-on-write edits of a PlacementConfig, for UI shells that own the state.

Every helper returns a new config and leaves its argument untouched.
"""
from __future__ import annotations

import itertools
from typing import Any, Union

from loguru import logger

from .constants import DEFAULT_HANGER_OFFSET_CM, DEFAULT_HANGER_OFFSET_IN
from .models import (
    ARTWORK_TYPES,
    HARDWARE_FIELDS,
    Configuration,
    DRingArtwork,
    Layout,
    PlacementConfig,
    Units,
    WireArtwork,
    to_number_or_zero,
)
from .units import convert_units

ArtworkId = Union[int, str]

_SHARED_FIELDS = ("id", "width", "height")
# Never set through update_artwork
_NOT_EDITABLE = ("id", "retained_hardware")


def next_artwork_id(config: PlacementConfig) -> int:
    used = {a.id for a in config.artworks}
    numeric = [i for i in used if isinstance(i, int)]
    start = max(numeric, default=0) + 1
    return next(i for i in itertools.count(start) if i not in used)


def default_hanger_offset(units: Units) -> float:
    return DEFAULT_HANGER_OFFSET_CM if units == "cm" else DEFAULT_HANGER_OFFSET_IN


def blank_artwork(config: PlacementConfig, artwork_id: ArtworkId) -> WireArtwork:
    return WireArtwork(id=artwork_id, hanger_offset=default_hanger_offset(config.units))


def add_artwork(config: PlacementConfig) -> PlacementConfig:
    art = blank_artwork(config, next_artwork_id(config))
    return config.model_copy(update={"artworks": [*config.artworks, art]})


def remove_artwork(config: PlacementConfig, artwork_id: ArtworkId) -> PlacementConfig:
    """Remove an artwork by id; the last remaining artwork is never removed."""
    if len(config.artworks) <= 1:
        return config
    kept = [a for a in config.artworks if a.id != artwork_id]
    return config.model_copy(update={"artworks": kept})


def switch_mounting(
    artwork: Union[WireArtwork, DRingArtwork], mounting_type: str, units: Units = "cm"
) -> Union[WireArtwork, DRingArtwork]:
    """Re-type an artwork, keeping every value it holds.

    The outgoing variant's hardware values are parked in `retained_hardware`
    and come back on a later switch; hardware never set before starts from
    its default (the hanger offset default depends on `units`).
    """
    if artwork.mounting_type == mounting_type:
        return artwork
    if mounting_type not in ARTWORK_TYPES:
        raise ValueError(f"Unknown mounting type: {mounting_type!r}")
    shared = {k: getattr(artwork, k) for k in _SHARED_FIELDS}
    parked = dict(artwork.retained_hardware)
    parked.update({f: getattr(artwork, f) for f in HARDWARE_FIELDS[artwork.mounting_type]})
    restored = {f: parked.pop(f) for f in HARDWARE_FIELDS[mounting_type] if f in parked}
    if mounting_type == "wire":
        restored.setdefault("hanger_offset", default_hanger_offset(units))
    return ARTWORK_TYPES[mounting_type](**shared, **restored, retained_hardware=parked)


def update_artwork(config: PlacementConfig, artwork_id: ArtworkId, field: str, value: Any) -> PlacementConfig:
    """Set one field of one artwork.

    Numeric fields are coerced (blank/invalid -> 0); `mounting_type` swaps the
    variant. Hardware fields of the other mounting type are stored in
    `retained_hardware` and take effect after a switch. Unknown fields raise ValueError.
    """

    def edit(a: Union[WireArtwork, DRingArtwork]) -> Union[WireArtwork, DRingArtwork]:
        if a.id != artwork_id:
            return a
        if field == "mounting_type":
            return switch_mounting(a, str(value), config.units)
        if field in _NOT_EDITABLE:
            raise ValueError(f"{type(a).__name__} has no editable field {field!r}")
        if field in type(a).model_fields:
            return a.model_copy(update={field: to_number_or_zero(value)})
        if any(field in fields for fields in HARDWARE_FIELDS.values()):
            parked = {**a.retained_hardware, field: to_number_or_zero(value)}
            return a.model_copy(update={"retained_hardware": parked})
        raise ValueError(f"{type(a).__name__} has no editable field {field!r}")

    return config.model_copy(update={"artworks": [edit(a) for a in config.artworks]})


def update_layout(config: PlacementConfig, **fields: Any) -> PlacementConfig:
    """Merge layout fields through validation (rows/cols clamp to >= 1)."""
    merged = {**config.layout.model_dump(), **fields}
    return config.model_copy(update={"layout": Layout.model_validate(merged)})


def set_configuration(config: PlacementConfig, configuration: Configuration) -> PlacementConfig:
    """Switch arrangement mode.

    Single keeps only the first artwork; multi-artwork modes always get at
    least two artworks so there is something to arrange.
    """
    artworks = list(config.artworks)
    if configuration == "single" and len(artworks) > 1:
        artworks = artworks[:1]
    elif configuration != "single" and len(artworks) == 1:
        artworks.append(blank_artwork(config, next_artwork_id(config)))
    logger.debug(f"Configuration {config.configuration} -> {configuration} ({len(artworks)} artwork(s))")
    return PlacementConfig.model_validate(
        {**config.model_dump(exclude={"artworks"}), "configuration": configuration, "artworks": artworks}
    )


def toggle_units(config: PlacementConfig) -> PlacementConfig:
    return convert_units(config, "inches" if config.units == "cm" else "cm")
