from __future__ import annotations

from typing import Any, Dict, Union

from loguru import logger

from .constants import CM_PER_INCH, CONVERSION_DECIMALS
from .models import HARDWARE_FIELDS, DRingArtwork, Layout, PlacementConfig, Units, WireArtwork, round_half_up

# Length-valued fields per record type; everything else (ids, counts, enums) is left alone.
_ARTWORK_DIMS = ("width", "height")
_LAYOUT_LENGTHS = ("horizontal_gap", "vertical_gap")
_CONFIG_LENGTHS = ("target_centroid", "wall_width")


def conversion_factor(from_units: Units, to_units: Units) -> float:
    if from_units == to_units:
        return 1.0
    return CM_PER_INCH if to_units == "cm" else 1.0 / CM_PER_INCH


def convert_length(value: float, factor: float) -> float:
    """Scale one stored length and round to one decimal.

    Zero means "unset" and stays exactly zero so blank fields stay blank.
    """
    if value == 0:
        return 0.0
    return round_half_up(value * factor, CONVERSION_DECIMALS)


def _scaled(fields: tuple, record: Any, factor: float) -> Dict[str, float]:
    return {f: convert_length(getattr(record, f), factor) for f in fields}


def convert_artwork(artwork: Union[WireArtwork, DRingArtwork], factor: float) -> Union[WireArtwork, DRingArtwork]:
    update = _scaled(_ARTWORK_DIMS + HARDWARE_FIELDS[artwork.mounting_type], artwork, factor)
    # values parked from the other mounting type are lengths too
    update["retained_hardware"] = {k: convert_length(v, factor) for k, v in artwork.retained_hardware.items()}
    return artwork.model_copy(update=update)


def convert_layout(layout: Layout, factor: float) -> Layout:
    return layout.model_copy(update=_scaled(_LAYOUT_LENGTHS, layout, factor))


def convert_units(config: PlacementConfig, to_units: Units) -> PlacementConfig:
    """Return a copy of `config` with every length re-expressed in `to_units`."""
    if to_units == config.units:
        return config

    factor = conversion_factor(config.units, to_units)
    logger.debug(f"Converting configuration {config.units} -> {to_units} (factor {factor:.6g})")

    update: Dict[str, Any] = _scaled(_CONFIG_LENGTHS, config, factor)
    update["units"] = to_units
    update["artworks"] = [convert_artwork(a, factor) for a in config.artworks]
    update["layout"] = convert_layout(config.layout, factor)
    return config.model_copy(update=update)
