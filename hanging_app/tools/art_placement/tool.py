from __future__ import annotations

import traceback
from typing import Any, Dict

from hanging_app import __version__
from hanging_app.core.paths import create_run_dir
from hanging_app.core.settings import tool_settings
from hanging_app.core.tool_base import ToolMeta

from .calc_trace import Assumption, CalcTrace, compute_input_hash
from .constants import TOOL_ID
from .engine import compute_placements, compute_placements_with_trace
from .exports import export_all
from .formatter import usage_hint
from .logging_utils import get_run_logger, remove_run_logger_sink
from .models import PlacementConfig
from .units import convert_units

# Settings keys that may override model defaults (lengths are in the settings' units)
_SETTINGS_KEYS = ("target_centroid", "wall_width", "configuration")

ASSUMPTIONS = [
    Assumption(id="A1", text="Vertical values are measured up from the floor; horizontal values from the wall's left edge."),
    Assumption(
        id="A2",
        text="A wire pulled taut rests wire_offset below the top edge; the nail sits hanger_offset above it to absorb sag.",
    ),
    Assumption(id="A3", text="D-rings are symmetric: both holes sit the same distance in from their side edges."),
    Assumption(
        id="A4",
        text=(
            "Stacks and grids are centred as one composite; in a grid, a piece smaller than its cell sits at the "
            "cell's left/bottom edge rather than centred in it."
        ),
    ),
]


class ArtPlacementTool:
    """Nail placement tool.

    - compute(): validated, pure calculation; nothing written to disk.
    - run_batch(): calculation + full calc package exports in a run directory.
    """

    meta = ToolMeta(
        id=TOOL_ID,
        name="Art Placement",
        category="Hanging",
        version=__version__,
        description="Nail heights and positions for wire and D-ring hung artwork, singly, stacked or in a grid.",
    )

    InputModel = PlacementConfig

    def default_inputs(self) -> dict:
        """Model defaults, overridden by the tool's section of the settings file."""
        config = self.InputModel()
        overrides = tool_settings(self.meta.id)
        if overrides.get("units") in ("cm", "inches"):
            config = convert_units(config, overrides["units"])
        data = config.model_dump()
        data.update({k: overrides[k] for k in _SETTINGS_KEYS if k in overrides})
        return self.InputModel.model_validate(data).model_dump()

    def compute(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        model = self.InputModel.model_validate(inputs)
        results = compute_placements(model)
        return {
            "ok": True,
            "units": model.units,
            "results": [r.model_dump() for r in results],
            "usage": usage_hint(results),
        }

    # ------------------------------
    # Batch calculation API (headless)
    # ------------------------------
    def run_batch(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        """Run the full calculation + exports and return results."""

        model = self.InputModel.model_validate(inputs)
        inputs_norm = model.model_dump()
        input_hash = compute_input_hash(inputs_norm)
        run_dir = create_run_dir(self.meta.id, input_hash)
        log, _log_sink = get_run_logger(run_dir, self.meta.id, input_hash)

        try:
            log.info("Starting art placement batch run")
            log.info(f"Inputs (validated): {inputs_norm}")

            trace = CalcTrace.new(
                tool_id=self.meta.id,
                tool_version=self.meta.version,
                units_system=model.units,
                inputs=inputs_norm,
                input_hash=input_hash,
            )
            trace.assumptions.extend(ASSUMPTIONS)

            placements = compute_placements_with_trace(trace, model)
            log.info(f"Computed {len(placements)} placement(s) for '{model.configuration}'")
            if model.configuration == "single" and len(model.artworks) > 1:
                log.warning(f"Single arrangement uses only the first of {len(model.artworks)} artworks")
            if model.configuration == "custom":
                capacity = model.layout.rows * model.layout.cols
                if len(model.artworks) > capacity:
                    log.warning(f"{len(model.artworks) - capacity} artwork(s) do not fit the {model.layout.rows}x{model.layout.cols} grid")

            rows = [p.model_dump() for p in placements]
            trace.tables["placements"] = rows
            results: Dict[str, Any] = {
                "ok": True,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "units": model.units,
                "configuration": model.configuration,
                "results": rows,
                "usage": usage_hint(placements),
            }
            trace.summary = {
                "configuration": model.configuration,
                "units": model.units,
                "artworks_placed": len(placements),
                "nails": sum(2 if p.is_dring else 1 for p in placements),
                "nail_heights": {p.label: p.nail_height for p in placements},
            }

            out_paths = export_all(trace, run_dir, results)
            results["outputs"] = {k: str(v) for k, v in out_paths.items()}

            log.info("Batch run complete")
            return results

        except Exception as e:
            log.exception("Batch run failed")
            return {
                "ok": False,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "error": str(e),
                "traceback": traceback.format_exc(),
            }

        finally:
            remove_run_logger_sink(_log_sink)


TOOL = ArtPlacementTool()