from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from hanging_app.core.loader import discover_tools, get_tool
from hanging_app.core.logging import configure_logging
from hanging_app.core.schema_utils import validate_inputs
from hanging_app.core.tool_base import ToolBase
from hanging_app.tools.art_placement import PlacementConfig, compute_placements, convert_units
from hanging_app.tools.art_placement.formatter import describe_result, usage_hint
from hanging_app.tools.art_placement.constants import TOOL_ID


def _load_config(tool: ToolBase, path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return tool.default_inputs()
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _cmd_list(_args: argparse.Namespace) -> int:
    for t in discover_tools():
        print(f"{t.meta.id:<20} {t.meta.name} v{t.meta.version} - {t.meta.description}")
    return 0


def _cmd_compute(args: argparse.Namespace) -> int:
    tool = get_tool(TOOL_ID)
    try:
        raw = _load_config(tool, args.config)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read configuration {args.config}: {e}")
        return 2
    data, err = validate_inputs(tool.InputModel, raw)
    if err:
        logger.error(f"Invalid configuration: {err}")
        return 2
    config = PlacementConfig.model_validate(data)

    if args.units:
        config = convert_units(config, args.units)

    if args.batch:
        res = tool.run_batch(config.model_dump())
        if not res["ok"]:
            logger.error(f"Batch run failed: {res['error']}")
            return 1
        print(f"Calc package written to {res['run_dir']}")
        return 0

    results = compute_placements(config)
    if args.json:
        print(json.dumps([r.model_dump() for r in results], indent=2))
        return 0

    lines: List[str] = []
    for r in results:
        lines.extend(describe_result(r, config.units))
    lines.append("")
    lines.append(usage_hint(results))
    print("\n".join(lines))
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="hanging_app", description="Nail placement calculator for hanging artwork.")
    ap.add_argument("--log-level", default="WARNING", help="Console log level (default: WARNING).")
    sub = ap.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List available tools.")
    p_list.set_defaults(func=_cmd_list)

    p_comp = sub.add_parser("compute", help="Compute nail placements for a JSON configuration.")
    p_comp.add_argument("config", nargs="?", help="Path to a JSON configuration ('-' for stdin; defaults if omitted).")
    p_comp.add_argument("--units", choices=["cm", "inches"], help="Convert the configuration to these units first.")
    p_comp.add_argument("--json", action="store_true", help="Print results as JSON.")
    p_comp.add_argument("--batch", action="store_true", help="Write the full calc package to a run directory.")
    p_comp.set_defaults(func=_cmd_compute)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
