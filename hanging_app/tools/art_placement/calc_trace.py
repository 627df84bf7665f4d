from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .models import round_half_up


@dataclass(frozen=True)
class TraceMeta:
    tool_id: str
    tool_version: str
    report_version: str
    timestamp: str
    units_system: str
    input_hash: str


@dataclass(frozen=True)
class TraceInput:
    id: str
    label: str
    value: Any
    units: str
    source: str
    notes: str = ""


@dataclass(frozen=True)
class Assumption:
    id: str
    text: str


@dataclass(frozen=True)
class CalcVar:
    symbol: str
    description: str
    value: Any
    units: str
    source: str


@dataclass(frozen=True)
class CalcResult:
    value: float
    units: str


@dataclass(frozen=True)
class Reference:
    type: str  # "derived" (function the value comes from) | "assumption"
    ref: str


@dataclass
class CalcStep:
    id: str
    section: str
    title: str
    output_symbol: str
    output_description: str
    equation_latex: str
    substitution_latex: str
    variables: List[CalcVar]
    result_unrounded: CalcResult
    decimals: int
    result_rounded: CalcResult
    references: List[Reference]


@dataclass
class CalcTrace:
    """Reproducible record of one placement run.

    All exports (HTML/PDF/Excel/JSON/CSV) are rendered from this object.
    """

    meta: TraceMeta
    inputs: List[TraceInput] = field(default_factory=list)
    assumptions: List[Assumption] = field(default_factory=list)
    steps: List[CalcStep] = field(default_factory=list)
    tables: Dict[str, Any] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        *,
        tool_id: str,
        tool_version: str,
        inputs: Dict[str, Any],
        units_system: str = "cm",
        report_version: str = "1.0",
        input_hash: Optional[str] = None,
    ) -> "CalcTrace":
        """Create a new CalcTrace with deterministic input_hash and a flat input listing.

        Nested inputs (artwork lists, layout) are listed as dotted ids,
        e.g. ``artworks.1.width``. Length-valued inputs carry `units_system`.
        """

        if input_hash is None:
            input_hash = compute_input_hash(inputs)

        meta = TraceMeta(
            tool_id=str(tool_id),
            tool_version=str(tool_version),
            report_version=str(report_version),
            timestamp=datetime.now().isoformat(timespec="seconds"),
            units_system=str(units_system),
            input_hash=str(input_hash),
        )

        flat = flatten_inputs(inputs)
        trace_inputs = [
            TraceInput(
                id=k,
                label=_default_label(k),
                value=flat[k],
                units=units_system if _is_length(k, flat[k]) else "-",
                source="user",
            )
            for k in sorted(flat)
        ]
        return cls(meta=meta, inputs=trace_inputs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def dump_trace_json(trace: CalcTrace, path: str) -> None:
    Path(path).write_text(
        json.dumps(trace.to_dict(), indent=2, sort_keys=True, default=str),
        encoding="utf-8",
    )


def flatten_inputs(inputs: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in inputs.items():
        key = f"{prefix}{k}"
        if isinstance(v, dict):
            out.update(flatten_inputs(v, prefix=f"{key}."))
        elif isinstance(v, (list, tuple)):
            for i, item in enumerate(v, start=1):
                if isinstance(item, dict):
                    out.update(flatten_inputs(item, prefix=f"{key}.{i}."))
                else:
                    out[f"{key}.{i}"] = item
        else:
            out[key] = v
    return out


_NON_LENGTH_KEYS = ("id", "rows", "cols")


def _is_length(key: str, value: Any) -> bool:
    return isinstance(value, float) and key.rsplit(".", 1)[-1] not in _NON_LENGTH_KEYS


def _default_label(key: str) -> str:
    return key.replace("_", " ").replace(".", " / ")


def _normalize(v: Any) -> Any:
    if isinstance(v, float):
        # Stable float repr for hashing (keeps determinism across platforms)
        return float(f"{v:.12g}")
    if isinstance(v, dict):
        return {k: _normalize(v[k]) for k in sorted(v.keys())}
    if isinstance(v, (list, tuple)):
        return [_normalize(x) for x in v]
    return v


def compute_input_hash(inputs: Dict[str, Any]) -> str:
    """Deterministic hash computed from normalized, sorted inputs."""
    payload = json.dumps(_normalize(inputs), sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]


def _format_value_units(value: Any, units: str) -> str:
    if isinstance(value, (int, float)):
        return f"{value:g}\\,\\mathrm{{{units}}}" if units and units != "-" else f"{value:g}"
    return f"{value}\\,\\mathrm{{{units}}}" if units and units != "-" else str(value)


def compute_step(
    trace: CalcTrace,
    *,
    id: str,
    section: str,
    title: str,
    output_symbol: str,
    output_description: str,
    equation_latex: str,
    variables: List[CalcVar],
    compute_fn: Callable[[], float],
    units: str,
    references: List[Reference],
    decimals: int = 2,
) -> float:
    """Evaluate one equation, append it to the trace and return the rounded value.

    The substitution line is the equation with every variable symbol replaced
    by its value, so a reader can redo the arithmetic by hand.
    """

    if not id or not section or not title:
        raise ValueError("compute_step requires non-empty id/section/title.")

    unrounded = float(compute_fn())
    rounded = round_half_up(unrounded, decimals)

    # Longest symbols first, so no shorter symbol matches inside a longer one.
    substitution = equation_latex
    for v in sorted(variables, key=lambda a: -len(a.symbol)):
        substitution = substitution.replace(v.symbol, _format_value_units(v.value, v.units))

    trace.steps.append(
        CalcStep(
            id=id,
            section=section,
            title=title,
            output_symbol=output_symbol,
            output_description=output_description,
            equation_latex=equation_latex,
            substitution_latex=substitution,
            variables=list(variables),
            result_unrounded=CalcResult(value=unrounded, units=units),
            decimals=decimals,
            result_rounded=CalcResult(value=rounded, units=units),
            references=list(references),
        )
    )
    return rounded
