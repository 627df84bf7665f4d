from __future__ import annotations
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError


def format_validation_error(e: ValidationError) -> str:
    """One line per problem, located by dotted path (e.g. ``artworks.2.mounting_type: ...``).

    Artwork positions are reported 1-based, like everywhere else in the tool output.
    """
    lines = []
    for err in e.errors():
        parts = []
        loc = list(err.get("loc", ()))
        for i, part in enumerate(loc):
            if isinstance(part, int):
                parts.append(str(part + 1))
            elif i > 0 and isinstance(loc[i - 1], int) and part in ("wire", "dring"):
                # discriminated-union branch tag, not a field
                continue
            else:
                parts.append(str(part))
        where = ".".join(parts) or "<root>"
        lines.append(f"{where}: {err.get('msg', 'invalid value')}")
    return "; ".join(lines)


def validate_inputs(model: Optional[Type[BaseModel]], raw: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Returns (validated_dict, error_message). If model is None, returns raw as-is.
    """
    if model is None:
        return raw, None
    if not isinstance(raw, dict):
        return {}, f"<root>: expected a JSON object, got {type(raw).__name__}"
    try:
        obj = model.model_validate(raw)
        return obj.model_dump(), None
    except ValidationError as e:
        return {}, format_validation_error(e)
