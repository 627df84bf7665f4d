from __future__ import annotations

import json
from typing import Any, Dict

from loguru import logger

from hanging_app.core.paths import settings_path


def load_settings() -> Dict[str, Any]:
    p = settings_path()
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable settings file {p}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: Dict[str, Any]) -> None:
    p = settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2), encoding="utf-8")


def tool_settings(tool_id: str) -> Dict[str, Any]:
    """Per-tool section of the settings file ({} when absent or malformed)."""
    section = load_settings().get(tool_id, {})
    return section if isinstance(section, dict) else {}
