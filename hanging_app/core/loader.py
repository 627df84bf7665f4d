from __future__ import annotations
import importlib
import pkgutil
from typing import List
from loguru import logger
from .tool_base import ToolBase

TOOLS_PKG = "hanging_app.tools"

def discover_tools() -> List[ToolBase]:
    """
    Tools are subpackages of hanging_app.tools exposing `TOOL` (usually via a
    lazy module __getattr__). A package that fails to import is logged and skipped.
    """
    tools: List[ToolBase] = []
    pkg = importlib.import_module(TOOLS_PKG)
    for m in pkgutil.iter_modules(pkg.__path__):
        if not m.ispkg:
            continue
        mod_name = f"{TOOLS_PKG}.{m.name}"
        try:
            tool = getattr(importlib.import_module(mod_name), "TOOL", None)
        except Exception as e:
            logger.exception(f"Failed loading tool {mod_name}: {e}")
            continue
        if tool is None:
            logger.warning(f"Package {mod_name} has no TOOL export; skipping.")
            continue
        tools.append(tool)
    tools.sort(key=lambda t: (t.meta.category.lower(), t.meta.name.lower()))
    return tools

def get_tool(tool_id: str) -> ToolBase:
    for t in discover_tools():
        if t.meta.id == tool_id:
            return t
    raise KeyError(f"No tool with id {tool_id!r}")
