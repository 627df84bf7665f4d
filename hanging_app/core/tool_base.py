from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Type

from pydantic import BaseModel

@dataclass(frozen=True)
class ToolMeta:
    id: str
    name: str
    category: str
    version: str
    description: str

class ToolBase(Protocol):
    """
    Tool contract.

    Tools declare an `InputModel` (Pydantic) for typed inputs so callers get
    validation for free, and expose:
      - compute(inputs): pure calculation, no files written
      - run_batch(inputs): calculation + calc package exports
    """
    meta: ToolMeta
    InputModel: Optional[Type[BaseModel]]

    def default_inputs(self) -> Dict[str, Any]:
        ...

    def compute(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def run_batch(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        ...
