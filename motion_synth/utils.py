from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .types import EnvironmentalAnalysis, Vector3


def extract_command_list(data: Any) -> List[Any]:
    """Pull the waypoint list out of a language-model payload.

    Accepts a bare list or an object with a ``keyframes`` or ``commands``
    list. Individual entries are returned untouched; checking them is the
    validator's job.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("keyframes", "commands"):
            if isinstance(data.get(key), list):
                return data[key]
    raise ValueError("Expected a list of camera commands or an object with 'keyframes' or 'commands'")


def load_json(path: str) -> Any:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(p, "r", encoding="utf-8") as f:
        return json.load(f)


def load_commands(path: str) -> List[Any]:
    return extract_command_list(load_json(path))


def parse_vector(text: str) -> Vector3:
    """Parse ``"x,y,z"`` into a Vector3."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 3:
        raise ValueError(f"Expected three comma-separated numbers, got {text!r}")
    return Vector3(x=float(parts[0]), y=float(parts[1]), z=float(parts[2]))


def analysis_to_dict(analysis: EnvironmentalAnalysis) -> Dict[str, Any]:
    return analysis.model_dump(exclude={"performance"})
