from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

from .errors import ProcessingError, StructuralError


def _frozen(values: Any, dtype=np.float64) -> np.ndarray:
    arr = np.array(values, dtype=dtype, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class ProcessedPathData:
    """Dense, playback-ready camera trajectory produced for one request."""

    sampled_positions: np.ndarray  # flat (x1, y1, z1, x2, y2, z2, ...)
    keyframe_quaternions: np.ndarray  # (n_commands + 1, 4), row 0 is the initial orientation
    segment_durations: Tuple[float, ...]  # one per original command
    total_duration: float
    waypoint_durations: Tuple[float, ...] = ()  # one per deduplicated position
    segment_easings: Tuple[Optional[str], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "sampled_positions", _frozen(self.sampled_positions).reshape(-1))
        object.__setattr__(self, "keyframe_quaternions", _frozen(self.keyframe_quaternions).reshape(-1, 4))
        object.__setattr__(self, "segment_durations", tuple(float(d) for d in self.segment_durations))
        object.__setattr__(self, "waypoint_durations", tuple(float(d) for d in self.waypoint_durations))
        object.__setattr__(self, "segment_easings", tuple(self.segment_easings))

    @property
    def sample_count(self) -> int:
        return self.sampled_positions.shape[0] // 3

    def positions(self) -> np.ndarray:
        return self.sampled_positions.reshape(-1, 3)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sampled_positions": self.sampled_positions.tolist(),
            "keyframe_quaternions": self.keyframe_quaternions.tolist(),
            "segment_durations": list(self.segment_durations),
            "waypoint_durations": list(self.waypoint_durations),
            "segment_easings": list(self.segment_easings),
            "total_duration": self.total_duration,
            "sample_count": self.sample_count,
        }


@dataclass(frozen=True)
class PathOk:
    data: ProcessedPathData
    status: str = field(default="ok", init=False)

    def unwrap(self) -> ProcessedPathData:
        return self.data


@dataclass(frozen=True)
class PathDegenerate:
    """A handled but suspicious input: the data is usable, the reason should be logged upstream."""

    data: ProcessedPathData
    reason: str
    status: str = field(default="degenerate", init=False)

    def unwrap(self) -> ProcessedPathData:
        return self.data


@dataclass(frozen=True)
class PathError:
    kind: str  # "empty" or "structural"
    message: str
    index: Optional[int] = None
    field_name: Optional[str] = None
    status: str = field(default="error", init=False)

    def unwrap(self) -> ProcessedPathData:
        if self.kind == "structural":
            raise StructuralError(self.message, index=self.index, field=self.field_name, component="PathProcessor")
        raise ProcessingError(self.message)


PathResult = Union[PathOk, PathDegenerate, PathError]
