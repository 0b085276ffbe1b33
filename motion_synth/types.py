from __future__ import annotations

from typing import Any, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Vector3(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def _from_sequence(cls, value: Any) -> Any:
        # LLM payloads send vectors either as {x,y,z} objects or [x,y,z] lists
        if isinstance(value, (list, tuple, np.ndarray)):
            if len(value) != 3:
                raise ValueError(f"expected 3 components, got {len(value)}")
            return {"x": value[0], "y": value[1], "z": value[2]}
        return value

    @classmethod
    def from_array(cls, values: Any) -> "Vector3":
        arr = np.asarray(values, dtype=float)
        return cls(x=float(arr[0]), y=float(arr[1]), z=float(arr[2]))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def distance_to(self, other: "Vector3") -> float:
        return float(np.linalg.norm(self.to_array() - other.to_array()))


class CameraCommand(BaseModel):
    """One authored waypoint: where the camera is, what it looks at, and how long it takes to get there."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    position: Vector3
    target: Vector3
    duration: float = Field(..., ge=0, description="Seconds spent travelling to this waypoint")
    easing: Optional[str] = Field(None, description="Easing function name")


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: Vector3
    max: Vector3

    @property
    def center(self) -> Vector3:
        return Vector3.from_array((self.min.to_array() + self.max.to_array()) / 2.0)

    @property
    def size(self) -> Vector3:
        return Vector3.from_array(self.max.to_array() - self.min.to_array())

    def contains_point(self, point: Vector3) -> bool:
        # inclusive on every axis, a camera resting on a face is inside
        return (
            self.min.x <= point.x <= self.max.x
            and self.min.y <= point.y <= self.max.y
            and self.min.z <= point.z <= self.max.z
        )


class Dimensions(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    width: float
    height: float
    depth: float


class SceneGeometry(BaseModel):
    """Measured geometry of the analysed object, supplied by the upstream scene analysis."""

    model_config = ConfigDict(frozen=True)

    bounding_box: BoundingBox
    center: Vector3
    dimensions: Optional[Vector3] = None

    def resolved_dimensions(self) -> Vector3:
        return self.dimensions if self.dimensions is not None else self.bounding_box.size


class EnvironmentBounds(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: Vector3
    max: Vector3
    center: Vector3
    dimensions: Dimensions


class ObjectMeasurements(BaseModel):
    model_config = ConfigDict(frozen=True)

    bounding_box: BoundingBox
    center: Vector3
    dimensions: Dimensions
    floor_offset: float = 0.0


class DistanceMeasurements(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: float
    right: float
    front: float
    back: float
    top: float
    bottom: float


class CameraConstraints(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_height: float
    max_height: float
    min_distance: float
    max_distance: float
    max_speed: Optional[float] = Field(None, description="Units per second")
    max_angle_change: Optional[float] = Field(None, description="Degrees between consecutive view directions")


class OperationTiming(BaseModel):
    name: str
    duration: float
    success: bool = True


class PerformanceMetrics(BaseModel):
    start_time: float = 0.0
    end_time: float = 0.0
    duration: float = 0.0
    operations: List[OperationTiming] = Field(default_factory=list)


class EnvironmentalAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    environment: EnvironmentBounds
    object: ObjectMeasurements
    distances: DistanceMeasurements
    camera_constraints: CameraConstraints
    performance: PerformanceMetrics = Field(default_factory=PerformanceMetrics)


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    rule: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, rule: str, *errors: str) -> "ValidationResult":
        return cls(is_valid=False, errors=list(errors), rule=rule)
