from __future__ import annotations

from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


class EnvironmentSize(BaseModel):
    width: float = Field(50.0, gt=0)
    height: float = Field(50.0, gt=0)
    depth: float = Field(50.0, gt=0)


class ConstraintFactors(BaseModel):
    """Multipliers applied to the object height to derive camera constraints."""

    min_height: float = 0.5
    max_height: float = 3.0
    min_distance: float = 0.8
    max_distance: float = 5.0


class FallbackConstraints(BaseModel):
    """Absolute ranges used when the object is too flat to scale from."""

    min_height: float = 0.1
    max_height: float = 10.0
    min_distance: float = 0.5
    max_distance: float = 25.0


class SolverConfig(BaseModel):
    environment_size: EnvironmentSize = Field(default_factory=EnvironmentSize)
    factors: ConstraintFactors = Field(default_factory=ConstraintFactors)
    fallback: FallbackConstraints = Field(default_factory=FallbackConstraints)
    min_object_height: float = Field(1e-6, ge=0)
    max_speed: Optional[float] = Field(None, gt=0)
    max_angle_change: Optional[float] = Field(None, gt=0, le=180)


class PathConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    sample_rate: int = Field(60, gt=0, description="Samples per second of total duration")
    epsilon: float = Field(1e-6, gt=0)
    corner_angle_deg: float = Field(30.0, gt=0, lt=180)
    reversal_margin_deg: float = Field(6.0, ge=0, lt=180)
    blend_offset_fraction: float = Field(0.3, gt=0, lt=0.5)
    blend_min_offset: float = Field(0.05, ge=0)
    blend_max_offset_factor: float = Field(0.45, gt=0, lt=0.5)
    arc_length_divisions: int = Field(200, ge=1)


class AppConfig(BaseModel):
    solver: SolverConfig = Field(default_factory=SolverConfig)
    path: PathConfig = Field(default_factory=PathConfig)


def load_config(path: str) -> AppConfig:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return AppConfig(**data)
