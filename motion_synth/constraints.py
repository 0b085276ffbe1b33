from __future__ import annotations

import math
import time
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from .config import SolverConfig
from .errors import AnalysisError
from .types import (
    CameraConstraints,
    Dimensions,
    DistanceMeasurements,
    EnvironmentalAnalysis,
    EnvironmentBounds,
    ObjectMeasurements,
    OperationTiming,
    PerformanceMetrics,
    SceneGeometry,
    ValidationResult,
    Vector3,
)


class EnvironmentalAnalyzer:
    """Derives the playable camera space and camera constraints from an object's geometry.

    Every operation is a pure function of its arguments and the static
    configuration; the only state is the initialization flag and the timing
    of the last analysis.
    """

    def __init__(self, config: Optional[SolverConfig] = None, console: Optional[Console] = None) -> None:
        self.config = config or SolverConfig()
        self.console = console or Console(stderr=True)
        self.initialized = False
        self._performance = PerformanceMetrics()

    def initialize(self, config: Optional[SolverConfig] = None) -> None:
        if config is not None:
            self.config = config
        self.initialized = True
        size = self.config.environment_size
        self.console.print(
            f"EnvironmentalAnalyzer initialized: environment {size.width} x {size.height} x {size.depth}"
        )

    def analyze_environment(self, geometry: Union[SceneGeometry, Mapping[str, Any]]) -> EnvironmentalAnalysis:
        if not self.initialized:
            raise AnalysisError("Environmental Analyzer not initialized")
        scene = self._coerce_geometry(geometry)

        start = time.perf_counter()
        environment = self._calculate_environment_bounds()
        measured = self._extract_object_measurements(scene, environment)
        distances = self._calculate_distances(environment, measured)
        constraints = self._calculate_camera_constraints(measured)
        end = time.perf_counter()

        self._performance = PerformanceMetrics(
            start_time=start,
            end_time=end,
            duration=end - start,
            operations=[OperationTiming(name="environment_analysis", duration=end - start)],
        )
        return EnvironmentalAnalysis(
            environment=environment,
            object=measured,
            distances=distances,
            camera_constraints=constraints,
            performance=self._performance,
        )

    def _coerce_geometry(self, geometry: Any) -> SceneGeometry:
        if isinstance(geometry, SceneGeometry):
            return geometry
        if not isinstance(geometry, Mapping):
            raise AnalysisError(f"Scene geometry must be a mapping, got {type(geometry).__name__}")
        missing = [key for key in ("bounding_box", "center") if geometry.get(key) is None]
        if missing:
            raise AnalysisError(f"Scene geometry is incomplete: missing {', '.join(missing)}")
        try:
            return SceneGeometry.model_validate(geometry)
        except PydanticValidationError as exc:
            self.console.print(f"[red]EnvironmentalAnalyzer: invalid scene geometry: {exc.error_count()} error(s)[/red]")
            raise AnalysisError(f"Scene geometry is malformed: {exc.errors()[0]['msg']}") from exc

    def get_environment_measurements(self, analysis: EnvironmentalAnalysis) -> Tuple[EnvironmentBounds, ObjectMeasurements]:
        return analysis.environment, analysis.object

    def get_distance_measurements(self, analysis: EnvironmentalAnalysis) -> DistanceMeasurements:
        return analysis.distances

    def get_camera_constraints(self, analysis: EnvironmentalAnalysis) -> CameraConstraints:
        return analysis.camera_constraints

    def get_camera_ranges(self, analysis: EnvironmentalAnalysis) -> Dict[str, Tuple[float, float]]:
        c = analysis.camera_constraints
        return {
            "height": (c.min_height, c.max_height),
            "distance": (c.min_distance, c.max_distance),
        }

    def get_performance_metrics(self) -> PerformanceMetrics:
        return self._performance

    def validate_camera_position(
        self, analysis: EnvironmentalAnalysis, position: Vector3, target: Vector3
    ) -> ValidationResult:
        c = analysis.camera_constraints
        height = position.y
        distance = position.distance_to(target)

        if height < c.min_height or height > c.max_height:
            return ValidationResult.fail(
                "camera_position",
                f"Camera height {height:.3f} outside allowed range [{c.min_height:.3f}, {c.max_height:.3f}]",
            )
        if distance < c.min_distance or distance > c.max_distance:
            return ValidationResult.fail(
                "camera_position",
                f"Camera distance {distance:.3f} outside allowed range [{c.min_distance:.3f}, {c.max_distance:.3f}]",
            )
        return ValidationResult.ok()

    def update_camera_constraints(self, analysis: EnvironmentalAnalysis, floor_offset: float) -> EnvironmentalAnalysis:
        """Re-derive constraints after the object was raised or lowered relative to the floor.

        The height window moves with the object; distance limits do not change.
        """
        if not math.isfinite(floor_offset):
            raise AnalysisError(f"Floor offset must be a finite number, got {floor_offset!r}")
        object_height = analysis.object.dimensions.height
        if floor_offset < -object_height:
            raise AnalysisError(
                f"Floor offset {floor_offset:.3f} would sink the object below the floor (height {object_height:.3f})"
            )
        measured = analysis.object.model_copy(update={"floor_offset": float(floor_offset)})
        base = self._calculate_camera_constraints(measured)
        constraints = base.model_copy(
            update={
                "min_height": base.min_height + floor_offset,
                "max_height": base.max_height + floor_offset,
            }
        )
        return analysis.model_copy(update={"object": measured, "camera_constraints": constraints})

    def _calculate_environment_bounds(self) -> EnvironmentBounds:
        size = self.config.environment_size
        half_width = size.width / 2
        half_depth = size.depth / 2
        return EnvironmentBounds(
            min=Vector3(x=-half_width, y=0.0, z=-half_depth),
            max=Vector3(x=half_width, y=size.height, z=half_depth),
            center=Vector3(x=0.0, y=size.height / 2, z=0.0),
            dimensions=Dimensions(width=size.width, height=size.height, depth=size.depth),
        )

    def _extract_object_measurements(self, scene: SceneGeometry, environment: EnvironmentBounds) -> ObjectMeasurements:
        dims = scene.resolved_dimensions()
        return ObjectMeasurements(
            bounding_box=scene.bounding_box,
            center=scene.center,
            dimensions=Dimensions(width=dims.x, height=dims.y, depth=dims.z),
            floor_offset=scene.bounding_box.min.y - environment.min.y,
        )

    def _calculate_distances(self, environment: EnvironmentBounds, measured: ObjectMeasurements) -> DistanceMeasurements:
        env_min, env_max = environment.min, environment.max
        obj_min, obj_max = measured.bounding_box.min, measured.bounding_box.max
        return DistanceMeasurements(
            left=abs(env_min.x - obj_min.x),
            right=abs(env_max.x - obj_max.x),
            front=abs(env_min.z - obj_min.z),
            back=abs(env_max.z - obj_max.z),
            top=abs(env_max.y - obj_max.y),
            bottom=abs(env_min.y - obj_min.y),
        )

    def _calculate_camera_constraints(self, measured: ObjectMeasurements) -> CameraConstraints:
        height = measured.dimensions.height
        limits = {"max_speed": self.config.max_speed, "max_angle_change": self.config.max_angle_change}

        if height <= self.config.min_object_height:
            fallback = self.config.fallback
            self.console.print(
                f"[yellow]EnvironmentalAnalyzer: object height {height:.3g} is too small to scale from; "
                "using fallback camera ranges.[/yellow]"
            )
            return CameraConstraints(
                min_height=fallback.min_height,
                max_height=fallback.max_height,
                min_distance=fallback.min_distance,
                max_distance=fallback.max_distance,
                **limits,
            )

        factors = self.config.factors
        return CameraConstraints(
            min_height=height * factors.min_height,
            max_height=height * factors.max_height,
            min_distance=height * factors.min_distance,
            max_distance=height * factors.max_distance,
            **limits,
        )
