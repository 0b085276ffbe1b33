from __future__ import annotations

import math
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from rich.console import Console
from rich.markup import escape

from .config import PathConfig
from .geometry import angle_between, format_vector, look_at_quaternion, normalize_quaternion, squared_distance
from .results import PathDegenerate, PathError, PathOk, PathResult, ProcessedPathData
from .spline import CentripetalCatmullRom
from .types import CameraCommand
from .validator import command_field, is_finite_number, read_vector


class _Waypoint(NamedTuple):
    position: np.ndarray
    target: np.ndarray
    duration: float
    easing: Optional[str]


class PathProcessor:
    """Turns a sparse waypoint list into a dense, evenly sampled camera trajectory."""

    def __init__(self, config: Optional[PathConfig] = None, console: Optional[Console] = None) -> None:
        self.config = config or PathConfig()
        self.console = console or Console(stderr=True)

    def _warn(self, message: str) -> None:
        self.console.print(f"[yellow]PathProcessor: {message}[/yellow]")

    def process(
        self,
        commands: Sequence[Union[CameraCommand, Any]],
        initial_orientation: Sequence[float],
    ) -> PathResult:
        if not commands:
            self._warn("No commands provided.")
            return PathError(kind="empty", message="No commands provided.")

        try:
            initial = normalize_quaternion(initial_orientation)
        except (TypeError, ValueError):
            return PathError(
                kind="structural",
                message="initial orientation must be a finite, non-zero (x, y, z, w) quaternion",
                field_name="initial_orientation",
            )

        waypoints: List[_Waypoint] = []
        for index, command in enumerate(commands):
            checked = self._coerce(index, command)
            if isinstance(checked, PathError):
                self.console.print(f"[red]PathProcessor: {escape(checked.message)}[/red]")
                return checked
            waypoints.append(checked)

        quaternions = self.compute_orientations(waypoints, initial)
        durations = [wp.duration for wp in waypoints]
        total_duration = self.total_duration(durations)

        positions = [wp.position for wp in waypoints]
        filtered, waypoint_durations = self.deduplicate(positions, durations)

        def build(samples: np.ndarray) -> ProcessedPathData:
            return ProcessedPathData(
                sampled_positions=samples,
                keyframe_quaternions=quaternions,
                segment_durations=durations,
                total_duration=total_duration,
                waypoint_durations=waypoint_durations,
                segment_easings=[wp.easing for wp in waypoints],
            )

        if len(filtered) == 1:
            self._warn(f"Only one unique position {format_vector(filtered[0])}; holding it for the whole path.")
            samples = np.tile(filtered[0], self.sample_count(total_duration))
            return PathDegenerate(data=build(samples), reason="single_position")

        if len(filtered) == 2:
            augmented = [p.copy() for p in filtered]
        else:
            augmented = self.blend_corners(filtered)

        control_points = [p for p in augmented if np.all(np.isfinite(p))]
        if len(control_points) < 2:
            self.console.print(
                "[red]PathProcessor: fewer than 2 usable control points; falling back to an origin curve.[/red]"
            )
            curve = CentripetalCatmullRom([np.zeros(3), np.zeros(3)], self.config.arc_length_divisions)
            return PathDegenerate(data=build(self.sample_curve(curve, total_duration)), reason="origin_fallback")

        curve = CentripetalCatmullRom(control_points, self.config.arc_length_divisions)
        return PathOk(data=build(self.sample_curve(curve, total_duration)))

    def _coerce(self, index: int, command: Any) -> Union[_Waypoint, PathError]:
        # read fields as-is: "1", True or ["0", "0", "0"] are malformed, not coercible
        if not isinstance(command, (CameraCommand, Mapping)):
            return PathError(
                kind="structural",
                message=f"command {index}: expected an object with position, target and duration",
                index=index,
            )

        vectors = {}
        for name in ("position", "target"):
            arr = read_vector(command_field(command, name))
            if arr is None:
                return PathError(
                    kind="structural",
                    message=f"command {index}: {name} must be a finite 3-component vector",
                    index=index,
                    field_name=name,
                )
            vectors[name] = arr

        duration = command_field(command, "duration")
        if not is_finite_number(duration) or duration < 0:
            return PathError(
                kind="structural",
                message=f"command {index}: duration must be a finite non-negative number (got {duration!r})",
                index=index,
                field_name="duration",
            )

        easing = command_field(command, "easing")
        if easing is not None and not isinstance(easing, str):
            self._warn(f"Command {index}: ignoring non-string easing {escape(repr(easing))}.")
            easing = None
        return _Waypoint(
            position=vectors["position"],
            target=vectors["target"],
            duration=float(duration),
            easing=easing,
        )

    def compute_orientations(self, waypoints: Sequence[_Waypoint], initial: np.ndarray) -> np.ndarray:
        """Initial orientation followed by one look-at quaternion per waypoint."""
        eps_sq = self.config.epsilon * self.config.epsilon
        quaternions = [initial]
        previous = initial
        for index, wp in enumerate(waypoints):
            if squared_distance(wp.position, wp.target) > eps_sq:
                current = look_at_quaternion(wp.position, wp.target)
            else:
                self._warn(
                    f"Command {index}: position and target coincide at {format_vector(wp.position)}; "
                    "reusing previous orientation."
                )
                current = previous
            quaternions.append(current)
            previous = current
        return np.stack(quaternions)

    def total_duration(self, durations: Sequence[float]) -> float:
        total = float(sum(durations))
        if total <= self.config.epsilon:
            return self.config.epsilon
        return total

    def sample_count(self, total_duration: float) -> int:
        return max(2, int(math.ceil(self.config.sample_rate * total_duration)))

    def deduplicate(
        self, positions: Sequence[np.ndarray], durations: Sequence[float]
    ) -> Tuple[List[np.ndarray], List[float]]:
        """Drop positions that coincide with the previously kept one.

        A dropped waypoint's duration is added to the most recently kept
        point, so the summed duration is unchanged.
        """
        eps_sq = self.config.epsilon * self.config.epsilon
        kept = [np.asarray(positions[0], dtype=np.float64)]
        kept_durations = [float(durations[0])]
        for position, duration in zip(positions[1:], durations[1:]):
            position = np.asarray(position, dtype=np.float64)
            if squared_distance(position, kept[-1]) > eps_sq:
                kept.append(position)
                kept_durations.append(float(duration))
            else:
                kept_durations[-1] += float(duration)
        merged = len(positions) - len(kept)
        if merged:
            self._warn(f"Merged {merged} coincident waypoint(s).")
        return kept, kept_durations

    def blend_corners(self, points: Sequence[np.ndarray]) -> List[np.ndarray]:
        """Replace every sharp interior corner with two rounding points.

        Endpoints are always kept. Near-reversals are left alone, as are
        corners with a zero-length adjacent segment.
        """
        pts = [np.asarray(p, dtype=np.float64) for p in points]
        if len(pts) < 3:
            return [p.copy() for p in pts]

        cfg = self.config
        eps_sq = cfg.epsilon * cfg.epsilon
        min_angle = math.radians(cfg.corner_angle_deg)
        max_angle = math.radians(180.0 - cfg.reversal_margin_deg)

        augmented = [pts[0].copy()]
        for i in range(1, len(pts) - 1):
            corner = pts[i]
            v_in = corner - pts[i - 1]
            v_out = pts[i + 1] - corner
            in_sq = float(np.dot(v_in, v_in))
            out_sq = float(np.dot(v_out, v_out))
            if in_sq <= eps_sq or out_sq <= eps_sq:
                self._warn(f"Zero-length segment next to waypoint {i}; corner not blended.")
                augmented.append(corner.copy())
                continue

            angle = angle_between(v_in, v_out)
            if not (min_angle < angle < max_angle):
                augmented.append(corner.copy())
                continue

            len_in = math.sqrt(in_sq)
            len_out = math.sqrt(out_sq)
            shorter = min(len_in, len_out)
            offset = min(max(shorter * cfg.blend_offset_fraction, cfg.blend_min_offset), shorter * cfg.blend_max_offset_factor)
            augmented.append(corner - (v_in / len_in) * offset)
            augmented.append(corner + (v_out / len_out) * offset)
        augmented.append(pts[-1].copy())
        return augmented

    def sample_curve(self, curve: CentripetalCatmullRom, total_duration: float) -> np.ndarray:
        count = self.sample_count(total_duration)
        u = np.clip(np.arange(count, dtype=np.float64) / (count - 1), 0.0, 1.0)
        return curve.get_points_at(u).reshape(-1)
