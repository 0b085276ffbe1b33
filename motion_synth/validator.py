from __future__ import annotations

import math
from numbers import Real
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np
from rich.console import Console
from rich.markup import escape

from .easing import EASING_FUNCTIONS
from .geometry import angle_between, format_vector
from .types import BoundingBox, CameraCommand, CameraConstraints, ValidationResult, Vector3

PATH_VIOLATION_BOUNDING_BOX = "PATH_VIOLATION_BOUNDING_BOX"
PATH_VIOLATION_SPEED = "PATH_VIOLATION_SPEED"
PATH_VIOLATION_ANGLE = "PATH_VIOLATION_ANGLE"


def is_finite_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def read_vector(value: Any) -> Optional[np.ndarray]:
    """Return the vector as a float array, or None if it is not a finite 3-component vector."""
    if isinstance(value, Vector3):
        components = [value.x, value.y, value.z]
    elif isinstance(value, Mapping):
        if not all(key in value for key in ("x", "y", "z")):
            return None
        components = [value["x"], value["y"], value["z"]]
    elif isinstance(value, (list, tuple, np.ndarray)):
        if len(value) != 3:
            return None
        components = list(value)
    else:
        return None
    if not all(is_finite_number(c) for c in components):
        return None
    return np.array(components, dtype=np.float64)


def command_field(command: Any, name: str) -> Any:
    if isinstance(command, Mapping):
        return command.get(name)
    return getattr(command, name, None)


class CommandValidator:
    """Stateless checks on a proposed waypoint list, run before any path processing."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)

    def _warn(self, message: str) -> None:
        self.console.print(f"[yellow]CommandValidator: {message}[/yellow]")

    def validate(
        self,
        commands: Sequence[Any],
        bounding_box: Optional[BoundingBox] = None,
        constraints: Optional[CameraConstraints] = None,
    ) -> ValidationResult:
        if not commands:
            self._warn("Command list is empty, nothing to validate.")
            return ValidationResult.ok()

        structural = self.check_structure(commands)
        if structural:
            self._warn(f"Structural validation failed: {len(structural)} error(s).")
            return ValidationResult.fail("structural", *structural)

        positions = [read_vector(command_field(c, "position")) for c in commands]
        targets = [read_vector(command_field(c, "target")) for c in commands]
        durations = [float(command_field(c, "duration")) for c in commands]

        if bounding_box is None:
            self._warn("Object bounds not provided; skipping bounding box validation.")
        else:
            violation = self.check_bounding_box(positions, bounding_box)
            if violation is not None:
                self.console.print(f"[red]CommandValidator: {violation}[/red]")
                return ValidationResult.fail("bounding_box", violation)

        limits = self.check_motion_limits(positions, targets, durations, constraints)
        if limits:
            self._warn(f"Motion limit validation failed: {len(limits)} error(s).")
            return ValidationResult.fail("motion_limits", *limits)
        return ValidationResult.ok()

    def check_structure(self, commands: Sequence[Any]) -> List[str]:
        errors: List[str] = []
        for index, command in enumerate(commands):
            if not isinstance(command, (CameraCommand, Mapping)):
                errors.append(f"command {index}: expected an object with position, target and duration")
                continue
            for name in ("position", "target"):
                if read_vector(command_field(command, name)) is None:
                    errors.append(f"command {index}: {name} must be a finite 3-component vector")
            duration = command_field(command, "duration")
            if not is_finite_number(duration) or duration < 0:
                errors.append(f"command {index}: duration must be a finite non-negative number (got {duration!r})")
            easing = command_field(command, "easing")
            if easing is not None and (not isinstance(easing, str) or easing not in EASING_FUNCTIONS):
                self._warn(f"command {index}: unknown easing {escape(repr(easing))}, linear will be used.")
        return errors

    def check_bounding_box(self, positions: Sequence[np.ndarray], bounding_box: BoundingBox) -> Optional[str]:
        for index, position in enumerate(positions):
            if bounding_box.contains_point(Vector3.from_array(position)):
                return (
                    f"{PATH_VIOLATION_BOUNDING_BOX}: camera position {format_vector(position)} "
                    f"enters object bounds at command {index}"
                )
        return None

    def check_motion_limits(
        self,
        positions: Sequence[np.ndarray],
        targets: Sequence[np.ndarray],
        durations: Sequence[float],
        constraints: Optional[CameraConstraints],
    ) -> List[str]:
        if constraints is None or (constraints.max_speed is None and constraints.max_angle_change is None):
            return []

        errors: List[str] = []
        for index in range(1, len(positions)):
            if constraints.max_speed is not None:
                travelled = float(np.linalg.norm(positions[index] - positions[index - 1]))
                duration = durations[index]
                if travelled > 0 and (duration <= 0 or travelled / duration > constraints.max_speed):
                    speed = math.inf if duration <= 0 else travelled / duration
                    errors.append(
                        f"{PATH_VIOLATION_SPEED}: command {index} moves at {speed:.3f} units/s "
                        f"(max {constraints.max_speed:.3f})"
                    )
            if constraints.max_angle_change is not None:
                before = targets[index - 1] - positions[index - 1]
                after = targets[index] - positions[index]
                change = math.degrees(angle_between(before, after))
                if change > constraints.max_angle_change:
                    errors.append(
                        f"{PATH_VIOLATION_ANGLE}: command {index} turns {change:.1f} degrees "
                        f"(max {constraints.max_angle_change:.1f})"
                    )
        return errors
