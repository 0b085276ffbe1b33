from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from scipy.spatial.transform import Rotation as R

WORLD_UP = np.array([0.0, 1.0, 0.0])
IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0])


def as_vector(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64).reshape(3)


def squared_distance(a: np.ndarray, b: np.ndarray) -> float:
    delta = a - b
    return float(np.dot(delta, delta))


def normalize(v: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(v))
    if length == 0.0:
        return np.zeros(3)
    return v / length


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Unsigned angle between two vectors in radians, 0 when either is zero-length."""
    denominator = math.sqrt(float(np.dot(a, a)) * float(np.dot(b, b)))
    if denominator == 0.0:
        return 0.0
    cosine = float(np.dot(a, b)) / denominator
    return math.acos(max(-1.0, min(1.0, cosine)))


def look_at_matrix(eye: np.ndarray, target: np.ndarray, up: np.ndarray = WORLD_UP) -> np.ndarray:
    """Rotation whose local -Z axis points from eye towards target.

    Columns are the camera's right, up and backward axes in world space.
    """
    z = eye - target
    if float(np.dot(z, z)) == 0.0:
        z = np.array([0.0, 0.0, 1.0])
    z = normalize(z)

    x = np.cross(up, z)
    if float(np.dot(x, x)) == 0.0:
        # looking straight along up: nudge forward so the basis is defined
        z = z.copy()
        if abs(up[2]) == 1.0:
            z[0] += 0.0001
        else:
            z[2] += 0.0001
        z = normalize(z)
        x = np.cross(up, z)
    x = normalize(x)
    y = np.cross(z, x)
    return np.column_stack([x, y, z])


def look_at_quaternion(eye: np.ndarray, target: np.ndarray, up: np.ndarray = WORLD_UP) -> np.ndarray:
    """Quaternion (x, y, z, w) rotating the canonical forward axis (-Z) to face target from eye."""
    return R.from_matrix(look_at_matrix(eye, target, up)).as_quat()


def normalize_quaternion(q: Sequence[float]) -> np.ndarray:
    arr = np.asarray(q, dtype=np.float64).reshape(4)
    norm = float(np.linalg.norm(arr))
    if norm == 0.0 or not math.isfinite(norm):
        raise ValueError("quaternion must be finite and non-zero")
    return arr / norm


def format_vector(v: Sequence[float]) -> str:
    return "(" + ", ".join(f"{float(c):.3f}" for c in v) + ")"
