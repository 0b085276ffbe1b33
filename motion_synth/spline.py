from __future__ import annotations

from typing import Sequence

import numpy as np

# knot intervals shorter than this are treated as coincident points
MIN_KNOT_INTERVAL = 1e-4


def _nonuniform_tangents(
    x0: np.ndarray, x1: np.ndarray, x2: np.ndarray, x3: np.ndarray, dt0: float, dt1: float, dt2: float
) -> tuple[np.ndarray, np.ndarray]:
    t1 = (x1 - x0) / dt0 - (x2 - x0) / (dt0 + dt1) + (x2 - x1) / dt1
    t2 = (x2 - x1) / dt1 - (x3 - x1) / (dt1 + dt2) + (x3 - x2) / dt2
    return t1 * dt1, t2 * dt1


def _hermite_coefficients(p1: np.ndarray, p2: np.ndarray, t1: np.ndarray, t2: np.ndarray) -> np.ndarray:
    c0 = p1
    c1 = t1
    c2 = -3 * p1 + 3 * p2 - 2 * t1 - t2
    c3 = 2 * p1 - 2 * p2 + t1 + t2
    return np.stack([c0, c1, c2, c3])


class CentripetalCatmullRom:
    """Open curve through every control point, with mirrored phantom ends and arc-length lookup."""

    def __init__(self, points: Sequence[Sequence[float]], arc_length_divisions: int = 200) -> None:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if pts.shape[0] < 2:
            raise ValueError("a Catmull-Rom curve needs at least 2 control points")
        self.points = pts
        self.arc_length_divisions = int(arc_length_divisions)
        self._coefficients = self._build_segments(pts)
        self._arc_lengths = self._compute_arc_lengths()

    @property
    def segment_count(self) -> int:
        return self._coefficients.shape[0]

    @property
    def length(self) -> float:
        return float(self._arc_lengths[-1])

    @staticmethod
    def _build_segments(pts: np.ndarray) -> np.ndarray:
        count = pts.shape[0]
        first_phantom = 2 * pts[0] - pts[1]
        last_phantom = 2 * pts[-1] - pts[-2]
        coefficients = np.empty((count - 1, 4, 3), dtype=np.float64)
        for i in range(count - 1):
            p0 = pts[i - 1] if i > 0 else first_phantom
            p1 = pts[i]
            p2 = pts[i + 1]
            p3 = pts[i + 2] if i + 2 < count else last_phantom

            # sqrt of the distance, taken on the squared distance
            dt0 = float(np.dot(p1 - p0, p1 - p0)) ** 0.25
            dt1 = float(np.dot(p2 - p1, p2 - p1)) ** 0.25
            dt2 = float(np.dot(p3 - p2, p3 - p2)) ** 0.25
            if dt1 < MIN_KNOT_INTERVAL:
                dt1 = 1.0
            if dt0 < MIN_KNOT_INTERVAL:
                dt0 = dt1
            if dt2 < MIN_KNOT_INTERVAL:
                dt2 = dt1

            t1, t2 = _nonuniform_tangents(p0, p1, p2, p3, dt0, dt1, dt2)
            coefficients[i] = _hermite_coefficients(p1, p2, t1, t2)
        return coefficients

    def get_points(self, t: np.ndarray) -> np.ndarray:
        """Evaluate the curve at curve parameters ``t`` in [0, 1] (not arc-length normalized)."""
        t = np.clip(np.atleast_1d(np.asarray(t, dtype=np.float64)), 0.0, 1.0)
        scaled = t * self.segment_count
        index = np.floor(scaled).astype(int)
        weight = scaled - index
        # the very end of the curve belongs to the last segment at weight 1
        at_end = index >= self.segment_count
        index[at_end] = self.segment_count - 1
        weight[at_end] = 1.0

        c = self._coefficients[index]
        w = weight[:, None]
        return c[:, 0] + w * (c[:, 1] + w * (c[:, 2] + w * c[:, 3]))

    def get_point(self, t: float) -> np.ndarray:
        return self.get_points(np.array([t]))[0]

    def _compute_arc_lengths(self) -> np.ndarray:
        samples = self.get_points(np.linspace(0.0, 1.0, self.arc_length_divisions + 1))
        steps = np.linalg.norm(np.diff(samples, axis=0), axis=1)
        return np.concatenate([[0.0], np.cumsum(steps)])

    def u_to_t(self, u: np.ndarray) -> np.ndarray:
        """Map arc-length fractions ``u`` to curve parameters ``t``."""
        u = np.clip(np.atleast_1d(np.asarray(u, dtype=np.float64)), 0.0, 1.0)
        lengths = self._arc_lengths
        total = lengths[-1]
        if total <= 0.0:
            return u
        last = lengths.shape[0] - 1
        target = u * total
        # index of the last tabulated length strictly below the target
        i = np.searchsorted(lengths, target, side="left") - 1
        i = np.clip(i, 0, last - 1)
        before = lengths[i]
        segment = lengths[i + 1] - before
        fraction = np.divide(target - before, segment, out=np.zeros_like(target), where=segment > 0)
        return np.clip((i + fraction) / last, 0.0, 1.0)

    def get_points_at(self, u: np.ndarray) -> np.ndarray:
        """Evaluate the curve at arc-length fractions ``u`` in [0, 1]."""
        return self.get_points(self.u_to_t(u))

    def get_point_at(self, u: float) -> np.ndarray:
        return self.get_points_at(np.array([u]))[0]
