from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation as R
from scipy.spatial.transform import Slerp

from .easing import get_easing
from .results import ProcessedPathData


def position_at(data: ProcessedPathData, elapsed: float) -> np.ndarray:
    """Camera position after ``elapsed`` seconds, interpolated within the sample buffer."""
    positions = data.positions()
    fraction = min(max(elapsed / data.total_duration, 0.0), 1.0)
    scaled = fraction * (positions.shape[0] - 1)
    i = min(int(np.floor(scaled)), positions.shape[0] - 2)
    w = scaled - i
    return positions[i] * (1.0 - w) + positions[i + 1] * w


def segment_at(data: ProcessedPathData, elapsed: float) -> Tuple[int, float]:
    """Index of the command segment active at ``elapsed`` and the local progress through it."""
    remaining = max(elapsed, 0.0)
    last = len(data.segment_durations) - 1
    for index, duration in enumerate(data.segment_durations):
        if duration <= 0:
            continue
        if remaining < duration:
            return index, remaining / duration
        remaining -= duration
    return last, 1.0


def orientation_at(data: ProcessedPathData, elapsed: float) -> np.ndarray:
    """Orientation (x, y, z, w) after ``elapsed`` seconds.

    Segment ``i`` rotates from keyframe ``i`` to keyframe ``i + 1`` over the
    duration of command ``i``, shaped by that command's easing. Orientation
    is keyed to the authored commands, independent of how many position
    samples or blend points the segment has. At ``elapsed <= 0`` the camera
    holds the initial orientation, even when leading commands take no time.
    """
    quaternions = data.keyframe_quaternions
    if len(data.segment_durations) == 0 or elapsed <= 0:
        return quaternions[0].copy()
    index, local_t = segment_at(data, elapsed)
    easing = data.segment_easings[index] if index < len(data.segment_easings) else None
    t = get_easing(easing)(local_t)
    if t <= 0.0:
        return quaternions[index].copy()
    if t >= 1.0:
        return quaternions[index + 1].copy()
    slerp = Slerp([0.0, 1.0], R.from_quat(quaternions[index : index + 2]))
    return slerp([t]).as_quat()[0]
