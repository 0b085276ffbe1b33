import numpy as np
import pytest
from scipy.spatial.transform import Rotation as R

from motion_synth.path_processor import PathProcessor
from motion_synth.playback import orientation_at, position_at, segment_at
from motion_synth.types import CameraCommand

IDENTITY = (0.0, 0.0, 0.0, 1.0)


def _same_rotation(q1, q2):
    return np.isclose(abs(np.dot(q1, q2)), 1.0, atol=1e-9)


class TestPlayback:

    def setup_method(self):
        commands = [
            CameraCommand(position=[0, 0, 0], target=[10, 0, 0], duration=1.0),
            CameraCommand(position=[4, 0, 0], target=[4, 0, -10], duration=2.0, easing="easeInOutQuad"),
            CameraCommand(position=[4, 0, 4], target=[4, 0, 4], duration=1.0),
        ]
        self.data = PathProcessor().process(commands, IDENTITY).unwrap()

    def test_segment_lookup(self):
        assert segment_at(self.data, 0.0) == (0, 0.0)
        assert segment_at(self.data, 0.5) == (0, 0.5)
        assert segment_at(self.data, 2.0) == (1, 0.5)
        assert segment_at(self.data, 10.0) == (2, 1.0)

    def test_orientation_starts_at_initial(self):
        assert _same_rotation(orientation_at(self.data, 0.0), IDENTITY)

    def test_orientation_reaches_each_keyframe(self):
        q = self.data.keyframe_quaternions
        assert _same_rotation(orientation_at(self.data, 1.0), q[1])
        assert _same_rotation(orientation_at(self.data, 4.0), q[3])

    def test_orientation_midway_is_a_slerp(self):
        q = self.data.keyframe_quaternions
        expected_angle = (R.from_quat(q[0]).inv() * R.from_quat(q[1])).magnitude() / 2
        mid = orientation_at(self.data, 0.5)
        assert (R.from_quat(q[0]).inv() * R.from_quat(mid)).magnitude() == pytest.approx(expected_angle)

    def test_easing_shapes_orientation_progress(self):
        q = self.data.keyframe_quaternions
        full = (R.from_quat(q[1]).inv() * R.from_quat(q[2])).magnitude()
        # a quarter of the way through segment 1; easeInOutQuad(0.25) == 0.125
        quarter = orientation_at(self.data, 1.5)
        assert (R.from_quat(q[1]).inv() * R.from_quat(quarter)).magnitude() == pytest.approx(full * 0.125)

    def test_position_endpoints(self):
        assert np.allclose(position_at(self.data, 0.0), (0, 0, 0))
        assert np.allclose(position_at(self.data, 4.0), (4, 0, 4))
        assert np.allclose(position_at(self.data, 99.0), (4, 0, 4))

    def test_zero_duration_first_command_keeps_initial_orientation(self):
        commands = [
            CameraCommand(position=[0, 0, 0], target=[10, 0, 0], duration=0.0),
            CameraCommand(position=[4, 0, 0], target=[4, 0, -10], duration=1.0),
        ]
        data = PathProcessor().process(commands, IDENTITY).unwrap()
        assert _same_rotation(orientation_at(data, 0.0), IDENTITY)
        assert _same_rotation(orientation_at(data, -1.0), IDENTITY)
        # just after the start the zero-length first segment has already been passed
        assert segment_at(data, 1e-9)[0] == 1

    def test_position_is_finite_throughout(self):
        for elapsed in np.linspace(0, 4, 37):
            assert np.all(np.isfinite(position_at(self.data, elapsed)))
