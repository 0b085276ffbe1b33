"""Tests for the path processor stages and its degenerate-input policy."""

import math

import numpy as np
import pytest
from scipy.spatial.transform import Rotation as R

from motion_synth.config import PathConfig
from motion_synth.errors import ProcessingError, StructuralError
from motion_synth.path_processor import PathProcessor
from motion_synth.results import PathDegenerate, PathError, PathOk
from motion_synth.types import CameraCommand, Vector3
from motion_synth.validator import CommandValidator

IDENTITY = (0.0, 0.0, 0.0, 1.0)


def cmd(position, target=(0, 0, -100), duration=1.0, easing=None):
    return CameraCommand(position=list(position), target=list(target), duration=duration, easing=easing)


def _between(point, a, b):
    """True when point lies strictly inside segment a-b."""
    a, b, point = (np.asarray(v, dtype=float) for v in (a, b, point))
    ab = b - a
    s = np.dot(point - a, ab) / np.dot(ab, ab)
    return 0 < s < 1 and np.allclose(a + s * ab, point)


class TestInputHandling:

    def setup_method(self):
        self.processor = PathProcessor()

    def test_empty_commands_is_an_error(self):
        result = self.processor.process([], IDENTITY)
        assert isinstance(result, PathError)
        assert result.kind == "empty"
        with pytest.raises(ProcessingError):
            result.unwrap()

    def test_nan_position_rejected_before_spline_math(self):
        bad = CameraCommand.model_construct(
            position=Vector3.model_construct(x=float("nan"), y=0.0, z=0.0),
            target=Vector3(x=0, y=0, z=0),
            duration=1.0,
            easing=None,
        )
        result = self.processor.process([cmd((1, 0, 0)), bad], IDENTITY)
        assert isinstance(result, PathError)
        assert result.kind == "structural"
        assert result.index == 1
        assert result.field_name == "position"
        with pytest.raises(StructuralError):
            result.unwrap()

    def test_raw_mapping_with_bad_duration(self):
        result = self.processor.process([{"position": [0, 0, 0], "target": [0, 0, 1], "duration": -2}], IDENTITY)
        assert isinstance(result, PathError)
        assert result.index == 0
        assert result.field_name == "duration"

    @pytest.mark.parametrize(
        "command, field_name",
        [
            ({"position": [0, 0, 0], "target": [0, 0, 1], "duration": "1"}, "duration"),
            ({"position": [0, 0, 0], "target": [0, 0, 1], "duration": True}, "duration"),
            ({"position": ["0", "0", "0"], "target": [0, 0, 1], "duration": 1}, "position"),
            ({"position": [0, 0, 0], "target": [False, 0, 1], "duration": 1}, "target"),
        ],
    )
    def test_raw_mapping_values_are_not_coerced(self, command, field_name):
        result = self.processor.process([command], IDENTITY)
        assert isinstance(result, PathError)
        assert result.kind == "structural"
        assert result.field_name == field_name

    def test_processor_agrees_with_validator_on_malformed_commands(self):
        commands = [
            {"position": ["0", "0", "0"], "target": [0, 0, 1], "duration": "1"},
            {"position": [1, 0, 0], "target": [0, 0, 1], "duration": True},
        ]
        assert not CommandValidator().validate(commands).is_valid
        assert isinstance(self.processor.process(commands, IDENTITY), PathError)

    def test_non_object_command_rejected(self):
        result = self.processor.process([cmd((0, 0, 0)), "oops"], IDENTITY)
        assert isinstance(result, PathError)
        assert result.index == 1

    def test_raw_mappings_are_accepted(self):
        result = self.processor.process(
            [
                {"position": {"x": 0, "y": 0, "z": 0}, "target": [0, 0, -1], "duration": 1},
                {"position": [5, 0, 0], "target": [0, 0, -1], "duration": 1},
            ],
            IDENTITY,
        )
        assert isinstance(result, PathOk)

    def test_zero_initial_orientation_rejected(self):
        result = self.processor.process([cmd((0, 0, 0))], (0, 0, 0, 0))
        assert isinstance(result, PathError)
        assert result.field_name == "initial_orientation"


class TestOrientation:

    def setup_method(self):
        self.processor = PathProcessor()

    def test_one_quaternion_per_command_plus_initial(self):
        result = self.processor.process([cmd((0, 0, 0)), cmd((5, 0, 0)), cmd((5, 0, 5))], IDENTITY)
        quats = result.data.keyframe_quaternions
        assert quats.shape == (4, 4)
        assert np.allclose(quats[0], IDENTITY)

    def test_look_at_faces_target(self):
        result = self.processor.process([cmd((0, 0, 0), target=(10, 0, 0)), cmd((0, 0, 5), target=(0, 5, 5))], IDENTITY)
        quats = result.data.keyframe_quaternions
        forward = R.from_quat(quats[1]).apply([0, 0, -1])
        assert np.allclose(forward, [1, 0, 0], atol=1e-9)
        # straight up is parallel to world up and still yields a valid rotation
        forward_up = R.from_quat(quats[2]).apply([0, 0, -1])
        assert np.allclose(forward_up, [0, 1, 0], atol=1e-3)
        assert np.all(np.isfinite(quats))

    def test_coincident_target_reuses_previous_orientation(self, console):
        processor = PathProcessor(console=console)
        result = processor.process(
            [cmd((0, 0, 0), target=(0, 0, 0)), cmd((5, 0, 0), target=(5, 0, -5)), cmd((5, 0, 5), target=(5, 0, 5))],
            (0.0, 0.7071067811865476, 0.0, 0.7071067811865476),
        )
        quats = result.data.keyframe_quaternions
        assert np.allclose(quats[1], quats[0])
        assert np.allclose(quats[3], quats[2])
        assert "reusing previous orientation" in console.text

    def test_initial_orientation_is_normalized(self):
        result = self.processor.process([cmd((0, 0, 0)), cmd((1, 0, 0))], (0, 0, 0, 2))
        assert np.allclose(result.data.keyframe_quaternions[0], IDENTITY)


class TestDeduplication:

    def setup_method(self):
        self.processor = PathProcessor()

    def test_merged_durations_go_to_last_kept_point(self):
        positions = [np.array(p, dtype=float) for p in [(0, 0, 0), (0, 0, 0), (1, 0, 0), (1, 0, 1e-9), (2, 0, 0)]]
        kept, durations = self.processor.deduplicate(positions, [0.5, 1.0, 2.0, 3.0, 4.0])
        assert len(kept) == 3
        assert durations == [1.5, 5.0, 4.0]

    def test_duration_conservation(self):
        commands = [cmd((0, 0, 0), duration=0.25), cmd((0, 0, 0), duration=0.5), cmd((3, 0, 0), duration=1.0),
                    cmd((3, 0, 0), duration=0.75), cmd((3, 0, 4), duration=2.0)]
        data = self.processor.process(commands, IDENTITY).data
        total_in = sum(c.duration for c in commands)
        assert sum(data.segment_durations) == total_in
        assert sum(data.waypoint_durations) == pytest.approx(total_in)
        assert data.total_duration == total_in
        assert len(data.segment_durations) == len(commands)


class TestCornerBlending:

    def setup_method(self):
        self.processor = PathProcessor()

    def test_nearly_straight_points_are_not_blended(self):
        pts = [np.array(p, dtype=float) for p in [(0, 0, 0), (5, 0, 0), (10, 1, 0)]]
        augmented = self.processor.blend_corners(pts)
        assert len(augmented) == 3
        assert all(np.allclose(a, b) for a, b in zip(augmented, pts))

    def test_right_angle_injects_two_points_on_the_segments(self):
        a, corner, b = (0, 0, 0), (4, 0, 0), (4, 0, 2)
        augmented = self.processor.blend_corners([np.array(p, dtype=float) for p in (a, corner, b)])
        assert len(augmented) == 4
        assert np.allclose(augmented[0], a)
        assert np.allclose(augmented[-1], b)
        b1, b2 = augmented[1], augmented[2]
        assert _between(b1, a, corner)
        assert _between(b2, corner, b)
        # offset is 0.3 of the shorter (2 unit) segment
        assert np.allclose(b1, (3.4, 0, 0))
        assert np.allclose(b2, (4, 0, 0.6))
        assert not any(np.allclose(p, corner) for p in augmented)

    def test_near_reversal_is_not_blended(self):
        pts = [np.array(p, dtype=float) for p in [(0, 0, 0), (5, 0, 0), (0, 0.1, 0)]]
        assert len(self.processor.blend_corners(pts)) == 3

    def test_short_segment_offset_is_capped(self):
        config = PathConfig(blend_min_offset=1.0)
        pts = [np.array(p, dtype=float) for p in [(0, 0, 0), (1, 0, 0), (1, 0, 1)]]
        augmented = PathProcessor(config).blend_corners(pts)
        # min offset of 1.0 would reach the neighbours; it is capped at 0.45 of the segment
        assert np.allclose(augmented[1], (0.55, 0, 0))
        assert np.allclose(augmented[2], (1, 0, 0.45))

    def test_endpoints_never_blended_and_count_grows(self):
        pts = [np.array(p, dtype=float) for p in [(0, 0, 0), (4, 0, 0), (4, 0, 4), (0, 0, 4), (0, 0, 8)]]
        augmented = self.processor.blend_corners(pts)
        assert len(augmented) == 2 + 2 * 3
        assert np.allclose(augmented[0], pts[0])
        assert np.allclose(augmented[-1], pts[-1])


class TestSampling:

    def setup_method(self):
        self.processor = PathProcessor()

    @pytest.mark.parametrize("durations", [[1.0, 1.0], [0.5, 0.25, 0.3], [2.0, 0.0, 1.7]])
    def test_sample_count_law(self, durations):
        commands = [cmd((i * 3, 0, (i % 2) * 2), duration=d) for i, d in enumerate(durations)]
        data = self.processor.process(commands, IDENTITY).data
        assert data.sampled_positions.shape[0] / 3 == max(2, math.ceil(60 * data.total_duration))

    def test_all_zero_durations_still_sample_two_points(self):
        data = self.processor.process([cmd((0, 0, 0), duration=0), cmd((1, 0, 0), duration=0)], IDENTITY).data
        assert data.total_duration == pytest.approx(1e-6)
        assert data.sample_count == 2

    def test_idempotent(self):
        commands = [cmd((0, 0, 0)), cmd((4, 1, 0)), cmd((4, 2, 4)), cmd((0, 0, 6), duration=0.7)]
        first = self.processor.process(commands, IDENTITY).data
        second = self.processor.process(commands, IDENTITY).data
        assert np.array_equal(first.sampled_positions, second.sampled_positions)
        assert np.array_equal(first.keyframe_quaternions, second.keyframe_quaternions)

    def test_path_starts_and_ends_at_endpoints(self):
        commands = [cmd((0, 0, 0)), cmd((4, 1, 0)), cmd((4, 2, 4))]
        positions = self.processor.process(commands, IDENTITY).data.positions()
        assert np.allclose(positions[0], (0, 0, 0))
        assert np.allclose(positions[-1], (4, 2, 4))

    def test_output_is_read_only(self):
        data = self.processor.process([cmd((0, 0, 0)), cmd((1, 0, 0))], IDENTITY).data
        with pytest.raises(ValueError):
            data.sampled_positions[0] = 5.0


class TestDegenerateInputs:

    def setup_method(self):
        self.processor = PathProcessor()

    def test_single_point_path(self, console):
        result = PathProcessor(console=console).process([cmd((1, 2, 3), duration=2.0)], IDENTITY)
        assert isinstance(result, PathDegenerate)
        assert result.reason == "single_position"
        positions = result.data.positions()
        assert positions.shape == (120, 3)
        assert np.all(positions == np.array([1.0, 2.0, 3.0]))
        assert "Only one unique position" in console.text

    def test_repeated_single_position(self):
        result = self.processor.process([cmd((1, 1, 1)), cmd((1, 1, 1)), cmd((1, 1, 1))], IDENTITY)
        assert isinstance(result, PathDegenerate)
        assert result.data.sample_count == 180
        assert result.data.waypoint_durations == (3.0,)

    def test_two_waypoint_path(self):
        result = self.processor.process(
            [cmd((0, 0, 0), target=(0, 0, -1)), cmd((10, 0, 0), target=(10, 0, -1))],
            IDENTITY,
        )
        assert isinstance(result, PathOk)
        data = result.data
        assert data.total_duration == 2.0
        assert data.sample_count == 120
        positions = data.positions()
        assert np.allclose(positions[0], (0, 0, 0))
        assert np.allclose(positions[-1], (10, 0, 0))
        # straight between the two points
        assert np.allclose(positions[:, 1:], 0)

    def test_two_waypoint_path_with_coincident_first_target(self, console):
        initial = (0.0, 0.7071067811865476, 0.0, 0.7071067811865476)
        result = PathProcessor(console=console).process(
            [cmd((0, 0, 0), target=(0, 0, 0)), cmd((10, 0, 0), target=(10, 0, -1))],
            initial,
        )
        assert isinstance(result, PathOk)
        data = result.data
        assert data.total_duration == 2.0
        assert data.sample_count == 120
        positions = data.positions()
        assert np.allclose(positions[0], (0, 0, 0))
        assert np.allclose(positions[-1], (10, 0, 0))
        assert np.allclose(positions[:, 1:], 0)
        assert np.allclose(data.keyframe_quaternions[1], initial)
        assert "reusing previous orientation" in console.text

    def test_origin_fallback_when_no_usable_control_points(self, console, monkeypatch):
        processor = PathProcessor(console=console)
        monkeypatch.setattr(processor, "blend_corners", lambda pts: [np.full(3, np.nan) for _ in pts])
        result = processor.process([cmd((0, 0, 0)), cmd((1, 0, 0)), cmd((1, 0, 1))], IDENTITY)
        assert isinstance(result, PathDegenerate)
        assert result.reason == "origin_fallback"
        assert np.all(result.data.sampled_positions == 0)
        assert "origin curve" in console.text
