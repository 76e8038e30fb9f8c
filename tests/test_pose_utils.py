import math
import random

import pytest

from squat_counter.landmarks import Landmark, landmark_from_result
from squat_counter.pose_utils import (
    DepthReading,
    angle_between,
    depth_from_knee_angle,
    estimate_squat_depth,
    round_half_up,
)


def test_right_angle():
    assert angle_between((1, 0), (0, 0), (0, 1)) == pytest.approx(90.0)


def test_straight_line_is_180():
    assert angle_between((0, -1), (0, 0), (0, 1)) == pytest.approx(180.0)


def test_reflex_angle_is_reflected():
    # raw atan2 difference here is 270 degrees
    assert angle_between((0, -1), (0, 0), (-1, 0)) == pytest.approx(90.0)


def test_accepts_landmarks():
    a = Landmark(1.0, 0.0)
    b = Landmark(0.0, 0.0)
    c = Landmark(1.0, 1.0)
    assert angle_between(a, b, c) == pytest.approx(45.0)


def test_coincident_points_are_finite():
    angle = angle_between((0.3, 0.3), (0.3, 0.3), (0.3, 0.3))
    assert math.isfinite(angle)
    assert angle == 0.0


def test_angle_range_and_symmetry():
    rng = random.Random(7)
    for _ in range(200):
        a, b, c = [(rng.random(), rng.random()) for _ in range(3)]
        angle = angle_between(a, b, c)
        assert 0.0 <= angle <= 180.0
        assert angle == pytest.approx(angle_between(c, b, a))


@pytest.mark.parametrize("knee_angle, depth", [
    (180, 0),
    (135, 50),
    (90, 100),
    (60, 100),
    (171, 10),
])
def test_depth_from_knee_angle(knee_angle, depth):
    assert depth_from_knee_angle(knee_angle) == depth


def test_depth_is_monotonic_in_knee_angle():
    depths = [depth_from_knee_angle(a) for a in range(90, 181)]
    assert all(d1 >= d2 for d1, d2 in zip(depths, depths[1:]))


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_estimate_depth_standing(pose_for_angle):
    reading = estimate_squat_depth(pose_for_angle(180))
    assert reading.is_valid
    assert reading.depth == 0
    assert reading.knee_angle == 180
    assert reading.hip_angle == 180


def test_estimate_depth_half_squat(pose_for_angle):
    reading = estimate_squat_depth(pose_for_angle(135))
    assert reading.depth == 50
    assert reading.knee_angle == 135


def test_estimate_depth_full_squat(pose_for_angle):
    reading = estimate_squat_depth(pose_for_angle(90))
    assert reading.depth == 100
    assert reading.knee_angle == 90


@pytest.mark.parametrize("landmarks", [None, []])
def test_missing_landmarks_give_invalid_reading(landmarks):
    reading = estimate_squat_depth(landmarks)
    assert reading == DepthReading.invalid()
    assert reading.depth == 0
    assert not reading.is_valid


def test_too_few_landmarks_give_invalid_reading(pose_for_angle):
    # left ankle is index 27, so 27 landmarks are not enough
    assert not estimate_squat_depth(pose_for_angle(90, count=27)).is_valid
    assert estimate_squat_depth(pose_for_angle(90, count=28)).is_valid


def test_fixed_side_ignores_other_leg(pose_for_angle):
    # right leg squatting, left leg straight: the default side still reads left
    landmarks = pose_for_angle(90, side="right")
    assert estimate_squat_depth(landmarks).depth == 0
    assert estimate_squat_depth(landmarks, side="right").depth == 100


def test_unknown_side_rejected(pose_for_angle):
    with pytest.raises(ValueError):
        estimate_squat_depth(pose_for_angle(90), side="middle")


def test_low_visibility_still_measured_but_flagged(pose_for_angle):
    reading = estimate_squat_depth(pose_for_angle(90, visibility=0.2))
    assert reading.is_valid
    assert reading.depth == 100
    assert not reading.is_confident


def test_landmark_from_result():
    class Raw:
        x, y, z, visibility = 0.25, 0.75, -0.1, 0.8

    lm = landmark_from_result(Raw())
    assert lm == Landmark(0.25, 0.75, -0.1, 0.8)


def test_landmark_from_result_without_visibility():
    class Raw:
        x, y = 0.1, 0.2

    lm = landmark_from_result(Raw())
    assert lm.z is None
    assert lm.visibility == 0.0
    assert not lm.is_visible()
