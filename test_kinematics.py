#!/usr/bin/env python3
"""Tests for the kinematic state and angle helpers."""
import math

import pytest

from config import DEGREES_PER_STEP
from state.kinematics import (
    KinematicState,
    ball_position,
    degrees_to_steps,
    normalize_degrees,
    rotated_position,
    time_needed_for_steps,
    trig_to_angle,
)


def test_normalize_degrees():
    assert normalize_degrees(-90) == 270
    assert normalize_degrees(720) == 0
    assert normalize_degrees(359.5) == 359.5
    # Float noise just below zero must not come back as 360
    assert normalize_degrees(-1e-20) == 0.0


@pytest.mark.parametrize("degrees", [0, 30, 90, 135, 180, 225, 270, 315, 359])
def test_trig_to_angle_inverts_cos_sin(degrees):
    c = math.cos(math.radians(degrees))
    s = math.sin(math.radians(degrees))
    assert trig_to_angle(c, s) == pytest.approx(degrees, abs=1e-9)


def test_trig_to_angle_axis_branches():
    assert trig_to_angle(1, 0.001) == 0.0
    assert trig_to_angle(-1, -0.001) == 180.0
    assert trig_to_angle(0.001, 1) == 90.0
    assert trig_to_angle(-0.001, -1) == 270.0


def test_rotated_position():
    x, y = rotated_position(1, 0, 90)
    assert x == pytest.approx(0, abs=1e-12)
    assert y == pytest.approx(1)
    # Within EPS of a full turn counts as no rotation
    assert rotated_position(3, 4, 359.999) == (3, 4)
    assert rotated_position(3, 4, -720) == (3, 4)


def test_degrees_to_steps_ignores_float_noise():
    assert degrees_to_steps(3 * DEGREES_PER_STEP) == 3
    assert degrees_to_steps(0.35) == 0
    assert degrees_to_steps(180) == 512
    assert degrees_to_steps(0.1 + 0.2 + 360 / 1024 * 10 - 0.3) == 10


def test_time_needed_for_steps():
    assert time_needed_for_steps(1024, 3) == 3072
    assert time_needed_for_steps(0, 3) == 0


def test_ball_position():
    assert ball_position(0, 0, 200) == pytest.approx((400, 0))
    x, y = ball_position(90, 0, 200)
    assert (x, y) == pytest.approx((0, 400), abs=1e-9)
    x, y = ball_position(37, 180, 200)
    assert math.hypot(x, y) == pytest.approx(0, abs=1e-9)


def test_state_position_is_derived_from_angles():
    state = KinematicState(radius=400)
    assert state.arm_length == 200
    assert state.current_position == pytest.approx((400, 0))

    state.arm1_rotation = 90
    assert state.current_x == pytest.approx(200)
    assert state.current_y == pytest.approx(200)
    assert state.elbow_position == pytest.approx((200, 0))


def test_state_rotate_keeps_raw_winding():
    state = KinematicState(radius=400)
    state.rotate(0, 400)
    state.rotate(1, -30)
    assert state.arm0_rotation_raw == 400
    assert state.arm0_rotation == pytest.approx(40)
    assert state.arm1_rotation == pytest.approx(330)

    with pytest.raises(ValueError):
        state.rotate(2, 10)


def test_logo_direction_is_normalized():
    state = KinematicState()
    state.logo_direction = -90
    assert state.logo_direction == 270
    state.logo_direction += 450
    assert state.logo_direction == pytest.approx(0)


def test_logo_direction_is_not_a_constructor_argument():
    with pytest.raises(TypeError):
        KinematicState(_logo_direction=720)
    assert KinematicState(radius=300).logo_direction == 0
