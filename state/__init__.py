"""Kinematic state of the sand table."""

from .kinematics import (
    KinematicState,
    ball_position,
    degrees_to_steps,
    normalize_degrees,
    rotated_position,
    time_needed_for_steps,
    trig_to_angle,
)

__all__ = [
    "KinematicState",
    "ball_position",
    "degrees_to_steps",
    "normalize_degrees",
    "rotated_position",
    "time_needed_for_steps",
    "trig_to_angle",
]
