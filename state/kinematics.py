"""
Kinematic state of the two-arm sand table.
Holds the arm angles; the ball position is always derived from them.
"""
import math
from dataclasses import dataclass, field
from typing import Tuple

from config import DEGREES_PER_STEP, EPS, MS_PER_STEP, PLATE_RADIUS


def normalize_degrees(degrees: float) -> float:
    """Map any angle onto [0, 360)."""
    result = degrees % 360
    # -1e-20 % 360 rounds to 360.0
    if result >= 360:
        return 0.0
    return result


def trig_to_angle(c: float, s: float) -> float:
    """
    Returns the angle in degrees, in [0, 360), whose cosine is c and sine is s.
    Near-zero sine or cosine take explicit branches so asin stays in its domain.
    """
    if abs(s) < EPS:
        return 0.0 if c > 0 else 180.0
    if abs(c) < EPS:
        return 90.0 if s > 0 else 270.0

    alpha = math.degrees(math.asin(max(-1.0, min(1.0, s))))  # [-90, 90]
    if c < 0:
        alpha = 180 - alpha
    elif s < 0:
        alpha += 360
    return alpha


def rotated_position(x: float = 0.0, y: float = 0.0, rotation: float = 0.0) -> Tuple[float, float]:
    """Rotate (x, y) about the origin by rotation degrees (counter-clockwise in plate math)."""
    rotation = normalize_degrees(rotation)
    if EPS <= rotation <= 360 - EPS:
        c = math.cos(math.radians(rotation))
        s = math.sin(math.radians(rotation))
        return (x * c - y * s, x * s + y * c)
    return (x, y)


def degrees_to_steps(degrees: float) -> int:
    """Floor a non-negative angle to whole motor steps, ignoring float noise."""
    return int(math.floor(degrees / DEGREES_PER_STEP + 1e-6))


def time_needed_for_steps(steps: int, ms_per_step: float = MS_PER_STEP) -> float:
    """Modelled milliseconds for a rotation of the given number of steps."""
    return steps * ms_per_step


def ball_position(arm0_degrees: float, arm1_degrees: float, arm_length: float) -> Tuple[float, float]:
    """Forward kinematics: ball position for the given arm angles."""
    a0 = math.radians(arm0_degrees)
    a01 = math.radians(arm0_degrees + arm1_degrees)
    x = arm_length * math.cos(a0) + arm_length * math.cos(a01)
    y = arm_length * math.sin(a0) + arm_length * math.sin(a01)
    return (x, y)


@dataclass
class KinematicState:
    """
    Single source of truth for the arm angles.

    The raw accumulators are never wrapped so the winding direction survives
    many revolutions; the public angle properties are normalized to [0, 360).
    """
    radius: float = PLATE_RADIUS
    arm0_rotation_raw: float = 0.0
    arm1_rotation_raw: float = 0.0
    _logo_direction: float = field(default=0.0, init=False)  # turtle heading used by forward/arc

    @property
    def arm_length(self) -> float:
        return self.radius / 2

    @property
    def arm0_rotation(self) -> float:
        return normalize_degrees(self.arm0_rotation_raw)

    @arm0_rotation.setter
    def arm0_rotation(self, degrees: float) -> None:
        self.arm0_rotation_raw = degrees

    @property
    def arm1_rotation(self) -> float:
        return normalize_degrees(self.arm1_rotation_raw)

    @arm1_rotation.setter
    def arm1_rotation(self, degrees: float) -> None:
        self.arm1_rotation_raw = degrees

    @property
    def logo_direction(self) -> float:
        return self._logo_direction

    @logo_direction.setter
    def logo_direction(self, degrees: float) -> None:
        self._logo_direction = normalize_degrees(degrees)

    @property
    def current_position(self) -> Tuple[float, float]:
        return ball_position(self.arm0_rotation, self.arm1_rotation, self.arm_length)

    @property
    def current_x(self) -> float:
        return self.current_position[0]

    @property
    def current_y(self) -> float:
        return self.current_position[1]

    @property
    def elbow_position(self) -> Tuple[float, float]:
        """End point of arm0 (the pivot of arm1)."""
        a0 = math.radians(self.arm0_rotation)
        return (self.arm_length * math.cos(a0), self.arm_length * math.sin(a0))

    def rotate(self, arm: int, degrees: float) -> None:
        """Add degrees to the raw accumulator of arm 0 or 1."""
        if arm == 0:
            self.arm0_rotation_raw += degrees
        elif arm == 1:
            self.arm1_rotation_raw += degrees
        else:
            raise ValueError(f"Unknown arm: {arm}")

    def get_state_summary(self) -> str:
        x, y = self.current_position
        return (f"arm0={self.arm0_rotation:.2f} deg, arm1={self.arm1_rotation:.2f} deg, "
                f"ball=({x:.2f}, {y:.2f}), heading={self.logo_direction:.1f} deg")
