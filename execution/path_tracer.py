"""
Path tracing: turns Cartesian targets, lines and arcs into bounded
sequences of synchronized arm rotations.
"""
import math
from typing import List, Tuple

from config import DEGREES_PER_STEP, EPS, STEPS_PER_REVOLUTION
from execution.actuator import Axis
from execution.motion import MotionController
from state.kinematics import degrees_to_steps, normalize_degrees, trig_to_angle
from utils.logger import get_logger

logger = get_logger(__name__)


def elbow_candidates(x0: float, y0: float, r: float) -> List[Tuple[float, float]]:
    """
    Possible positions of arm0's end point so that arm1 reaches (x0, y0).

    They are the solutions (x_i, y_i) of
                 x^2 + y^2 = r^2
        (x - x0)^2 + (y - y0)^2 = r^2
    or, equivalently,
                 x^2 + y^2 = r^2
           x0 * x + y0 * y = r0^2 / 2,   where r0^2 = x0^2 + y0^2.

    The target must not be the center (every elbow position works there).
    """
    r0_sq = x0 * x0 + y0 * y0

    if abs(x0) < EPS:
        y1 = r0_sq / 2 / y0
        x1 = math.sqrt(max(0.0, r * r - y1 * y1))
        return [(x1, y1), (-x1, y1)]

    if abs(y0) < EPS:
        x1 = r0_sq / 2 / x0
        y1 = math.sqrt(max(0.0, r * r - x1 * x1))
        return [(x1, y1), (x1, -y1)]

    # a * y^2 + b * y + c = 0, solved without cancellation
    a = 4 * r0_sq
    b = -4 * r0_sq * y0
    c = r0_sq * r0_sq - 4 * r * r * x0 * x0
    root = math.sqrt(max(0.0, b * b - 4 * a * c))

    if b >= 0:
        q = -b - root
    else:
        q = -b + root
    if abs(q) < 1e-12:
        # b and the discriminant vanish together only when y0 == 0, handled above
        y1 = y2 = 0.0
    else:
        y1 = q / a / 2
        y2 = 2 * c / q

    x1 = (r0_sq / 2 - y0 * y1) / x0
    x2 = (r0_sq / 2 - y0 * y2) / x0
    return [(x1, y1), (x2, y2)]


def signed_rotation(steps: int) -> Tuple[int, bool]:
    """Map a forward step delta (mod one revolution) to (steps, clockwise) taking the short way."""
    steps = steps % STEPS_PER_REVOLUTION
    if steps <= STEPS_PER_REVOLUTION // 2:
        return steps, True
    return STEPS_PER_REVOLUTION - steps, False


class PathTracer:
    """Converts geometric targets into motion sequences."""

    def __init__(self, motion: MotionController):
        self.motion = motion

    @property
    def state(self):
        return self.motion.state

    @property
    def settings(self):
        return self.motion.settings

    async def goto_pos(self, x0: float, y0: float) -> None:
        """
        Move the ball to (x0, y0) with the least arm motion the step grid allows.

        Args:
            x0: X coordinate, 0 is the plate center. Range: [-radius, radius]
            y0: Y coordinate, 0 is the plate center. Range: [-radius, radius]
        """
        state = self.state
        radius = state.radius
        r = state.arm_length
        r0 = math.hypot(x0, y0)

        if r0 > radius:
            logger.warning(f"({x0:.2f}, {y0:.2f}) is out of range!")
            x0 = x0 * radius / r0
            y0 = y0 * radius / r0
            r0 = radius
            logger.warning(f"Going to nearest possible ({x0:.2f}, {y0:.2f}) instead!")

        cur_x, cur_y = state.current_position
        dist = math.hypot(cur_x - x0, cur_y - y0)
        if dist >= self.settings.goto_max_step_length:
            logger.warning(f"Moving distance {dist:.2f} is too large for a single goto")

        a0 = state.arm0_rotation
        a1 = state.arm1_rotation

        if abs(x0) < EPS and abs(y0) < EPS:
            # Ball at the center: fold arm1 back onto arm0, arm0 stays put
            if a1 <= 180:
                await self.motion.rotate_axis(Axis.ARM1, degrees_to_steps(180 - a1), True)
            else:
                await self.motion.rotate_axis(Axis.ARM1, degrees_to_steps(a1 - 180), False)
            self.motion.renderer.on_dot(x0, y0)
            return

        # Pick the elbow solution closer to where arm0 is now
        elbow_x, elbow_y = state.elbow_position
        xt, yt = min(
            elbow_candidates(x0, y0, r),
            key=lambda p: (p[0] - elbow_x) ** 2 + (p[1] - elbow_y) ** 2,
        )

        alpha = trig_to_angle(xt / r, yt / r)
        j0 = degrees_to_steps(normalize_degrees(alpha - a0))

        # arm0 only lands on step boundaries; aim arm1 from the quantized elbow
        a0_quantized = normalize_degrees(a0 + j0 * DEGREES_PER_STEP)
        xt = r * math.cos(math.radians(a0_quantized))
        yt = r * math.sin(math.radians(a0_quantized))

        rt = math.hypot(x0 - xt, y0 - yt)
        if rt < 1e-12:
            beta = a0_quantized + a1
        else:
            beta = trig_to_angle((x0 - xt) / rt, (y0 - yt) / rt)
        j1 = degrees_to_steps(normalize_degrees(beta - a0_quantized - a1))

        j0, j1 = self._refine_steps(x0, y0, a0, a1, j0, j1)

        arm0_steps, arm0_clockwise = signed_rotation(j0)
        arm1_steps, arm1_clockwise = signed_rotation(j1)
        await self.motion.rotate_both_axes(arm0_steps, arm0_clockwise, arm1_steps, arm1_clockwise)

        logger.debug(f"goto ({x0:.2f}, {y0:.2f}) reached ({state.current_x:.2f}, {state.current_y:.2f})")
        self.motion.renderer.on_dot(x0, y0)

    def _refine_steps(self, x0: float, y0: float, a0: float, a1: float,
                      j0: int, j1: int) -> Tuple[int, int]:
        """
        Grid search around (j0, j1) for the step pair whose forward kinematics
        land closest to (x0, y0). Ties keep the lowest (j0, j1).
        """
        r = self.state.arm_length
        width = self.settings.grid_search_width

        best = (j0, j1)
        min_dist = self.state.radius * self.state.radius * 4 + 1
        for i in range(j0 - width, j0 + width + 1):
            arm0_angle = math.radians(a0 + i * DEGREES_PER_STEP)
            elbow_x = r * math.cos(arm0_angle)
            elbow_y = r * math.sin(arm0_angle)
            for j in range(j1 - width, j1 + width + 1):
                arm1_angle = math.radians(a0 + a1 + (i + j) * DEGREES_PER_STEP)
                xt = elbow_x + r * math.cos(arm1_angle)
                yt = elbow_y + r * math.sin(arm1_angle)
                dist = (xt - x0) * (xt - x0) + (yt - y0) * (yt - y0)
                if dist < min_dist:
                    min_dist = dist
                    best = (i, j)
        return best

    async def line_to(self, x: float, y: float) -> None:
        """Draw a (relatively) straight line from the current position to (x, y)."""
        start_x, start_y = self.state.current_position
        dx = x - start_x
        dy = y - start_y

        steps = math.ceil(math.hypot(dx, dy) / self.settings.line_max_step_length)
        for i in range(1, steps):
            self.motion.check_stop()
            await self.goto_pos(start_x + dx * i / steps, start_y + dy * i / steps)

        await self.goto_pos(x, y)

    async def arc_to(self, x: float, y: float, radius: float,
                     right_hand_side: bool = True, draw_minor_arc: bool = True) -> None:
        """
        Draw an arc of the given radius from the current position to (x, y).

        Args:
            x, y: End point
            radius: Radius of the arc
            right_hand_side: Which side of the vector (current position) -> (x, y) the arc bulges to
            draw_minor_arc: Draw the shorter of the two arcs; False draws the major arc
        """
        cur_x, cur_y = self.state.current_position
        dist = math.hypot(cur_x - x, cur_y - y)

        if dist > 2 * radius:
            logger.warning(f"Arc of radius {radius:.2f} cannot span {dist:.2f}; "
                           f"going to ({x:.2f}, {y:.2f}) in a line instead")
            await self.line_to(x, y)
            return
        if dist < 1e-9:
            await self.goto_pos(x, y)
            return

        logger.debug(f"Arc to ({x:.2f}, {y:.2f}) radius {radius:.2f}")

        # Center of the arc, on the perpendicular bisector of the chord
        t = math.sqrt(max(0.0, radius * radius / dist / dist - 0.25))
        mid_x = (cur_x + x) / 2
        mid_y = (cur_y + y) / 2
        if right_hand_side == draw_minor_arc:
            center_x = mid_x - (y - cur_y) * t
            center_y = mid_y + (x - cur_x) * t
        else:
            center_x = mid_x + (y - cur_y) * t
            center_y = mid_y - (x - cur_x) * t

        # v0 * exp(i * theta) = v1
        v00, v01 = cur_x - center_x, cur_y - center_y
        v10, v11 = x - center_x, y - center_y
        c = (v10 * v00 + v11 * v01) / (v00 * v00 + v01 * v01)
        theta = math.degrees(math.acos(max(-1.0, min(1.0, c))))
        if not right_hand_side:
            theta = -theta
        if not draw_minor_arc:
            theta = 360 - theta if right_hand_side else -360 - theta

        steps = max(1, math.ceil(radius * abs(math.radians(theta)) / self.settings.arc_max_step_length))

        c = math.cos(math.radians(theta / steps))
        s = math.sin(math.radians(theta / steps))
        for _ in range(steps - 1):
            self.motion.check_stop()
            next_x = center_x + (cur_x - center_x) * c - (cur_y - center_y) * s
            next_y = center_y + (cur_y - center_y) * c + (cur_x - center_x) * s
            await self.goto_pos(next_x, next_y)
            cur_x, cur_y = next_x, next_y

        await self.goto_pos(x, y)

    async def minor_arc_to(self, x: float, y: float, radius: float, right_hand_side: bool = True) -> None:
        await self.arc_to(x, y, radius, right_hand_side, True)
