"""
Motion primitives: quantized single-axis rotation, synchronized two-axis
rotation and parking.
"""
import asyncio
from typing import Awaitable, Callable, NamedTuple, Optional

from config import DEGREES_PER_STEP, RigSettings, get_rig_settings
from execution.actuator import Actuator, Axis
from execution.renderer import ArmPositions, Renderer
from state.kinematics import KinematicState, degrees_to_steps, time_needed_for_steps
from utils.logger import get_logger

logger = get_logger(__name__)


def _whole_steps(steps: float) -> int:
    return max(0, int(steps // 1))


class ExecutionAborted(RuntimeError):
    """Raised inside a motion after a stop was requested."""


class MotionTiming(NamedTuple):
    """Modelled elapsed milliseconds of each axis in a synchronized rotation."""
    arm0_ms: float
    arm1_ms: float


class MotionController:
    """
    Drives the actuator and keeps the kinematic state in step with it.

    All motions are coroutines; the only concurrency is the two-axis join in
    rotate_both_axes.
    """

    def __init__(self, state: KinematicState, actuator: Actuator,
                 renderer: Optional[Renderer] = None,
                 settings: Optional[RigSettings] = None,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        """
        Args:
            state: KinematicState mutated by every rotation
            actuator: Actuator that performs the physical rotation
            renderer: Optional observer notified after each rotation chunk
            settings: RigSettings (default from config)
            sleep: Coroutine function taking seconds (default asyncio.sleep)
        """
        self.state = state
        self.actuator = actuator
        self.renderer = renderer or Renderer()
        self.settings = settings or get_rig_settings(radius=state.radius)
        self._sleep = sleep or asyncio.sleep
        self._stop_flag = False

    # ---------- Stop control ----------

    @property
    def stop_requested(self) -> bool:
        return self._stop_flag

    def request_stop(self) -> None:
        logger.warning("Stop requested - motion will abort at the next step")
        self._stop_flag = True

    def reset_stop(self) -> None:
        self._stop_flag = False

    def check_stop(self) -> None:
        if self._stop_flag:
            raise ExecutionAborted("Stop flag set - motion interrupted")

    # ---------- Timing ----------

    def time_needed(self, steps: int) -> float:
        """Milliseconds needed to rotate the given number of steps."""
        return time_needed_for_steps(steps, self.settings.ms_per_step)

    async def sleep_ms(self, milliseconds: float) -> None:
        await self._sleep(max(0.0, milliseconds) / 1000.0)

    # ---------- Primitives ----------

    def _positions(self) -> ArmPositions:
        x, y = self.state.current_position
        return ArmPositions(self.state.arm0_rotation, self.state.arm1_rotation, x, y)

    async def rotate_axis(self, axis: Axis, steps: float = 1, clockwise: bool = True,
                          notify: bool = True, extra_delay_ms: float = 0.0) -> float:
        """
        Rotate one axis and wait for it to complete.

        Args:
            axis: Axis to rotate
            steps: Non-negative step count; negative values are clamped to 0
            clockwise: True for clockwise (increasing angle)
            notify: Whether the renderer is told about each chunk
            extra_delay_ms: Extra time to wait after the rotation before returning

        Returns:
            Modelled elapsed time in milliseconds
        """
        if steps < 0:
            logger.warning(f"Negative step count {steps} for {axis.name}; clamping to 0")
        steps = _whole_steps(steps)

        sign = 1 if clockwise else -1
        remaining = steps
        while remaining > 0:
            self.check_stop()
            chunk = min(remaining, self.settings.rotation_chunk_steps)
            pacing = asyncio.ensure_future(self.sleep_ms(self.time_needed(chunk)))
            try:
                await self.actuator.rotate(axis, chunk, clockwise)
                # The state follows the actuator before anything else can run
                self.state.rotate(axis.value, chunk * DEGREES_PER_STEP * sign)
                remaining -= chunk
                if notify:
                    self.renderer.on_step(self._positions())
                await pacing
            finally:
                pacing.cancel()

        if extra_delay_ms > 0:
            await self.sleep_ms(extra_delay_ms)
        return self.time_needed(steps) + max(0.0, extra_delay_ms)

    async def rotate_both_axes(self, arm0_steps: float = 1, arm0_clockwise: bool = True,
                               arm1_steps: float = 1, arm1_clockwise: bool = True,
                               notify: bool = True) -> MotionTiming:
        """
        Rotate both axes so that they finish together.

        The axis needing less time waits for the difference after its own
        rotation. If either axis fails (or is stopped) the other is cancelled.
        """
        time0 = self.time_needed(_whole_steps(arm0_steps))
        time1 = self.time_needed(_whole_steps(arm1_steps))
        extra0 = max(0.0, time1 - time0)
        extra1 = max(0.0, time0 - time1)

        tasks = [
            asyncio.ensure_future(self.rotate_axis(Axis.ARM0, arm0_steps, arm0_clockwise, notify, extra0)),
            asyncio.ensure_future(self.rotate_axis(Axis.ARM1, arm1_steps, arm1_clockwise, notify, extra1)),
        ]
        try:
            elapsed0, elapsed1 = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            raise
        return MotionTiming(elapsed0, elapsed1)

    async def park(self) -> MotionTiming:
        """Return to the rest pose: arm0 at 0 degrees, arm1 at 180 (ball at the center)."""
        a0 = self.state.arm0_rotation
        a1 = self.state.arm1_rotation

        if a0 <= 180:
            arm0_steps, arm0_clockwise = degrees_to_steps(a0), False
        else:
            arm0_steps, arm0_clockwise = degrees_to_steps(360 - a0), True

        if a1 <= 180:
            arm1_steps, arm1_clockwise = degrees_to_steps(180 - a1), True
        else:
            arm1_steps, arm1_clockwise = degrees_to_steps(a1 - 180), False

        logger.debug(f"Parking: arm0 {arm0_steps} steps, arm1 {arm1_steps} steps")
        return await self.rotate_both_axes(arm0_steps, arm0_clockwise, arm1_steps, arm1_clockwise)
