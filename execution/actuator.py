"""
Actuator capability: the only way the controller moves the motors.
The wire protocol lives in a separate driver; this module defines the
interface and the simulation stand-in.
"""
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict

from utils.logger import get_logger

logger = get_logger(__name__)


class Axis(Enum):
    """Motor axes. ARM0 pivots at the plate center, ARM1 at the end of ARM0."""
    ARM0 = 0
    ARM1 = 1


@dataclass(frozen=True)
class RotationCommand:
    """One call made to an actuator."""
    axis: Axis
    steps: int
    clockwise: bool


class Actuator(ABC):
    """
    Consumed capability for rotating one motor axis.

    Implementations await physical completion (and apply their own
    timeout/retry policy) before returning.
    """

    @abstractmethod
    async def rotate(self, axis: Axis, steps: int, clockwise: bool) -> None:
        """Rotate axis by a whole, non-negative number of steps."""
        raise NotImplementedError


class SimulatedActuator(Actuator):
    """
    Actuator for SIMULATION MODE: records commands instead of moving hardware.
    Timing is handled by the motion layer's pacing. Only the latest
    max_history commands are kept; step totals cover every command.
    """

    def __init__(self, max_history: int = 100000):
        self.history: Deque[RotationCommand] = deque(maxlen=max_history)
        self._totals: Dict[Axis, int] = {axis: 0 for axis in Axis}
        logger.info("Running in SIMULATION MODE - no hardware will be moved")

    async def rotate(self, axis: Axis, steps: int, clockwise: bool) -> None:
        self.history.append(RotationCommand(axis, steps, clockwise))
        self._totals[axis] += steps if clockwise else -steps
        logger.debug(f"[SIM] rotate {axis.name} {steps} steps {'cw' if clockwise else 'ccw'}")

    def total_steps(self, axis: Axis) -> int:
        """Signed step count issued to axis (clockwise positive)."""
        return self._totals[axis]

    def clear(self) -> None:
        self.history.clear()
        self._totals = {axis: 0 for axis in Axis}
