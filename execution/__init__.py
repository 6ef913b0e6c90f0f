"""Execution layer for driving the sand table arms."""

from .actuator import Actuator, Axis, RotationCommand, SimulatedActuator
from .renderer import ArmPositions, Renderer, TrailRenderer
from .motion import ExecutionAborted, MotionController, MotionTiming
from .path_tracer import PathTracer
from .curves import CurveGenerator

__all__ = [
    "Actuator",
    "ArmPositions",
    "Axis",
    "CurveGenerator",
    "ExecutionAborted",
    "MotionController",
    "MotionTiming",
    "PathTracer",
    "Renderer",
    "RotationCommand",
    "SimulatedActuator",
    "TrailRenderer",
]
