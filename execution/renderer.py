"""
Renderer capability: purely observational callbacks fired by the motion layer.
"""
from collections import deque
from typing import Deque, NamedTuple, Tuple


class ArmPositions(NamedTuple):
    """Arm angles (normalized degrees) and the ball position they imply."""
    arm0: float
    arm1: float
    x: float
    y: float


class Renderer:
    """Base renderer; every hook is a no-op. Hooks must return quickly."""

    def on_step(self, positions: ArmPositions) -> None:
        """Called after each primitive rotation."""

    def on_dot(self, x: float, y: float) -> None:
        """Called after each settled goto_pos with the requested target."""


class TrailRenderer(Renderer):
    """
    Keeps the most recent ball trail and settled target dots in memory.
    Counters keep running past the caps.
    """

    def __init__(self, max_trail_points: int = 200000, max_dots: int = 50000):
        self.max_trail_points = max_trail_points
        self.trail: Deque[Tuple[float, float]] = deque(maxlen=max_trail_points)
        self.dots: Deque[Tuple[float, float]] = deque(maxlen=max_dots)
        self.step_count = 0
        self.dot_count = 0

    def on_step(self, positions: ArmPositions) -> None:
        self.step_count += 1
        self.trail.append((positions.x, positions.y))

    def on_dot(self, x: float, y: float) -> None:
        self.dot_count += 1
        self.dots.append((x, y))

    def clear(self) -> None:
        self.trail.clear()
        self.dots.clear()
        self.step_count = 0
        self.dot_count = 0

    def get_summary(self) -> str:
        last = self.dots[-1] if self.dots else None
        last_text = f"({last[0]:.2f}, {last[1]:.2f})" if last else "none"
        return f"{self.step_count} steps rendered, {self.dot_count} dots, last dot {last_text}"
