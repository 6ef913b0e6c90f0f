"""
Curve generators built on the path tracer: space-filling curves,
the octagon fractal and turtle-style drawing.
"""
import math
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from config import EPS
from execution.path_tracer import PathTracer
from state.kinematics import rotated_position
from utils.logger import get_logger

logger = get_logger(__name__)

Point = Tuple[float, float]

# Local curve frames are turned by these offsets to line up with the plate frame
HILBERT_FRAME_OFFSET = -135.0
PEANO_FRAME_OFFSET = 135.0

# Largest square inside the plate is radius * sqrt(2) wide; keep a hair inside
SQUARE_MARGIN = 0.1

OCTAGON_SCALE = 0.55  # circumradius of the octagon relative to the plate radius
FLOWSNAKE_SCALE = 151 / 400  # radius of the flowsnake ring relative to the plate radius


class HilbertOrientation(Enum):
    """Side on which a Hilbert cell's U-shaped traversal is open."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


# Orientation of the four children, in traversal order
HILBERT_PRODUCTIONS: Dict[HilbertOrientation, List[HilbertOrientation]] = {
    HilbertOrientation.DOWN: [HilbertOrientation.LEFT, HilbertOrientation.DOWN,
                              HilbertOrientation.DOWN, HilbertOrientation.RIGHT],
    HilbertOrientation.RIGHT: [HilbertOrientation.UP, HilbertOrientation.RIGHT,
                               HilbertOrientation.RIGHT, HilbertOrientation.DOWN],
    HilbertOrientation.UP: [HilbertOrientation.RIGHT, HilbertOrientation.UP,
                            HilbertOrientation.UP, HilbertOrientation.LEFT],
    HilbertOrientation.LEFT: [HilbertOrientation.DOWN, HilbertOrientation.LEFT,
                              HilbertOrientation.LEFT, HilbertOrientation.UP],
}

# Quadrant (dx, dy) of the four children, in traversal order
HILBERT_OFFSETS: Dict[HilbertOrientation, List[Tuple[int, int]]] = {
    HilbertOrientation.DOWN: [(-1, -1), (-1, 1), (1, 1), (1, -1)],
    HilbertOrientation.RIGHT: [(1, 1), (-1, 1), (-1, -1), (1, -1)],
    HilbertOrientation.UP: [(1, 1), (1, -1), (-1, -1), (-1, 1)],
    HilbertOrientation.LEFT: [(-1, -1), (1, -1), (1, 1), (-1, 1)],
}

HILBERT_ROOT = HilbertOrientation.UP


class PeanoType(Enum):
    """Mirror state of a Peano cell. MIRRORED is NORMAL reflected left-right."""
    NORMAL = 0
    MIRRORED = 1

    @property
    def flipped(self) -> "PeanoType":
        return PeanoType.MIRRORED if self is PeanoType.NORMAL else PeanoType.NORMAL


# NORMAL forward traversal: up the left column, down the middle, up the right
PEANO_POSITIONS: Dict[PeanoType, List[Tuple[int, int]]] = {
    PeanoType.NORMAL: [(-1, -1), (-1, 0), (-1, 1), (0, 1), (0, 0), (0, -1), (1, -1), (1, 0), (1, 1)],
    PeanoType.MIRRORED: [(1, -1), (1, 0), (1, 1), (0, 1), (0, 0), (0, -1), (-1, -1), (-1, 0), (-1, 1)],
}

# Whether each child runs forward, for a forward parent
PEANO_DIRECTIONS: List[bool] = [True, True, True, False, False, False, True, True, True]


def hilbert_points(depth: int, side: float, center: Point = (0.0, 0.0),
                   orientation: HilbertOrientation = HILBERT_ROOT) -> Iterator[Point]:
    """Yield the 4**depth cell centers of a Hilbert curve filling a square of the given side."""
    if depth <= 0:
        yield center
        return
    quarter = side / 4
    for (dx, dy), child in zip(HILBERT_OFFSETS[orientation], HILBERT_PRODUCTIONS[orientation]):
        yield from hilbert_points(depth - 1, side / 2,
                                  (center[0] + dx * quarter, center[1] + dy * quarter), child)


def peano_points(depth: int, side: float, center: Point = (0.0, 0.0),
                 peano_type: PeanoType = PeanoType.NORMAL, forward: bool = True) -> Iterator[Point]:
    """
    Yield the 9**depth cell centers of a Peano curve filling a square of the given side.

    Successive children alternate type; a backward traversal reverses both the
    child positions and each child's direction so it retraces the same cells.
    """
    if depth <= 0:
        yield center
        return
    third = side / 3
    positions = PEANO_POSITIONS[peano_type]
    directions = PEANO_DIRECTIONS
    types = [peano_type if k % 2 == 0 else peano_type.flipped for k in range(9)]
    children = list(zip(positions, types, directions))
    if not forward:
        children = [(pos, child_type, not child_forward)
                    for pos, child_type, child_forward in reversed(children)]
    for (dx, dy), child_type, child_forward in children:
        yield from peano_points(depth - 1, third,
                                (center[0] + dx * third, center[1] + dy * third),
                                child_type, child_forward)


def levy_points(start: Point, end: Point, level: int) -> Iterator[Point]:
    """
    Yield the end points of the L-shaped refinement of a segment.
    Each level replaces a segment by two perpendicular halves bulging to its right.
    """
    if level <= 0:
        yield end
        return
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    apex = ((start[0] + end[0]) / 2 + dy / 2, (start[1] + end[1]) / 2 - dx / 2)
    yield from levy_points(start, apex, level - 1)
    yield from levy_points(apex, end, level - 1)


def octagon_vertices(circumradius: float) -> List[Point]:
    """Counter-clockwise vertices of a regular octagon with axis-aligned sides."""
    return [(circumradius * math.cos(math.radians(22.5 + 45 * k)),
             circumradius * math.sin(math.radians(22.5 + 45 * k))) for k in range(8)]


class CurveGenerator:
    """Draws curves by issuing line_to/arc_to calls on a PathTracer."""

    def __init__(self, tracer: PathTracer):
        self.tracer = tracer

    @property
    def state(self):
        return self.tracer.state

    def _square_side(self) -> float:
        return self.state.radius * math.sqrt(2) - SQUARE_MARGIN

    async def _draw_points(self, points: Iterator[Point], rotation: float) -> int:
        count = 0
        for x, y in points:
            rotated_x, rotated_y = rotated_position(x, y, rotation)
            await self.tracer.line_to(rotated_x, rotated_y)
            count += 1
        return count

    async def hilbert_curve(self, depth: int, rotation: float = 0.0) -> None:
        """
        Draws a space-filling Hilbert curve.

        Args:
            depth: Depth of the curve; 4**depth points are visited
            rotation: Extra rotation in degrees on top of the plate frame offset
        """
        depth = int(depth)
        if depth <= 0:
            logger.warning("Depth must be a positive integer.")
            return
        logger.info(f"Draw Hilbert curve of depth {depth}.")
        await self._draw_points(hilbert_points(depth, self._square_side()),
                                HILBERT_FRAME_OFFSET + rotation)

    async def peano_curve(self, depth: int, rotation: float = 0.0) -> None:
        """Draws a space-filling Peano curve visiting 9**depth points."""
        depth = int(depth)
        if depth <= 0:
            logger.warning("Depth must be a positive integer.")
            return
        logger.info(f"Draw Peano curve of depth {depth}.")
        await self._draw_points(peano_points(depth, self._square_side()),
                                PEANO_FRAME_OFFSET + rotation)

    async def octagon_fractal(self, level: int) -> None:
        """Draws an octagon whose edges are refined into L-shaped micro-paths level times."""
        level = int(level)
        if level < 0:
            logger.warning("Level must not be negative.")
            return
        logger.info(f"Draw octagon fractal of level {level}.")
        vertices = octagon_vertices(self.state.radius * OCTAGON_SCALE)
        await self.tracer.line_to(*vertices[0])
        for k in range(8):
            start, end = vertices[k], vertices[(k + 1) % 8]
            for x, y in levy_points(start, end, level):
                await self.tracer.line_to(x, y)

    # ---------- Turtle drawing ----------

    async def forward(self, distance: float, direction: Optional[float] = None) -> None:
        """Draw a line of the given length along the heading (set it first when direction is given)."""
        if direction is None:
            direction = self.state.logo_direction
        else:
            self.state.logo_direction = direction
        x0, y0 = self.state.current_position
        x1 = x0 + math.cos(math.radians(direction)) * distance
        y1 = y0 + math.sin(math.radians(direction)) * distance
        await self.tracer.line_to(x1, y1)

    async def arc(self, radius: float, degrees: float, right_handed: bool = True,
                  direction: Optional[float] = None) -> None:
        """
        Draw an arc tangent to the heading and turn the heading by degrees.

        right_handed is meant in the screen frame, where y grows downward, so a
        right-handed arc turns counter-clockwise in plate coordinates.
        """
        if degrees <= 0 or degrees >= 360:
            logger.warning("Degrees must be between 0 and 360 (exclusive).")
            return

        if direction is None:
            direction = self.state.logo_direction
        else:
            self.state.logo_direction = direction

        clockwise = not right_handed
        x1, y1 = self.state.current_position
        c = math.cos(math.radians(direction))
        s = math.sin(math.radians(direction))

        if clockwise:
            center_x, center_y = x1 + s * radius, y1 - c * radius
            end_angle = math.radians(direction + 90 - degrees)
        else:
            center_x, center_y = x1 - s * radius, y1 + c * radius
            end_angle = math.radians(direction - 90 + degrees)
        x2 = center_x + radius * math.cos(end_angle)
        y2 = center_y + radius * math.sin(end_angle)

        await self.tracer.arc_to(x2, y2, radius + EPS, not clockwise, degrees <= 180)
        self.state.logo_direction += -degrees if clockwise else degrees

    async def flowsnake(self, level: int) -> None:
        """Three-fold ring of arcs, each refined into seven smaller arcs per level."""
        level = int(level)
        if level < 0:
            logger.warning("Level must not be negative.")
            return
        r0 = self.state.radius * FLOWSNAKE_SCALE
        await self.tracer.line_to(r0, 0)
        self.state.logo_direction = 90
        for _ in range(3):
            await self._flowsnake(level, r0, True)

    async def _flowsnake(self, remaining_level: int, radius: float, right_handed: bool) -> None:
        if remaining_level == 0:
            await self.arc(radius, 120, right_handed)
            return
        turn = -127.5 - math.degrees(math.asin(1 / 2 / math.sqrt(7)))
        self.state.logo_direction += turn
        if right_handed:
            sequence = [True, True, False, True, True, False, False]
        else:
            sequence = [True, True, False, False, True, False, False]
        for child_right_handed in sequence:
            await self._flowsnake(remaining_level - 1, radius / math.sqrt(7), child_right_handed)
        self.state.logo_direction -= turn
