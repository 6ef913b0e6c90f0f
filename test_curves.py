#!/usr/bin/env python3
"""Tests for the space-filling curves, the octagon fractal and turtle drawing."""
import asyncio
import logging
import math

import pytest

from execution.curves import (
    HILBERT_FRAME_OFFSET,
    HILBERT_OFFSETS,
    HILBERT_PRODUCTIONS,
    PEANO_FRAME_OFFSET,
    PEANO_POSITIONS,
    CurveGenerator,
    HilbertOrientation,
    PeanoType,
    hilbert_points,
    levy_points,
    octagon_vertices,
    peano_points,
)
from state.kinematics import KinematicState, rotated_position


class RecordingTracer:
    """Records the geometry a CurveGenerator asks for without moving anything."""

    def __init__(self, radius=400):
        self.state = KinematicState(radius=radius)
        self.lines = []
        self.arcs = []

    async def line_to(self, x, y):
        self.lines.append((x, y))

    async def arc_to(self, x, y, radius, right_hand_side=True, draw_minor_arc=True):
        self.arcs.append((x, y, radius, right_hand_side, draw_minor_arc))


def assert_unit_steps(points, spacing):
    for (x1, y1), (x2, y2) in zip(points, points[1:]):
        assert math.hypot(x2 - x1, y2 - y1) == pytest.approx(spacing)


def grid_cells(points, spacing, side):
    """Map cell centers onto integer grid indices."""
    return {(round((x + side / 2 - spacing / 2) / spacing),
             round((y + side / 2 - spacing / 2) / spacing)) for x, y in points}


@pytest.mark.parametrize("orientation", list(HilbertOrientation))
def test_hilbert_points_visit_every_cell_once(orientation):
    points = list(hilbert_points(3, 8.0, orientation=orientation))
    assert len(points) == 64
    assert grid_cells(points, 1.0, 8.0) == {(i, j) for i in range(8) for j in range(8)}
    assert_unit_steps(points, 1.0)


def test_orientation_tables_cover_every_member():
    assert set(HILBERT_PRODUCTIONS) == set(HilbertOrientation)
    assert set(HILBERT_OFFSETS) == set(HilbertOrientation)
    assert set(PEANO_POSITIONS) == set(PeanoType)


def test_hilbert_depth_one_is_a_u_shape():
    points = list(hilbert_points(1, 4.0))
    assert points == [(1.0, 1.0), (1.0, -1.0), (-1.0, -1.0), (-1.0, 1.0)]


def test_peano_points_visit_every_cell_once():
    points = list(peano_points(2, 9.0))
    assert len(points) == 81
    assert grid_cells(points, 1.0, 9.0) == {(i, j) for i in range(9) for j in range(9)}
    assert_unit_steps(points, 1.0)


def test_peano_backward_retraces_forward():
    forward = list(peano_points(2, 9.0))
    backward = list(peano_points(2, 9.0, forward=False))
    assert backward == forward[::-1]


def test_levy_points_refine_each_segment():
    points = list(levy_points((0.0, 0.0), (1.0, 0.0), 3))
    assert len(points) == 8
    assert points[-1] == pytest.approx((1.0, 0.0))
    # Every refinement keeps the end points and halves the segment length by sqrt(2)
    assert_unit_steps([(0.0, 0.0)] + points, (1 / math.sqrt(2)) ** 3)


def test_octagon_vertices_are_regular():
    vertices = octagon_vertices(100)
    assert len(vertices) == 8
    for x, y in vertices:
        assert math.hypot(x, y) == pytest.approx(100)
    side = 2 * 100 * math.sin(math.radians(22.5))
    assert_unit_steps(vertices + vertices[:1], side)


def test_hilbert_curve_draws_rotated_points():
    tracer = RecordingTracer()
    curves = CurveGenerator(tracer)

    asyncio.run(curves.hilbert_curve(2))

    side = 400 * math.sqrt(2) - 0.1
    expected = list(hilbert_points(2, side))
    assert len(tracer.lines) == 16
    for (x, y), (ex, ey) in zip(tracer.lines, expected):
        ux, uy = rotated_position(x, y, -HILBERT_FRAME_OFFSET)
        assert (ux, uy) == pytest.approx((ex, ey))
    # Every point stays on the plate
    assert all(math.hypot(x, y) < 400 for x, y in tracer.lines)


def test_hilbert_curve_extra_rotation():
    plain = RecordingTracer()
    turned = RecordingTracer()
    asyncio.run(CurveGenerator(plain).hilbert_curve(1))
    asyncio.run(CurveGenerator(turned).hilbert_curve(1, 90))

    for (x, y), (tx, ty) in zip(plain.lines, turned.lines):
        assert rotated_position(x, y, 90) == pytest.approx((tx, ty))


def test_peano_curve_draws_rotated_points():
    tracer = RecordingTracer()
    asyncio.run(CurveGenerator(tracer).peano_curve(1))

    side = 400 * math.sqrt(2) - 0.1
    expected = list(peano_points(1, side))
    assert len(tracer.lines) == 9
    for (x, y), (ex, ey) in zip(tracer.lines, expected):
        assert rotated_position(x, y, -PEANO_FRAME_OFFSET) == pytest.approx((ex, ey))


def test_non_positive_depth_is_ignored(caplog):
    tracer = RecordingTracer()
    curves = CurveGenerator(tracer)

    with caplog.at_level(logging.WARNING):
        asyncio.run(curves.hilbert_curve(0))
        asyncio.run(curves.peano_curve(-1))

    assert tracer.lines == []
    assert "Depth must be a positive integer" in caplog.text


def test_octagon_fractal_point_count():
    tracer = RecordingTracer()
    asyncio.run(CurveGenerator(tracer).octagon_fractal(2))

    # Move to the first vertex, then 2**level points per edge
    assert len(tracer.lines) == 1 + 8 * 4
    assert tracer.lines[-1] == pytest.approx(tracer.lines[0])


def test_forward_follows_heading():
    tracer = RecordingTracer()
    curves = CurveGenerator(tracer)

    asyncio.run(curves.forward(10, 90))
    assert tracer.lines[-1] == pytest.approx((400, 10))
    assert tracer.state.logo_direction == 90

    # The tracer never moved, so the next step starts from (400, 0) again
    asyncio.run(curves.forward(5))
    assert tracer.lines[-1] == pytest.approx((400, 5))


def test_arc_turns_heading():
    tracer = RecordingTracer()
    curves = CurveGenerator(tracer)

    asyncio.run(curves.arc(100, 90, right_handed=True, direction=90))

    x, y, radius, right_hand_side, minor = tracer.arcs[-1]
    assert (x, y) == pytest.approx((300, 100))
    assert radius == pytest.approx(100.01)
    assert right_hand_side is True
    assert minor is True
    assert tracer.state.logo_direction == pytest.approx(180)


def test_arc_rejects_full_turns(caplog):
    tracer = RecordingTracer()
    with caplog.at_level(logging.WARNING):
        asyncio.run(CurveGenerator(tracer).arc(50, 360))
    assert tracer.arcs == []
    assert "Degrees must be between" in caplog.text


def test_flowsnake_level_zero_is_three_arcs():
    tracer = RecordingTracer()
    asyncio.run(CurveGenerator(tracer).flowsnake(0))

    assert len(tracer.arcs) == 3
    # Three 120 degree turns bring the heading back to where it started
    assert tracer.state.logo_direction == pytest.approx(90)


def test_flowsnake_level_one_has_seven_arcs_per_segment():
    tracer = RecordingTracer()
    asyncio.run(CurveGenerator(tracer).flowsnake(1))
    assert len(tracer.arcs) == 21
