"""Tests for the scrolling background and ski trail."""

import pytest

from skiracer.simulation.constants import CANVAS_HEIGHT, SKIER_Y
from skiracer.simulation.skier import SkierState
from skiracer.simulation.world import TrailPoint, WorldScroller, ski_tails


def test_ski_tails_straight():
    point = ski_tails(SkierState(x=300, y=SKIER_Y, angle=0.0))
    assert point.left_x == pytest.approx(290)
    assert point.right_x == pytest.approx(310)
    assert point.left_y == pytest.approx(SKIER_Y + 9)
    assert point.right_y == pytest.approx(point.left_y)


def test_ski_tails_follow_angle():
    right = ski_tails(SkierState(x=300, angle=0.5))
    left = ski_tails(SkierState(x=300, angle=-0.5))
    # Turning right leaves the tails to the left of the ski centres
    assert right.left_x < 290
    assert left.left_x > 290


def test_tiles_scroll_up():
    world = WorldScroller()
    world.step(5.0)
    assert world.tile1_y == -5.0
    assert world.tile2_y == CANVAS_HEIGHT - 5.0


def test_tile_wraps_below_the_other():
    world = WorldScroller(tile1_y=-798.0, tile2_y=2.0)
    world.step(5.0)
    assert sorted([world.tile1_y, world.tile2_y]) == [-3.0, 797.0]


def test_large_step_still_covers_viewport():
    world = WorldScroller()
    world.step(2000.0)
    top, bottom = sorted([world.tile1_y, world.tile2_y])
    assert top > -CANVAS_HEIGHT
    assert bottom - top == CANVAS_HEIGHT
    assert top <= 0 < bottom + CANVAS_HEIGHT


def test_tiles_stay_integral():
    world = WorldScroller()
    for _ in range(50):
        world.step(3.37)
    assert world.tile1_y == int(world.tile1_y)
    assert abs(world.tile1_y - world.tile2_y) == CANVAS_HEIGHT


def test_trail_scrolls_and_evicts_from_head():
    world = WorldScroller()
    world.trail.append(TrailPoint(0, -5, 0, -5))
    world.trail.append(TrailPoint(0, 100, 0, 100))
    world.step(10.0)
    assert len(world.trail) == 1
    assert world.trail[0].left_y == 90


def test_step_with_skier_appends_sample():
    world = WorldScroller()
    world.step(4.0, SkierState())
    world.step(4.0, SkierState())
    assert len(world.trail) == 2
    assert world.trail[0].left_y == pytest.approx(world.trail[1].left_y - 4.0)


def test_reset():
    world = WorldScroller()
    world.step(123.0, SkierState())
    world.reset()
    assert (world.tile1_y, world.tile2_y) == (0.0, CANVAS_HEIGHT)
    assert not world.trail
