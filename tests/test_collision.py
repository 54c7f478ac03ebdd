"""Tests for skier/obstacle collision."""

from skiracer.simulation.collision import check_collision
from skiracer.simulation.obstacles import Obstacle, ObstacleType
from skiracer.simulation.skier import Jump, SkierState

# Heap: radius 30, offset 27; skier circle radius 12, 15 below the skier centre
HEAP = Obstacle(ObstacleType.HEAP, 300.0, 400.0)
TREE = Obstacle(ObstacleType.TREE, 300.0, 400.0)


def skier_at(y: float, airborne: bool = False) -> SkierState:
    skier = SkierState(x=300.0, y=y)
    if airborne:
        skier.jump = Jump(started_at=0.0, drift=0.0)
    return skier


def test_overlap_is_a_hit():
    # |(300, y + 15) - (300, 427)| = 41 < 42
    assert check_collision(skier_at(453.0), [HEAP]) is HEAP


def test_touching_is_not_a_hit():
    assert check_collision(skier_at(454.0), [HEAP]) is None


def test_jumpable_ignored_while_airborne():
    assert check_collision(skier_at(453.0, airborne=True), [HEAP]) is None


def test_non_jumpable_hits_while_airborne():
    assert check_collision(skier_at(409.0, airborne=True), [TREE]) is TREE


def test_disabled_collisions():
    assert check_collision(skier_at(453.0), [HEAP], collision_enabled=False) is None


def test_reports_first_hit_in_order():
    other = Obstacle(ObstacleType.ROCK, 300.0, 430.0)
    assert check_collision(skier_at(420.0), [other, HEAP]) is other


def test_empty_field():
    assert check_collision(skier_at(400.0), []) is None
