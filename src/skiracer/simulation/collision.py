"""Skier/obstacle collision test."""

import math
from typing import Iterable, Optional

from skiracer.simulation.constants import SKIER_HIT_OFFSET_Y, SKIER_HIT_RADIUS
from skiracer.simulation.obstacles import Obstacle
from skiracer.simulation.skier import SkierState


def skier_hit_point(skier: SkierState) -> tuple[float, float]:
    return skier.x, skier.y + SKIER_HIT_OFFSET_Y


def check_collision(
    skier: SkierState,
    obstacles: Iterable[Obstacle],
    collision_enabled: bool = True,
) -> Optional[Obstacle]:
    """Return the first obstacle the skier overlaps, or None.

    Jumpable obstacles are ignored while the skier is airborne. Any hit
    ends the run the same way, so scan order only decides which obstacle
    gets reported.
    """
    if not collision_enabled:
        return None

    sx, sy = skier_hit_point(skier)
    for obstacle in obstacles:
        spec = obstacle.spec
        if spec.jumpable and skier.airborne:
            continue
        ox, oy = obstacle.hit_point
        if math.hypot(sx - ox, sy - oy) < spec.hit_radius + SKIER_HIT_RADIUS:
            return obstacle
    return None
