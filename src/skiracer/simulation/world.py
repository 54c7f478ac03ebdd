"""Scrolling snow and ski trails."""

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Deque

from skiracer.simulation.constants import (
    CANVAS_HEIGHT, BODY_HEIGHT, SKI_HEIGHT, SKI_SPACING, TRAIL_EVICT_Y,
)
from skiracer.simulation.skier import SkierState


@dataclass
class TrailPoint:
    """Back-of-ski contact points for one tick."""
    left_x: float
    left_y: float
    right_x: float
    right_y: float


def ski_tails(skier: SkierState) -> TrailPoint:
    """Project the tail of each ski behind the skier.

    Skis are drawn rotated by the negated angle so they point along the
    direction of travel; the tail sits half a ski length back from the
    ski centre.
    """
    ski_y = skier.y + BODY_HEIGHT / 2
    rotation = -skier.angle
    back = SKI_HEIGHT / 2
    dx = math.sin(rotation) * back
    dy = math.cos(rotation) * back
    left_center = skier.x - SKI_SPACING / 2
    right_center = skier.x + SKI_SPACING / 2
    return TrailPoint(
        left_x=left_center + dx,
        left_y=ski_y - dy,
        right_x=right_center + dx,
        right_y=ski_y - dy,
    )


@dataclass
class WorldScroller:
    """Two background tiles cycling upward plus the trail history.

    The tiles are each one canvas tall; together they always cover the
    viewport. The trail is a queue: new samples at the tail, samples that
    scrolled off the top evicted from the head.
    """

    tile_height: float = CANVAS_HEIGHT
    tile1_y: float = 0.0
    tile2_y: float = float(CANVAS_HEIGHT)
    trail: Deque[TrailPoint] = field(default_factory=deque)

    def reset(self) -> None:
        self.tile1_y = 0.0
        self.tile2_y = float(self.tile_height)
        self.trail.clear()

    def step(self, downhill_speed: float, skier: SkierState | None = None) -> None:
        self.scroll_tiles(downhill_speed)

        for point in self.trail:
            point.left_y -= downhill_speed
            point.right_y -= downhill_speed
        while self.trail and self.trail[0].left_y < TRAIL_EVICT_Y:
            self.trail.popleft()

        if skier is not None:
            self.trail.append(ski_tails(skier))

    def scroll_tiles(self, downhill_speed: float) -> None:
        # Sub-pixel offsets leave a visible seam between the tiles
        self.tile1_y = float(round(self.tile1_y - downhill_speed))
        self.tile2_y = float(round(self.tile2_y - downhill_speed))

        # Loop: a single tick may move more than one tile height
        while self.tile1_y <= -self.tile_height or self.tile2_y <= -self.tile_height:
            if self.tile1_y <= self.tile2_y:
                self.tile1_y = self.tile2_y + self.tile_height
            else:
                self.tile2_y = self.tile1_y + self.tile_height
