"""Obstacles and the finish line.

Obstacles are spawned just below the screen, carried upward by the
downhill speed and dropped once they leave the top. They are appended
in increasing y order, so the oldest one is always at the front of the
queue and eviction only ever looks at the head.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, Optional

from skiracer.simulation.constants import (
    CANVAS_WIDTH, CANVAS_HEIGHT, SKIER_Y,
    RACE_DISTANCE, SPAWN_CUTOFF_FRACTION, OBSTACLE_SPAWN_DISTANCE,
    SPAWN_FACTOR_MIN, SPAWN_FACTOR_SPAN, SPAWN_MARGIN,
    FINISH_GAP_X, FINISH_ALIGN_RANGE, FINISH_PASS_MARGIN, FINISH_PULL, FINISH_ANGLE_DECAY,
)
from skiracer.simulation.skier import SkierState, clamp_x

logger = logging.getLogger(__name__)


class ObstacleType(Enum):
    TREE = "tree"
    SNOWMAN = "snowman"
    ROCK = "rock"
    ARROW_LEFT = "arrow_left"
    ARROW_RIGHT = "arrow_right"
    HEAP = "heap"
    WINE_BARREL = "wine_barrel"


class Placement(Enum):
    ANYWHERE = "anywhere"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class ObstacleSpec:
    """Per-type geometry and spawn policy.

    hit_offset_y moves the collision circle from the sprite centre onto
    the solid part of the sprite (a tree trunk, the base of a snowman).
    """
    width: int
    height: int
    hit_radius: float
    hit_offset_y: float
    jumpable: bool = False
    placement: Placement = Placement.ANYWHERE
    weight: float = 1.0


# Enumeration order matters for weighted picking
OBSTACLE_SPECS: Dict[ObstacleType, ObstacleSpec] = {
    ObstacleType.TREE: ObstacleSpec(64, 96, hit_radius=16, hit_offset_y=24, weight=50),
    ObstacleType.SNOWMAN: ObstacleSpec(40, 60, hit_radius=14, hit_offset_y=14, weight=10),
    ObstacleType.ROCK: ObstacleSpec(48, 32, hit_radius=16, hit_offset_y=4, jumpable=True, weight=15),
    ObstacleType.ARROW_LEFT: ObstacleSpec(40, 56, hit_radius=10, hit_offset_y=18,
                                          placement=Placement.LEFT, weight=5),
    ObstacleType.ARROW_RIGHT: ObstacleSpec(40, 56, hit_radius=10, hit_offset_y=18,
                                           placement=Placement.RIGHT, weight=5),
    ObstacleType.HEAP: ObstacleSpec(96, 64, hit_radius=30, hit_offset_y=27, jumpable=True, weight=15),
    # Never spawns; kept so the sprite set stays complete
    ObstacleType.WINE_BARREL: ObstacleSpec(40, 48, hit_radius=16, hit_offset_y=8, weight=0),
}

DEFAULT_OBSTACLE = ObstacleType.TREE


@dataclass
class Obstacle:
    type: ObstacleType
    x: float
    y: float

    @property
    def spec(self) -> ObstacleSpec:
        return OBSTACLE_SPECS[self.type]

    @property
    def hit_point(self) -> tuple[float, float]:
        return self.x, self.y + self.spec.hit_offset_y


def pick_obstacle_type(
    rng: random.Random,
    specs: Dict[ObstacleType, ObstacleSpec] = OBSTACLE_SPECS,
) -> ObstacleType:
    """Cumulative-weight sampling over the catalogue in enumeration order."""
    total = sum(spec.weight for spec in specs.values())
    remainder = rng.random() * total
    for obstacle_type, spec in specs.items():
        if spec.weight <= 0:
            continue
        remainder -= spec.weight
        if remainder <= 0:
            return obstacle_type
    # Float rounding can leave a sliver of remainder
    return DEFAULT_OBSTACLE


def spawn_x(spec: ObstacleSpec, rng: random.Random) -> float:
    if spec.placement == Placement.LEFT:
        return SPAWN_MARGIN + spec.width / 2
    if spec.placement == Placement.RIGHT:
        return CANVAS_WIDTH - SPAWN_MARGIN - spec.width / 2
    return spec.width / 2 + rng.random() * (CANVAS_WIDTH - spec.width)


@dataclass
class FieldStep:
    """What happened in one ObstacleField.step()."""
    spawned: Optional[Obstacle] = None
    evicted: int = 0
    finish_created: bool = False
    finish_passed: bool = False


@dataclass
class ObstacleField:
    """Active obstacles plus the finish marker."""

    rng: random.Random = field(default_factory=random.Random)
    race_distance: float = RACE_DISTANCE
    obstacles: Deque[Obstacle] = field(default_factory=deque)
    finish_y: Optional[float] = None
    distance_since_spawn: float = 0.0
    next_spawn_distance: float = 0.0
    spawn_count: int = 0

    def __post_init__(self) -> None:
        if self.next_spawn_distance <= 0:
            self.next_spawn_distance = self._roll_spawn_distance()

    @property
    def spawn_cutoff(self) -> float:
        return self.race_distance * SPAWN_CUTOFF_FRACTION

    def reset(self) -> None:
        self.obstacles.clear()
        self.finish_y = None
        self.distance_since_spawn = 0.0
        self.next_spawn_distance = self._roll_spawn_distance()
        self.spawn_count = 0

    def step(self, downhill_speed: float, current_distance: float, spawning: bool = True) -> FieldStep:
        result = FieldStep()

        for obstacle in self.obstacles:
            obstacle.y -= downhill_speed
        if self.finish_y is not None:
            self.finish_y -= downhill_speed

        while self.obstacles and self.obstacles[0].y < -self.obstacles[0].spec.height:
            self.obstacles.popleft()
            result.evicted += 1

        if spawning and current_distance < self.spawn_cutoff:
            self.distance_since_spawn += downhill_speed
            if self.distance_since_spawn >= self.next_spawn_distance:
                self.distance_since_spawn = 0.0
                self.next_spawn_distance = self._roll_spawn_distance()
                result.spawned = self.spawn()

        remaining = self.race_distance - current_distance
        if self.finish_y is None and remaining < CANVAS_HEIGHT:
            self.finish_y = CANVAS_HEIGHT + remaining
            result.finish_created = True
            logger.debug(f"Finish line placed at y={self.finish_y:.0f}")

        result.finish_passed = self.finish_passed
        return result

    def spawn(self, obstacle_type: Optional[ObstacleType] = None) -> Obstacle:
        """Push a new obstacle just below the visible area."""
        if obstacle_type is None:
            obstacle_type = pick_obstacle_type(self.rng)
        spec = OBSTACLE_SPECS[obstacle_type]
        obstacle = Obstacle(obstacle_type, spawn_x(spec, self.rng), CANVAS_HEIGHT + spec.height)
        self.obstacles.append(obstacle)
        self.spawn_count += 1
        return obstacle

    @property
    def finish_passed(self) -> bool:
        return self.finish_y is not None and self.finish_y < SKIER_Y - FINISH_PASS_MARGIN

    def finish_near(self, skier: SkierState) -> bool:
        return self.finish_y is not None and self.finish_y - skier.y < FINISH_ALIGN_RANGE

    def apply_finish_alignment(self, skier: SkierState) -> bool:
        """Steer the skier through the finish gap once the line is close."""
        if not self.finish_near(skier):
            return False
        skier.x = clamp_x(skier.x + (FINISH_GAP_X - skier.x) * FINISH_PULL)
        skier.angle *= FINISH_ANGLE_DECAY
        return True

    def _roll_spawn_distance(self) -> float:
        return OBSTACLE_SPAWN_DISTANCE * (SPAWN_FACTOR_MIN + self.rng.random() * SPAWN_FACTOR_SPAN)
