"""Race simulation: skier physics, scrolling world, obstacles and the phase flow.

RaceState lives in skiracer.simulation.race and is imported from there;
this package only re-exports the leaf modules.
"""

from skiracer.simulation.input import Action, InputState, KeyboardInput
from skiracer.simulation.skier import SkierKinematics, SkierState
from skiracer.simulation.world import WorldScroller, TrailPoint
from skiracer.simulation.obstacles import Obstacle, ObstacleField, ObstacleType, OBSTACLE_SPECS
from skiracer.simulation.collision import check_collision

__all__ = [
    "Action",
    "InputState",
    "KeyboardInput",
    "SkierKinematics",
    "SkierState",
    "WorldScroller",
    "TrailPoint",
    "Obstacle",
    "ObstacleField",
    "ObstacleType",
    "OBSTACLE_SPECS",
    "check_collision",
]
