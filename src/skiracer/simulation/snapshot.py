"""Read-only view of the game handed to the renderer each frame."""

from dataclasses import dataclass
from typing import Optional

from skiracer.core.state import RacePhase
from skiracer.leaderboard.models import LeaderboardEntry, ScoreKind
from skiracer.simulation.obstacles import ObstacleType


@dataclass(frozen=True)
class SkierView:
    x: float
    y: float
    angle: float
    speed: float
    airborne: bool
    jump_progress: float  # 0..1 through the airborne window, 0 on the ground


@dataclass(frozen=True)
class ObstacleView:
    type: ObstacleType
    x: float
    y: float


@dataclass(frozen=True)
class DebugCounters:
    obstacles: int
    trail_points: int
    spawned: int
    collision_enabled: bool
    crashed_into: Optional[ObstacleType] = None


@dataclass(frozen=True)
class RaceSnapshot:
    phase: RacePhase
    skier: SkierView
    tile1_y: float
    tile2_y: float
    trail: tuple[tuple[float, float, float, float], ...]
    obstacles: tuple[ObstacleView, ...]
    finish_y: Optional[float]
    distance_m: float
    remaining_m: float
    race_time_ms: float
    countdown: Optional[str]
    countdown_scale: float
    loading_progress: float
    leaderboard: tuple[LeaderboardEntry, ...]
    leaderboard_loading: bool
    rank: Optional[int]
    score_kind: Optional[ScoreKind]
    score_value: Optional[float]
    player_name: str
    name_submitted: bool
    transition_alpha: float
    debug: DebugCounters
    debug_enabled: bool = False
