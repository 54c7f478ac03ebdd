"""Tuning constants for the slope simulation.

All speeds are pixels per tick; one tick is one rendered frame.
"""

import math

# --- Playfield ---
CANVAS_WIDTH = 600
CANVAS_HEIGHT = 800
SKIER_Y = CANVAS_HEIGHT / 3

# --- Speed ---
MIN_SPEED = 1.0
INITIAL_SPEED = 3.0
MAX_SPEED_STRAIGHT = 20.0    # going straight down the fall line
MAX_SPEED_TURNING = 16.0     # at full ski angle
SPEED_PUSH = 0.15            # "down" key
SPEED_CHECK = 0.25           # "up" key
SPEED_DECAY = 0.05           # no speed key held

# --- Steering ---
MAX_SKI_ANGLE = math.pi / 3
TURN_RATE = 0.04             # radians per tick
TURN_SPEED_PENALTY = 0.3     # downhill speed lost at max angle (0 = none, 1 = full stop)
TURN_WIDENING = 0.6          # how much speed widens the turn radius
DRIFT_SCALE = 0.8

# --- Skier body ---
BODY_WIDTH = 32
BODY_HEIGHT = 48
SKI_WIDTH = 4
SKI_HEIGHT = 30
SKI_SPACING = 20
HALF_BODY = BODY_WIDTH / 2 + SKI_SPACING
SKIER_HIT_OFFSET_Y = 15
SKIER_HIT_RADIUS = 12

# --- Jump ---
JUMP_DURATION_MS = 600.0

# --- Crash slide ---
CRASH_SPEED_DECAY = 0.95
CRASH_STOP_THRESHOLD = 0.05

# --- Course ---
PIXELS_PER_METER = 20.0
RACE_DISTANCE = 30000.0
SPAWN_CUTOFF_FRACTION = 0.95
OBSTACLE_SPAWN_DISTANCE = 350.0
SPAWN_FACTOR_MIN = 0.3
SPAWN_FACTOR_SPAN = 2.0
SPAWN_MARGIN = 40.0          # edge margin for "biased" obstacles

# --- Finish line ---
FINISH_GAP_X = CANVAS_WIDTH / 2
FINISH_ALIGN_RANGE = 300.0   # marker distance below the skier where homing starts
FINISH_PASS_MARGIN = 150.0   # marker must be this far above the skier to finish
FINISH_PULL = 0.05
FINISH_ANGLE_DECAY = 0.9

# --- Trail ---
TRAIL_EVICT_Y = -10.0

# --- Phase timing (wall clock) ---
SCOREBOARD_DELAY_MS = 2000.0
FADE_DURATION_MS = 400.0
START_COUNTDOWN_MS = 3000.0

# --- Name entry ---
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 10


def meters(distance_px: float) -> float:
    """Convert a scroll distance in pixels to displayed metres."""
    return distance_px / PIXELS_PER_METER
