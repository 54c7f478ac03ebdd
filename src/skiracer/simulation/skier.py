"""Skier physics.

Heuristic planar model: the ski angle sets a lateral drift and bleeds
forward progress, the speed keys push speed between MIN_SPEED and an
angle-dependent ceiling, and a timed jump freezes steering.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from skiracer.simulation.constants import (
    CANVAS_WIDTH, SKIER_Y, HALF_BODY,
    MIN_SPEED, INITIAL_SPEED, MAX_SPEED_STRAIGHT, MAX_SPEED_TURNING,
    SPEED_PUSH, SPEED_CHECK, SPEED_DECAY,
    MAX_SKI_ANGLE, TURN_RATE, TURN_SPEED_PENALTY, TURN_WIDENING, DRIFT_SCALE,
    JUMP_DURATION_MS, CRASH_SPEED_DECAY, CRASH_STOP_THRESHOLD,
)
from skiracer.simulation.input import Action, InputState


def max_speed_for_angle(angle: float) -> float:
    """Speed ceiling, interpolated from straight to full-turn by |angle|."""
    ratio = min(1.0, abs(angle) / MAX_SKI_ANGLE)
    return MAX_SPEED_STRAIGHT - (MAX_SPEED_STRAIGHT - MAX_SPEED_TURNING) * ratio


def lateral_drift(angle: float, speed: float) -> float:
    """Per-tick x displacement. Faster skiing flattens the effective angle, widening the arc."""
    turn_factor = 1 - (speed / MAX_SPEED_STRAIGHT) * TURN_WIDENING
    effective_angle = angle * turn_factor
    return math.sin(effective_angle) * speed * DRIFT_SCALE


def downhill_speed(angle: float, speed: float) -> float:
    """Forward progress after the turning penalty."""
    return speed * (1 - abs(math.sin(angle)) * TURN_SPEED_PENALTY)


def clamp_x(x: float) -> float:
    return max(HALF_BODY, min(CANVAS_WIDTH - HALF_BODY, x))


@dataclass
class Jump:
    """Airborne window: start time and the drift frozen at take-off.

    A crash pins the window at frozen_at, so the skier stays at the
    height they were hit.
    """
    started_at: float
    drift: float
    frozen_at: Optional[float] = None

    def elapsed(self, now_ms: float) -> float:
        if self.frozen_at is not None:
            now_ms = min(now_ms, self.frozen_at)
        return now_ms - self.started_at

    def progress(self, now_ms: float) -> float:
        return max(0.0, min(1.0, self.elapsed(now_ms) / JUMP_DURATION_MS))


@dataclass
class SkierState:
    x: float = CANVAS_WIDTH / 2
    y: float = SKIER_Y
    angle: float = 0.0
    speed: float = INITIAL_SPEED
    jump: Optional[Jump] = None
    drift: float = 0.0

    @property
    def airborne(self) -> bool:
        return self.jump is not None


@dataclass
class SkierKinematics:
    """Owns the skier state and integrates it once per tick."""

    state: SkierState = field(default_factory=SkierState)

    def reset(self) -> None:
        self.state = SkierState()

    @property
    def current_max_speed(self) -> float:
        return max_speed_for_angle(self.state.angle)

    def step(self, keys: InputState, now_ms: float) -> float:
        """Advance one racing tick. Returns the downhill speed."""
        s = self.state
        self._update_speed(keys)

        if s.jump is not None and s.jump.elapsed(now_ms) >= JUMP_DURATION_MS:
            s.jump = None

        if s.jump is None:
            self._update_angle(keys)
            # Clamp again: turning lowers the ceiling
            s.speed = max(MIN_SPEED, min(self.current_max_speed, s.speed))
            if keys.tapped(Action.JUMP):
                s.jump = Jump(started_at=now_ms, drift=lateral_drift(s.angle, s.speed))

        if s.jump is not None:
            s.drift = s.jump.drift
        else:
            s.drift = lateral_drift(s.angle, s.speed)

        s.x = clamp_x(s.x + s.drift)
        return downhill_speed(s.angle, s.speed)

    def slide_step(self) -> float:
        """Crash slide: speed decays geometrically, drift keeps the last angle."""
        s = self.state
        s.speed *= CRASH_SPEED_DECAY
        if s.speed < CRASH_STOP_THRESHOLD:
            s.speed = 0.0
        s.drift = lateral_drift(s.angle, s.speed)
        s.x = clamp_x(s.x + s.drift)
        return downhill_speed(s.angle, s.speed)

    def freeze_jump(self, now_ms: float) -> None:
        """Hold any jump in progress where it is (used on crash)."""
        if self.state.jump is not None and self.state.jump.frozen_at is None:
            self.state.jump.frozen_at = now_ms

    def _update_speed(self, keys: InputState) -> None:
        s = self.state
        if keys.held(Action.DOWN):
            s.speed += SPEED_PUSH
        elif keys.held(Action.UP):
            s.speed -= SPEED_CHECK
        else:
            s.speed -= SPEED_DECAY
        s.speed = max(MIN_SPEED, min(self.current_max_speed, s.speed))

    def _update_angle(self, keys: InputState) -> None:
        s = self.state
        if keys.held(Action.TURN_LEFT):
            s.angle = max(-MAX_SKI_ANGLE, s.angle - TURN_RATE)
        if keys.held(Action.TURN_RIGHT):
            s.angle = min(MAX_SKI_ANGLE, s.angle + TURN_RATE)
