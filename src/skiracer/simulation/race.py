"""Race flow: the phase machine driving every per-frame system.

One call to advance() is one tick:

    input -> skier -> world -> obstacles -> collision -> phase -> fade

Phase-specific behaviour lives in one handler per RacePhase. The skier,
world and obstacle field only move while racing or crashed; the fade
and countdown run on wall-clock time regardless.
"""

import logging
import random
from typing import Callable, Dict, Optional

from skiracer.animation.countdown import StartCountdown
from skiracer.animation.transition import FadeTransition
from skiracer.core.assets import AssetGate
from skiracer.core.clock import Clock
from skiracer.core.events import Event, EventBus, EventType, sound_event
from skiracer.core.state import PhaseMachine, RacePhase
from skiracer.leaderboard.board import Leaderboard
from skiracer.leaderboard.models import ScoreKind
from skiracer.simulation.collision import check_collision
from skiracer.simulation.constants import (
    RACE_DISTANCE, SCOREBOARD_DELAY_MS, NAME_MIN_LENGTH, NAME_MAX_LENGTH, meters,
)
from skiracer.simulation.input import Action, InputState
from skiracer.simulation.obstacles import Obstacle, ObstacleField
from skiracer.simulation.skier import SkierKinematics
from skiracer.simulation.snapshot import (
    DebugCounters, ObstacleView, RaceSnapshot, SkierView,
)
from skiracer.simulation.world import WorldScroller

logger = logging.getLogger(__name__)


class RaceState:
    """Owns the simulation context and moves it between phases."""

    def __init__(
        self,
        clock: Clock,
        leaderboard: Leaderboard,
        event_bus: Optional[EventBus] = None,
        assets: Optional[AssetGate] = None,
        rng: Optional[random.Random] = None,
        debug: bool = False,
        race_distance: float = RACE_DISTANCE,
    ) -> None:
        self.clock = clock
        self.leaderboard = leaderboard
        self.event_bus = event_bus
        self.assets = assets
        self.debug = debug

        now = clock.now_ms()
        self._now = now
        self.phases = PhaseMachine(RacePhase.LOADING, now)
        self.phases.add_listener(self._on_phase_changed)

        self.skier = SkierKinematics()
        self.world = WorldScroller()
        self.field = ObstacleField(rng=rng or random.Random(), race_distance=race_distance)
        self.fade = FadeTransition()
        self.countdown = StartCountdown(on_beat=self._on_countdown_beat, on_complete=self._begin_race)

        self.distance = 0.0
        self.race_started_at = now
        self.race_time_ms = 0.0
        self.collision_enabled = True
        self.crashed_into: Optional[Obstacle] = None

        self.score_kind: Optional[ScoreKind] = None
        self.score_value: Optional[float] = None
        self.player_name = ""
        self.name_submitted = False

        self._handlers: Dict[RacePhase, Callable[[InputState], None]] = {
            RacePhase.LOADING: self._update_loading,
            RacePhase.MENU: self._update_menu,
            RacePhase.START_ANIMATION: self._update_start_animation,
            RacePhase.RACING: self._update_racing,
            RacePhase.FINISHED: self._update_finished,
            RacePhase.CRASHED: self._update_crashed,
            RacePhase.SCOREBOARD: self._update_scoreboard,
        }
        missing = set(RacePhase) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for phases: {sorted(p.name for p in missing)}")

    @property
    def phase(self) -> RacePhase:
        return self.phases.phase

    @property
    def race_distance(self) -> float:
        return self.field.race_distance

    def advance(self, keys: InputState) -> None:
        """Run one tick."""
        self._now = self.clock.now_ms()

        if self.debug and keys.tapped(Action.TOGGLE_COLLISION):
            self.collision_enabled = not self.collision_enabled
            logger.info(f"Collisions {'enabled' if self.collision_enabled else 'disabled'}")

        self._handlers[self.phase](keys)
        self.fade.step(self._now)

    # Phase handlers

    def _update_loading(self, keys: InputState) -> None:
        if self.assets is None or self.assets.all_settled:
            if self.phases.transition(RacePhase.MENU, self._now):
                self.leaderboard.refresh()

    def _update_menu(self, keys: InputState) -> None:
        if self.fade.active:
            return
        if keys.tapped(Action.START):
            if self.phases.transition(RacePhase.START_ANIMATION, self._now):
                self.countdown.start(self._now)

    def _update_start_animation(self, keys: InputState) -> None:
        # Completion callback moves us to RACING
        self.countdown.update(self._now)

    def _update_racing(self, keys: InputState) -> None:
        was_airborne = self.skier.state.airborne
        downhill = self.skier.step(keys, self._now)
        if self.skier.state.airborne and not was_airborne:
            self._emit(sound_event("jump"))

        self.world.step(downhill, self.skier.state)
        field_step = self.field.step(downhill, self.distance)
        self.field.apply_finish_alignment(self.skier.state)

        self.distance += downhill
        self.race_time_ms = self._now - self.race_started_at

        hit = check_collision(self.skier.state, self.field.obstacles, self.collision_enabled)
        if hit is not None:
            self._crash(hit)
        elif field_step.finish_passed:
            self._finish()

    def _update_finished(self, keys: InputState) -> None:
        self._maybe_show_scoreboard()

    def _update_crashed(self, keys: InputState) -> None:
        downhill = self.skier.slide_step()
        self.world.step(downhill, self.skier.state if downhill > 0 else None)
        self.field.step(downhill, self.distance, spawning=False)
        self._maybe_show_scoreboard()

    def _update_scoreboard(self, keys: InputState) -> None:
        if self.fade.active or self.leaderboard.loading:
            return

        if not self.name_submitted:
            self._edit_name(keys)
            return

        if keys.tapped(Action.CONTINUE):
            self.fade.start(self._now, on_midpoint=self._return_to_menu)

    # Transitions

    def _begin_race(self) -> None:
        self.skier.reset()
        self.world.reset()
        self.field.reset()
        self.distance = 0.0
        self.race_started_at = self._now
        self.race_time_ms = 0.0
        self.crashed_into = None
        if self.phases.transition(RacePhase.RACING, self._now):
            self._emit(Event(EventType.MUSIC_PLAY, data={"name": "race"}, source="race"))

    def _crash(self, obstacle: Obstacle) -> None:
        self.crashed_into = obstacle
        self.skier.freeze_jump(self._now)
        logger.info(
            f"Crashed into {obstacle.type.value} at {meters(self.distance):.0f} m"
        )
        self.phases.transition(RacePhase.CRASHED, self._now)
        self._emit(Event(EventType.MUSIC_STOP, source="race"))
        self._emit(sound_event("fall"))

    def _finish(self) -> None:
        logger.info(f"Finished in {self.race_time_ms / 1000:.2f} s")
        self.phases.transition(RacePhase.FINISHED, self._now)
        self._emit(Event(EventType.MUSIC_STOP, source="race"))
        self._emit(sound_event("finish"))

    def _maybe_show_scoreboard(self) -> None:
        if self.fade.active:
            return
        if self.phases.time_in_phase(self._now) >= SCOREBOARD_DELAY_MS:
            self.fade.start(self._now, on_midpoint=self._enter_scoreboard)

    def _enter_scoreboard(self) -> None:
        finished = self.phase == RacePhase.FINISHED
        if not self.phases.transition(RacePhase.SCOREBOARD, self._now):
            return
        if finished:
            self.score_kind = ScoreKind.TIME
            self.score_value = round(self.race_time_ms / 1000.0, 2)
        else:
            self.score_kind = ScoreKind.DISTANCE
            self.score_value = round(meters(self.distance), 1)
        self.player_name = ""
        self.name_submitted = False
        self.leaderboard.refresh()

    def _return_to_menu(self) -> None:
        if not self.phases.transition(RacePhase.MENU, self._now):
            return
        self.skier.reset()
        self.world.reset()
        self.field.reset()
        self.distance = 0.0
        self.race_time_ms = 0.0
        self.crashed_into = None
        self.leaderboard.refresh()

    # Name entry

    def _edit_name(self, keys: InputState) -> None:
        # ASCII only: the pixel font has no other glyphs, and upper() can lengthen text
        for char in keys.typed:
            if char.isascii() and char.isalnum():
                self.player_name = (self.player_name + char.upper())[:NAME_MAX_LENGTH]

        if keys.tapped(Action.BACKSPACE):
            self.player_name = self.player_name[:-1]

        if keys.tapped(Action.CONFIRM) and len(self.player_name) >= NAME_MIN_LENGTH:
            if self.leaderboard.submit(self.player_name, self.score_kind, self.score_value):
                self.name_submitted = True
                logger.info(f"Submitting score for {self.player_name}")

    # Events

    def _on_phase_changed(self, old: RacePhase, new: RacePhase, now_ms: float) -> None:
        self._emit(Event(
            EventType.PHASE_CHANGED,
            data={"from": old.name, "to": new.name, "at": now_ms},
            source="race",
        ))

    def _on_countdown_beat(self, label: str) -> None:
        self._emit(sound_event("countdown_go" if label == "GO" else "countdown_tick"))

    def _emit(self, event: Event) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event)

    # Rendering

    def snapshot(self) -> RaceSnapshot:
        s = self.skier.state
        jump_progress = s.jump.progress(self._now) if s.jump is not None else 0.0
        return RaceSnapshot(
            phase=self.phase,
            skier=SkierView(s.x, s.y, s.angle, s.speed, s.airborne, jump_progress),
            tile1_y=self.world.tile1_y,
            tile2_y=self.world.tile2_y,
            trail=tuple((p.left_x, p.left_y, p.right_x, p.right_y) for p in self.world.trail),
            obstacles=tuple(ObstacleView(o.type, o.x, o.y) for o in self.field.obstacles),
            finish_y=self.field.finish_y,
            distance_m=meters(self.distance),
            remaining_m=max(0.0, meters(self.race_distance - self.distance)),
            race_time_ms=self.race_time_ms,
            countdown=self.countdown.label(self._now),
            countdown_scale=self.countdown.beat_scale(self._now),
            loading_progress=self.assets.progress if self.assets is not None else 1.0,
            leaderboard=tuple(self.leaderboard.entries),
            leaderboard_loading=self.leaderboard.loading,
            rank=self.leaderboard.last_rank,
            score_kind=self.score_kind,
            score_value=self.score_value,
            player_name=self.player_name,
            name_submitted=self.name_submitted,
            transition_alpha=self.fade.alpha,
            debug=DebugCounters(
                obstacles=len(self.field.obstacles),
                trail_points=len(self.world.trail),
                spawned=self.field.spawn_count,
                collision_enabled=self.collision_enabled,
                crashed_into=self.crashed_into.type if self.crashed_into else None,
            ),
            debug_enabled=self.debug,
        )
