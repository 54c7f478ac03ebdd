"""End-to-end tests of the race phase flow, driven by a manual clock."""

import random

import pytest

from conftest import IDLE, FakeLeaderboard, hold, start_race, tap
from skiracer.core.assets import AssetGate
from skiracer.core.events import EventType
from skiracer.core.state import RacePhase
from skiracer.leaderboard.models import ScoreKind
from skiracer.simulation.constants import JUMP_DURATION_MS, SKIER_Y, meters
from skiracer.simulation.input import Action
from skiracer.simulation.obstacles import Obstacle, ObstacleType
from skiracer.simulation.race import RaceState

TICK_MS = 16


def sounds(bus):
    return [e.data["name"] for e in bus.get_history(EventType.SOUND_PLAY, limit=100)]


def place(race, obstacle_type, y):
    """Put an obstacle straight in the skier's path."""
    race.field.obstacles.append(Obstacle(obstacle_type, race.skier.state.x, y))


def crash(race, clock):
    # Tree hit point sits 24 px below its y, the skier's 15 px below SKIER_Y
    place(race, ObstacleType.TREE, SKIER_Y - 9)
    clock.advance(TICK_MS)
    race.advance(IDLE)
    assert race.phase == RacePhase.CRASHED


def settle_into_scoreboard(race, clock):
    """Wait out the results delay and the fade until the scoreboard takes input."""
    clock.advance(2000)
    race.advance(IDLE)        # delay elapsed, fade starts
    clock.advance(400)
    race.advance(IDLE)        # midpoint, scoreboard entered
    assert race.phase == RacePhase.SCOREBOARD
    clock.advance(400)
    race.advance(IDLE)        # fade finished
    assert not race.fade.active


class TestLoading:
    def test_moves_to_menu_without_assets(self, race, board):
        race.advance(IDLE)
        assert race.phase == RacePhase.MENU
        assert board.refresh_calls == 1

    def test_waits_for_assets_to_settle(self, clock, board):
        assets = AssetGate()
        assets.register("audio")
        race = RaceState(clock=clock, leaderboard=board, assets=assets)

        race.advance(IDLE)
        assert race.phase == RacePhase.LOADING
        assert race.snapshot().loading_progress == 0.0

        assets.mark_failed("audio")
        race.advance(IDLE)
        assert race.phase == RacePhase.MENU


class TestMenuAndCountdown:
    def test_other_keys_ignored_on_menu(self, race):
        race.advance(IDLE)
        race.advance(tap(Action.JUMP))
        assert race.phase == RacePhase.MENU

    def test_countdown_beats_then_race(self, race, clock, bus):
        race.advance(IDLE)
        race.advance(tap(Action.START))
        assert race.phase == RacePhase.START_ANIMATION

        labels = []
        for _ in range(4):
            race.advance(IDLE)
            labels.append(race.snapshot().countdown)
            clock.advance(750)
        assert labels == ["3", "2", "1", "GO"]
        assert sounds(bus) == ["countdown_tick"] * 3 + ["countdown_go"]

        race.advance(IDLE)
        assert race.phase == RacePhase.RACING
        music = bus.get_history(EventType.MUSIC_PLAY)
        assert music[-1].data == {"name": "race"}

    def test_phase_changes_are_published(self, race, clock, bus):
        start_race(race, clock)
        changes = [e.data["to"] for e in bus.get_history(EventType.PHASE_CHANGED)]
        assert changes == ["MENU", "START_ANIMATION", "RACING"]


class TestRacing:
    def test_distance_and_time_accumulate(self, race, clock):
        start_race(race, clock)
        for _ in range(10):
            clock.advance(TICK_MS)
            race.advance(hold(Action.DOWN))

        assert race.distance > 30
        assert race.race_time_ms == 10 * TICK_MS
        snap = race.snapshot()
        assert snap.distance_m == pytest.approx(meters(race.distance))
        assert snap.remaining_m == pytest.approx(meters(race.race_distance - race.distance))

    def test_jump_plays_sound(self, race, clock, bus):
        start_race(race, clock)
        race.advance(tap(Action.JUMP))
        assert race.skier.state.airborne
        assert sounds(bus)[-1] == "jump"

    def test_jump_clears_rock(self, race, clock):
        start_race(race, clock)
        place(race, ObstacleType.ROCK, SKIER_Y + 11)
        race.advance(tap(Action.JUMP))
        assert race.phase == RacePhase.RACING

    def test_crash_on_tree(self, race, clock, bus):
        start_race(race, clock)
        crash(race, clock)

        assert race.crashed_into.type == ObstacleType.TREE
        assert sounds(bus)[-1] == "fall"
        assert bus.get_history(EventType.MUSIC_STOP)

    def test_crash_freezes_counters(self, race, clock):
        start_race(race, clock)
        crash(race, clock)
        distance, elapsed = race.distance, race.race_time_ms

        for _ in range(20):
            clock.advance(TICK_MS)
            race.advance(hold(Action.DOWN))
        assert race.distance == distance
        assert race.race_time_ms == elapsed

    def test_crash_in_the_air_freezes_the_jump(self, race, clock):
        start_race(race, clock)
        clock.advance(TICK_MS)
        race.advance(tap(Action.JUMP))
        clock.advance(200)
        place(race, ObstacleType.TREE, SKIER_Y - 9)
        race.advance(IDLE)
        assert race.phase == RacePhase.CRASHED
        lift = race.snapshot().skier.jump_progress
        assert lift == pytest.approx(200 / JUMP_DURATION_MS)

        clock.advance(1000)
        race.advance(IDLE)
        skier = race.snapshot().skier
        assert skier.airborne
        assert skier.jump_progress == pytest.approx(lift)

    def test_crashed_slide_ignores_obstacles_and_spawns_nothing(self, race, clock):
        start_race(race, clock)
        crash(race, clock)
        spawned = race.field.spawn_count
        tree = Obstacle(ObstacleType.TREE, race.skier.state.x, SKIER_Y - 9)
        race.field.obstacles.append(tree)

        for _ in range(100):
            before = tree.y
            clock.advance(TICK_MS)
            race.advance(IDLE)
            assert race.phase == RacePhase.CRASHED
            assert race.field.spawn_count == spawned
            if race.skier.state.speed > 0:
                assert tree.y < before
            else:
                assert tree.y == before
        assert race.skier.state.speed == 0.0

    def test_collision_toggle_needs_debug(self, race, clock):
        start_race(race, clock)
        race.advance(tap(Action.TOGGLE_COLLISION))
        assert race.collision_enabled

    def test_collision_toggle_in_debug(self, clock, board):
        race = RaceState(clock=clock, leaderboard=board, rng=random.Random(0), debug=True)
        start_race(race, clock)
        race.advance(tap(Action.TOGGLE_COLLISION))
        assert not race.collision_enabled

        place(race, ObstacleType.TREE, SKIER_Y - 9)
        race.advance(IDLE)
        assert race.phase == RacePhase.RACING
        assert not race.snapshot().debug.collision_enabled


class TestScoreboard:
    @pytest.fixture
    def scoreboard(self, race, clock):
        start_race(race, clock)
        for _ in range(5):
            clock.advance(TICK_MS)
            race.advance(IDLE)
        crash(race, clock)
        settle_into_scoreboard(race, clock)
        return race

    def test_crash_scores_distance(self, scoreboard, board):
        assert scoreboard.score_kind == ScoreKind.DISTANCE
        assert scoreboard.score_value == round(meters(scoreboard.distance), 1)
        assert scoreboard.player_name == ""
        assert board.refresh_calls == 2

    def test_not_shown_before_delay(self, race, clock):
        start_race(race, clock)
        crash(race, clock)
        clock.advance(1999)
        race.advance(IDLE)
        assert not race.fade.active

    def test_name_entry(self, scoreboard):
        scoreboard.advance(tap(typed="ab1%"))
        assert scoreboard.player_name == "AB1"

        scoreboard.advance(tap(Action.BACKSPACE))
        assert scoreboard.player_name == "AB"

    def test_name_is_capped(self, scoreboard):
        scoreboard.advance(tap(typed="abcdefghijkl"))
        assert scoreboard.player_name == "ABCDEFGHIJ"

    def test_name_cap_holds_when_upper_case_grows(self, scoreboard):
        scoreboard.advance(tap(typed="abcdefghiß"))
        assert scoreboard.player_name == "ABCDEFGHI"

    def test_name_takes_ascii_only(self, scoreboard):
        scoreboard.advance(tap(typed="é٣x"))
        assert scoreboard.player_name == "X"

    def test_short_name_not_submitted(self, scoreboard, board):
        scoreboard.advance(tap(typed="a"))
        scoreboard.advance(tap(Action.CONFIRM))
        assert board.submissions == []
        assert not scoreboard.name_submitted

    def test_submit(self, scoreboard, board):
        scoreboard.advance(tap(Action.CONFIRM, typed="zq"))
        assert board.submissions == [("ZQ", ScoreKind.DISTANCE, scoreboard.score_value)]
        assert scoreboard.name_submitted
        assert scoreboard.snapshot().rank == 1

    def test_input_ignored_while_loading(self, scoreboard, board):
        board.loading = True
        scoreboard.advance(tap(Action.CONFIRM, typed="ab"))
        assert scoreboard.player_name == ""
        assert board.submissions == []

    def test_continue_returns_to_menu(self, scoreboard, board, clock):
        scoreboard.advance(tap(Action.CONFIRM, typed="ab"))
        scoreboard.advance(tap(Action.CONTINUE))
        assert scoreboard.fade.active

        clock.advance(400)
        scoreboard.advance(IDLE)
        assert scoreboard.phase == RacePhase.MENU
        assert scoreboard.distance == 0.0
        assert board.refresh_calls == 3

        # Menu ignores input until the fade has cleared
        clock.advance(100)
        scoreboard.advance(tap(Action.START))
        assert scoreboard.phase == RacePhase.MENU

        clock.advance(300)
        scoreboard.advance(IDLE)
        scoreboard.advance(tap(Action.START))
        assert scoreboard.phase == RacePhase.START_ANIMATION


def test_finish_scores_time(clock, bus):
    board = FakeLeaderboard()
    race = RaceState(
        clock=clock, leaderboard=board, event_bus=bus,
        rng=random.Random(3), race_distance=1000,
    )
    race.collision_enabled = False
    start_race(race, clock)

    for _ in range(2000):
        clock.advance(TICK_MS)
        race.advance(hold(Action.DOWN))
        if race.phase != RacePhase.RACING:
            break

    assert race.phase == RacePhase.FINISHED
    assert sounds(bus)[-1] == "finish"
    assert race.field.finish_y is not None
    elapsed = race.race_time_ms
    distance = race.distance
    assert elapsed > 0

    settle_into_scoreboard(race, clock)
    assert race.distance == distance
    assert race.score_kind == ScoreKind.TIME
    assert race.score_value == round(elapsed / 1000.0, 2)


def test_snapshot_after_start(race, clock):
    start_race(race, clock)
    snap = race.snapshot()
    assert snap.phase == RacePhase.RACING
    assert snap.skier.x == 300
    assert snap.skier.jump_progress == 0.0
    assert snap.countdown is None
    assert snap.remaining_m == pytest.approx(1500.0)
    assert snap.transition_alpha == 0.0
    assert snap.leaderboard == ()
    assert snap.debug.collision_enabled
