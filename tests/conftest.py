"""Shared fixtures for the skiracer test suite."""

import random
from typing import Optional

import pytest

from skiracer.core.clock import ManualClock
from skiracer.core.events import EventBus
from skiracer.leaderboard.models import LeaderboardEntry, ScoreKind
from skiracer.simulation.input import Action, InputState
from skiracer.simulation.race import RaceState

IDLE = InputState()


def tap(*actions: Action, typed: str = "") -> InputState:
    return InputState.of(tapped=actions, typed=typed)


def hold(*actions: Action) -> InputState:
    return InputState.of(*actions)


class FakeLeaderboard:
    """Records what the race asks of the leaderboard without any I/O."""

    def __init__(self, entries: tuple[LeaderboardEntry, ...] = ()) -> None:
        self.entries = entries
        self.loading = False
        self.last_rank: Optional[int] = None
        self.refresh_calls = 0
        self.submissions: list[tuple[str, ScoreKind, float]] = []

    def refresh(self) -> bool:
        self.refresh_calls += 1
        return True

    def submit(self, name: str, kind: ScoreKind, value: float) -> bool:
        self.submissions.append((name, kind, value))
        self.last_rank = 1
        return True


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start_ms=1000.0)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def board() -> FakeLeaderboard:
    return FakeLeaderboard()


@pytest.fixture
def race(clock: ManualClock, board: FakeLeaderboard, bus: EventBus) -> RaceState:
    return RaceState(clock=clock, leaderboard=board, event_bus=bus, rng=random.Random(0))


def start_race(race: RaceState, clock: ManualClock) -> None:
    """Drive a fresh race from LOADING to the first RACING tick."""
    race.advance(IDLE)                    # LOADING -> MENU
    race.advance(tap(Action.START))       # MENU -> START_ANIMATION
    clock.advance(race.countdown.duration_ms)
    race.advance(IDLE)                    # countdown done -> RACING
