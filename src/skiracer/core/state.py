"""
Phase machine for the race flow.

Phases:
    LOADING: Assets are being prepared
    MENU: Title screen, waiting for the start key
    START_ANIMATION: 3-2-1-GO countdown before the run
    RACING: Skier is under player control
    FINISHED: Finish line passed, results held on screen
    CRASHED: Skier hit an obstacle and slides to a stop
    SCOREBOARD: Name entry and leaderboard
"""

from enum import Enum, auto
from typing import Callable
import logging

logger = logging.getLogger(__name__)


class RacePhase(Enum):
    """Top-level race phases."""
    LOADING = auto()
    MENU = auto()
    START_ANIMATION = auto()
    RACING = auto()
    FINISHED = auto()
    CRASHED = auto()
    SCOREBOARD = auto()


PhaseListener = Callable[[RacePhase, RacePhase, float], None]


class PhaseMachine:
    """
    Tracks the current race phase and when it was entered.

    Only the transitions listed in VALID_TRANSITIONS are accepted;
    anything else is logged and refused.
    """

    VALID_TRANSITIONS: list[tuple[RacePhase, RacePhase]] = [
        (RacePhase.LOADING, RacePhase.MENU),
        (RacePhase.MENU, RacePhase.START_ANIMATION),
        (RacePhase.START_ANIMATION, RacePhase.RACING),

        # From RACING
        (RacePhase.RACING, RacePhase.FINISHED),
        (RacePhase.RACING, RacePhase.CRASHED),

        # Results go through the scoreboard
        (RacePhase.FINISHED, RacePhase.SCOREBOARD),
        (RacePhase.CRASHED, RacePhase.SCOREBOARD),

        (RacePhase.SCOREBOARD, RacePhase.MENU),
    ]

    def __init__(self, initial_phase: RacePhase = RacePhase.LOADING, now_ms: float = 0.0) -> None:
        self._phase = initial_phase
        self._entered_at = now_ms
        self._listeners: list[PhaseListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.info(f"PhaseMachine initialized with phase: {initial_phase.name}")

    @property
    def phase(self) -> RacePhase:
        """Get current phase."""
        return self._phase

    @property
    def entered_at(self) -> float:
        """Clock time (ms) at which the current phase was entered."""
        return self._entered_at

    def time_in_phase(self, now_ms: float) -> float:
        """Milliseconds spent in the current phase."""
        return now_ms - self._entered_at

    def can_transition(self, to_phase: RacePhase) -> bool:
        """Check if transition to given phase is valid."""
        return (self._phase, to_phase) in self._valid_transitions

    def transition(self, to_phase: RacePhase, now_ms: float) -> bool:
        """
        Attempt to move to a new phase.

        Args:
            to_phase: Target phase
            now_ms: Clock time of the transition

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_phase):
            logger.warning(
                f"Invalid transition: {self._phase.name} -> {to_phase.name}"
            )
            return False

        old_phase = self._phase
        self._phase = to_phase
        self._entered_at = now_ms

        logger.info(f"Phase transition: {old_phase.name} -> {to_phase.name}")

        for listener in self._listeners:
            try:
                listener(old_phase, to_phase, now_ms)
            except Exception as e:
                logger.error(f"Error in phase listener: {e}")

        return True

    def add_listener(self, callback: PhaseListener) -> None:
        """Add a phase change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: PhaseListener) -> None:
        """Remove a phase change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)
