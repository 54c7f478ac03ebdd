"""Fade-to-white transition between phases.

A transition is a pure function of wall-clock time since it started:
fade out (alpha 0 -> 1), run the midpoint callback while the screen is
fully covered, then fade back in (alpha 1 -> 0). It keeps running while
the simulation itself is paused.
"""

from enum import Enum, auto
from typing import Callable, Optional
import logging

from skiracer.animation.easing import Easing, interpolate
from skiracer.simulation.constants import FADE_DURATION_MS

logger = logging.getLogger(__name__)


class FadeStage(Enum):
    IDLE = auto()
    FADING_OUT = auto()
    FADING_IN = auto()


class FadeTransition:
    """Two-stage alpha timer with a midpoint hook."""

    def __init__(self, duration_ms: float = FADE_DURATION_MS, easing: Easing = Easing.LINEAR) -> None:
        self.duration_ms = duration_ms
        self.easing = easing
        self._stage = FadeStage.IDLE
        self._started_at = 0.0
        self._alpha = 0.0
        self._on_midpoint: Optional[Callable[[], None]] = None
        self._on_complete: Optional[Callable[[], None]] = None

    @property
    def stage(self) -> FadeStage:
        return self._stage

    @property
    def active(self) -> bool:
        return self._stage != FadeStage.IDLE

    @property
    def alpha(self) -> float:
        return self._alpha

    def start(
        self,
        now_ms: float,
        on_midpoint: Optional[Callable[[], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> bool:
        """Begin fading out. Refused while another transition is running."""
        if self.active:
            logger.debug("Transition already running, start ignored")
            return False
        self._stage = FadeStage.FADING_OUT
        self._started_at = now_ms
        self._alpha = 0.0
        self._on_midpoint = on_midpoint
        self._on_complete = on_complete
        return True

    def step(self, now_ms: float) -> float:
        """Advance to now_ms and return the current alpha."""
        if self._stage == FadeStage.FADING_OUT:
            elapsed = now_ms - self._started_at
            if elapsed < self.duration_ms:
                self._alpha = interpolate(0.0, 1.0, elapsed / self.duration_ms, self.easing)
                return self._alpha
            self._alpha = 1.0
            self._stage = FadeStage.FADING_IN
            self._started_at += self.duration_ms
            callback, self._on_midpoint = self._on_midpoint, None
            if callback:
                callback()

        if self._stage == FadeStage.FADING_IN:
            elapsed = now_ms - self._started_at
            if elapsed < self.duration_ms:
                self._alpha = interpolate(1.0, 0.0, elapsed / self.duration_ms, self.easing)
                return self._alpha
            self._alpha = 0.0
            self._stage = FadeStage.IDLE
            callback, self._on_complete = self._on_complete, None
            if callback:
                callback()

        return self._alpha

    def cancel(self) -> None:
        self._stage = FadeStage.IDLE
        self._alpha = 0.0
        self._on_midpoint = None
        self._on_complete = None
