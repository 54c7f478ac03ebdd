"""3-2-1-GO start sequence played before every run."""

from typing import Callable, Optional
import logging

from skiracer.animation.easing import Easing, interpolate
from skiracer.simulation.constants import START_COUNTDOWN_MS

logger = logging.getLogger(__name__)


class StartCountdown:
    """Wall-clock countdown with a callback per beat and one at the end.

    The sequence is split into four equal beats: "3", "2", "1", "GO".
    """

    LABELS = ("3", "2", "1", "GO")

    def __init__(
        self,
        duration_ms: float = START_COUNTDOWN_MS,
        on_beat: Optional[Callable[[str], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        self.duration_ms = duration_ms
        self.on_beat = on_beat
        self.on_complete = on_complete
        self._started_at: Optional[float] = None
        self._beat = -1
        self._finished = False

    @property
    def running(self) -> bool:
        return self._started_at is not None and not self._finished

    @property
    def beat_ms(self) -> float:
        return self.duration_ms / len(self.LABELS)

    def start(self, now_ms: float) -> None:
        self._started_at = now_ms
        self._beat = -1
        self._finished = False
        logger.debug("Countdown started")

    def update(self, now_ms: float) -> Optional[str]:
        """Advance the sequence; returns the label to show, or None when idle."""
        if not self.running:
            return None

        elapsed = now_ms - self._started_at
        if elapsed >= self.duration_ms:
            self._finished = True
            if self.on_complete:
                self.on_complete()
            return None

        beat = min(len(self.LABELS) - 1, int(elapsed // self.beat_ms))
        while self._beat < beat:
            self._beat += 1
            if self.on_beat:
                self.on_beat(self.LABELS[self._beat])
        return self.LABELS[beat]

    def label(self, now_ms: float) -> Optional[str]:
        if not self.running:
            return None
        elapsed = now_ms - self._started_at
        return self.LABELS[min(len(self.LABELS) - 1, int(elapsed // self.beat_ms))]

    def beat_scale(self, now_ms: float) -> float:
        """Pop-in scale for the current label (overshoots, then settles at 1.0)."""
        if not self.running:
            return 1.0
        local = ((now_ms - self._started_at) % self.beat_ms) / self.beat_ms
        return interpolate(0.3, 1.0, min(1.0, local * 3), Easing.EASE_OUT_BACK)
