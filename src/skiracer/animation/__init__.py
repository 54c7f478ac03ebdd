"""Animation helpers for skiracer."""

from skiracer.animation.easing import Easing, get_easing, interpolate
from skiracer.animation.transition import FadeTransition, FadeStage
from skiracer.animation.countdown import StartCountdown

__all__ = [
    "Easing",
    "get_easing",
    "interpolate",
    "FadeTransition",
    "FadeStage",
    "StartCountdown",
]
