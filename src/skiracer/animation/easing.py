"""Easing curves for fades and the countdown pop-in.

Each curve maps progress t in 0..1 to an eased fraction, with f(0) == 0
and f(1) == 1. Overshooting curves may leave 0..1 in between.
"""

from enum import Enum
from typing import Callable

EasingFunc = Callable[[float], float]

# Overshoot amount for EASE_OUT_BACK
BACK_OVERSHOOT = 1.70158


def _out_back(t: float) -> float:
    u = t - 1
    return 1 + (BACK_OVERSHOOT + 1) * u ** 3 + BACK_OVERSHOOT * u ** 2


class Easing(Enum):
    """Named curves; the value is the lookup name."""

    LINEAR = "linear"
    EASE_OUT_BACK = "ease_out_back"


_CURVES: dict[Easing, EasingFunc] = {
    Easing.LINEAR: lambda t: t,
    Easing.EASE_OUT_BACK: _out_back,
}


def get_easing(easing: Easing | str) -> EasingFunc:
    """Look up a curve by enum member or by name, e.g. "ease_out_back".

    Raises:
        ValueError: for an unknown name
    """
    if isinstance(easing, str):
        try:
            easing = Easing(easing.lower())
        except ValueError:
            raise ValueError(f"Unknown easing function: {easing}") from None
    return _CURVES[easing]


def interpolate(start: float, end: float, t: float, easing: Easing | str = Easing.LINEAR) -> float:
    """Value between start and end at progress t (clamped to 0..1)."""
    eased = get_easing(easing)(max(0.0, min(1.0, t)))
    return start + (end - start) * eased
