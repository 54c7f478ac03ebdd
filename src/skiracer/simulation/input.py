"""Logical input state.

Raw key events are buffered by KeyboardInput and collapsed into one
immutable InputState per frame, so every step function sees the same
view of the keyboard for the whole tick.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Tuple
import logging

from skiracer.core.events import Event, EventBus, EventType

logger = logging.getLogger(__name__)


class Action(Enum):
    """Logical actions recognised by the game."""

    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"
    DOWN = "down"            # point the skis down the hill: speed up
    UP = "up"                # check speed
    JUMP = "jump"
    START = "start"
    CONFIRM = "confirm"
    BACKSPACE = "backspace"
    CONTINUE = "continue"
    TOGGLE_COLLISION = "toggle_collision"


@dataclass(frozen=True)
class InputState:
    """Keyboard view for a single tick.

    Attributes:
        pressed: Actions currently held
        just_pressed: Actions that went down since the previous tick
        typed: Printable characters typed since the previous tick
    """

    pressed: FrozenSet[Action] = field(default_factory=frozenset)
    just_pressed: FrozenSet[Action] = field(default_factory=frozenset)
    typed: Tuple[str, ...] = ()

    def held(self, action: Action) -> bool:
        return action in self.pressed

    def tapped(self, action: Action) -> bool:
        return action in self.just_pressed

    @classmethod
    def of(cls, *held: Action, tapped: tuple = (), typed: str = "") -> "InputState":
        """Build a state directly; tapped actions also count as held."""
        return cls(
            pressed=frozenset(held) | frozenset(tapped),
            just_pressed=frozenset(tapped),
            typed=tuple(typed),
        )


class KeyboardInput:
    """Buffers KEY_DOWN / KEY_UP events and produces one InputState per poll."""

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._held: set[Action] = set()
        self._went_down: set[Action] = set()
        self._typed: list[str] = []
        self._unsubscribers = []
        if event_bus is not None:
            self.attach(event_bus)

    def attach(self, event_bus: EventBus) -> None:
        self._unsubscribers.append(event_bus.subscribe(EventType.KEY_DOWN, self.on_key_event))
        self._unsubscribers.append(event_bus.subscribe(EventType.KEY_UP, self.on_key_event))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def on_key_event(self, event: Event) -> None:
        actions = self._event_actions(event)
        if event.type == EventType.KEY_DOWN:
            for action in actions:
                # Key repeat delivers extra KEY_DOWNs; only the first one is an edge
                if action not in self._held:
                    self._went_down.add(action)
                self._held.add(action)
            char = event.data.get("char") or ""
            if len(char) == 1 and char.isascii() and char.isalnum():
                self._typed.append(char)
        elif event.type == EventType.KEY_UP:
            for action in actions:
                self._held.discard(action)

    def poll(self) -> InputState:
        """Snapshot the keyboard for this tick and reset the edge buffers."""
        state = InputState(
            pressed=frozenset(self._held | self._went_down),
            just_pressed=frozenset(self._went_down),
            typed=tuple(self._typed),
        )
        self._went_down.clear()
        self._typed.clear()
        return state

    def release_all(self) -> None:
        """Forget held keys, e.g. when the window loses focus."""
        self._held.clear()
        self._went_down.clear()

    def _event_actions(self, event: Event) -> list[Action]:
        raw = event.data.get("actions")
        if raw is None:
            raw = [event.data.get("action")]
        parsed = (self._parse_action(item) for item in raw)
        return [action for action in parsed if action is not None]

    @staticmethod
    def _parse_action(raw) -> Action | None:
        if raw is None or isinstance(raw, Action):
            return raw
        try:
            return Action(raw)
        except ValueError:
            logger.debug(f"Ignoring unknown action: {raw}")
            return None
