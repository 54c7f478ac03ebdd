"""
Event bus for skiracer.

The race core never talks to pygame, the mixer or the network directly.
The simulator window publishes key events, the race publishes phase,
sound and music events, and the audio board and window subscribe to
the ones they care about.
"""

from dataclasses import dataclass, field
from typing import Any, Callable
from enum import Enum, auto
from collections import defaultdict, deque
import logging
import time

logger = logging.getLogger(__name__)

HISTORY_SIZE = 100


class EventType(Enum):
    """Event types published on the bus."""
    # Keyboard
    KEY_DOWN = auto()
    KEY_UP = auto()

    # Race
    PHASE_CHANGED = auto()

    # Audio requests
    SOUND_PLAY = auto()
    MUSIC_PLAY = auto()
    MUSIC_STOP = auto()

    # Host
    SHUTDOWN = auto()


@dataclass
class Event:
    """
    A published event.

    Attributes:
        type: EventType, or a plain string for ad-hoc events
        data: Payload
        source: Publisher name, for logs
        timestamp: time.monotonic() at creation
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.monotonic)


Handler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub shared by the race, window and audio board.

    emit() calls handlers synchronously, inside the frame that
    published the event. A failing handler is logged and skipped.
    """

    def __init__(self, history_size: int = HISTORY_SIZE) -> None:
        self._handlers: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._history: deque[Event] = deque(maxlen=history_size)

    def subscribe(self, event_type: EventType | str, handler: Handler) -> Callable[[], None]:
        """Register a handler for one event type. Returns a function that removes it."""
        handlers = self._handlers[event_type]
        handlers.append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to {event_type}")

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Deliver an event to its handlers now."""
        self._history.append(event)
        for handler in list(self._handlers.get(event.type, ())):
            self._call(handler, event)

    @staticmethod
    def _call(handler: Handler, event: Event) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.error(f"Error in handler for {event.type}: {e}")

    def get_history(self, event_type: EventType | str | None = None, limit: int = 10) -> list[Event]:
        """Most recent events, oldest first, optionally of one type."""
        events = [e for e in self._history if event_type is None or e.type == event_type]
        return events[-limit:]

    def clear_history(self) -> None:
        self._history.clear()


def key_event(
    actions: tuple[str, ...] = (),
    down: bool = True,
    char: str = "",
    source: str = "keyboard",
) -> Event:
    """Key press or release carrying logical actions and/or a typed character."""
    return Event(
        EventType.KEY_DOWN if down else EventType.KEY_UP,
        data={"actions": list(actions), "char": char},
        source=source,
    )


def sound_event(name: str, source: str = "race") -> Event:
    """One-shot sound effect request."""
    return Event(EventType.SOUND_PLAY, data={"name": name}, source=source)

