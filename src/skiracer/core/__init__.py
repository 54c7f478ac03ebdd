"""Core framework components for skiracer."""

from .state import RacePhase, PhaseMachine
from .events import EventBus, Event, EventType

__all__ = ["RacePhase", "PhaseMachine", "EventBus", "Event", "EventType"]
