"""Tests for the simulator window's key handling."""

import logging
from types import SimpleNamespace

import pygame
import pytest

from conftest import FakeLeaderboard
from skiracer.core.clock import ManualClock
from skiracer.core.events import Event, EventBus, EventType
from skiracer.simulation.input import Action, KeyboardInput
from skiracer.simulation.race import RaceState
from skiracer.simulator.window import KEY_ACTIONS, LogCapture, SimulatorWindow, WindowConfig


def test_key_map_uses_known_actions():
    for actions in KEY_ACTIONS.values():
        for action in actions:
            Action(action)


def test_window_size_follows_scale():
    assert WindowConfig(scale=1.5).size == (900, 1200)


def test_log_capture_keeps_recent_lines():
    capture = LogCapture(max_lines=2)
    log = logging.getLogger("skiracer.test_capture")
    log.addHandler(capture)
    log.setLevel(logging.INFO)
    try:
        for i in range(3):
            log.info(f"line {i}")
    finally:
        log.removeHandler(capture)
    assert [line.split(": ")[-1] for line in capture.lines] == ["line 1", "line 2"]


@pytest.fixture
def window():
    bus = EventBus()
    keyboard = KeyboardInput(bus)
    race = RaceState(clock=ManualClock(), leaderboard=FakeLeaderboard(), event_bus=bus)
    window = SimulatorWindow(race, keyboard, bus)
    window._running = True
    yield window
    logging.getLogger().removeHandler(window._log_capture)


def keydown(key, unicode=""):
    return SimpleNamespace(key=key, unicode=unicode)


def test_keys_become_actions(window):
    window._handle_keydown(keydown(pygame.K_a, "a"))
    state = window.keyboard.poll()
    assert state.held(Action.TURN_LEFT)
    assert state.typed == ("a",)


def test_unmapped_letters_still_type(window):
    window._handle_keydown(keydown(pygame.K_q, "q"))
    state = window.keyboard.poll()
    assert state.pressed == frozenset()
    assert state.typed == ("q",)


def test_escape_stops(window):
    window._handle_keydown(keydown(pygame.K_ESCAPE))
    assert not window.running


def test_debug_panel_toggle(window):
    window._handle_keydown(keydown(pygame.K_F3))
    assert window._show_debug


def test_shutdown_event_stops(window):
    window.event_bus.emit(Event(EventType.SHUTDOWN))
    assert not window.running
