"""Tests for keyboard buffering into per-tick input state."""

from skiracer.core.events import EventBus, key_event
from skiracer.simulation.input import Action, InputState, KeyboardInput


def test_input_state_of():
    state = InputState.of(Action.DOWN, tapped=(Action.JUMP,), typed="ab")
    assert state.held(Action.DOWN)
    assert state.held(Action.JUMP)
    assert state.tapped(Action.JUMP)
    assert not state.tapped(Action.DOWN)
    assert state.typed == ("a", "b")


class TestKeyboardInput:
    def setup_method(self):
        self.bus = EventBus()
        self.keyboard = KeyboardInput(self.bus)

    def test_press_is_an_edge_once(self):
        self.bus.emit(key_event(("jump",)))
        first = self.keyboard.poll()
        second = self.keyboard.poll()
        assert first.tapped(Action.JUMP) and first.held(Action.JUMP)
        assert second.held(Action.JUMP)
        assert not second.tapped(Action.JUMP)

    def test_key_repeat_is_not_an_edge(self):
        self.bus.emit(key_event(("jump",)))
        self.keyboard.poll()
        self.bus.emit(key_event(("jump",)))
        assert not self.keyboard.poll().tapped(Action.JUMP)

    def test_release(self):
        self.bus.emit(key_event(("turn_left",)))
        self.bus.emit(key_event(("turn_left",), down=False))
        state = self.keyboard.poll()
        # A press and release inside one frame still registers
        assert state.tapped(Action.TURN_LEFT)
        assert not self.keyboard.poll().held(Action.TURN_LEFT)

    def test_one_key_many_actions(self):
        self.bus.emit(key_event(("confirm", "start", "continue")))
        state = self.keyboard.poll()
        assert {Action.CONFIRM, Action.START, Action.CONTINUE} <= state.just_pressed

    def test_typed_characters(self):
        self.bus.emit(key_event((), char="a"))
        self.bus.emit(key_event(("down",), char="s"))
        self.bus.emit(key_event((), char="%"))
        state = self.keyboard.poll()
        assert state.typed == ("a", "s")
        assert state.held(Action.DOWN)
        assert self.keyboard.poll().typed == ()

    def test_non_ascii_characters_dropped(self):
        for char in ("é", "٣", "ß", "q"):
            self.bus.emit(key_event((), char=char))
        assert self.keyboard.poll().typed == ("q",)

    def test_unknown_action_ignored(self):
        self.bus.emit(key_event(("fly",)))
        assert self.keyboard.poll().pressed == frozenset()

    def test_release_all(self):
        self.bus.emit(key_event(("down",)))
        self.keyboard.release_all()
        assert not self.keyboard.poll().held(Action.DOWN)

    def test_detach(self):
        self.keyboard.detach()
        self.bus.emit(key_event(("down",)))
        assert not self.keyboard.poll().held(Action.DOWN)
