"""Tests for the synthesized sound board."""

from unittest.mock import MagicMock, patch

import pygame
import pytest

from skiracer.audio.engine import ASSET_NAME, SoundBoard, build_sound_bank
from skiracer.core.assets import AssetGate, AssetStatus
from skiracer.core.events import Event, EventBus, EventType, sound_event


@pytest.fixture(scope="module")
def bank():
    return build_sound_bank(rate=8000)


def test_bank_contents(bank):
    assert set(bank) == {"countdown_tick", "countdown_go", "jump", "fall", "finish", "music_race"}
    assert len(bank["jump"]) == 2000
    assert bank["jump"].typecode == "h"
    assert len(bank["music_race"]) > len(bank["finish"])


def test_bank_is_not_silent(bank):
    for name, samples in bank.items():
        assert max(abs(s) for s in samples) > 1000, name


def test_uninitialized_board_is_silent():
    board = SoundBoard()
    assert board.play("jump") is None
    assert board.play_music("race") is None
    assert board.toggle_mute()


def test_events_are_routed():
    bus = EventBus()
    board = SoundBoard()
    board.play = MagicMock()
    board.play_music = MagicMock()
    board.stop_music = MagicMock()
    board.attach(bus)

    bus.emit(sound_event("jump"))
    bus.emit(Event(EventType.MUSIC_PLAY, data={"name": "race"}))
    bus.emit(Event(EventType.MUSIC_STOP))

    board.play.assert_called_once_with("jump")
    board.play_music.assert_called_once_with("race")
    board.stop_music.assert_called_once()

    board.detach()
    bus.emit(sound_event("fall"))
    board.play.assert_called_once()


def test_mixer_failure_settles_asset():
    assets = AssetGate()
    board = SoundBoard(assets=assets)
    assert assets.status(ASSET_NAME) == AssetStatus.PENDING

    with patch("pygame.mixer.pre_init"), \
            patch("pygame.mixer.init", side_effect=pygame.error("no audio device")):
        assert not board.init()

    assert not board.initialized
    assert assets.status(ASSET_NAME) == AssetStatus.FAILED
    assert assets.all_settled


def test_init_loads_bank(bank):
    assets = AssetGate()
    board = SoundBoard(assets=assets)
    sound = MagicMock()

    with patch("pygame.mixer.pre_init"), patch("pygame.mixer.init"), \
            patch("pygame.mixer.set_num_channels"), \
            patch("skiracer.audio.engine.build_sound_bank", return_value={"jump": bank["jump"]}), \
            patch("pygame.mixer.Sound", return_value=sound) as sound_cls:
        assert board.init()
        stereo = sound_cls.call_args.kwargs["buffer"]

    assert len(stereo) == 2 * len(bank["jump"])
    assert stereo[0] == stereo[1] == bank["jump"][0]
    assert assets.is_available(ASSET_NAME)

    board.play("jump")
    sound.play.assert_called_once()
    assert board.play("missing") is None
