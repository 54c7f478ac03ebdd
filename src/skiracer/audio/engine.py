"""
Chiptune sound board for the race.

Every effect is synthesized at startup from simple oscillators, so the
game ships without audio files. The board listens on the event bus:
the race asks for sounds by name and never touches pygame.mixer.
"""

import array
import logging
import math
import random
from typing import Callable, Dict, Optional

import pygame

from skiracer.core.assets import AssetGate
from skiracer.core.events import Event, EventBus, EventType

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050
ASSET_NAME = "audio"
MUSIC_CHANNEL = 0


def square(t: float, freq: float) -> float:
    return 1 if (t * freq) % 1 < 0.5 else -1


def triangle(t: float, freq: float) -> float:
    return 4 * abs((t * freq) % 1 - 0.5) - 1


def sine(t: float, freq: float) -> float:
    return math.sin(2 * math.pi * freq * t)


def to_pcm(value: float) -> int:
    return int(max(-32767, min(32767, value * 32767)))


def synth(duration: float, voice: Callable[[float], float], rate: int = SAMPLE_RATE) -> array.array:
    """Sample voice(t) for `duration` seconds into signed 16-bit mono PCM."""
    return array.array("h", (to_pcm(voice(i / rate)) for i in range(int(rate * duration))))


# Effects. Each takes t in seconds and returns a sample in -1..1.

def _tick(t: float) -> float:
    return sine(t, 1000) * 0.3 * max(0.0, 1 - t * 20)


def _go(t: float) -> float:
    chord = (square(t, 523) + square(t, 659) + square(t, 784)) * 0.12
    return (chord + sine(t, 300 + t * 1500) * 0.1) * max(0.0, 1 - t * 2.5)


def _jump(t: float) -> float:
    # Upward sweep, like a spring
    return triangle(t, 220 + t * 1400) * 0.35 * max(0.0, 1 - t * 4)


def _fall(rng: random.Random) -> Callable[[float], float]:
    def voice(t: float) -> float:
        thud = sine(t, 90 - t * 60) * 0.5 * max(0.0, 1 - t * 3)
        crunch = (rng.random() * 2 - 1) * 0.3 * max(0.0, 1 - t * 5)
        return thud + crunch
    return voice


def _finish(t: float) -> float:
    notes = (523, 659, 784, 1047)
    step = min(int(t * 8), len(notes) - 1)
    local = t - step / 8
    return square(t, notes[step]) * 0.22 * max(0.0, 1 - local * 2.5 if step < 3 else 1 - local * 1.2)


def _race_music(t: float) -> float:
    """Four bar loop: walking bass plus an arpeggio on top."""
    beat = 60 / 150
    bass_notes = (110, 110, 147, 131)
    lead_notes = (440, 523, 659, 784, 659, 523)
    bar = int(t / (beat * 4)) % len(bass_notes)
    step = int(t / (beat / 2))
    local = (t % (beat / 2)) / (beat / 2)
    bass = triangle(t, bass_notes[bar]) * 0.35
    lead = square(t, lead_notes[step % len(lead_notes)]) * 0.12 * max(0.0, 1 - local * 1.5)
    return bass + lead


def build_sound_bank(rng: Optional[random.Random] = None, rate: int = SAMPLE_RATE) -> Dict[str, array.array]:
    """Synthesize every effect and music loop as mono PCM."""
    rng = rng or random.Random(7)
    return {
        "countdown_tick": synth(0.06, _tick, rate),
        "countdown_go": synth(0.4, _go, rate),
        "jump": synth(0.25, _jump, rate),
        "fall": synth(0.5, _fall(rng), rate),
        "finish": synth(0.9, _finish, rate),
        "music_race": synth(60 / 150 * 16, _race_music, rate),
    }


class SoundBoard:
    """Plays the synthesized bank in response to bus events.

    Audio is optional: if the mixer cannot start the board reports the
    asset as failed and every request becomes a no-op.
    """

    def __init__(self, assets: Optional[AssetGate] = None, muted: bool = False) -> None:
        self.assets = assets
        self._muted = muted
        self._initialized = False
        self._sounds: Dict[str, pygame.mixer.Sound] = {}
        self._music_channel: Optional[pygame.mixer.Channel] = None
        self._current_music: Optional[str] = None
        self._volume_sfx = 0.8
        self._volume_music = 0.5
        self._unsubscribers: list[Callable[[], None]] = []

        if self.assets is not None:
            self.assets.register(ASSET_NAME)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def current_music(self) -> Optional[str]:
        return self._current_music

    def init(self) -> bool:
        """Start the mixer and load the bank. Returns False if audio is unavailable."""
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 2, 1024)
            pygame.mixer.init()
            pygame.mixer.set_num_channels(8)
            bank = build_sound_bank()
            self._sounds = {name: self._create_sound(samples) for name, samples in bank.items()}
        except pygame.error as e:
            logger.error(f"Failed to initialize audio: {e}")
            if self.assets is not None:
                self.assets.mark_failed(ASSET_NAME, str(e))
            return False

        self._initialized = True
        if self.assets is not None:
            self.assets.mark_ready(ASSET_NAME)
        logger.info(f"Audio initialized with {len(self._sounds)} sounds")
        return True

    def attach(self, event_bus: EventBus) -> None:
        self._unsubscribers.extend([
            event_bus.subscribe(EventType.SOUND_PLAY, self._on_sound),
            event_bus.subscribe(EventType.MUSIC_PLAY, self._on_music_play),
            event_bus.subscribe(EventType.MUSIC_STOP, self._on_music_stop),
        ])

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _create_sound(self, samples: array.array) -> pygame.mixer.Sound:
        """Create a pygame Sound from mono samples (duplicated to stereo)."""
        stereo = array.array("h", bytes(len(samples) * 4))
        stereo[0::2] = samples
        stereo[1::2] = samples
        return pygame.mixer.Sound(buffer=stereo)

    def play(self, name: str) -> Optional[pygame.mixer.Channel]:
        if not self._initialized or self._muted:
            return None
        sound = self._sounds.get(name)
        if sound is None:
            logger.warning(f"Sound not found: {name}")
            return None
        sound.set_volume(self._volume_sfx)
        return sound.play()

    def play_music(self, track: str, fade_in_ms: int = 300) -> Optional[pygame.mixer.Channel]:
        if not self._initialized or self._muted:
            return None
        sound = self._sounds.get(f"music_{track}")
        if sound is None:
            logger.warning(f"Music track not found: {track}")
            return None

        self.stop_music(fade_out_ms=0)
        self._music_channel = pygame.mixer.Channel(MUSIC_CHANNEL)
        self._music_channel.set_volume(self._volume_music)
        self._music_channel.play(sound, loops=-1, fade_ms=fade_in_ms)
        self._current_music = track
        logger.debug(f"Playing music: {track}")
        return self._music_channel

    def stop_music(self, fade_out_ms: int = 300) -> None:
        if self._music_channel is not None:
            if fade_out_ms > 0:
                self._music_channel.fadeout(fade_out_ms)
            else:
                self._music_channel.stop()
        self._current_music = None

    def toggle_mute(self) -> bool:
        self._muted = not self._muted
        if self._initialized:
            if self._muted:
                pygame.mixer.pause()
            else:
                pygame.mixer.unpause()
        logger.info(f"Audio {'muted' if self._muted else 'unmuted'}")
        return self._muted

    def cleanup(self) -> None:
        self.detach()
        if self._initialized:
            pygame.mixer.quit()
            self._initialized = False
            logger.info("Audio shut down")

    def _on_sound(self, event: Event) -> None:
        self.play(event.data.get("name", ""))

    def _on_music_play(self, event: Event) -> None:
        self.play_music(event.data.get("name", "race"))

    def _on_music_stop(self, event: Event) -> None:
        self.stop_music()
