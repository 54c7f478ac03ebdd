"""
Desktop host for the race using pygame.

Owns the OS window, turns keyboard events into bus events, drives one
race tick per frame and blits the software-rendered frame buffer.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Deque, Optional

import pygame

from skiracer.audio.engine import SoundBoard
from skiracer.core.events import EventBus, key_event, Event, EventType
from skiracer.graphics.renderer import SlopeRenderer
from skiracer.simulation.constants import CANVAS_WIDTH, CANVAS_HEIGHT
from skiracer.simulation.input import KeyboardInput
from skiracer.simulation.race import RaceState

logger = logging.getLogger(__name__)

# pygame key -> logical actions. Letters used for steering still type
# their character on the name entry screen.
KEY_ACTIONS: dict[int, tuple[str, ...]] = {
    pygame.K_LEFT: ("turn_left",),
    pygame.K_a: ("turn_left",),
    pygame.K_RIGHT: ("turn_right",),
    pygame.K_d: ("turn_right",),
    pygame.K_DOWN: ("down",),
    pygame.K_s: ("down",),
    pygame.K_UP: ("up",),
    pygame.K_w: ("up",),
    pygame.K_SPACE: ("jump", "start", "continue"),
    pygame.K_RETURN: ("confirm", "start", "continue"),
    pygame.K_KP_ENTER: ("confirm", "start", "continue"),
    pygame.K_BACKSPACE: ("backspace",),
    pygame.K_F1: ("toggle_collision",),
}


@dataclass
class WindowConfig:
    """Simulator window configuration."""
    title: str = "Ski Racer"
    scale: float = 1.0
    fullscreen: bool = False
    fps: int = 60
    screenshot_dir: Path = Path(".")

    panel_color: tuple[int, int, int, int] = (20, 25, 35, 220)
    text_color: tuple[int, int, int] = (200, 200, 220)
    accent_color: tuple[int, int, int] = (100, 150, 255)

    @property
    def size(self) -> tuple[int, int]:
        return int(CANVAS_WIDTH * self.scale), int(CANVAS_HEIGHT * self.scale)


class LogCapture(logging.Handler):
    """Keeps the most recent formatted log lines for the in-window viewer."""

    def __init__(self, max_lines: int = 40) -> None:
        super().__init__()
        self.lines: Deque[str] = deque(maxlen=max_lines)
        self.setFormatter(logging.Formatter("%(levelname).1s %(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(self.format(record))


class SimulatorWindow:
    """
    Main window running the race.

    Keyboard Mapping:
        ARROWS / WASD: Turn and speed
        SPACE: Jump / start / continue
        RETURN: Submit name / start / continue
        BACKSPACE: Delete a name character
        F1: Toggle collisions (debug only)
        F2: Toggle log viewer
        F3: Toggle debug panel
        F4: Mute audio
        F12: Screenshot
        ESC: Quit
    """

    def __init__(
        self,
        race: RaceState,
        keyboard: KeyboardInput,
        event_bus: EventBus,
        renderer: Optional[SlopeRenderer] = None,
        audio: Optional[SoundBoard] = None,
        config: Optional[WindowConfig] = None,
    ) -> None:
        self.race = race
        self.keyboard = keyboard
        self.event_bus = event_bus
        self.renderer = renderer or SlopeRenderer()
        self.audio = audio
        self.config = config or WindowConfig()

        self._screen: Optional[pygame.Surface] = None
        self._clock: Optional[pygame.time.Clock] = None
        self._font: Optional[pygame.font.Font] = None
        self._running = False
        self._frame_count = 0
        self._show_debug = race.debug
        self._show_log = False

        self._log_capture = LogCapture()
        logging.getLogger().addHandler(self._log_capture)

        self.event_bus.subscribe(EventType.SHUTDOWN, self._on_shutdown)
        logger.info("SimulatorWindow created")

    @property
    def running(self) -> bool:
        return self._running

    def _init_pygame(self) -> None:
        pygame.init()
        pygame.display.set_caption(self.config.title)

        flags = pygame.DOUBLEBUF
        if self.config.fullscreen:
            flags |= pygame.FULLSCREEN | pygame.SCALED
        self._screen = pygame.display.set_mode(self.config.size, flags)
        self._clock = pygame.time.Clock()

        pygame.font.init()
        self._font = pygame.font.SysFont("dejavusansmono,menlo,consolas,monospace", 13)
        logger.info(f"Pygame initialized: {self.config.size[0]}x{self.config.size[1]}")

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)
            elif event.type == pygame.KEYUP:
                actions = KEY_ACTIONS.get(event.key)
                if actions:
                    self.event_bus.emit(key_event(actions, down=False))
            elif event.type == pygame.WINDOWFOCUSLOST:
                self.keyboard.release_all()

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        key = event.key

        if key == pygame.K_ESCAPE:
            self._running = False
            return
        if key == pygame.K_F2:
            self._show_log = not self._show_log
            return
        if key == pygame.K_F3:
            self._show_debug = not self._show_debug
            return
        if key == pygame.K_F4:
            if self.audio is not None:
                self.audio.toggle_mute()
            return
        if key == pygame.K_F12:
            self._capture_screenshot()
            return

        char = event.unicode if len(event.unicode) == 1 and event.unicode.isascii() and event.unicode.isalnum() else ""
        actions = KEY_ACTIONS.get(key, ())
        if actions or char:
            self.event_bus.emit(key_event(actions, down=True, char=char))

    def _render(self) -> None:
        if self._screen is None:
            return

        frame = self.renderer.render(self.race.snapshot())
        surface = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
        if surface.get_size() != self._screen.get_size():
            surface = pygame.transform.scale(surface, self._screen.get_size())
        self._screen.blit(surface, (0, 0))

        if self._show_debug:
            self._render_debug_panel()
        if self._show_log:
            self._render_log_panel()

        pygame.display.flip()

    def _render_panel(self, rect: pygame.Rect, lines: list[tuple[str, tuple[int, int, int]]]) -> None:
        surf = pygame.Surface(rect.size, pygame.SRCALPHA)
        surf.fill(self.config.panel_color)
        self._screen.blit(surf, rect.topleft)
        y = rect.y + 6
        for text, color in lines:
            self._screen.blit(self._font.render(text, True, color), (rect.x + 8, y))
            y += 15
            if y > rect.bottom - 15:
                break

    def _render_debug_panel(self) -> None:
        if not self._font:
            return
        snap = self.race.snapshot()
        s = snap.skier
        text = self.config.text_color
        lines = [
            (f"FPS: {self._clock.get_fps():.1f}" if self._clock else "FPS: --", self.config.accent_color),
            (f"Frame: {self._frame_count}", text),
            (f"Phase: {snap.phase.name}", text),
            (f"x={s.x:.1f} angle={s.angle:+.2f} speed={s.speed:.2f}", text),
            (f"airborne={s.airborne} distance={snap.distance_m:.1f}m", text),
            (f"obstacles={snap.debug.obstacles} trail={snap.debug.trail_points}", text),
            (f"collisions={'on' if snap.debug.collision_enabled else 'off'}", text),
        ]
        width, _ = self._screen.get_size()
        self._render_panel(pygame.Rect(width - 330, 10, 320, 15 * len(lines) + 12), lines)

    def _render_log_panel(self) -> None:
        if not self._font:
            return
        colors = {"E": (255, 100, 100), "W": (255, 200, 100), "I": (150, 200, 150)}
        lines = [
            (line[:70], colors.get(line[:1], (150, 150, 170)))
            for line in list(self._log_capture.lines)[-25:]
        ]
        _, height = self._screen.get_size()
        self._render_panel(pygame.Rect(10, height - 400, 480, 390), lines)

    def _capture_screenshot(self) -> None:
        if self._screen is None:
            return
        name = f"skiracer_{datetime.now():%Y%m%d_%H%M%S}_{self._frame_count}.png"
        path = self.config.screenshot_dir / name
        pygame.image.save(self._screen, str(path))
        logger.info(f"Screenshot saved: {path}")

    def _on_shutdown(self, event: Event) -> None:
        self._running = False

    async def run(self) -> None:
        """Main loop: input, one race tick, render, yield to background tasks."""
        self._init_pygame()
        self._running = True
        logger.info("Simulator started")

        try:
            while self._running:
                self._handle_events()

                self.race.advance(self.keyboard.poll())

                self._render()

                if self._clock:
                    self._clock.tick(self.config.fps)
                self._frame_count += 1

                # Let leaderboard requests make progress
                await asyncio.sleep(0)
        finally:
            self._cleanup()

    def _cleanup(self) -> None:
        logging.getLogger().removeHandler(self._log_capture)
        pygame.quit()
        logger.info("Simulator stopped")

    def stop(self) -> None:
        self._running = False
