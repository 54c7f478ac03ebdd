"""
Main entry point for Ski Racer.

Wires settings, the event bus, the leaderboard client, audio and the
race together and hands them to the pygame window.
"""

import asyncio
import logging
import random
import sys

from dotenv import load_dotenv

from skiracer.core.assets import AssetGate
from skiracer.core.clock import MonotonicClock
from skiracer.core.events import Event, EventBus, EventType
from skiracer.core.settings import Settings, get_settings
from skiracer.leaderboard.board import Leaderboard
from skiracer.leaderboard.cache import LeaderboardCache
from skiracer.leaderboard.client import ScoreStore


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )
    # Connection pool chatter drowns out the game at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


async def run_simulator(settings: Settings) -> None:
    """Build the object graph and run the window until it closes."""
    from skiracer.audio.engine import SoundBoard
    from skiracer.graphics.renderer import SlopeRenderer
    from skiracer.simulation.input import KeyboardInput
    from skiracer.simulation.race import RaceState
    from skiracer.simulator.window import SimulatorWindow, WindowConfig

    event_bus = EventBus()
    keyboard = KeyboardInput(event_bus)
    assets = AssetGate()

    audio = None
    if not settings.mute:
        audio = SoundBoard(assets=assets)
        audio.attach(event_bus)

    assets.register("background")
    renderer = SlopeRenderer(seed=settings.seed)
    assets.mark_ready("background")

    store = ScoreStore(
        url=settings.leaderboard_url,
        cache=LeaderboardCache(settings.cache_path),
        timeout=settings.leaderboard_timeout,
    )

    leaderboard = Leaderboard(store)

    race = RaceState(
        clock=MonotonicClock(),
        leaderboard=leaderboard,
        event_bus=event_bus,
        assets=assets,
        rng=random.Random(settings.seed),
        debug=settings.debug,
    )

    window = SimulatorWindow(
        race=race,
        keyboard=keyboard,
        event_bus=event_bus,
        renderer=renderer,
        audio=audio,
        config=WindowConfig(scale=settings.window_scale, fullscreen=settings.fullscreen, fps=settings.fps),
    )

    # Mixer needs pygame's audio subsystem; the window initializes video
    if audio is not None:
        audio.init()

    try:
        await window.run()
    finally:
        event_bus.emit(Event(EventType.SHUTDOWN, source="main"))
        await store.close()
        if audio is not None:
            audio.cleanup()


def main() -> None:
    """Main entry point."""
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info("Ski Racer starting...")

    try:
        asyncio.run(run_simulator(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("Ski Racer stopped")


if __name__ == "__main__":
    main()
