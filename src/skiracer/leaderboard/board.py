"""In-game view of the leaderboard.

Requests run as background tasks on the event loop so the frame loop
never waits on the network. While one is in flight `loading` is True
and the scoreboard controls ignore input; only one request runs at a
time.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from skiracer.leaderboard.client import ScoreStore
from skiracer.leaderboard.models import LeaderboardEntry, LeaderboardOutcome, ScoreKind

logger = logging.getLogger(__name__)

Spawner = Callable[[Awaitable[None]], object]


class Leaderboard:
    """Current board, loading gate and the rank of the last submission."""

    def __init__(
        self,
        store: ScoreStore,
        spawn: Optional[Spawner] = None,
    ) -> None:
        self.store = store
        self._spawn = spawn or self._spawn_task
        self._tasks: set[asyncio.Task] = set()
        # Cached board is available synchronously before any request
        self._entries: tuple[LeaderboardEntry, ...] = tuple(store.entries)
        self._loading = False
        self._last_rank: Optional[int] = None
        self._last_error = ""

    @property
    def entries(self) -> tuple[LeaderboardEntry, ...]:
        return self._entries

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def last_rank(self) -> Optional[int]:
        return self._last_rank

    @property
    def last_error(self) -> str:
        return self._last_error

    def ranking(self) -> dict[int, LeaderboardEntry]:
        """Board as {rank: entry}, ranks starting at 1."""
        return {index + 1: entry for index, entry in enumerate(self._entries)}

    def refresh(self) -> bool:
        """Start a background fetch. Returns False if a request is already running."""
        if self._loading:
            return False
        self._loading = True
        self._spawn(self._run(self.store.fetch_leaderboard()))
        return True

    def submit(self, name: str, kind: ScoreKind, value: float) -> bool:
        """Start a background submission. Returns False if a request is already running."""
        if self._loading:
            return False
        self._loading = True
        self._last_rank = None
        self._spawn(self._run(self.store.submit_score(name, kind, value), submission=True))
        return True

    async def _run(self, request: Awaitable[LeaderboardOutcome], submission: bool = False) -> None:
        try:
            outcome = await request
        finally:
            self._loading = False
        self.apply(outcome, submission)

    def apply(self, outcome: LeaderboardOutcome, submission: bool = False) -> None:
        self._entries = outcome.entries
        self._last_error = outcome.error
        if submission:
            self._last_rank = outcome.rank
        if not outcome.ok:
            logger.warning(f"Leaderboard using fallback data ({outcome.error})")

    def _spawn_task(self, coro: Awaitable[None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Leaderboard request failed: {task.exception()}")
