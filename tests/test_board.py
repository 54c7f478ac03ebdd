"""Tests for the in-game leaderboard view."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from skiracer.leaderboard.board import Leaderboard
from skiracer.leaderboard.models import LeaderboardEntry, LeaderboardOutcome, ScoreKind

ENTRY = LeaderboardEntry("AB", ScoreKind.TIME, 70.0)


def make_board(outcome, entries=()):
    store = MagicMock()
    store.entries = list(entries)
    store.fetch_leaderboard = AsyncMock(return_value=outcome)
    store.submit_score = AsyncMock(return_value=outcome)
    pending = []
    board = Leaderboard(store, spawn=pending.append)
    return board, store, pending


def test_starts_with_cached_entries():
    board, _, _ = make_board(LeaderboardOutcome.success([]), entries=[ENTRY])
    assert board.entries == (ENTRY,)
    assert board.ranking() == {1: ENTRY}


def test_refresh_runs_in_background():
    board, store, pending = make_board(LeaderboardOutcome.success([ENTRY]))
    assert board.refresh()
    assert board.loading
    assert not board.refresh()
    assert len(pending) == 1

    asyncio.run(pending[0])
    assert not board.loading
    assert board.entries == (ENTRY,)


def test_submit_sets_rank():
    board, store, pending = make_board(LeaderboardOutcome.success([ENTRY], rank=1))
    assert board.submit("AB", ScoreKind.TIME, 70.0)
    assert not board.submit("AB", ScoreKind.TIME, 70.0)
    asyncio.run(pending[0])

    store.submit_score.assert_awaited_once_with("AB", ScoreKind.TIME, 70.0)
    assert board.last_rank == 1


def test_refresh_does_not_touch_rank():
    board, _, pending = make_board(LeaderboardOutcome.success([ENTRY], rank=4))
    board.refresh()
    asyncio.run(pending[0])
    assert board.last_rank is None


def test_failure_keeps_fallback_and_error():
    board, _, pending = make_board(LeaderboardOutcome.failure([ENTRY], "timeout", rank=3))
    board.submit("AB", ScoreKind.TIME, 70.0)
    asyncio.run(pending[0])
    assert board.entries == (ENTRY,)
    assert board.last_error == "timeout"
    assert board.last_rank == 3


def test_loading_cleared_when_request_raises():
    board, store, pending = make_board(LeaderboardOutcome.success([]))
    store.fetch_leaderboard = AsyncMock(side_effect=RuntimeError("boom"))
    board.refresh()
    try:
        asyncio.run(pending[0])
    except RuntimeError:
        pass
    assert not board.loading
    assert board.entries == ()


def test_default_spawner_uses_running_loop():
    store = MagicMock()
    store.entries = []
    store.fetch_leaderboard = AsyncMock(return_value=LeaderboardOutcome.success([ENTRY]))
    board = Leaderboard(store)

    async def scenario():
        board.refresh()
        while board.loading:
            await asyncio.sleep(0)

    asyncio.run(scenario())
    assert board.entries == (ENTRY,)
