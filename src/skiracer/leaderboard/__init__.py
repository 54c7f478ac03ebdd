"""Shared leaderboard: entries, local cache, HTTP store and in-game board."""

from skiracer.leaderboard.models import (
    LEADERBOARD_SIZE,
    LeaderboardEntry,
    LeaderboardOutcome,
    ScoreKind,
    insert_entry,
    parse_entries,
    sort_entries,
)
from skiracer.leaderboard.cache import LeaderboardCache, CACHE_KEY
from skiracer.leaderboard.client import ScoreStore
from skiracer.leaderboard.board import Leaderboard

__all__ = [
    "LEADERBOARD_SIZE",
    "LeaderboardEntry",
    "LeaderboardOutcome",
    "ScoreKind",
    "insert_entry",
    "parse_entries",
    "sort_entries",
    "LeaderboardCache",
    "CACHE_KEY",
    "ScoreStore",
    "Leaderboard",
]
