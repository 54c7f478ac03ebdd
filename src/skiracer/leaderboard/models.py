"""Leaderboard entries and their ranking order.

Finishing the course always beats crashing: every time entry ranks
above every distance entry. Among times lower is better, among
distances higher is better.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 50
UNKNOWN_NAME = "???"


class ScoreKind(Enum):
    TIME = "time"          # seconds to finish
    DISTANCE = "distance"  # metres before crashing


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    kind: ScoreKind
    value: float

    def sort_key(self) -> tuple[int, float]:
        if self.kind == ScoreKind.TIME:
            return (0, self.value)
        return (1, -self.value)

    def to_record(self) -> dict[str, Any]:
        return {"name": self.name, "kind": self.kind.value, "value": self.value}

    @classmethod
    def from_record(cls, record: Any) -> Optional["LeaderboardEntry"]:
        """Build an entry from a loosely-shaped record.

        Missing fields are defaulted (kind falls back to time, which also
        covers the legacy {name, time} shape). A record with no usable
        number cannot be ranked and is dropped.
        """
        if not isinstance(record, dict):
            logger.warning(f"Skipping non-object leaderboard record: {record!r}")
            return None

        raw_kind = record.get("kind") or record.get("type")
        try:
            kind = ScoreKind(str(raw_kind).lower()) if raw_kind else None
        except ValueError:
            logger.warning(f"Unknown score kind {raw_kind!r}, treating as time")
            kind = None

        raw_value = record.get("value")
        if raw_value is None:
            if kind in (None, ScoreKind.TIME) and record.get("time") is not None:
                raw_value = record.get("time")
                kind = ScoreKind.TIME
            elif kind in (None, ScoreKind.DISTANCE) and record.get("distance") is not None:
                raw_value = record.get("distance")
                kind = ScoreKind.DISTANCE

        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            logger.warning(f"Dropping leaderboard record without a value: {record!r}")
            return None

        name = str(record.get("name") or UNKNOWN_NAME).strip() or UNKNOWN_NAME
        return cls(name=name, kind=kind or ScoreKind.TIME, value=value)


def sort_entries(entries: Iterable[LeaderboardEntry]) -> list[LeaderboardEntry]:
    return sorted(entries, key=LeaderboardEntry.sort_key)


def parse_entries(records: Iterable[Any], limit: int = LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
    entries = [e for e in (LeaderboardEntry.from_record(r) for r in records) if e is not None]
    return sort_entries(entries)[:limit]


def insert_entry(
    entries: Iterable[LeaderboardEntry],
    entry: LeaderboardEntry,
    limit: int = LEADERBOARD_SIZE,
) -> tuple[list[LeaderboardEntry], Optional[int]]:
    """Add an entry, re-sort and truncate.

    Returns the new list and the 1-based rank of the entry, or None if it
    did not make the cut. Ties keep earlier entries ahead.
    """
    merged = sort_entries([*entries, entry])[:limit]
    for index, existing in enumerate(merged):
        if existing is entry:
            return merged, index + 1
    return merged, None


def rank_of(entries: Iterable[LeaderboardEntry], entry: LeaderboardEntry) -> Optional[int]:
    """1-based rank of the first entry equal to `entry`."""
    for index, existing in enumerate(entries):
        if existing == entry:
            return index + 1
    return None


@dataclass(frozen=True)
class LeaderboardOutcome:
    """Result of a backend round-trip.

    On failure `entries` holds the fallback (cached or locally merged)
    board, so callers can always display something.
    """

    ok: bool
    entries: tuple[LeaderboardEntry, ...]
    rank: Optional[int] = None
    error: str = ""

    @classmethod
    def success(cls, entries: Iterable[LeaderboardEntry], rank: Optional[int] = None) -> "LeaderboardOutcome":
        return cls(ok=True, entries=tuple(entries), rank=rank)

    @classmethod
    def failure(
        cls,
        fallback: Iterable[LeaderboardEntry],
        error: str,
        rank: Optional[int] = None,
    ) -> "LeaderboardOutcome":
        return cls(ok=False, entries=tuple(fallback), rank=rank, error=error)
