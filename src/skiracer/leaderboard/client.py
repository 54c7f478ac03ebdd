"""HTTP client for the shared leaderboard.

The backend is a simple JSON web app: GET returns the board, POST with
{name, kind, value} stores a score and returns the updated board. Any
failure falls back to the last known board; nothing is retried here,
the next phase that needs the board simply asks again.
"""

import asyncio
import logging
from typing import Any, Iterable, Optional

import aiohttp

from skiracer.leaderboard.cache import LeaderboardCache
from skiracer.leaderboard.models import (
    LEADERBOARD_SIZE,
    LeaderboardEntry,
    LeaderboardOutcome,
    ScoreKind,
    insert_entry,
    parse_entries,
    rank_of,
)

logger = logging.getLogger(__name__)


class ScoreStore:
    """Fetches and submits scores, mirroring good results to the local cache."""

    def __init__(
        self,
        url: str,
        cache: LeaderboardCache,
        timeout: float = 5.0,
        limit: int = LEADERBOARD_SIZE,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.url = url
        self.cache = cache
        self.timeout = timeout
        self.limit = limit
        self._session = session
        self._owns_session = session is None
        self._entries: list[LeaderboardEntry] = cache.load()

        if not self.url:
            logger.warning("Leaderboard URL not configured, scores stay local")

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    @property
    def entries(self) -> list[LeaderboardEntry]:
        """Last known board (cache at startup, then every result since)."""
        return list(self._entries)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Content-Type": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if we created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def fetch_leaderboard(self) -> LeaderboardOutcome:
        if not self.is_configured:
            return LeaderboardOutcome.failure(self._entries, "not configured")

        try:
            session = await self._ensure_session()
            async with session.get(self.url, timeout=self._request_timeout()) as response:
                if not response.ok:
                    raise aiohttp.ClientResponseError(
                        response.request_info, response.history,
                        status=response.status, message="Failed to fetch leaderboard",
                    )
                payload = await response.json(content_type=None)
        except asyncio.TimeoutError:
            logger.error("Leaderboard fetch timed out, using cached board")
            return LeaderboardOutcome.failure(self._entries, "timeout")
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"Error fetching leaderboard: {e}")
            return LeaderboardOutcome.failure(self._entries, str(e))

        entries, _ = self._parse_payload(payload)
        self._remember(entries)
        logger.info(f"Leaderboard fetched: {len(entries)} entries")
        return LeaderboardOutcome.success(entries)

    async def submit_score(self, name: str, kind: ScoreKind, value: float) -> LeaderboardOutcome:
        entry = LeaderboardEntry(name=name, kind=kind, value=value)

        if not self.is_configured:
            entries, rank = insert_entry(self._entries, entry, self.limit)
            self._remember(entries)
            logger.info(f"Score stored locally: {name} {kind.value}={value} rank={rank}")
            return LeaderboardOutcome.failure(entries, "not configured", rank=rank)

        try:
            session = await self._ensure_session()
            async with session.post(
                self.url, json=entry.to_record(), timeout=self._request_timeout()
            ) as response:
                if not response.ok:
                    raise aiohttp.ClientResponseError(
                        response.request_info, response.history,
                        status=response.status, message="Failed to submit score",
                    )
                payload = await response.json(content_type=None)
        except (asyncio.TimeoutError, aiohttp.ClientError, ValueError) as e:
            logger.error(f"Error submitting score, keeping it locally: {e or 'timeout'}")
            entries, rank = insert_entry(self._entries, entry, self.limit)
            self._entries = entries
            return LeaderboardOutcome.failure(entries, str(e) or "timeout", rank=rank)

        entries, rank = self._parse_payload(payload)
        if rank is None:
            rank = rank_of(entries, entry)
        self._remember(entries)
        logger.info(f"Score submitted: {name} {kind.value}={value} rank={rank}")
        return LeaderboardOutcome.success(entries, rank=rank)

    def _parse_payload(self, payload: Any) -> tuple[list[LeaderboardEntry], Optional[int]]:
        """Accept a bare list or an object wrapping the list (and maybe a rank)."""
        rank = None
        records: Iterable[Any] = []
        if isinstance(payload, list):
            records = payload
        elif isinstance(payload, dict):
            for key in ("entries", "leaderboard", "data"):
                if isinstance(payload.get(key), list):
                    records = payload[key]
                    break
            raw_rank = payload.get("rank")
            if isinstance(raw_rank, int) and raw_rank > 0:
                rank = raw_rank
        else:
            logger.warning(f"Unexpected leaderboard payload: {type(payload).__name__}")
        return parse_entries(records, self.limit), rank

    def _remember(self, entries: list[LeaderboardEntry]) -> None:
        self._entries = entries
        self.cache.save(entries)

    def _request_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout)
