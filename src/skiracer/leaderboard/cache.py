"""Local mirror of the leaderboard.

Stored as a JSON document with the board under one fixed key, so the
menu and scoreboard have something to show before the first network
round-trip completes.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from skiracer.leaderboard.models import LeaderboardEntry, parse_entries

logger = logging.getLogger(__name__)

CACHE_KEY = "skiracer.leaderboard"


class LeaderboardCache:
    """Reads and writes the cached board at `path`."""

    def __init__(self, path: Path | str, key: str = CACHE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def load(self) -> list[LeaderboardEntry]:
        """Load the cached board. Missing or corrupt caches read as empty."""
        document = self._read_document()
        records = document.get(self.key, [])
        if not isinstance(records, list):
            logger.warning(f"Cached leaderboard under {self.key} is not a list, ignoring")
            return []
        entries = parse_entries(records)
        logger.debug(f"Loaded {len(entries)} cached leaderboard entries")
        return entries

    def save(self, entries: Iterable[LeaderboardEntry]) -> bool:
        document = self._read_document()
        document[self.key] = [entry.to_record() for entry in entries]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to write leaderboard cache {self.path}: {e}")
            return False
        return True

    def clear(self) -> None:
        self.save([])

    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable leaderboard cache {self.path}: {e}")
            return {}
        if not isinstance(document, dict):
            logger.warning(f"Leaderboard cache {self.path} has unexpected shape, ignoring")
            return {}
        return document
