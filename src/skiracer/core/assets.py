"""Asset readiness gate.

Loading finishes once every registered asset has either loaded or
failed. A failed asset is settled too: the game runs with degraded
visuals or audio rather than stalling on the loading screen.
"""

from enum import Enum, auto
import logging

logger = logging.getLogger(__name__)


class AssetStatus(Enum):
    PENDING = auto()
    READY = auto()
    FAILED = auto()


class AssetGate:
    """Tracks named assets until all of them settle."""

    def __init__(self) -> None:
        self._assets: dict[str, AssetStatus] = {}

    def register(self, name: str) -> None:
        if name not in self._assets:
            self._assets[name] = AssetStatus.PENDING

    def mark_ready(self, name: str) -> None:
        self._assets[name] = AssetStatus.READY
        logger.debug(f"Asset ready: {name}")

    def mark_failed(self, name: str, reason: str = "") -> None:
        self._assets[name] = AssetStatus.FAILED
        logger.warning(f"Asset failed, continuing without it: {name} {reason}".rstrip())

    def status(self, name: str) -> AssetStatus | None:
        return self._assets.get(name)

    def is_available(self, name: str) -> bool:
        """True only for assets that actually loaded."""
        return self._assets.get(name) == AssetStatus.READY

    @property
    def progress(self) -> float:
        """Fraction of assets that have settled (0.0 to 1.0)."""
        if not self._assets:
            return 1.0
        settled = sum(1 for s in self._assets.values() if s != AssetStatus.PENDING)
        return settled / len(self._assets)

    @property
    def all_settled(self) -> bool:
        return all(s != AssetStatus.PENDING for s in self._assets.values())
