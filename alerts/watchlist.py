"""
Watchlist - Tracked entities and their alert settings.

Names are trimmed and matched case-insensitively; the first
spelling added is the one displayed.
"""

import logging
from typing import Any, Iterator, Optional

from core.config import EngineConfig
from sentiment.thresholds import NEGATIVE_THRESHOLD, POSITIVE_THRESHOLD

from .exceptions import WatchlistError
from .models import DEFAULT_THRESHOLD, WatchlistEntry, validate_threshold


logger = logging.getLogger(__name__)


class Watchlist:
    """
    Ordered collection of watch-list entries.

    Usage:
        watchlist = Watchlist()
        watchlist.add("Nvidia", threshold=20)
        watchlist.toggle_alerts("nvidia")
    """

    def __init__(self, default_threshold: int = DEFAULT_THRESHOLD) -> None:
        self._default_threshold = validate_threshold(default_threshold)
        self._entries: dict[str, WatchlistEntry] = {}

    @classmethod
    def from_config(cls, config: EngineConfig) -> "Watchlist":
        return cls(default_threshold=config.alert_default_threshold)

    def __iter__(self) -> Iterator[WatchlistEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().casefold() in self._entries

    def add(
        self,
        name: str,
        threshold: Optional[int] = None,
        alert_enabled: bool = True,
        last_known_sentiment: float = 0.0,
    ) -> WatchlistEntry:
        """Add an entity; duplicates (ignoring case) are rejected."""
        entry = WatchlistEntry(
            name=name,
            last_known_sentiment=last_known_sentiment,
            alert_enabled=alert_enabled,
            threshold=self._default_threshold if threshold is None else threshold,
        )
        if entry.key in self._entries:
            raise WatchlistError(f"{entry.name} is already on the watchlist", entity=entry.name)

        self._entries[entry.key] = entry
        logger.info(f"Watching {entry.name} (threshold {entry.threshold})")
        return entry

    def get(self, name: str) -> Optional[WatchlistEntry]:
        return self._entries.get(name.strip().casefold())

    def remove(self, name: str) -> WatchlistEntry:
        entry = self._entries.pop(self._require(name).key)
        logger.info(f"Stopped watching {entry.name}")
        return entry

    def toggle_alerts(self, name: str) -> bool:
        """Flip alert_enabled and return the new value."""
        entry = self._require(name)
        entry.alert_enabled = not entry.alert_enabled
        return entry.alert_enabled

    def set_threshold(self, name: str, threshold: int) -> WatchlistEntry:
        entry = self._require(name)
        entry.threshold = validate_threshold(threshold, entry.name)
        return entry

    def stats(self, active_alerts: int = 0) -> dict[str, Any]:
        entries = list(self._entries.values())
        return {
            "total_watched": len(entries),
            "positive_trend": sum(1 for e in entries if e.last_known_sentiment > POSITIVE_THRESHOLD),
            "negative_trend": sum(1 for e in entries if e.last_known_sentiment < NEGATIVE_THRESHOLD),
            "alerts_enabled": sum(1 for e in entries if e.alert_enabled),
            "active_alerts": active_alerts,
        }

    def to_list(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries.values()]

    def _require(self, name: str) -> WatchlistEntry:
        entry = self.get(name) if isinstance(name, str) else None
        if entry is None:
            raise WatchlistError(f"{name!r} is not on the watchlist", entity=str(name))
        return entry
