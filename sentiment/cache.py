"""
Sentiment Cache - TTL cache of fused scores keyed by normalized text.

The cache is an injectable service so tests can supply a clock
(and a deterministic cache) instead of relying on wall-clock time
and process-wide singletons.

Only final_score is stored. A hit replays the score; it never
recomputes the scorer legs.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional

from core.clock import ClockFactory, ClockProtocol

from .models import CacheEntry


logger = logging.getLogger(__name__)


DEFAULT_TTL_SECONDS = 6 * 60 * 60


class SentimentCache(ABC):
    """Interface for the fused-score cache."""

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return a fresh entry, or None on miss/expiry."""
        pass

    @abstractmethod
    def put(self, key: str, final_score: float) -> CacheEntry:
        """Store a score stamped with the current time (last write wins)."""
        pass

    @abstractmethod
    def evict(self, key: str) -> bool:
        """Remove an entry. Returns True if one was removed."""
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop expired entries, returning how many were removed."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class TTLSentimentCache(SentimentCache):
    """
    In-memory TTL cache.

    Expiry is lazy: a stale entry is dropped when read. Call
    purge_expired() from a background sweep to bound memory.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock or ClockFactory.get_clock()
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

        self._stats = {
            "hits": 0,
            "misses": 0,
            "expired": 0,
            "writes": 0,
        }

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock.age_seconds(entry.created_at) < self.ttl_seconds

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            if not self._is_fresh(entry):
                del self._entries[key]
                self._stats["expired"] += 1
                self._stats["misses"] += 1
                return None

            self._stats["hits"] += 1
            return entry

    def put(self, key: str, final_score: float) -> CacheEntry:
        entry = CacheEntry(final_score=final_score, created_at=self._clock.now())
        with self._lock:
            self._entries[key] = entry
            self._stats["writes"] += 1
        return entry

    def evict(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        with self._lock:
            expired = [k for k, e in self._entries.items() if not self._is_fresh(e)]
            for k in expired:
                del self._entries[k]
            self._stats["expired"] += len(expired)

        if expired:
            logger.debug(f"Purged {len(expired)} expired sentiment cache entries")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            lookups = self._stats["hits"] + self._stats["misses"]
            hit_rate = self._stats["hits"] / lookups * 100 if lookups > 0 else 0
            return {
                **self._stats,
                "size": len(self._entries),
                "ttl_seconds": self.ttl_seconds,
                "hit_rate_pct": round(hit_rate, 2),
            }
