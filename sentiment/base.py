"""
Base Scorer - Abstract interface for all sentiment scorers.

All scorers follow the same non-raising pattern: the public
`score()` wraps the subclass's `_score()` and converts any
failure into a ScorerResult.err(...).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from .exceptions import ScorerError
from .models import ScorerResult


logger = logging.getLogger(__name__)


class BaseScorer(ABC):
    """
    Abstract base class for sentiment scorers.

    DESIGN PRINCIPLES:
    1. NEVER raise - log and return ScorerResult.err
    2. ALWAYS bounded - scores are clamped to [-1, 1]
    3. TRACKED - call and error counts are available

    All subclasses must implement:
    - name - scorer identifier
    - _score() - produce a raw score for a text
    """

    def __init__(self) -> None:
        self._stats = {
            "total_calls": 0,
            "errors": 0,
        }

    @property
    @abstractmethod
    def name(self) -> str:
        """Return scorer name."""
        pass

    @abstractmethod
    async def _score(self, text: str) -> ScorerResult:
        """
        Score a text.

        Must be implemented by subclasses.
        May raise; the caller converts exceptions into errors.
        """
        pass

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    async def score(self, text: str) -> ScorerResult:
        """
        Score a text.

        NEVER raises - returns ScorerResult.err on failure.
        """
        self._stats["total_calls"] += 1

        try:
            return await self._score(text)
        except ScorerError as e:
            self._stats["errors"] += 1
            logger.warning(f"[{self.name}] Scorer error: {e}")
            return ScorerResult.err(self.name, str(e))
        except Exception as e:
            self._stats["errors"] += 1
            logger.error(f"[{self.name}] Unexpected error: {e}")
            return ScorerResult.err(self.name, f"{type(e).__name__}: {e}")

    def get_stats(self) -> dict[str, Any]:
        """Get scorer statistics."""
        total = self._stats["total_calls"]
        error_rate = self._stats["errors"] / total * 100 if total > 0 else 0

        return {
            **self._stats,
            "error_rate_pct": round(error_rate, 2),
            "scorer_name": self.name,
        }

    async def close(self) -> None:
        """Cleanup resources. Override if needed."""
        pass
