"""
Fusion Engine - Combines lexicon and learned scores into one verdict.

Flow for analyze(text):
1. Cache lookup on the normalized text (when use_cache is set)
2. Lexicon and learned scorers run concurrently
3. Length-dependent dynamic weighting
4. Confidence and category derived from the fused score
5. Fused score cached with the current clock time

Short texts lean on the cheap lexicon score; longer texts shift
weight toward the learned model because word-list scoring is
diluted by neutral tokens.

analyze() never raises for string input. A failed scorer leg
contributes 0.0; if both legs fail the result is fully neutral
with zero confidence (and is not cached).
"""

import asyncio
import logging
from typing import Any, Optional

from core.clock import ClockFactory, ClockProtocol

from .base import BaseScorer
from .cache import SentimentCache, TTLSentimentCache
from .learned import LearnedScorer
from .lexicon import LexiconScorer
from .models import ScoredItem, ScorerResult, normalize_text_key
from .thresholds import confidence_for


logger = logging.getLogger(__name__)


BASE_LEXICON_WEIGHT = 0.4
MAX_LEXICON_WEIGHT = 0.6
LONG_TEXT_CHARS = 100
LONG_TEXT_ADJUSTMENT = -0.1


def lexicon_weight_for(text: str) -> float:
    """Lexicon share of the fused score for a given text."""
    adjustment = LONG_TEXT_ADJUSTMENT if len(text) > LONG_TEXT_CHARS else 0.0
    return min(MAX_LEXICON_WEIGHT, BASE_LEXICON_WEIGHT + adjustment)


class FusionEngine:
    """
    Multi-scorer sentiment fusion with a TTL result cache.

    Usage:
        engine = FusionEngine()
        item = await engine.analyze("I love this product! It works great.")
        print(item.final_score, item.confidence, item.category.value)
    """

    def __init__(
        self,
        lexicon: Optional[BaseScorer] = None,
        learned: Optional[BaseScorer] = None,
        cache: Optional[SentimentCache] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._clock = clock or ClockFactory.get_clock()
        self._lexicon = lexicon or LexiconScorer()
        self._learned = learned or LearnedScorer()
        self._cache = cache if cache is not None else TTLSentimentCache(clock=self._clock)

        self._stats = {
            "total_calls": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "lexicon_failures": 0,
            "learned_failures": 0,
            "total_failures": 0,
        }

    @property
    def cache(self) -> SentimentCache:
        return self._cache

    @property
    def lexicon(self) -> BaseScorer:
        return self._lexicon

    @property
    def learned(self) -> BaseScorer:
        return self._learned

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    async def analyze(self, text: str, use_cache: bool = True) -> ScoredItem:
        """
        Produce a fused ScoredItem for a text.

        Args:
            text: Raw text to score
            use_cache: Replay a fresh cached score when available

        Returns:
            ScoredItem with final_score in [-1, 1] and confidence in [0, 1]

        Raises:
            TypeError: If text is not a string
        """
        if not isinstance(text, str):
            raise TypeError(f"analyze() expects str, got {type(text).__name__}")

        self._stats["total_calls"] += 1
        text_key = normalize_text_key(text)

        if use_cache:
            entry = self._cache.get(text_key)
            if entry is not None:
                self._stats["cache_hits"] += 1
                logger.debug(f"Sentiment cache hit for key of length {len(text_key)}")
                return ScoredItem.from_cache(text_key, entry.final_score, entry.created_at)
            self._stats["cache_misses"] += 1

        lexicon_result, learned_result = await self._run_scorers(text)

        if not lexicon_result.is_ok:
            self._stats["lexicon_failures"] += 1
        if not learned_result.is_ok:
            self._stats["learned_failures"] += 1

        if not lexicon_result.is_ok and not learned_result.is_ok:
            self._stats["total_failures"] += 1
            logger.warning(
                f"Both scorers failed, returning neutral result: "
                f"lexicon={lexicon_result.error}, learned={learned_result.error}"
            )
            return ScoredItem.neutral(text_key, self._clock.now())

        lexicon_score = lexicon_result.value_or(0.0)
        learned_score = learned_result.value_or(0.0)

        lexicon_weight = lexicon_weight_for(text)
        learned_weight = 1 - lexicon_weight
        final_score = lexicon_score * lexicon_weight + learned_score * learned_weight

        item = ScoredItem(
            text_key=text_key,
            lexicon_score=lexicon_score,
            learned_score=learned_score,
            final_score=final_score,
            confidence=confidence_for(final_score),
            created_at=self._clock.now(),
            lexicon_ok=lexicon_result.is_ok,
            learned_ok=learned_result.is_ok,
        )

        if use_cache:
            self._cache.put(text_key, item.final_score)

        return item

    def analyze_sync(self, text: str, use_cache: bool = True) -> ScoredItem:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.analyze(text, use_cache=use_cache))

    def get_stats(self) -> dict[str, Any]:
        """Get engine statistics, including each scorer's."""
        stats: dict[str, Any] = dict(self._stats)
        for scorer in (self._lexicon, self._learned):
            get_stats = getattr(scorer, "get_stats", None)
            if callable(get_stats):
                stats[f"{scorer.name}_stats"] = get_stats()
        return stats

    async def close(self) -> None:
        await self._lexicon.close()
        await self._learned.close()

    # ─────────────────────────────────────────────────────────────
    # Internal methods
    # ─────────────────────────────────────────────────────────────

    async def _run_scorers(self, text: str) -> tuple[ScorerResult, ScorerResult]:
        """Run both legs concurrently and join before fusing."""
        results = await asyncio.gather(
            self._lexicon.score(text),
            self._learned.score(text),
            return_exceptions=True,
        )

        lexicon_result = self._as_result(self._lexicon, results[0])
        learned_result = self._as_result(self._learned, results[1])
        return lexicon_result, learned_result

    @staticmethod
    def _as_result(scorer: BaseScorer, outcome: Any) -> ScorerResult:
        if isinstance(outcome, ScorerResult):
            return outcome
        if isinstance(outcome, BaseException):
            logger.error(f"[{scorer.name}] Scorer raised despite contract: {outcome}")
            return ScorerResult.err(scorer.name, f"{type(outcome).__name__}: {outcome}")
        return ScorerResult.err(scorer.name, f"Unexpected scorer output: {outcome!r}")
