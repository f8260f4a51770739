"""
Tests for the fusion engine and its result cache.
"""

import random
import string

import pytest
from unittest.mock import AsyncMock

from sentiment.cache import DEFAULT_TTL_SECONDS, TTLSentimentCache
from sentiment.fusion import FusionEngine, lexicon_weight_for
from sentiment.learned import LearnedScorer
from sentiment.lexicon import LexiconScorer
from sentiment.models import ScoredItem, ScorerResult, normalize_text_key
from sentiment.thresholds import (
    SentimentCategory,
    SentimentLabel,
    categorize,
    fused_label,
    percent,
    round_half_up,
)
from tests.conftest import failing_loader, keyword_loader, make_loader


def _engine(clock, loader=None, lexicon=None):
    return FusionEngine(
        lexicon=lexicon or LexiconScorer(),
        learned=LearnedScorer(loader=loader or make_loader()),
        cache=TTLSentimentCache(clock=clock),
        clock=clock,
    )


# ============================================================
# THRESHOLDS
# ============================================================

class TestThresholds:
    """Canonical (+/-0.2) and fused (+/-0.1) bands."""

    @pytest.mark.parametrize("score,expected", [
        (0.21, SentimentCategory.POSITIVE),
        (0.2, SentimentCategory.NEUTRAL),
        (0.0, SentimentCategory.NEUTRAL),
        (-0.2, SentimentCategory.NEUTRAL),
        (-0.21, SentimentCategory.NEGATIVE),
    ])
    def test_categorize(self, score, expected):
        assert categorize(score) == expected

    def test_bands_differ_between_0_1_and_0_2(self):
        assert fused_label(0.15) == SentimentLabel.POSITIVE
        assert categorize(0.15) == SentimentCategory.NEUTRAL
        assert fused_label(0.05) == SentimentLabel.NEUTRAL

    def test_category_depends_only_on_final_score(self, mock_clock):
        now = mock_clock.now()
        a = ScoredItem("a", 0.9, -0.9, 0.25, 0.3, now)
        b = ScoredItem("b", -0.4, 0.6, 0.25, 0.3, now, cached=True)
        assert a.category == b.category == SentimentCategory.POSITIVE

    def test_genuine_zero_is_not_inconclusive(self, mock_clock):
        now = mock_clock.now()
        neutral_text = ScoredItem("calm", 0.0, 0.0, 0.0, 0.0, now)

        assert not neutral_text.is_inconclusive
        assert ScoredItem.neutral("broken", now).is_inconclusive
        assert not ScoredItem("half", 0.0, 0.0, 0.0, 0.0, now, lexicon_ok=False).is_inconclusive

    def test_percent_rounds_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert percent(1, 8) == 13  # 12.5
        assert percent(0, 0) == 0
        assert percent(2, 3) == 67


# ============================================================
# CACHE
# ============================================================

class TestTTLSentimentCache:
    """Tests for TTLSentimentCache."""

    def test_default_ttl_is_six_hours(self, mock_clock):
        assert TTLSentimentCache(clock=mock_clock).ttl_seconds == DEFAULT_TTL_SECONDS == 21600

    def test_fresh_entry_is_returned(self, mock_clock):
        cache = TTLSentimentCache(clock=mock_clock)
        cache.put("key", 0.5)
        mock_clock.advance(hours=5, minutes=59)

        entry = cache.get("key")
        assert entry is not None
        assert entry.final_score == 0.5

    def test_entry_at_ttl_is_expired(self, mock_clock):
        cache = TTLSentimentCache(ttl_seconds=60, clock=mock_clock)
        cache.put("key", 0.5)
        mock_clock.advance(60)

        assert cache.get("key") is None
        assert len(cache) == 0
        assert cache.get_stats()["expired"] == 1

    def test_last_write_wins(self, mock_clock):
        cache = TTLSentimentCache(clock=mock_clock)
        cache.put("key", 0.1)
        cache.put("key", -0.3)
        assert cache.get("key").final_score == -0.3

    def test_purge_expired(self, mock_clock):
        cache = TTLSentimentCache(ttl_seconds=100, clock=mock_clock)
        cache.put("old", 0.1)
        mock_clock.advance(50)
        cache.put("new", 0.2)
        mock_clock.advance(60)

        assert cache.purge_expired() == 1
        assert cache.get("new") is not None

    def test_evict_and_clear(self, mock_clock):
        cache = TTLSentimentCache(clock=mock_clock)
        cache.put("a", 0.1)
        cache.put("b", 0.2)

        assert cache.evict("a") is True
        assert cache.evict("a") is False
        cache.clear()
        assert len(cache) == 0


# ============================================================
# FUSION ENGINE
# ============================================================

class TestLexiconWeight:

    def test_short_text(self):
        assert lexicon_weight_for("short") == pytest.approx(0.4)

    def test_long_text_shifts_to_learned(self):
        assert lexicon_weight_for("x" * 101) == pytest.approx(0.3)
        assert lexicon_weight_for("x" * 100) == pytest.approx(0.4)


class TestFusionEngine:
    """Tests for FusionEngine.analyze."""

    @pytest.mark.asyncio
    async def test_positive_review(self, mock_clock):
        engine = _engine(mock_clock, make_loader("POSITIVE", 0.99))

        item = await engine.analyze("I love this product! It works great.")

        assert item.lexicon_score > 0.3
        assert item.learned_score > 0.9
        assert item.final_score == pytest.approx(0.75 * 0.4 + 0.99 * 0.6)
        assert item.final_score > 0.2
        assert item.category == SentimentCategory.POSITIVE
        assert item.label == SentimentLabel.POSITIVE
        assert item.confidence == 1.0

    @pytest.mark.asyncio
    async def test_empty_text_is_neutral(self, mock_clock):
        engine = _engine(mock_clock)

        item = await engine.analyze("")

        assert item.lexicon_score == 0.0
        assert item.learned_score == 0.0
        assert item.final_score == 0.0
        assert item.confidence == 0.0
        assert item.category == SentimentCategory.NEUTRAL

    @pytest.mark.asyncio
    async def test_non_string_raises_type_error(self, mock_clock):
        engine = _engine(mock_clock)
        with pytest.raises(TypeError):
            await engine.analyze(None)

    @pytest.mark.asyncio
    async def test_scores_are_bounded_for_random_text(self, mock_clock):
        engine = _engine(mock_clock, keyword_loader)
        rng = random.Random(7)
        words = ["great", "awful", "crash", "love", "the", "market", "!!!", "hate"]

        for _ in range(50):
            length = rng.randint(0, 40)
            text = " ".join(rng.choice(words) for _ in range(length))
            text += "".join(rng.choice(string.punctuation) for _ in range(rng.randint(0, 3)))

            item = await engine.analyze(text, use_cache=False)

            assert -1.0 <= item.final_score <= 1.0
            assert 0.0 <= item.confidence <= 1.0

    @pytest.mark.asyncio
    async def test_cache_hit_replays_score(self, mock_clock):
        engine = _engine(mock_clock, keyword_loader)

        first = await engine.analyze("Stocks rally on great earnings")
        mock_clock.advance(hours=1)
        second = await engine.analyze("  STOCKS rally on great earnings ")

        assert second.cached
        assert second.final_score == first.final_score
        assert second.lexicon_score == second.learned_score == first.final_score
        assert second.created_at == first.created_at
        assert engine.get_stats()["cache_hits"] == 1

    @pytest.mark.asyncio
    async def test_without_cache_results_are_equal(self, mock_clock):
        engine = _engine(mock_clock, keyword_loader)

        first = await engine.analyze("Markets crash on bad news", use_cache=False)
        second = await engine.analyze("Markets crash on bad news", use_cache=False)

        assert first.final_score == second.final_score
        assert not second.cached
        assert len(engine.cache) == 0

    @pytest.mark.asyncio
    async def test_expired_entry_is_recomputed(self, mock_clock):
        lexicon = LexiconScorer()
        engine = _engine(mock_clock, keyword_loader, lexicon=lexicon)

        await engine.analyze("great quarter")
        mock_clock.advance(hours=6, seconds=1)
        item = await engine.analyze("great quarter")

        assert not item.cached
        assert lexicon.get_stats()["total_calls"] == 2
        assert item.created_at == mock_clock.now()

    @pytest.mark.asyncio
    async def test_learned_failure_degrades_gracefully(self, mock_clock):
        engine = _engine(mock_clock, failing_loader)

        item = await engine.analyze("This is a good day with great profit")

        assert -1.0 <= item.final_score <= 1.0
        assert 0.0 <= item.confidence <= 1.0
        assert item.learned_ok
        assert engine.learned.is_degraded
        # fallback heuristic: good, great, profit at 0.1 each
        assert item.learned_score == pytest.approx(0.3)

    @pytest.mark.asyncio
    async def test_failed_leg_contributes_zero(self, mock_clock):
        learned = AsyncMock()
        learned.name = "learned"
        learned.score = AsyncMock(return_value=ScorerResult.err("learned", "offline"))

        engine = FusionEngine(
            lexicon=LexiconScorer(),
            learned=learned,
            cache=TTLSentimentCache(clock=mock_clock),
            clock=mock_clock,
        )
        item = await engine.analyze("good")

        assert not item.learned_ok
        assert item.final_score == pytest.approx(0.25 * 0.4)

    @pytest.mark.asyncio
    async def test_both_legs_failing_is_neutral_and_uncached(self, mock_clock):
        lexicon = AsyncMock()
        lexicon.name = "lexicon"
        lexicon.score = AsyncMock(side_effect=RuntimeError("broken"))
        learned = AsyncMock()
        learned.name = "learned"
        learned.score = AsyncMock(return_value=ScorerResult.err("learned", "offline"))

        engine = FusionEngine(
            lexicon=lexicon,
            learned=learned,
            cache=TTLSentimentCache(clock=mock_clock),
            clock=mock_clock,
        )
        item = await engine.analyze("good")

        assert item.final_score == 0.0
        assert item.confidence == 0.0
        assert item.is_inconclusive
        assert len(engine.cache) == 0
        assert engine.get_stats()["total_failures"] == 1

    def test_analyze_sync(self, mock_clock):
        engine = _engine(mock_clock)
        item = engine.analyze_sync("great")
        assert item.text_key == normalize_text_key("great")
        assert item.final_score > 0
