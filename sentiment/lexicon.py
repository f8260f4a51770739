"""
Lexicon Scorer - Word-list polarity scoring.

Fast, synchronous and always available. Each whitespace token is
lower-cased, stripped of punctuation and looked up in a fixed
positive/negative word set. Every match adds (or subtracts) a fixed
weight; the sum is not normalized by length and is clamped to
[-1, 1].

This is a fallback-grade scorer: it anchors the short-text leg of
the fusion weighting and doubles as the learned scorer's degraded
heuristic (with the narrower FALLBACK_* word lists).
"""

import re
from typing import FrozenSet, Iterable, Optional

from .base import BaseScorer
from .models import ScorerResult
from .thresholds import clamp


POSITIVE_WORDS: FrozenSet[str] = frozenset({
    "good", "great", "excellent", "awesome", "amazing", "happy", "love",
    "loved", "loves", "positive", "like", "liked", "best", "better",
    "win", "wins", "winning", "gain", "gains", "profit", "profits",
    "success", "successful", "growth", "strong", "stronger", "improve",
    "improved", "improves", "record", "boost", "boosts", "surge", "surges",
    "rally", "beat", "beats", "optimistic", "breakthrough", "innovative",
    "praise", "praised", "approve", "approved", "recover", "recovery",
    "benefit", "benefits", "wonderful", "fantastic", "perfect", "works",
})

NEGATIVE_WORDS: FrozenSet[str] = frozenset({
    "bad", "terrible", "awful", "horrible", "hate", "hated", "sad",
    "angry", "negative", "dislike", "worst", "worse", "lose", "loses",
    "losing", "loss", "losses", "drop", "drops", "fall", "falls", "fail",
    "fails", "failed", "failure", "weak", "weaker", "decline", "declines",
    "crash", "crisis", "fear", "fears", "risk", "warn", "warns", "warning",
    "lawsuit", "fraud", "scandal", "layoffs", "cut", "cuts", "slump",
    "plunge", "plunges", "recession", "broken", "poor", "concern",
    "concerns", "threat", "war", "dead", "death", "attack",
})

# Narrow list used when the learned model is unavailable
FALLBACK_POSITIVE_WORDS: FrozenSet[str] = frozenset({
    "good", "great", "excellent", "awesome", "happy", "love", "positive",
    "like", "up", "gain", "profit", "success",
})

FALLBACK_NEGATIVE_WORDS: FrozenSet[str] = frozenset({
    "bad", "terrible", "awful", "hate", "sad", "angry", "negative",
    "dislike", "down", "loss", "drop", "fail",
})

DEFAULT_TOKEN_WEIGHT = 0.25
FALLBACK_TOKEN_WEIGHT = 0.1

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_token(token: str) -> str:
    return _NON_ALNUM.sub("", token.lower())


class LexiconScorer(BaseScorer):
    """
    Rule-based polarity scorer over a fixed valence lexicon.

    No failure mode: unknown or empty text yields 0.0.
    """

    def __init__(
        self,
        positive_words: Optional[Iterable[str]] = None,
        negative_words: Optional[Iterable[str]] = None,
        token_weight: float = DEFAULT_TOKEN_WEIGHT,
        name: str = "lexicon",
    ) -> None:
        super().__init__()
        self._positive = frozenset(positive_words) if positive_words is not None else POSITIVE_WORDS
        self._negative = frozenset(negative_words) if negative_words is not None else NEGATIVE_WORDS
        self._token_weight = token_weight
        self._name = name

    @classmethod
    def fallback(cls) -> "LexiconScorer":
        """Heuristic used by the learned scorer in degraded mode."""
        return cls(
            positive_words=FALLBACK_POSITIVE_WORDS,
            negative_words=FALLBACK_NEGATIVE_WORDS,
            token_weight=FALLBACK_TOKEN_WEIGHT,
            name="lexicon_fallback",
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def token_weight(self) -> float:
        return self._token_weight

    def polarity(self, text: str) -> float:
        """Synchronous score in [-1, 1]."""
        if not text:
            return 0.0

        score = 0.0
        for raw in text.split():
            token = normalize_token(raw)
            if not token:
                continue
            if token in self._positive:
                score += self._token_weight
            elif token in self._negative:
                score -= self._token_weight

        return clamp(score)

    async def _score(self, text: str) -> ScorerResult:
        return ScorerResult.ok(self.name, self.polarity(text))
