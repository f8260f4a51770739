"""
Shared fixtures.

The learned model is always injected through a fake loader so no
model is downloaded, and time always comes from a MockClock.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from aggregation.models import ArticleRecord
from core.clock import ClockFactory, MockClock
from sentiment import FusionEngine, LearnedScorer, LexiconScorer, TTLSentimentCache


FIXED_NOW = datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc)


def make_loader(label: str = "POSITIVE", score: float = 0.99):
    """Loader returning a classifier with a fixed verdict."""
    def classifier(text):
        return [{"label": label, "score": score}]

    def loader():
        return classifier

    return loader


def keyword_loader():
    """Loader whose classifier is positive unless the text looks negative."""
    negative_markers = ("hate", "terrible", "crash", "awful", "bad")

    def classifier(text):
        lowered = text.lower()
        if any(marker in lowered for marker in negative_markers):
            return [{"label": "NEGATIVE", "score": 0.95}]
        return [{"label": "POSITIVE", "score": 0.9}]

    return classifier


def failing_loader():
    raise RuntimeError("model weights not found")


def make_record(
    item_id: str,
    score: Optional[float],
    hours_ago: float = 1.0,
    now: datetime = FIXED_NOW,
    **kwargs,
) -> ArticleRecord:
    kwargs.setdefault("headline", f"Headline {item_id}")
    confidence = None if score is None else min(1.0, abs(score) * 1.2)
    return ArticleRecord(
        item_id=item_id,
        published_at=now - timedelta(hours=hours_ago),
        final_score=score,
        confidence=kwargs.pop("confidence", confidence),
        **kwargs,
    )


@pytest.fixture
def mock_clock():
    """Mock clock pinned to FIXED_NOW."""
    return MockClock(FIXED_NOW)


@pytest.fixture(autouse=True)
def reset_global_clock():
    yield
    ClockFactory.reset()


@pytest.fixture
def engine(mock_clock):
    """Fusion engine with a positive fake classifier."""
    return FusionEngine(
        lexicon=LexiconScorer(),
        learned=LearnedScorer(loader=make_loader()),
        cache=TTLSentimentCache(clock=mock_clock),
        clock=mock_clock,
    )
