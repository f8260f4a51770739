"""
Sentiment Thresholds - Canonical classification and percentage rules.

Two bands exist and must stay distinct:

- The canonical +/-0.2 band (`categorize`) is used by every
  aggregation, dashboard and alert path.
- The tighter +/-0.1 band (`fused_label`) is used only for the
  single label returned by the fusion engine alongside confidence.

Unifying them would silently change dashboard counts.
"""

import math
from enum import Enum


class SentimentCategory(Enum):
    """Canonical category used by aggregation, dashboards and alerts."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class SentimentLabel(Enum):
    """Label returned by the fusion engine alongside confidence."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


POSITIVE_THRESHOLD = 0.2
NEGATIVE_THRESHOLD = -0.2

FUSED_NEUTRAL_BAND = 0.1

CONFIDENCE_SCALE = 1.2


def categorize(score: float) -> SentimentCategory:
    """Canonical category for a final score."""
    if score > POSITIVE_THRESHOLD:
        return SentimentCategory.POSITIVE
    if score < NEGATIVE_THRESHOLD:
        return SentimentCategory.NEGATIVE
    return SentimentCategory.NEUTRAL


def fused_label(score: float) -> SentimentLabel:
    """Fusion engine's own label (tighter neutral band)."""
    if abs(score) < FUSED_NEUTRAL_BAND:
        return SentimentLabel.NEUTRAL
    return SentimentLabel.POSITIVE if score > 0 else SentimentLabel.NEGATIVE


def confidence_for(score: float) -> float:
    """Confidence grows with magnitude and saturates at 1."""
    return min(1.0, abs(score) * CONFIDENCE_SCALE)


def round_half_up(value: float) -> int:
    """Round .5 upward, matching the dashboard's rounding."""
    return int(math.floor(value + 0.5))


def percent(part: int, total: int) -> int:
    """Whole-number percentage, 0 when total is 0."""
    if total <= 0:
        return 0
    return round_half_up(part / total * 100)


def clamp(value: float, low: float = -1.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
