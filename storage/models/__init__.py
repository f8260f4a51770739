"""
Storage Models Package.

- Base, TimestampMixin (base.py)
- SentimentScoreRecord (sentiment.py)
"""

from storage.models.base import Base, TimestampMixin
from storage.models.sentiment import ANALYSIS_TEXT_LIMIT, SentimentScoreRecord


__all__ = [
    "Base",
    "TimestampMixin",
    "SentimentScoreRecord",
    "ANALYSIS_TEXT_LIMIT",
]
