"""
Sentiment Score ORM Model.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Stage: DERIVED (scored)
- Mutability: UPSERT (one row per item, rescoring overwrites)
- Source: FusionEngine via BatchProcessor
- Consumers: aggregation, dashboards

============================================================
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sentiment.models import ScoredItem
from storage.models.base import Base, TimestampMixin


ANALYSIS_TEXT_LIMIT = 1000


class SentimentScoreRecord(Base, TimestampMixin):
    """Fused sentiment for one text item."""

    __tablename__ = "sentiment_scores"

    item_id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Text item identifier",
    )

    lexicon_score: Mapped[float] = mapped_column(Float, nullable=False)
    learned_score: Mapped[float] = mapped_column(Float, nullable=False)
    final_score: Mapped[float] = mapped_column(Float, nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)

    label: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="Fused label (+/-0.1 band)",
    )

    category: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="Canonical category (+/-0.2 band)",
    )

    cached: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    analysis_text: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="First 1000 characters of the analysed text",
    )

    scored_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the fusion engine produced the score",
    )

    __table_args__ = (
        Index("ix_sentiment_scores_category", "category"),
        Index("ix_sentiment_scores_scored_at", "scored_at"),
    )

    def apply(self, scored: ScoredItem, analysis_text: str = "") -> None:
        """Copy a scored item's values onto this row."""
        self.lexicon_score = scored.lexicon_score
        self.learned_score = scored.learned_score
        self.final_score = scored.final_score
        self.confidence = scored.confidence
        self.label = scored.label.value
        self.category = scored.category.value
        self.cached = scored.cached
        self.analysis_text = analysis_text[:ANALYSIS_TEXT_LIMIT] if analysis_text else None
        self.scored_at = scored.created_at

    def __repr__(self) -> str:
        return (
            f"<SentimentScoreRecord(item_id={self.item_id}, "
            f"final_score={self.final_score}, category={self.category})>"
        )
