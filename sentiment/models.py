"""
Sentiment Data Models - Scored items, scorer results and batch output.

A ScoredItem is created once per unique input text (or replayed
from cache) and never mutated. Its category is always derived
from final_score; it is never stored on its own.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .thresholds import (
    SentimentCategory,
    SentimentLabel,
    categorize,
    clamp,
    confidence_for,
    fused_label,
)


class ModelState(Enum):
    """Initialization state of the learned scorer's model."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DEGRADED = "degraded"


def normalize_text_key(text: str) -> str:
    """Cache/identity key for a piece of text."""
    return text.strip().lower()


# ============================================================
# SCORER RESULT
# ============================================================

@dataclass(frozen=True)
class ScorerResult:
    """
    Outcome of one scorer call: Ok(score) or Err(reason).

    The fusion engine consumes this explicitly instead of
    guessing from missing fields.
    """
    scorer_name: str
    score: Optional[float] = None
    error: Optional[str] = None
    used_fallback: bool = False

    @classmethod
    def ok(cls, scorer_name: str, score: float, used_fallback: bool = False) -> "ScorerResult":
        return cls(scorer_name=scorer_name, score=clamp(score), used_fallback=used_fallback)

    @classmethod
    def err(cls, scorer_name: str, reason: str) -> "ScorerResult":
        return cls(scorer_name=scorer_name, error=reason)

    @property
    def is_ok(self) -> bool:
        return self.error is None and self.score is not None

    def value_or(self, default: float = 0.0) -> float:
        return self.score if self.is_ok else default


# ============================================================
# SCORED ITEM
# ============================================================

@dataclass(frozen=True)
class ScoredItem:
    """
    Fused sentiment verdict for one text.

    final_score: -1.0 (very negative) to +1.0 (very positive)
    confidence: 0.0 to 1.0

    On a cache hit lexicon_score and learned_score both equal
    final_score; the per-model breakdown is not kept in cache.
    """
    text_key: str
    lexicon_score: float
    learned_score: float
    final_score: float
    confidence: float
    created_at: datetime

    cached: bool = False
    lexicon_ok: bool = True
    learned_ok: bool = True

    def __post_init__(self) -> None:
        """Keep scores inside their documented ranges."""
        for name in ("lexicon_score", "learned_score", "final_score"):
            value = getattr(self, name)
            if not -1.0 <= value <= 1.0:
                object.__setattr__(self, name, clamp(value))
        if not 0.0 <= self.confidence <= 1.0:
            object.__setattr__(self, "confidence", clamp(self.confidence, 0.0, 1.0))

    @classmethod
    def neutral(cls, text_key: str, created_at: datetime) -> "ScoredItem":
        """Zero-confidence result used when no scorer produced a value."""
        return cls(
            text_key=text_key,
            lexicon_score=0.0,
            learned_score=0.0,
            final_score=0.0,
            confidence=0.0,
            created_at=created_at,
            lexicon_ok=False,
            learned_ok=False,
        )

    @classmethod
    def from_cache(cls, text_key: str, final_score: float, created_at: datetime) -> "ScoredItem":
        return cls(
            text_key=text_key,
            lexicon_score=final_score,
            learned_score=final_score,
            final_score=final_score,
            confidence=confidence_for(final_score),
            created_at=created_at,
            cached=True,
        )

    @property
    def category(self) -> SentimentCategory:
        return categorize(self.final_score)

    @property
    def label(self) -> SentimentLabel:
        return fused_label(self.final_score)

    @property
    def is_inconclusive(self) -> bool:
        """Neither scorer produced a value; not a genuinely neutral text."""
        return not (self.lexicon_ok or self.learned_ok)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text_key": self.text_key,
            "lexicon_score": self.lexicon_score,
            "learned_score": self.learned_score,
            "final_score": self.final_score,
            "confidence": self.confidence,
            "category": self.category.value,
            "label": self.label.value,
            "cached": self.cached,
            "lexicon_ok": self.lexicon_ok,
            "learned_ok": self.learned_ok,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class CacheEntry:
    """A cached fused score."""
    final_score: float
    created_at: datetime


# ============================================================
# COLLABORATOR SHAPES
# ============================================================

@dataclass(frozen=True)
class TextItem:
    """An item handed over by the fetcher/persistence layer."""
    item_id: str
    headline: str
    content: str = ""
    published_at: Optional[datetime] = None
    source_name: str = ""
    country: Optional[str] = None
    entity_tags: tuple[str, ...] = ()
    summary: str = ""
    source_id: Optional[str] = None

    @property
    def analysis_text(self) -> str:
        """Text fed to the fusion engine."""
        if self.content and self.content.strip():
            return self.content
        return " ".join(part for part in (self.headline, self.summary) if part)


@dataclass(frozen=True)
class BatchFailure:
    """One item a batch could not score or persist."""
    item_id: str
    error_reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"item_id": self.item_id, "error_reason": self.error_reason}


@dataclass
class BatchResult:
    """Outcome of a batch run: scored items plus collected failures."""
    scored: dict[str, ScoredItem] = field(default_factory=dict)
    failures: list[BatchFailure] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.scored) + len(self.failures)

    @property
    def succeeded(self) -> int:
        return len(self.scored)

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": len(self.failures),
            "failures": [f.to_dict() for f in self.failures],
        }
