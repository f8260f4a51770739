"""
Sentiment Fusion Layer - Multi-scorer sentiment with a TTL cache.

This package provides:
- LexiconScorer: word-list polarity scoring, always available
- LearnedScorer: binary classifier with sticky degraded fallback
- FusionEngine: length-weighted fusion, confidence and labels
- TTLSentimentCache: injectable result cache keyed on normalized text
- BatchProcessor: bounded-concurrency scoring of pending items

Usage:
    from sentiment import FusionEngine

    engine = FusionEngine()
    item = await engine.analyze("I love this product! It works great.")

    print(f"Score: {item.final_score}")
    print(f"Confidence: {item.confidence}")
    print(f"Category: {item.category.value}")

Output Schema:
- final_score: -1.0 (very negative) to +1.0 (very positive)
- confidence: min(1, |final_score| * 1.2)
- category: canonical +/-0.2 band (aggregation, dashboards, alerts)
- label: fused +/-0.1 band (returned alongside confidence only)
"""

from .base import BaseScorer
from .batch import BatchProcessor
from .cache import SentimentCache, TTLSentimentCache
from .exceptions import ScorerError, ScorerTransientError, ScorerUnavailableError
from .fusion import FusionEngine, lexicon_weight_for
from .interfaces import PersistenceSink, TextSource
from .learned import LearnedScorer, load_transformers_pipeline, to_signed_score
from .lexicon import LexiconScorer
from .models import (
    BatchFailure,
    BatchResult,
    CacheEntry,
    ModelState,
    ScoredItem,
    ScorerResult,
    TextItem,
    normalize_text_key,
)
from .registry import analyze, build_engine, get_engine, set_engine
from .thresholds import (
    SentimentCategory,
    SentimentLabel,
    categorize,
    confidence_for,
    fused_label,
    percent,
)


__all__ = [
    # Scorers
    "BaseScorer",
    "LexiconScorer",
    "LearnedScorer",
    "load_transformers_pipeline",
    "to_signed_score",

    # Fusion & cache
    "FusionEngine",
    "lexicon_weight_for",
    "SentimentCache",
    "TTLSentimentCache",

    # Batch & collaborators
    "BatchProcessor",
    "TextSource",
    "PersistenceSink",

    # Registry
    "analyze",
    "build_engine",
    "get_engine",
    "set_engine",

    # Models
    "ScoredItem",
    "ScorerResult",
    "CacheEntry",
    "TextItem",
    "BatchResult",
    "BatchFailure",
    "ModelState",
    "normalize_text_key",

    # Thresholds
    "SentimentCategory",
    "SentimentLabel",
    "categorize",
    "fused_label",
    "confidence_for",
    "percent",

    # Exceptions
    "ScorerError",
    "ScorerUnavailableError",
    "ScorerTransientError",
]


__version__ = "1.0.0"
