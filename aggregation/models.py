"""
Aggregation Data Models - Filters, records, buckets and results.

============================================================
PERCENTAGE SEMANTICS
============================================================
- Category counts use the canonical +/-0.2 thresholds
- positive + negative + neutral counts == count, always
- Each percentage is rounded half-up on its own; the three
  need not sum to exactly 100
- Empty buckets report 0 for average and every percentage

============================================================
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from sentiment.models import ScoredItem, TextItem
from sentiment.thresholds import SentimentCategory, categorize, percent

from .exceptions import AggregationFilterError


SOURCE_ALL = "all"
UNKNOWN_SOURCE_NAME = "Unknown Source"
DEFAULT_COUNTRY = "Global"

_WHITESPACE = re.compile(r"\s+")


def canonical_source_id(source_name: str) -> str:
    """Slug used as a source id when the fetcher did not assign one."""
    slug = _WHITESPACE.sub("-", (source_name or "").strip().lower())
    return slug or "unknown"


# ============================================================
# FILTERS
# ============================================================

class DateRange(Enum):
    """Selectable aggregation windows."""
    LAST_24_HOURS = "24h"
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"

    @classmethod
    def parse(cls, token: Any) -> "DateRange":
        if isinstance(token, DateRange):
            return token
        for member in cls:
            if member.value == token:
                return member
        raise AggregationFilterError(
            f"Unknown date range {token!r}; expected one of "
            f"{', '.join(m.value for m in cls)}",
            field_name="date_range",
            value=token,
        )

    @property
    def window(self) -> timedelta:
        return _WINDOWS[self]

    @property
    def slots(self) -> int:
        """Number of trend slots (24 hourly, 7 or 30 daily)."""
        return _SLOTS[self]

    @property
    def slot_width(self) -> timedelta:
        return self.window / self.slots


_WINDOWS = {
    DateRange.LAST_24_HOURS: timedelta(hours=24),
    DateRange.LAST_7_DAYS: timedelta(days=7),
    DateRange.LAST_30_DAYS: timedelta(days=30),
}

_SLOTS = {
    DateRange.LAST_24_HOURS: 24,
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_30_DAYS: 30,
}


@dataclass(frozen=True)
class AggregationFilters:
    """
    Active filter set.

    - date_range: window ending now, inclusive at both ends
    - source: "all" or an exact canonical source id
    - search_term: case-insensitive substring over headline,
      summary, content and entity names (OR)
    """
    date_range: DateRange = DateRange.LAST_7_DAYS
    source: str = SOURCE_ALL
    search_term: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "date_range", DateRange.parse(self.date_range))

    @classmethod
    def from_params(
        cls,
        date_range: Any = "7d",
        source: Any = SOURCE_ALL,
        search: Any = "",
    ) -> "AggregationFilters":
        """Build filters from raw request parameters, validating eagerly."""
        filters = cls(
            date_range=date_range,
            source=source,
            search_term=search,
        )
        filters.validate()
        return filters

    def validate(self) -> None:
        """Raise AggregationFilterError on an invalid filter set."""
        if not isinstance(self.source, str) or not self.source.strip():
            raise AggregationFilterError(
                "source must be 'all' or a non-empty source id",
                field_name="source",
                value=self.source,
            )

        if not isinstance(self.search_term, str):
            raise AggregationFilterError(
                "search_term must be a string",
                field_name="search_term",
                value=self.search_term,
            )

    @property
    def is_source_filtered(self) -> bool:
        return self.source != SOURCE_ALL

    @property
    def normalized_search(self) -> str:
        return self.search_term.strip().lower()

    def to_dict(self) -> dict[str, Any]:
        return {
            "date_range": self.date_range.value,
            "source": self.source,
            "search_term": self.search_term,
        }


# ============================================================
# INPUT RECORDS
# ============================================================

@dataclass(frozen=True)
class ArticleRecord:
    """
    A scored (or pending) item with the metadata aggregation needs.

    final_score None means the item has not been scored yet.
    """
    item_id: str
    headline: str
    published_at: datetime
    final_score: Optional[float] = None
    confidence: Optional[float] = None
    source_name: str = ""
    source_id: Optional[str] = None
    country: Optional[str] = None
    entities: tuple[str, ...] = ()
    summary: str = ""
    content: str = ""

    @classmethod
    def from_scored(cls, item: TextItem, scored: Optional[ScoredItem]) -> "ArticleRecord":
        if item.published_at is None:
            raise ValueError(f"Item {item.item_id} has no published_at")
        return cls(
            item_id=item.item_id,
            headline=item.headline,
            published_at=item.published_at,
            final_score=scored.final_score if scored else None,
            confidence=scored.confidence if scored else None,
            source_name=item.source_name,
            source_id=item.source_id,
            country=item.country,
            entities=tuple(item.entity_tags),
            summary=item.summary,
            content=item.content,
        )

    @property
    def is_pending(self) -> bool:
        return self.final_score is None

    @property
    def is_inconclusive(self) -> bool:
        """Scored, but with zero score and zero confidence."""
        return self.final_score == 0.0 and self.confidence == 0.0

    @property
    def canonical_source_id(self) -> str:
        if self.source_id:
            return str(self.source_id)
        return canonical_source_id(self.source_name)

    @property
    def display_source(self) -> str:
        return self.source_name or UNKNOWN_SOURCE_NAME

    @property
    def category(self) -> Optional[SentimentCategory]:
        if self.final_score is None:
            return None
        return categorize(self.final_score)


# ============================================================
# BUCKETS
# ============================================================

@dataclass
class AggregateBucket:
    """Running statistics for one dimension value."""
    key: str
    name: str
    count: int = 0
    sum_score: float = 0.0
    positive_count: int = 0
    negative_count: int = 0
    neutral_count: int = 0

    def add(self, score: float) -> None:
        """Fold one final score into the bucket."""
        self.count += 1
        self.sum_score += score

        category = categorize(score)
        if category == SentimentCategory.POSITIVE:
            self.positive_count += 1
        elif category == SentimentCategory.NEGATIVE:
            self.negative_count += 1
        else:
            self.neutral_count += 1

    @property
    def average(self) -> float:
        return self.sum_score / self.count if self.count else 0.0

    @property
    def positive_percent(self) -> int:
        return percent(self.positive_count, self.count)

    @property
    def negative_percent(self) -> int:
        return percent(self.negative_count, self.count)

    @property
    def neutral_percent(self) -> int:
        return percent(self.neutral_count, self.count)

    @property
    def sort_key(self) -> tuple:
        """Descending count, then case-insensitive name, then key."""
        return (-self.count, self.name.casefold(), self.key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "count": self.count,
            "sum_score": self.sum_score,
            "average": self.average,
            "positive_count": self.positive_count,
            "negative_count": self.negative_count,
            "neutral_count": self.neutral_count,
            "positive_percent": self.positive_percent,
            "negative_percent": self.negative_percent,
            "neutral_percent": self.neutral_percent,
        }


# ============================================================
# OUTPUTS
# ============================================================

@dataclass(frozen=True)
class GlobalStats:
    """Summary statistics over every item matching the filters."""
    overall: float
    positive: int
    negative: int
    neutral: int
    total: int
    pending: int = 0
    inconclusive: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
            "total": self.total,
            "pending": self.pending,
            "inconclusive": self.inconclusive,
        }


@dataclass(frozen=True)
class TrendPoint:
    """One slot of the trend series."""
    slot_start: datetime
    slot_end: datetime
    count: int
    positive_percent: int
    negative_percent: int
    neutral_percent: int
    average_score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "slot_start": self.slot_start.isoformat(),
            "slot_end": self.slot_end.isoformat(),
            "count": self.count,
            "positive_percent": self.positive_percent,
            "negative_percent": self.negative_percent,
            "neutral_percent": self.neutral_percent,
            "average_score": self.average_score,
        }


@dataclass(frozen=True)
class WordStat:
    """How often a word appears across matching items."""
    word: str
    count: int
    sentiment_sum: float
    positive: int
    negative: int
    neutral: int

    @property
    def average(self) -> float:
        return self.sentiment_sum / self.count if self.count else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "count": self.count,
            "average": self.average,
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
        }


@dataclass(frozen=True)
class TopicStat:
    """Keyword-matched topic with its mean sentiment."""
    name: str
    count: int
    average_sentiment: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "count": self.count,
            "average_sentiment": self.average_sentiment,
        }


@dataclass
class AggregationResult:
    """Everything the dashboard and alert evaluator consume."""
    overall_stats: GlobalStats
    entity_rollups: list[AggregateBucket]
    source_rollups: list[AggregateBucket]
    country_rollups: list[AggregateBucket]
    trend_series: list[TrendPoint]
    filters: AggregationFilters
    generated_at: datetime
    word_stats: list[WordStat] = field(default_factory=list)
    topic_stats: list[TopicStat] = field(default_factory=list)

    def top(self, dimension: str, n: int = 10) -> list[AggregateBucket]:
        """First n buckets of the 'entity', 'source' or 'country' rollup."""
        rollups = {
            "entity": self.entity_rollups,
            "source": self.source_rollups,
            "country": self.country_rollups,
        }
        if dimension not in rollups:
            raise ValueError(f"Unknown dimension: {dimension}")
        return rollups[dimension][:max(0, n)]

    def top_entities(self, n: int = 10) -> list[AggregateBucket]:
        return self.top("entity", n)

    def entity(self, name: str) -> Optional[AggregateBucket]:
        """Look up an entity bucket case-insensitively."""
        key = name.strip().casefold()
        for bucket in self.entity_rollups:
            if bucket.key == key:
                return bucket
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_stats": self.overall_stats.to_dict(),
            "entity_rollups": [b.to_dict() for b in self.entity_rollups],
            "source_rollups": [b.to_dict() for b in self.source_rollups],
            "country_rollups": [b.to_dict() for b in self.country_rollups],
            "trend_series": [p.to_dict() for p in self.trend_series],
            "word_stats": [w.to_dict() for w in self.word_stats],
            "topic_stats": [t.to_dict() for t in self.topic_stats],
            "filters": self.filters.to_dict(),
            "generated_at": self.generated_at.isoformat(),
        }
