"""
Aggregation Layer - Dashboard statistics over scored items.

Usage:
    from aggregation import AggregationEngine, AggregationFilters

    engine = AggregationEngine()
    result = engine.aggregate(records, AggregationFilters.from_params("24h"))
    print(result.overall_stats.overall)
"""

from .engine import AggregationEngine, Dimension
from .exceptions import AggregationFilterError
from .filters import apply_filters, window_bounds
from .insights import (
    COMMON_ENTITIES,
    SOURCE_COUNTRY_OVERRIDES,
    TOPIC_KEYWORD_MAP,
    compute_topic_stats,
    compute_word_stats,
    record_country,
    record_entities,
)
from .models import (
    AggregateBucket,
    AggregationFilters,
    AggregationResult,
    ArticleRecord,
    DateRange,
    GlobalStats,
    TopicStat,
    TrendPoint,
    WordStat,
    canonical_source_id,
)


__all__ = [
    "AggregationEngine",
    "Dimension",
    "AggregationFilterError",
    "apply_filters",
    "window_bounds",
    "COMMON_ENTITIES",
    "SOURCE_COUNTRY_OVERRIDES",
    "TOPIC_KEYWORD_MAP",
    "compute_topic_stats",
    "compute_word_stats",
    "record_country",
    "record_entities",
    "AggregateBucket",
    "AggregationFilters",
    "AggregationResult",
    "ArticleRecord",
    "DateRange",
    "GlobalStats",
    "TopicStat",
    "TrendPoint",
    "WordStat",
    "canonical_source_id",
]
