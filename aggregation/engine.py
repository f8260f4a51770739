"""
Aggregation Engine - Global stats, rollups and trend over scored items.

============================================================
PIPELINE
============================================================
1. Validate filters (raise before any computation)
2. Anchor the window on the injected clock
3. Filter records (date range, source, search)
4. Split pending (unscored) records out
5. Reduce: global stats, entity/source/country rollups, trend,
   word stats and topic stats

============================================================
DETERMINISM
============================================================
Identical inputs, filters and clock give identical results:
- Every reduction folds records in input order
- Every output list is explicitly sorted
- aggregate_async runs the three dimension reductions
  concurrently but assembles them in a fixed order

============================================================
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from core.clock import ClockFactory, ClockProtocol, ensure_utc
from sentiment.thresholds import SentimentCategory, categorize

from .exceptions import AggregationFilterError
from .filters import apply_filters, window_bounds
from .insights import (
    DEFAULT_WORD_LIMIT,
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
    GlobalStats,
    TrendPoint,
    canonical_source_id,
)


logger = logging.getLogger(__name__)


class Dimension(Enum):
    """Rollup dimensions."""
    ENTITY = "entity"
    SOURCE = "source"
    COUNTRY = "country"


class AggregationEngine:
    """
    Reduces scored items into dashboard statistics.

    Usage:
        engine = AggregationEngine(clock=clock)
        result = engine.aggregate(records, AggregationFilters.from_params("24h"))
        for bucket in result.top_entities(5):
            print(bucket.name, bucket.average)
    """

    def __init__(
        self,
        clock: Optional[ClockProtocol] = None,
        use_entity_fallback: bool = True,
        word_limit: int = DEFAULT_WORD_LIMIT,
    ) -> None:
        self._clock = clock or ClockFactory.get_clock()
        self._use_entity_fallback = use_entity_fallback
        self._word_limit = word_limit

        self._stats = {
            "aggregations": 0,
            "records_seen": 0,
            "records_matched": 0,
            "filter_errors": 0,
        }

    # ─────────────────────────────────────────────────────────
    # PUBLIC API
    # ─────────────────────────────────────────────────────────

    def aggregate(
        self,
        items: Iterable[ArticleRecord],
        filters: Optional[AggregationFilters] = None,
    ) -> AggregationResult:
        """Compute the full aggregation result for the given filters."""
        filters, now, matched, scored = self._prepare(items, filters)

        rollups = {
            dimension: self.rollup(scored, dimension)
            for dimension in Dimension
        }
        return self._assemble(filters, now, matched, scored, rollups)

    async def aggregate_async(
        self,
        items: Iterable[ArticleRecord],
        filters: Optional[AggregationFilters] = None,
    ) -> AggregationResult:
        """Same result as aggregate(), with the rollups computed concurrently."""
        filters, now, matched, scored = self._prepare(items, filters)

        dimensions = list(Dimension)
        buckets = await asyncio.gather(*(
            asyncio.to_thread(self.rollup, scored, dimension)
            for dimension in dimensions
        ))
        rollups = dict(zip(dimensions, buckets))
        return self._assemble(filters, now, matched, scored, rollups)

    def global_stats(self, matched: list[ArticleRecord]) -> GlobalStats:
        """Overall mean and canonical category counts."""
        positive = negative = neutral = inconclusive = pending = 0
        total_score = 0.0

        for record in matched:
            if record.final_score is None:
                pending += 1
                continue

            total_score += record.final_score
            if record.is_inconclusive:
                inconclusive += 1

            category = categorize(record.final_score)
            if category == SentimentCategory.POSITIVE:
                positive += 1
            elif category == SentimentCategory.NEGATIVE:
                negative += 1
            else:
                neutral += 1

        total = positive + negative + neutral
        return GlobalStats(
            overall=total_score / total if total else 0.0,
            positive=positive,
            negative=negative,
            neutral=neutral,
            total=total,
            pending=pending,
            inconclusive=inconclusive,
        )

    def rollup(self, scored: list[ArticleRecord], dimension: Dimension) -> list[AggregateBucket]:
        """One bucket per distinct dimension value, sorted."""
        extract = self._extractor(dimension)
        buckets: dict[str, AggregateBucket] = {}

        for record in scored:
            for key, name in extract(record):
                bucket = buckets.get(key)
                if bucket is None:
                    bucket = AggregateBucket(key=key, name=name)
                    buckets[key] = bucket
                bucket.add(record.final_score)

        return sorted(buckets.values(), key=lambda b: b.sort_key)

    def trend(self, scored: list[ArticleRecord], filters: AggregationFilters, now) -> list[TrendPoint]:
        """Equal-width slots across the window, oldest first."""
        start, end = window_bounds(filters, now)
        slots = filters.date_range.slots
        width = filters.date_range.slot_width

        buckets = [AggregateBucket(key=str(i), name=str(i)) for i in range(slots)]
        for record in scored:
            index = (ensure_utc(record.published_at) - start) // width
            index = min(max(index, 0), slots - 1)
            buckets[index].add(record.final_score)

        series = []
        for i, bucket in enumerate(buckets):
            slot_start = start + width * i
            series.append(TrendPoint(
                slot_start=slot_start,
                slot_end=end if i == slots - 1 else slot_start + width,
                count=bucket.count,
                positive_percent=bucket.positive_percent,
                negative_percent=bucket.negative_percent,
                neutral_percent=bucket.neutral_percent,
                average_score=bucket.average,
            ))
        return series

    def get_stats(self) -> dict:
        return dict(self._stats)

    # ─────────────────────────────────────────────────────────
    # INTERNALS
    # ─────────────────────────────────────────────────────────

    def _prepare(self, items, filters):
        filters = filters or AggregationFilters()
        try:
            filters.validate()
        except AggregationFilterError:
            self._stats["filter_errors"] += 1
            raise

        now = ensure_utc(self._clock.now())
        records = list(items)
        matched = apply_filters(records, filters, now, self._use_entity_fallback)
        scored = [r for r in matched if r.final_score is not None]

        self._stats["aggregations"] += 1
        self._stats["records_seen"] += len(records)
        self._stats["records_matched"] += len(matched)

        logger.debug(
            f"Aggregating {len(scored)} scored of {len(matched)} matched "
            f"({len(records)} total) for {filters.to_dict()}"
        )
        return filters, now, matched, scored

    def _assemble(self, filters, now, matched, scored, rollups) -> AggregationResult:
        return AggregationResult(
            overall_stats=self.global_stats(matched),
            entity_rollups=rollups[Dimension.ENTITY],
            source_rollups=rollups[Dimension.SOURCE],
            country_rollups=rollups[Dimension.COUNTRY],
            trend_series=self.trend(scored, filters, now),
            filters=filters,
            generated_at=now,
            word_stats=compute_word_stats(scored, self._word_limit),
            topic_stats=compute_topic_stats(scored),
        )

    def _extractor(self, dimension: Dimension) -> Callable[[ArticleRecord], list[tuple[str, str]]]:
        if dimension == Dimension.ENTITY:
            return lambda r: record_entities(r, self._use_entity_fallback)
        if dimension == Dimension.SOURCE:
            return lambda r: [(r.canonical_source_id, r.display_source)]
        return _country_pair


def _country_pair(record: ArticleRecord) -> list[tuple[str, str]]:
    country = record_country(record)
    return [(canonical_source_id(country), country)]
