"""
Aggregation Filters - Record matching against an active filter set.
"""

from datetime import datetime
from typing import Iterable

from core.clock import ensure_utc

from .insights import record_entities
from .models import AggregationFilters, ArticleRecord


def window_bounds(filters: AggregationFilters, now: datetime) -> tuple[datetime, datetime]:
    """Inclusive [start, end] of the date-range window ending at now."""
    end = ensure_utc(now)
    return end - filters.date_range.window, end


def matches_search(record: ArticleRecord, term: str, use_entity_fallback: bool = True) -> bool:
    """OR across headline, summary, content and entity names."""
    if not term:
        return True

    haystacks = [record.headline, record.summary, record.content]
    haystacks.extend(name for _, name in record_entities(record, use_entity_fallback))
    return any(term in (text or "").lower() for text in haystacks)


def matches(
    record: ArticleRecord,
    filters: AggregationFilters,
    start: datetime,
    end: datetime,
    use_entity_fallback: bool = True,
) -> bool:
    published = ensure_utc(record.published_at)
    if published < start or published > end:
        return False

    if filters.is_source_filtered and record.canonical_source_id != filters.source:
        return False

    return matches_search(record, filters.normalized_search, use_entity_fallback)


def apply_filters(
    records: Iterable[ArticleRecord],
    filters: AggregationFilters,
    now: datetime,
    use_entity_fallback: bool = True,
) -> list[ArticleRecord]:
    """Records matching the filters, in input order (pending included)."""
    start, end = window_bounds(filters, now)
    return [
        record for record in records
        if matches(record, filters, start, end, use_entity_fallback)
    ]
