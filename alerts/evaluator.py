"""
Alert Evaluator - Watch-list threshold checks.

============================================================
RULES
============================================================
- Entity sentiment is a full recompute: mean final score over
  every item attributed to the entity
- change = |current - previous| * 100 (percentage points)
- An alert fires when change > threshold and alerts are enabled
- Priority by overshoot:
    change <  threshold + 10  -> emerging
    change <= threshold + 30  -> escalating
    otherwise                 -> critical
- Every entry with data has last_known_sentiment updated,
  whether or not it alerted

============================================================
"""

import logging
from typing import Iterable, Optional, Union

from aggregation.insights import record_entities
from aggregation.models import AggregateBucket, AggregationResult, ArticleRecord
from core.clock import ClockFactory, ClockProtocol

from .models import Alert, AlertPriority, AlertType, WatchlistEntry


logger = logging.getLogger(__name__)


EMERGING_BAND = 10
ESCALATING_BAND = 30

# Float noise in (a - b) * 100 must not push a change across a threshold.
CHANGE_PRECISION = 6


Rollups = Union[AggregationResult, Iterable[AggregateBucket]]


def change_points(previous: float, current: float) -> float:
    """Absolute sentiment change in percentage points."""
    return round(abs(current - previous) * 100, CHANGE_PRECISION)


def priority_for(change: float, threshold: int) -> AlertPriority:
    if change < threshold + EMERGING_BAND:
        return AlertPriority.EMERGING
    if change <= threshold + ESCALATING_BAND:
        return AlertPriority.ESCALATING
    return AlertPriority.CRITICAL


class EntitySentimentIndex:
    """Case-insensitive entity -> mean sentiment lookup."""

    def __init__(self, sentiments: Optional[dict[str, float]] = None) -> None:
        self._sentiments = {k.casefold(): v for k, v in (sentiments or {}).items()}

    @classmethod
    def from_buckets(cls, buckets: Iterable[AggregateBucket]) -> "EntitySentimentIndex":
        return cls({
            bucket.key: bucket.sum_score / bucket.count
            for bucket in buckets
            if bucket.count
        })

    @classmethod
    def from_records(
        cls,
        records: Iterable[ArticleRecord],
        use_entity_fallback: bool = True,
    ) -> "EntitySentimentIndex":
        totals: dict[str, list] = {}
        for record in records:
            if record.final_score is None:
                continue
            for key, _ in record_entities(record, use_entity_fallback):
                entry = totals.setdefault(key, [0, 0.0])
                entry[0] += 1
                entry[1] += record.final_score
        return cls({key: total / count for key, (count, total) in totals.items()})

    def get(self, name: str) -> Optional[float]:
        return self._sentiments.get(name.strip().casefold())

    def __len__(self) -> int:
        return len(self._sentiments)


class AlertEvaluator:
    """
    Compares current entity sentiment against each watch-list entry.

    Usage:
        evaluator = AlertEvaluator()
        alerts = evaluator.evaluate(watchlist, aggregation_result)
    """

    def __init__(self, clock: Optional[ClockProtocol] = None) -> None:
        self._clock = clock or ClockFactory.get_clock()
        self._stats = {
            "evaluations": 0,
            "entries_checked": 0,
            "alerts_emitted": 0,
        }

    def evaluate(self, watchlist: Iterable[WatchlistEntry], current_rollups: Rollups) -> list[Alert]:
        """Evaluate against entity rollups (or an AggregationResult)."""
        if isinstance(current_rollups, AggregationResult):
            buckets = current_rollups.entity_rollups
        else:
            buckets = current_rollups
        return self.evaluate_index(watchlist, EntitySentimentIndex.from_buckets(buckets))

    def evaluate_items(
        self,
        watchlist: Iterable[WatchlistEntry],
        records: Iterable[ArticleRecord],
        use_entity_fallback: bool = True,
    ) -> list[Alert]:
        """Evaluate by recomputing entity sentiment from raw records."""
        index = EntitySentimentIndex.from_records(records, use_entity_fallback)
        return self.evaluate_index(watchlist, index)

    def evaluate_index(
        self,
        watchlist: Iterable[WatchlistEntry],
        index: EntitySentimentIndex,
    ) -> list[Alert]:
        alerts = []
        now = self._clock.now()
        self._stats["evaluations"] += 1

        for entry in watchlist:
            current = index.get(entry.name)
            if current is None:
                continue

            self._stats["entries_checked"] += 1
            previous = entry.last_known_sentiment
            change = change_points(previous, current)
            entry.last_known_sentiment = current

            if not entry.alert_enabled or change <= entry.threshold:
                continue

            alert = Alert(
                entity=entry.name,
                change_magnitude=change,
                priority=priority_for(change, entry.threshold),
                previous_sentiment=previous,
                current_sentiment=current,
                threshold=entry.threshold,
                created_at=now,
                alert_type=AlertType.SPIKE,
            )
            alerts.append(alert)
            logger.warning(
                f"[AlertEvaluator] {alert.priority.value.upper()}: {alert.message}"
            )

        self._stats["alerts_emitted"] += len(alerts)
        return alerts

    def get_stats(self) -> dict:
        return dict(self._stats)
