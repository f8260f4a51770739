"""
Tests for watch-list alerts.

TEST PRINCIPLES:
- Alerts fire only when the change exceeds the threshold
- Priority depends on how far the threshold is exceeded
- Closed alerts never return to the active set
"""

import pytest

from aggregation import AggregateBucket, AggregationEngine
from alerts import (
    AlertCenter,
    AlertEvaluator,
    AlertNotFoundError,
    AlertPriority,
    AlertStatus,
    AlertTransitionError,
    Watchlist,
    WatchlistEntry,
    WatchlistError,
    change_points,
    priority_for,
)
from alerts.evaluator import EntitySentimentIndex
from core.config import EngineConfig
from tests.conftest import make_record


def _bucket(name, scores):
    bucket = AggregateBucket(key=name.casefold(), name=name)
    for score in scores:
        bucket.add(score)
    return bucket


@pytest.fixture
def evaluator(mock_clock):
    return AlertEvaluator(clock=mock_clock)


# ============================================================
# WATCHLIST
# ============================================================

class TestWatchlistEntry:

    def test_defaults(self):
        entry = WatchlistEntry(name="  Nvidia ")
        assert entry.name == "Nvidia"
        assert entry.threshold == 30
        assert entry.alert_enabled
        assert entry.last_known_sentiment == 0.0

    @pytest.mark.parametrize("threshold", [9, 51, 30.5, True])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(WatchlistError):
            WatchlistEntry(name="Nvidia", threshold=threshold)

    @pytest.mark.parametrize("threshold", [10, 50])
    def test_threshold_bounds_are_inclusive(self, threshold):
        assert WatchlistEntry(name="Nvidia", threshold=threshold).threshold == threshold

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            WatchlistEntry(name="   ")


class TestWatchlist:
    """Tests for Watchlist."""

    def test_add_rejects_case_insensitive_duplicates(self):
        watchlist = Watchlist()
        watchlist.add("Bitcoin")

        with pytest.raises(WatchlistError):
            watchlist.add(" bitcoin ")
        assert len(watchlist) == 1
        assert "BITCOIN" in watchlist

    def test_toggle_remove_and_threshold(self):
        watchlist = Watchlist()
        watchlist.add("Tesla")

        assert watchlist.toggle_alerts("tesla") is False
        assert watchlist.toggle_alerts("TESLA") is True
        assert watchlist.set_threshold("Tesla", 45).threshold == 45
        with pytest.raises(WatchlistError):
            watchlist.set_threshold("Tesla", 5)

        watchlist.remove("tesla")
        assert len(watchlist) == 0
        with pytest.raises(WatchlistError):
            watchlist.remove("tesla")

    def test_default_threshold_from_config(self):
        watchlist = Watchlist.from_config(EngineConfig(alert_default_threshold=20))
        assert watchlist.add("Apple").threshold == 20

    def test_stats(self):
        watchlist = Watchlist()
        watchlist.add("A", last_known_sentiment=0.5)
        watchlist.add("B", last_known_sentiment=-0.3)
        watchlist.add("C", last_known_sentiment=0.2, alert_enabled=False)

        stats = watchlist.stats(active_alerts=2)

        assert stats == {
            "total_watched": 3,
            "positive_trend": 1,
            "negative_trend": 1,
            "alerts_enabled": 2,
            "active_alerts": 2,
        }


# ============================================================
# EVALUATOR
# ============================================================

class TestPriority:

    def test_change_points_removes_float_noise(self):
        assert change_points(0.1, 0.5) == 40.0
        assert change_points(0.5, 0.1) == 40.0

    @pytest.mark.parametrize("change,expected", [
        (35, AlertPriority.EMERGING),
        (39.99, AlertPriority.EMERGING),
        (40, AlertPriority.ESCALATING),
        (60, AlertPriority.ESCALATING),
        (60.01, AlertPriority.CRITICAL),
    ])
    def test_priority_bands(self, change, expected):
        assert priority_for(change, 30) == expected


class TestAlertEvaluator:
    """Tests for AlertEvaluator."""

    def test_crossing_threshold_emits_escalating_alert(self, evaluator, mock_clock):
        entry = WatchlistEntry(name="Nvidia", threshold=30, last_known_sentiment=0.1)

        alerts = evaluator.evaluate([entry], [_bucket("Nvidia", [0.5, 0.5])])

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.change_magnitude == 40.0
        assert alert.priority == AlertPriority.ESCALATING
        assert alert.previous_sentiment == 0.1
        assert alert.current_sentiment == 0.5
        assert alert.created_at == mock_clock.now()
        assert alert.status == AlertStatus.ACTIVE
        assert entry.last_known_sentiment == 0.5

    def test_change_equal_to_threshold_does_not_alert(self, evaluator):
        entry = WatchlistEntry(name="Apple", threshold=30, last_known_sentiment=0.0)
        assert evaluator.evaluate([entry], [_bucket("apple", [0.3])]) == []
        assert entry.last_known_sentiment == 0.3

    def test_disabled_entry_updates_without_alerting(self, evaluator):
        entry = WatchlistEntry(name="Tesla", alert_enabled=False)
        assert evaluator.evaluate([entry], [_bucket("Tesla", [-0.9])]) == []
        assert entry.last_known_sentiment == -0.9

    def test_entry_without_data_is_untouched(self, evaluator):
        entry = WatchlistEntry(name="Polkadot", last_known_sentiment=0.4)
        assert evaluator.evaluate([entry], [_bucket("Solana", [0.9])]) == []
        assert entry.last_known_sentiment == 0.4

    def test_critical_priority(self, evaluator):
        entry = WatchlistEntry(name="Fed", threshold=10, last_known_sentiment=0.6)
        alerts = evaluator.evaluate([entry], [_bucket("Fed", [-0.6])])
        assert alerts[0].priority == AlertPriority.CRITICAL
        assert alerts[0].direction == "down"

    def test_evaluate_from_aggregation_result(self, evaluator, mock_clock):
        records = [make_record(f"r{i}", 0.8, entities=("Bitcoin",)) for i in range(3)]
        result = AggregationEngine(clock=mock_clock).aggregate(records)
        watchlist = Watchlist()
        watchlist.add("bitcoin")

        alerts = evaluator.evaluate(watchlist, result)

        assert [a.entity for a in alerts] == ["bitcoin"]
        assert alerts[0].change_magnitude == 80.0

    def test_evaluate_items_recomputes_from_all_records(self, evaluator):
        records = [
            make_record("a", 0.6, entities=("Arm",)),
            make_record("b", 0.2, entities=("ARM",)),
            make_record("c", None, entities=("Arm",)),
        ]
        entry = WatchlistEntry(name="arm", threshold=35)

        alerts = evaluator.evaluate_items([entry], records)

        assert alerts[0].current_sentiment == pytest.approx(0.4)
        assert alerts[0].priority == AlertPriority.EMERGING

    def test_sentiment_index(self):
        index = EntitySentimentIndex.from_buckets([_bucket("Nvidia", [0.2, 0.4]), _bucket("Empty", [])])
        assert index.get(" NVIDIA ") == pytest.approx(0.3)
        assert index.get("empty") is None
        assert len(index) == 1


# ============================================================
# ALERT CENTER
# ============================================================

class TestAlertCenter:
    """Tests for AlertCenter lifecycle."""

    @pytest.fixture
    def center(self, mock_clock):
        return AlertCenter(clock=mock_clock)

    @pytest.fixture
    def fired(self, center):
        watchlist = Watchlist()
        watchlist.add("Nvidia", last_known_sentiment=0.1)
        watchlist.add("Apple", last_known_sentiment=-0.5)
        return center.check(watchlist, [_bucket("Nvidia", [0.5]), _bucket("Apple", [0.5])])

    def test_check_publishes_alerts(self, center, fired):
        assert len(fired) == 2
        assert len(center.active()) == 2
        assert center.stats()["active_by_priority"] == {
            "emerging": 0, "escalating": 1, "critical": 1,
        }

    def test_dismiss_moves_to_history(self, center, fired, mock_clock):
        mock_clock.advance(minutes=5)
        alert = center.dismiss(fired[0].alert_id)

        assert alert.status == AlertStatus.DISMISSED
        assert alert.closed_at == mock_clock.now()
        assert alert not in center.active()
        assert center.history() == [alert]
        assert center.get(alert.alert_id) is alert

    def test_closed_alert_cannot_transition_again(self, center, fired):
        center.resolve(fired[0].alert_id)

        with pytest.raises(AlertTransitionError):
            center.dismiss(fired[0].alert_id)
        with pytest.raises(AlertTransitionError):
            center.resolve(fired[0].alert_id)
        assert len(center.active()) == 1

    def test_unknown_alert(self, center):
        with pytest.raises(AlertNotFoundError):
            center.dismiss("missing")

    def test_stats_by_status(self, center, fired):
        center.dismiss(fired[0].alert_id)
        center.resolve(fired[1].alert_id)

        stats = center.stats()
        assert stats["active"] == 0
        assert stats["history_by_status"] == {"dismissed": 1, "resolved": 1}

    def test_history_is_bounded(self, mock_clock):
        center = AlertCenter(clock=mock_clock, max_history=2)
        entries = [WatchlistEntry(name=f"E{i}", threshold=10) for i in range(3)]
        alerts = center.check(entries, [_bucket(f"E{i}", [0.9]) for i in range(3)])

        for alert in alerts:
            mock_clock.advance(1)
            center.dismiss(alert.alert_id)

        assert [a.entity for a in center.history()] == ["E2", "E1"]

    def test_alert_to_dict(self, fired):
        data = fired[0].to_dict()
        assert data["status"] == "active"
        assert data["alert_type"] == "spike"
        assert "Nvidia sentiment moved up" in data["message"]
