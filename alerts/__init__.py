"""
Alerts - Watch-list threshold alerts.

Usage:
    from alerts import AlertCenter, Watchlist

    watchlist = Watchlist()
    watchlist.add("Nvidia")
    center = AlertCenter()
    new_alerts = center.check(watchlist, aggregation_result)
"""

from .center import AlertCenter
from .evaluator import (
    AlertEvaluator,
    EntitySentimentIndex,
    change_points,
    priority_for,
)
from .exceptions import (
    AlertError,
    AlertNotFoundError,
    AlertTransitionError,
    WatchlistError,
)
from .models import (
    DEFAULT_THRESHOLD,
    MAX_THRESHOLD,
    MIN_THRESHOLD,
    Alert,
    AlertPriority,
    AlertStatus,
    AlertType,
    WatchlistEntry,
    validate_threshold,
)
from .watchlist import Watchlist


__all__ = [
    "AlertCenter",
    "AlertEvaluator",
    "EntitySentimentIndex",
    "change_points",
    "priority_for",
    "AlertError",
    "AlertNotFoundError",
    "AlertTransitionError",
    "WatchlistError",
    "DEFAULT_THRESHOLD",
    "MAX_THRESHOLD",
    "MIN_THRESHOLD",
    "Alert",
    "AlertPriority",
    "AlertStatus",
    "AlertType",
    "WatchlistEntry",
    "validate_threshold",
    "Watchlist",
]
