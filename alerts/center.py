"""
Alert Center - Active alerts and closed-alert history.

An alert lives in the active set until it is dismissed or
resolved; it then moves to history and never comes back.
"""

import logging
from typing import Any, Iterable, Optional

from core.clock import ClockFactory, ClockProtocol

from .evaluator import AlertEvaluator, Rollups
from .exceptions import AlertNotFoundError
from .models import Alert, AlertPriority, AlertStatus, WatchlistEntry


logger = logging.getLogger(__name__)


class AlertCenter:
    """
    Holds alerts and applies status transitions.

    Usage:
        center = AlertCenter()
        center.check(watchlist, aggregation_result)
        for alert in center.active():
            center.dismiss(alert.alert_id)
    """

    def __init__(
        self,
        evaluator: Optional[AlertEvaluator] = None,
        clock: Optional[ClockProtocol] = None,
        max_history: int = 1000,
    ) -> None:
        self._clock = clock or ClockFactory.get_clock()
        self._evaluator = evaluator or AlertEvaluator(clock=self._clock)
        self._max_history = max_history
        self._active: dict[str, Alert] = {}
        self._history: list[Alert] = []

    @property
    def evaluator(self) -> AlertEvaluator:
        return self._evaluator

    def publish(self, alerts: Iterable[Alert]) -> list[Alert]:
        """Add newly emitted alerts to the active set."""
        published = []
        for alert in alerts:
            if not alert.is_active:
                self._archive(alert)
                continue
            self._active[alert.alert_id] = alert
            published.append(alert)
        return published

    def check(self, watchlist: Iterable[WatchlistEntry], current_rollups: Rollups) -> list[Alert]:
        """Evaluate the watch-list and publish whatever fires."""
        return self.publish(self._evaluator.evaluate(watchlist, current_rollups))

    def get(self, alert_id: str) -> Optional[Alert]:
        alert = self._active.get(alert_id)
        if alert is not None:
            return alert
        for archived in self._history:
            if archived.alert_id == alert_id:
                return archived
        return None

    def active(self) -> list[Alert]:
        """Active alerts, newest first."""
        return sorted(
            self._active.values(),
            key=lambda a: (a.created_at, a.change_magnitude),
            reverse=True,
        )

    def history(self, limit: Optional[int] = None) -> list[Alert]:
        """Closed alerts, most recently closed first."""
        recent = self._history[::-1]
        return recent if limit is None else recent[:limit]

    def dismiss(self, alert_id: str) -> Alert:
        return self._close(alert_id, AlertStatus.DISMISSED)

    def resolve(self, alert_id: str) -> Alert:
        return self._close(alert_id, AlertStatus.RESOLVED)

    def stats(self) -> dict[str, Any]:
        active = list(self._active.values())
        return {
            "active": len(active),
            "history": len(self._history),
            "active_by_priority": {
                priority.value: sum(1 for a in active if a.priority == priority)
                for priority in AlertPriority
            },
            "history_by_status": {
                status.value: sum(1 for a in self._history if a.status == status)
                for status in (AlertStatus.DISMISSED, AlertStatus.RESOLVED)
            },
        }

    def _close(self, alert_id: str, target: AlertStatus) -> Alert:
        alert = self.get(alert_id)
        if alert is None:
            raise AlertNotFoundError(alert_id)

        # Raises AlertTransitionError for alerts already closed.
        if target == AlertStatus.DISMISSED:
            alert.dismiss(self._clock.now())
        else:
            alert.resolve(self._clock.now())

        self._active.pop(alert_id, None)
        self._archive(alert)
        logger.info(f"Alert {alert_id} ({alert.entity}) {target.value}")
        return alert

    def _archive(self, alert: Alert) -> None:
        self._history.append(alert)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]
