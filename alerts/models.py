"""
Alert Data Models.

============================================================
ALERT LIFECYCLE
============================================================
    active ──dismiss──> dismissed
       │
       └───resolve──> resolved

dismissed and resolved are terminal. Any other transition
raises AlertTransitionError.

============================================================
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from core.clock import now_utc

from .exceptions import AlertTransitionError, WatchlistError


MIN_THRESHOLD = 10
MAX_THRESHOLD = 50
DEFAULT_THRESHOLD = 30


class AlertPriority(Enum):
    """How far a change overshoots its threshold."""
    EMERGING = "emerging"
    ESCALATING = "escalating"
    CRITICAL = "critical"


class AlertStatus(Enum):
    ACTIVE = "active"
    DISMISSED = "dismissed"
    RESOLVED = "resolved"


class AlertType(Enum):
    """Alert categories shown on the dashboard."""
    SPIKE = "spike"


def validate_threshold(threshold: Any, entity: str = "") -> int:
    """Return the threshold if it is an integer in [10, 50]."""
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise WatchlistError(
            f"Threshold must be an integer, got {threshold!r}", entity=entity
        )
    if not MIN_THRESHOLD <= threshold <= MAX_THRESHOLD:
        raise WatchlistError(
            f"Threshold {threshold} outside [{MIN_THRESHOLD}, {MAX_THRESHOLD}]",
            entity=entity,
        )
    return threshold


def _new_alert_id() -> str:
    return str(uuid.uuid4())


@dataclass
class WatchlistEntry:
    """A tracked entity with its last known sentiment."""
    name: str
    last_known_sentiment: float = 0.0
    alert_enabled: bool = True
    threshold: int = DEFAULT_THRESHOLD
    added_at: datetime = field(default_factory=now_utc)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise WatchlistError("Entity name must be a non-empty string")
        self.name = self.name.strip()
        validate_threshold(self.threshold, self.name)

    @property
    def key(self) -> str:
        return self.name.casefold()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "last_known_sentiment": self.last_known_sentiment,
            "alert_enabled": self.alert_enabled,
            "threshold": self.threshold,
            "added_at": self.added_at.isoformat(),
        }


@dataclass
class Alert:
    """A threshold crossing for one watched entity."""
    entity: str
    change_magnitude: float
    priority: AlertPriority
    previous_sentiment: float
    current_sentiment: float
    threshold: int
    created_at: datetime
    alert_type: AlertType = AlertType.SPIKE
    status: AlertStatus = AlertStatus.ACTIVE
    alert_id: str = field(default_factory=_new_alert_id)
    closed_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == AlertStatus.ACTIVE

    @property
    def direction(self) -> str:
        return "up" if self.current_sentiment >= self.previous_sentiment else "down"

    @property
    def message(self) -> str:
        return (
            f"{self.entity} sentiment moved {self.direction} by "
            f"{self.change_magnitude:.1f} points "
            f"({self.previous_sentiment:+.2f} -> {self.current_sentiment:+.2f})"
        )

    def dismiss(self, at: Optional[datetime] = None) -> None:
        self._close(AlertStatus.DISMISSED, at)

    def resolve(self, at: Optional[datetime] = None) -> None:
        self._close(AlertStatus.RESOLVED, at)

    def _close(self, target: AlertStatus, at: Optional[datetime]) -> None:
        if self.status != AlertStatus.ACTIVE:
            raise AlertTransitionError(self.alert_id, self.status.value, target.value)
        self.status = target
        self.closed_at = at or now_utc()

    def to_dict(self) -> dict[str, Any]:
        return {
            "alert_id": self.alert_id,
            "entity": self.entity,
            "alert_type": self.alert_type.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "change_magnitude": self.change_magnitude,
            "previous_sentiment": self.previous_sentiment,
            "current_sentiment": self.current_sentiment,
            "threshold": self.threshold,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
        }
