"""
Alert Exceptions.

Alert transitions and watch-list edits are caller contracts:
misuse raises immediately.
"""

from typing import Any, Optional

from core.exceptions import ErrorClassification, SentimentEngineError


class AlertError(SentimentEngineError):
    """Base exception for alert and watch-list errors."""

    default_classification = ErrorClassification.CONTRACT


class AlertNotFoundError(AlertError, KeyError):
    """No alert with the given id is known to the alert center."""

    def __init__(self, alert_id: str) -> None:
        super().__init__(f"Alert not found: {alert_id}", details={"alert_id": alert_id})
        self.alert_id = alert_id

    def __str__(self) -> str:
        return self.message


class AlertTransitionError(AlertError):
    """Illegal status transition (only active -> dismissed/resolved is allowed)."""

    def __init__(
        self,
        alert_id: str,
        current_status: str,
        target_status: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        details.update({
            "alert_id": alert_id,
            "current_status": current_status,
            "target_status": target_status,
        })
        super().__init__(
            f"Cannot move alert {alert_id} from {current_status} to {target_status}",
            details=details,
        )
        self.alert_id = alert_id
        self.current_status = current_status
        self.target_status = target_status


class WatchlistError(AlertError, ValueError):
    """Invalid watch-list entry or edit."""

    def __init__(self, message: str, entity: str = "", **kwargs) -> None:
        details = kwargs.pop("details", {})
        if entity:
            details["entity"] = entity
        super().__init__(message, details=details, **kwargs)
        self.entity = entity
