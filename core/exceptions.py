"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the root of the exception hierarchy for the engine.

============================================================
EXCEPTION HIERARCHY
============================================================
SentimentEngineError (base)
├── ConfigurationError
├── ScorerError                      (sentiment.exceptions)
│   ├── ScorerUnavailableError
│   └── ScorerTransientError
├── AggregationFilterError           (aggregation.exceptions)
├── AlertError                       (alerts.exceptions)
│   ├── AlertTransitionError
│   └── WatchlistError
└── PersistenceError                 (storage.repositories.exceptions)

Scorer errors are internal: the fusion engine logs them and
degrades. Filter, alert and persistence errors are contract
violations and are raised to the caller.

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

class ErrorClassification(Enum):
    """Classification of error recoverability."""

    TRANSIENT = "transient"
    """Temporary error, the next call may succeed."""

    PERMANENT = "permanent"
    """Sticky error for the rest of the process lifetime."""

    CONTRACT = "contract"
    """Caller passed invalid arguments."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class SentimentEngineError(Exception):
    """
    Base exception for all engine errors.

    All exceptions carry:
    - classification: for error handling decisions
    - details: for debugging
    - timestamp: when the error occurred
    """

    default_classification: ErrorClassification = ErrorClassification.CONTRACT

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.details = details or {}
        self.classification = classification or self.default_classification
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause is not None:
            self.details["cause_type"] = type(cause).__name__
            self.details["cause_message"] = str(cause)

    @property
    def is_transient(self) -> bool:
        return self.classification == ErrorClassification.TRANSIENT

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging/storage."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "classification": self.classification.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(SentimentEngineError):
    """Invalid engine configuration."""

    def __init__(
        self,
        message: str,
        errors: Optional[list] = None,
        **kwargs,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = list(errors)
        super().__init__(message, details=details, **kwargs)
        self.errors = list(errors or [])
