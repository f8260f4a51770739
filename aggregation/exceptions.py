"""
Aggregation Exceptions.

An invalid filter is a caller contract violation: it is rejected
eagerly, before any computation, and never silently defaulted.
"""

from typing import Any, Optional

from core.exceptions import ErrorClassification, SentimentEngineError


class AggregationFilterError(SentimentEngineError, ValueError):
    """Invalid filter value or combination."""

    default_classification = ErrorClassification.CONTRACT

    def __init__(
        self,
        message: str,
        field_name: str = "",
        value: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if field_name:
            details["field"] = field_name
        if value is not None:
            details["value"] = str(value)[:100]
        super().__init__(message, details=details)
        self.field_name = field_name
        self.value = value
