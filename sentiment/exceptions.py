"""
Scorer Exceptions - Internal error hierarchy for the scoring legs.

These exceptions are for internal logging only.
Scorers and the fusion engine NEVER raise them to the caller;
they are converted into ScorerResult.err(...) and logged.
"""

from typing import Any, Optional

from core.exceptions import ErrorClassification, SentimentEngineError


class ScorerError(SentimentEngineError):
    """Base exception for all scorer errors."""

    default_classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        message: str,
        scorer_name: str = "",
        details: Optional[dict[str, Any]] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, details=details, **kwargs)
        self.scorer_name = scorer_name

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["scorer_name"] = self.scorer_name
        return data


class ScorerUnavailableError(ScorerError):
    """The model could not be initialized; degraded for the process lifetime."""

    default_classification = ErrorClassification.PERMANENT


class ScorerTransientError(ScorerError):
    """A single inference call failed on valid text."""

    def __init__(
        self,
        message: str,
        scorer_name: str = "",
        text_preview: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, scorer_name, details, **kwargs)
        self.text_preview = text_preview[:100] if text_preview else None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["text_preview"] = self.text_preview
        return data
