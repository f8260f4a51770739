"""
Repository Layer Exceptions.

============================================================
PURPOSE
============================================================
Repositories catch SQLAlchemy errors and re-raise them as
PersistenceError subclasses carrying the repository name and
operation. The batch processor reports these per item.

============================================================
"""

from typing import Any, Optional

from core.exceptions import ErrorClassification, SentimentEngineError


class PersistenceError(SentimentEngineError):
    """Base exception for all repository operations."""

    default_classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        message: str,
        repository_name: str,
        operation: str,
        details: Optional[dict] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.repository_name = repository_name
        self.operation = operation
        super().__init__(
            f"[{repository_name}] {operation}: {message}",
            details=details,
            cause=cause,
        )


class ConnectionError(PersistenceError):
    """Database unreachable or connection pool exhausted."""

    def __init__(self, repository_name: str, operation: str, original_error: Exception) -> None:
        super().__init__(
            f"Database connection failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            cause=original_error,
        )


class QueryError(PersistenceError):
    """Statement execution failed."""

    default_classification = ErrorClassification.PERMANENT

    def __init__(self, repository_name: str, operation: str, original_error: Exception) -> None:
        super().__init__(
            f"Query failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            cause=original_error,
        )


class TransactionError(PersistenceError):
    """Commit or rollback failed."""

    def __init__(
        self,
        repository_name: str,
        phase: str,
        original_error: Exception,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        details["phase"] = phase
        super().__init__(
            f"Transaction {phase} failed: {original_error}",
            repository_name=repository_name,
            operation=phase,
            details=details,
            cause=original_error,
        )
        self.phase = phase
