"""
Repository Layer Package.

All database access goes through repository classes. Sessions
are injected, never created internally, and every database error
is wrapped in a PersistenceError.

Usage:
    from storage.repositories import SentimentScoreRepository

    repo = SentimentScoreRepository(session)
    repo.save(item, scored)
"""

from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import (
    ConnectionError,
    PersistenceError,
    QueryError,
    TransactionError,
)
from storage.repositories.sentiment_scores import SentimentScoreRepository


__all__ = [
    "BaseRepository",
    "SentimentScoreRepository",
    "PersistenceError",
    "ConnectionError",
    "QueryError",
    "TransactionError",
]
