"""
Storage Package.

Optional persistence for fused sentiment scores.

Modules:
- database: engine and session management
- models/: ORM models
- repositories/: data access layer
"""

from storage.database import get_engine, get_session_factory, init_db, session_scope
from storage.models import Base, SentimentScoreRecord
from storage.repositories import PersistenceError, SentimentScoreRepository


__all__ = [
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
    "Base",
    "SentimentScoreRecord",
    "PersistenceError",
    "SentimentScoreRepository",
]
