"""
Base Repository Class.

============================================================
USAGE
============================================================
Repositories inherit from BaseRepository. The session is
injected via the constructor; repositories flush, callers
(or session_scope) commit.

============================================================
"""

import logging
from abc import ABC
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from storage.models.base import Base
from storage.repositories.exceptions import (
    ConnectionError,
    PersistenceError,
    QueryError,
    TransactionError,
)


# Type variable for ORM model
T = TypeVar("T", bound=Base)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base class for all repositories.

    Wraps every SQLAlchemy error in a PersistenceError subclass.
    """

    def __init__(
        self,
        session: Session,
        model_class: Type[T],
        repository_name: str,
    ) -> None:
        self._session = session
        self._model_class = model_class
        self._repository_name = repository_name
        self._logger = logging.getLogger(f"repository.{repository_name}")

    @property
    def session(self) -> Session:
        return self._session

    @property
    def repository_name(self) -> str:
        return self._repository_name

    # =========================================================
    # PROTECTED HELPER METHODS
    # =========================================================

    def _wrap_db_error(self, error: SQLAlchemyError, operation: str) -> PersistenceError:
        self._logger.error(f"Database error in {operation}: {error}")
        if isinstance(error, OperationalError):
            return ConnectionError(self._repository_name, operation, error)
        return QueryError(self._repository_name, operation, error)

    def _get(self, key: Any) -> Optional[T]:
        try:
            return self._session.get(self._model_class, key)
        except SQLAlchemyError as e:
            raise self._wrap_db_error(e, "get") from e

    def _count(self) -> int:
        try:
            stmt = select(func.count()).select_from(self._model_class)
            return self._session.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            raise self._wrap_db_error(e, "count") from e

    def _execute_query(self, stmt: Any) -> List[T]:
        try:
            return list(self._session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise self._wrap_db_error(e, "query") from e

    def _flush(self, operation: str) -> None:
        try:
            self._session.flush()
        except SQLAlchemyError as e:
            raise self._wrap_db_error(e, operation) from e

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise TransactionError(self._repository_name, "commit", e) from e
