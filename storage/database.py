"""
Storage - Database.

Engine creation, schema setup and transactional session scope.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.config import EngineConfig
from storage.models.base import Base


logger = logging.getLogger(__name__)


def get_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create an engine for url (defaults to DATABASE_URL)."""
    url = url or EngineConfig.from_env().database_url
    engine = create_engine(url, echo=echo)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)
    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy own BEGIN so per-item SAVEPOINTs nest inside it."""

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Commit on success, roll back and re-raise on error."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
