"""Database Session Manager — sync engine with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Engine uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions mapped to PersistenceError (core/errors.py)

Design Decisions:
    - One manager per SqlSnapshotGateway, created by the composition root
      (ADR: no global import side effects)
    - Sync engine: the store is synchronous, so async drivers would only add a loop
    - expire_on_commit=False: rows stay readable after the session closes
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.orm import Session, sessionmaker

from relstore.core.errors import PersistenceError
from relstore.db.base import Base
import relstore.models  # noqa: F401

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages sync database sessions with rollback and health checks."""

    def __init__(self, database_url: str):
        self.engine = create_engine(database_url, pool_pre_ping=True)
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise PersistenceError("Integrity constraint violated", "commit") from e
        except OperationalError as e:
            session.rollback()
            logger.error(f"DB operational error: {e}")
            raise PersistenceError("Connection or operational error", "execute") from e
        except DBAPIError as e:
            session.rollback()
            logger.error(f"DB driver error: {e}")
            raise PersistenceError("Database driver error", "query") from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise PersistenceError("Database operation failed", "unknown") from e
        finally:
            session.close()

    def create_all(self) -> None:
        """Create the snapshot table if missing."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"DB schema creation failed: {e}")
            raise PersistenceError("Could not create snapshot table", "create_all") from e

    def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            with self.session() as db:
                db.execute(text("SELECT 1"))
            return True
        except PersistenceError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()
