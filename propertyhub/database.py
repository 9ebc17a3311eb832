"""Database connection and session management."""

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from propertyhub.config import settings
from propertyhub.errors import ConcurrentUpdateError, PersistenceError
from propertyhub.models import Base

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    SQLite uses StaticPool so that in-memory databases survive across sessions.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


engine = create_db_engine(settings.database_url, echo=settings.database_echo)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=bind or engine)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session, action: str) -> None:
    """Commit the session, translating store failures into PersistenceError.

    The session is rolled back on failure so it stays usable for the caller.

    Args:
        db: Database session with pending changes
        action: Short description of the write, used in log and error messages

    Raises:
        ConcurrentUpdateError: A versioned row changed since it was loaded
        PersistenceError: Any other backing store failure
    """
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning("Concurrent update detected during %s: %s", action, e)
        raise ConcurrentUpdateError(f"Concurrent update during {action}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to %s: %s", action, e)
        raise PersistenceError(f"Failed to {action}") from e


@contextmanager
def read_or_raise(db: Session, action: str) -> Iterator[None]:
    """Run store reads, translating failures into PersistenceError.

    The session is rolled back on failure so it stays usable for the caller.

    Args:
        db: Database session the reads run on
        action: Short description of the read, used in log and error messages

    Raises:
        PersistenceError: The backing store rejected a query
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to %s: %s", action, e)
        raise PersistenceError(f"Failed to {action}") from e


__all__ = [
    "engine",
    "SessionLocal",
    "create_db_engine",
    "init_db",
    "get_db",
    "commit_or_raise",
    "read_or_raise",
]
