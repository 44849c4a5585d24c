"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db(). Every write goes through unit_of_work().
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

from bank_ledger.config import get_settings
from bank_ledger.errors import StorageFailure

logger = logging.getLogger(__name__)

settings = get_settings()

# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale. SQLite connections are shared
# across the threads of the server, so the same-thread
# check has to be switched off for it.
connect_args = (
    {"check_same_thread": False}
    if settings.DATABASE_URL.startswith("sqlite")
    else {}
)
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

# --- Session Factory ---
# autocommit=False means we explicitly control when changes
# are saved. A balance change and its transaction record
# must land in the same commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, preventing connection leaks. A request that fails
    part way leaves nothing pending on the connection.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, operation: str):
    """
    Run a block of writes as one all-or-nothing database transaction.

    On success the session is committed. On any exception the
    session is rolled back first, so nothing the block wrote
    survives. Database errors are re-raised as StorageFailure;
    everything else (business rule violations) propagates as is.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "%s failed in storage, rolled back",
            operation,
            exc_info=True,
            extra={"operation": operation, "error": StorageFailure.error},
        )
        raise StorageFailure(
            f"{operation} failed: storage unavailable, no changes were applied"
        ) from exc
    except Exception:
        db.rollback()
        raise


@contextmanager
def read_guard(db: Session, operation: str):
    """
    Run reads that happen outside a unit of work.

    A database error is rolled back and re-raised as
    StorageFailure, the same as a failed write, since no
    changes were made.
    """
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "%s could not read from storage",
            operation,
            exc_info=True,
            extra={"operation": operation, "error": StorageFailure.error},
        )
        raise StorageFailure(
            f"{operation} failed: storage unavailable, no changes were applied"
        ) from exc
