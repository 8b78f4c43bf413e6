# teamtasks/database.py
import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, scoped_session

from teamtasks.core.exceptions import AppError, DuplicateResourceError
from teamtasks.core.settings import settings

logger = logging.getLogger("TaskHub.Database")

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    future=True,
    connect_args=connect_args,
)

SessionLocal = scoped_session(
    sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )
)


def commit(db: Session, conflict: Optional[AppError] = None) -> None:
    """
    Commits the unit of work. A unique-constraint violation rolls back and is
    reported as `conflict` (a DuplicateResourceError by default).
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error on commit: {e.orig}")
        raise conflict or DuplicateResourceError()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Database error on commit", exc_info=True)
        raise


def flush(db: Session, conflict: Optional[AppError] = None) -> None:
    """
    Flushes pending rows to get their ids. Constraint violations are handled
    as in `commit`.
    """
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error on flush: {e.orig}")
        raise conflict or DuplicateResourceError()
