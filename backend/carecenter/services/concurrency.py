# Overview: Atomic unit of work, row locking and storage-error translation for stock-affecting writes.

from __future__ import annotations

import logging
import time
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import CareCenterError, ConflictError, StorageFailureError
from ..extensions import db

logger = logging.getLogger(__name__)

LOCKED_IDS_KEY = "carecenter.locked_medicine_ids"

# Postgres SQLSTATEs that mean "someone else holds the lock, try again"
_RETRYABLE_PGCODES = {"40001", "40P01", "55P03", "23505"}
_RETRYABLE_MESSAGES = ("database is locked", "database is busy", "deadlock", "lock wait timeout", "unique constraint failed")


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; atomic_unit takes the database
    write lock with BEGIN IMMEDIATE instead, which serializes writers.
    """
    return query.with_for_update()


def locked_ids() -> set[int]:
    """Medicine ids locked by lock_and_fetch in the current atomic unit (empty outside one)."""
    return db.session.info.get(LOCKED_IDS_KEY, set())


def _is_contention(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, StaleDataError):
        return True
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) in _RETRYABLE_PGCODES:
        return True
    if isinstance(exc, (OperationalError, IntegrityError)):
        message = str(orig or exc).lower()
        return any(fragment in message for fragment in _RETRYABLE_MESSAGES)
    return False


def _begin_write():
    # Each unit starts from a fresh database transaction
    db.session.rollback()
    db.session.info[LOCKED_IDS_KEY] = set()
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


@contextmanager
def atomic_unit(operation: str):
    """
    Run a stock-affecting write as one all-or-nothing unit.

    Commits when the block exits normally. On any exception the session is
    rolled back, so no row written inside the block survives. Domain errors
    propagate unchanged; SQLAlchemy errors become ConflictError (lock
    contention, deadlock, stale version, concurrent code allocation) or
    StorageFailureError (anything else). Nothing is retried here.
    """
    if LOCKED_IDS_KEY in db.session.info:
        raise RuntimeError("atomic units cannot be nested")
    try:
        _begin_write()
        yield db.session
        db.session.commit()
    except CareCenterError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        if _is_contention(exc):
            logger.warning("%s hit a concurrent write conflict: %s", operation, exc)
            raise ConflictError(
                f"{operation} conflicted with a concurrent write; retry the request",
                details={"operation": operation},
            ) from exc
        logger.error("%s failed in storage and was rolled back: %s", operation, exc)
        raise StorageFailureError(
            f"{operation} failed to commit; no changes were saved",
            details={"operation": operation},
        ) from exc
    except BaseException:
        db.session.rollback()
        raise
    finally:
        db.session.info.pop(LOCKED_IDS_KEY, None)


def run_with_retry(func, *, attempts: int = 1, backoff_base: float = 0.1):
    """
    Caller-side helper: re-run a whole operation after a retryable conflict.

    Only ConflictError is retried; the operation itself already rolled back.
    attempts counts total calls, so attempts=1 means no retry.
    """
    attempts = max(1, attempts)
    for attempt in range(attempts):
        try:
            return func()
        except ConflictError:
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
