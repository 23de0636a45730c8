import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from inventory_tracker.core.errors import TransientStorageError
from inventory_tracker.database.engine import engine

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Driver messages for lock contention and lost connections. Anything else an
# OperationalError reports (missing tables, bad SQL, disk full) is permanent.
_TRANSIENT_MARKERS = (
    "database is locked",
    "database table is locked",
    "busy",
    "deadlock",
    "lock wait timeout",
    "could not serialize",
    "timeout",
    "timed out",
    "server closed the connection",
    "connection refused",
    "connection reset",
    "lost connection",
)


def is_transient_error(exc: BaseException) -> bool:
    if isinstance(exc, (InterfaceError, PoolTimeoutError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    if isinstance(exc, OperationalError):
        message = str(exc.orig if exc.orig is not None else exc).lower()
        return any(marker in message for marker in _TRANSIENT_MARKERS)
    return False


def _rollback(session: Session) -> None:
    try:
        session.rollback()
    except SQLAlchemyError:
        # Connection already gone; closing the session discards the transaction.
        logger.warning("Rollback failed; discarding session", exc_info=True)


@contextmanager
def unit_of_work(session_factory: Callable[[], Session]) -> Iterator[Session]:
    """Scoped atomic unit: commit on success, roll back on any error.

    Storage-level failures (timeouts, deadlocks, lost connections) surface as
    ``TransientStorageError``; every other exception propagates unchanged.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        _rollback(session)
        if is_transient_error(exc):
            logger.error("Transaction aborted by storage failure", exc_info=True)
            raise TransientStorageError("Storage temporarily unavailable") from exc
        raise
    except BaseException:
        _rollback(session)
        raise
    finally:
        session.close()


__all__ = ["SessionLocal", "get_db", "is_transient_error", "unit_of_work"]
