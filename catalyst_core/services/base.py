# catalyst_core/services/base.py

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Generator, Optional, Tuple, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from catalyst_core.db.session import atomic
from catalyst_core.errors import DomainError, StorageUnavailable

logger = structlog.get_logger()

T = TypeVar("T")


def insert_or_find(
    session: Session,
    *,
    find: Callable[[], Optional[T]],
    create: Callable[[], T],
    on_conflict: Callable[[IntegrityError], DomainError],
) -> Tuple[T, bool]:
    """
    Return the row matching a natural key, inserting it when missing.

    The insert runs inside a SAVEPOINT. If a concurrent caller inserted the
    same key between our lookup and our insert, the unique constraint fires,
    the savepoint is rolled back and the winner's row is re-read. A conflict
    that the re-read cannot explain (another constraint) is translated with
    ``on_conflict``.

    Returns ``(row, created)``.
    """
    existing = find()
    if existing is not None:
        return existing, False

    try:
        with session.begin_nested():
            row = create()
    except IntegrityError as exc:
        existing = find()
        if existing is None:
            raise on_conflict(exc) from exc
        logger.info("insert_race_resolved", row=repr(existing))
        return existing, False
    return row, True


@contextmanager
def storage_errors() -> Generator[None, None, None]:
    """Translate driver-level failures (e.g. "database is locked")."""
    try:
        yield
    except OperationalError as exc:
        logger.warning("storage_unavailable", reason=str(exc.orig))
        raise StorageUnavailable(
            "The database is busy or unreachable; retry the operation.",
            details={"reason": str(exc.orig)},
        ) from exc


def read_only(method):
    """Run a service read inside ``BaseService.reading()``."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.reading():
            return method(self, *args, **kwargs)

    return wrapper


class BaseService:
    """
    Shared plumbing for services bound to one SQLAlchemy session.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """One operation, one transaction: commit on success, rollback on error."""
        with storage_errors():
            with atomic(self._session):
                yield self._session

    @contextmanager
    def reading(self) -> Generator[Session, None, None]:
        """
        Scope for a read-only operation.

        A transaction opened here is rolled back on exit so its SQLite read
        lock is released; a transaction the caller already had is left
        alone.
        """
        owned = not self._session.in_transaction()
        try:
            with storage_errors():
                yield self._session
        finally:
            if owned:
                self._session.rollback()
