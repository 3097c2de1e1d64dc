# catalyst_core/db/session.py

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalyst_core.config import get_settings
from catalyst_core.db.models import Base

# ---------------------------------------------------------------------------
# Engine / Session factory
# ---------------------------------------------------------------------------


def _install_sqlite_hooks(engine: Engine) -> None:
    """
    Make pysqlite behave transactionally.

    The driver's own BEGIN handling defers the transaction until the first
    DML statement, which breaks SAVEPOINT nesting; we switch it off and emit
    BEGIN ourselves. Foreign keys are off by default in SQLite and must be
    enabled per connection.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN")


def build_engine(
    url: Optional[str] = None,
    *,
    echo: Optional[bool] = None,
    timeout: Optional[float] = None,
) -> Engine:
    """
    Create an Engine for ``url`` (default: settings.DATABASE_URL).

    ``timeout`` is how long a SQLite connection waits for a lock (default:
    settings.SQLITE_TIMEOUT).

    In-memory SQLite databases share a single connection so every session
    sees the same data.
    """
    settings = get_settings()
    url = url or settings.DATABASE_URL
    echo = settings.SQL_ECHO if echo is None else echo
    timeout = settings.SQLITE_TIMEOUT if timeout is None else timeout

    kwargs: dict[str, object] = {"echo": echo, "future": True}
    if url.startswith("sqlite"):
        # SQLite needs a special flag when used in a multi-threaded web app.
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": timeout}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        _install_sqlite_hooks(engine)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        class_=Session,
    )


engine = build_engine()
SessionLocal = build_session_factory(engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables and indexes that do not exist yet."""
    Base.metadata.create_all(bind=bind or engine)


# ---------------------------------------------------------------------------
# FastAPI dependency / helpers
# ---------------------------------------------------------------------------


def get_session() -> Generator[Session, None, None]:
    """
    FastAPI-style dependency that yields a database session and ensures it
    is closed afterwards.

    Usage:

        from fastapi import Depends
        from catalyst_core.db.session import get_session

        @router.get("/entities")
        def list_entities(db: Session = Depends(get_session)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def db_session() -> Generator[Session, None, None]:
    """
    Context manager for non-FastAPI usage, e.g. scripts or batch clients.

        from catalyst_core.db.session import db_session

        with db_session() as db:
            ...
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def atomic(session: Session) -> Generator[Session, None, None]:
    """
    Run one service operation as a single transaction: commit when the block
    finishes, roll back everything when it raises.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


__all__ = [
    "engine",
    "SessionLocal",
    "Base",
    "build_engine",
    "build_session_factory",
    "init_db",
    "get_session",
    "db_session",
    "atomic",
]
