"""
catalyst_core.db
================

Database package for the measurement store.

This module centralizes the public DB primitives so the rest of the
service can import them from a single place, e.g.:

    from catalyst_core.db import Base, SessionLocal, atomic, get_session
"""

from .models import Base
from .session import SessionLocal, atomic, build_engine, engine, get_session, init_db

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "atomic",
    "build_engine",
    "get_session",
    "init_db",
]
