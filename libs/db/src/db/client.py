"""Shared SQLAlchemy engine and session helpers.

One engine is bound per process to a single URL (explicit argument, else the
URL bound earlier, else ``$DATABASE_URL``). Asking for a different URL after
binding is an error until :func:`reset_engine` is called.

Usage
-----
from db.client import create_schema, session_scope

create_schema(database_url="sqlite+pysqlite:///doughflow.db")
with session_scope() as s:
    s.execute(...)
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.ledger import Base

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None
_bound_url: str | None = None


def _resolve_url(override: str | None) -> str:
    url = override or _bound_url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cannot initialize database client")
    return url


def _bind(url: str) -> Engine:
    global _engine, _session_factory, _bound_url
    engine = create_engine(url, pool_pre_ping=True)
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
    _engine = engine
    _bound_url = url
    return engine


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the process-wide engine, binding it on first use."""

    url = _resolve_url(database_url)
    if _engine is None:
        return _bind(url)
    if url != _bound_url:
        raise RuntimeError(
            f"engine already bound to {_bound_url!r}; call reset_engine() before using {url!r}"
        )
    return _engine


def reset_engine() -> None:
    """Dispose the shared engine so the next call may bind another URL."""

    global _engine, _session_factory, _bound_url
    if _engine is not None:
        _engine.dispose()
    _engine, _session_factory, _bound_url = None, None, None


def create_schema(*, database_url: str | None = None) -> None:
    """Create the ledger tables; existing tables are left as they are."""

    Base.metadata.create_all(get_engine(database_url=database_url))


def get_session(*, database_url: str | None = None) -> Session:
    get_engine(database_url=database_url)
    assert _session_factory is not None  # bound by get_engine
    return _session_factory()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Commit on success, roll back and re-raise on error, always close."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "create_schema",
    "get_engine",
    "get_session",
    "reset_engine",
    "session_scope",
]
