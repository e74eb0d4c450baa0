"""
Engine and session factory for the state database.

The CLI, handler and scheduler share one engine per database URL for the
life of the process; tests build throwaway engines with ``build_engine``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .models import Base


DEFAULT_DATABASE_URL = "sqlite:///data/outagewatch.db"


def _use_wal(engine: Engine) -> None:
    """Enable WAL journaling on every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()


def build_engine(url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> Engine:
    """Create an engine; for SQLite files the parent directory is created."""
    parsed = make_url(url)

    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, echo=echo, pool_pre_ping=True)

    if parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    _use_wal(engine)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@lru_cache(maxsize=None)
def get_engine(url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> Engine:
    """Process-wide engine for ``url``."""
    return build_engine(url, echo=echo)


@lru_cache(maxsize=None)
def get_session_factory(url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> sessionmaker[Session]:
    return build_session_factory(get_engine(url, echo=echo))


def init_db(url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> Engine:
    """Create the snapshot table if it does not exist yet."""
    engine = get_engine(url, echo=echo)
    Base.metadata.create_all(bind=engine)
    return engine
