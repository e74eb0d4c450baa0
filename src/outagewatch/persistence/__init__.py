"""State persistence layer."""

from .db import build_engine, build_session_factory, get_engine, get_session_factory, init_db
from .models import Base, OutageSnapshot
from .repo import SnapshotRepository
from .store import (
    MemoryStateStore,
    SqlStateStore,
    StateStore,
    StoredReport,
    StoreError,
    StoreReadError,
    StoreWriteError,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "get_engine",
    "get_session_factory",
    "init_db",
    "Base",
    "OutageSnapshot",
    "SnapshotRepository",
    "StateStore",
    "MemoryStateStore",
    "SqlStateStore",
    "StoredReport",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
]
