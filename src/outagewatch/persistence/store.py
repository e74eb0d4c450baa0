"""
State store adapters.

The orchestrator reads and writes the last notified report per category key
through ``StateStore``. ``get`` keeps the historical behavior of returning ""
for a key that was never written; ``get_snapshot`` exposes the difference
between "absent" and "stored" for callers that need it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from outagewatch.core.normalize import compute_fingerprint

from .db import get_session_factory, init_db
from .repo import SnapshotRepository


class StoreError(Exception):
    """Base exception for state store failures."""

    def __init__(self, message: str, key: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.key = key
        self.cause = cause


class StoreReadError(StoreError):
    """Previous state could not be read (unreachable store or malformed row)."""


class StoreWriteError(StoreError):
    """New state could not be written."""


@dataclass(frozen=True)
class StoredReport:
    """A persisted report with its last-updated timestamp."""

    key: str
    report: str
    last_updated: datetime

    @property
    def fingerprint(self) -> str:
        return compute_fingerprint(self.report)


class StateStore(ABC):
    """Key-value store of the last notified report per category."""

    @abstractmethod
    def get_snapshot(self, key: str) -> StoredReport | None:
        """Return the stored report, or None if the key was never written.

        Raises:
            StoreReadError: If the store cannot be read
        """

    @abstractmethod
    def put(self, key: str, report: str, timestamp: datetime) -> None:
        """Overwrite the report for a key (last write wins).

        Raises:
            StoreWriteError: If the write fails
        """

    def get(self, key: str) -> str:
        """Previous report, "" when absent.

        Raises:
            StoreReadError: If the store cannot be read
        """
        snapshot = self.get_snapshot(key)
        return snapshot.report if snapshot is not None else ""

    def close(self) -> None:
        """Release resources."""


class MemoryStateStore(StateStore):
    """In-process store, for ad-hoc runs and tests."""

    def __init__(self, initial: dict[str, StoredReport] | None = None) -> None:
        self._items: dict[str, StoredReport] = dict(initial or {})

    def get_snapshot(self, key: str) -> StoredReport | None:
        return self._items.get(key)

    def put(self, key: str, report: str, timestamp: datetime) -> None:
        self._items[key] = StoredReport(key=key, report=report, last_updated=timestamp)


class SqlStateStore(StateStore):
    """SQLAlchemy-backed store; one short session per operation.

    Built from a database URL, the engine and schema are set up on the first
    read or write, so an unreachable database fails that operation (and the
    category that issued it) instead of the whole run.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        *,
        url: str | None = None,
        echo: bool = False,
    ) -> None:
        if session_factory is None and url is None:
            raise ValueError("SqlStateStore needs a session factory or a database url")
        self._session_factory = session_factory
        self._url = url
        self._echo = echo

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "SqlStateStore":
        return cls(url=url, echo=echo)

    def _sessions(self, error_cls: type[StoreError], key: str | None = None) -> sessionmaker[Session]:
        if self._session_factory is None:
            try:
                init_db(self._url, echo=self._echo)
                self._session_factory = get_session_factory(self._url, echo=self._echo)
            except (SQLAlchemyError, OSError) as e:
                raise error_cls(f"State database unavailable: {e}", key=key, cause=e) from e
        return self._session_factory

    def get_snapshot(self, key: str) -> StoredReport | None:
        sessions = self._sessions(StoreReadError, key)
        try:
            with sessions() as session:
                row = SnapshotRepository(session).get_by_key(key)
                if row is None:
                    return None
                if row.report is None or row.last_updated is None:
                    raise StoreReadError(f"Malformed snapshot row for {key}", key=key)
                return StoredReport(key=row.key, report=row.report, last_updated=row.last_updated)
        except (SQLAlchemyError, OSError) as e:
            raise StoreReadError(f"Failed to read state for {key}: {e}", key=key, cause=e) from e

    def put(self, key: str, report: str, timestamp: datetime) -> None:
        sessions = self._sessions(StoreWriteError, key)
        try:
            with sessions() as session:
                SnapshotRepository(session).upsert(
                    key=key,
                    report=report,
                    fingerprint=compute_fingerprint(report),
                    last_updated=timestamp,
                )
                session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise StoreWriteError(f"Failed to save state for {key}: {e}", key=key, cause=e) from e

    def all_snapshots(self) -> list[StoredReport]:
        sessions = self._sessions(StoreReadError)
        try:
            with sessions() as session:
                return [
                    StoredReport(key=row.key, report=row.report, last_updated=row.last_updated)
                    for row in SnapshotRepository(session).get_all()
                ]
        except (SQLAlchemyError, OSError) as e:
            raise StoreReadError(f"Failed to list state: {e}", cause=e) from e
