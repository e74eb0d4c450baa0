"""
Repository for outage snapshot rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import OutageSnapshot


class SnapshotRepository:
    """Get and overwrite the per-category snapshot row."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_key(self, key: str) -> OutageSnapshot | None:
        return self.session.get(OutageSnapshot, key)

    def get_all(self) -> Sequence[OutageSnapshot]:
        stmt = select(OutageSnapshot).order_by(OutageSnapshot.key)
        return self.session.execute(stmt).scalars().all()

    def upsert(
        self,
        key: str,
        report: str,
        fingerprint: str,
        last_updated: datetime,
    ) -> tuple[OutageSnapshot, bool]:
        """Create or overwrite a snapshot.

        Returns:
            Tuple of (snapshot, created) where created is True if new
        """
        existing = self.get_by_key(key)

        if existing:
            existing.report = report
            existing.fingerprint = fingerprint
            existing.last_updated = last_updated
            self.session.flush()
            return existing, False

        snapshot = OutageSnapshot(
            key=key,
            report=report,
            fingerprint=fingerprint,
            last_updated=last_updated,
        )
        self.session.add(snapshot)
        self.session.flush()
        return snapshot, True
