"""
SQLAlchemy ORM models for OutageWatch.

One row per category key holding the last notified canonical report. Rows
are overwritten on change and never deleted.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Base Class
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# =============================================================================
# Mixins
# =============================================================================


class TimestampMixin:
    """Mixin providing created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=None,
        onupdate=utcnow,
        nullable=True,
    )


# =============================================================================
# Outage Snapshot Model
# =============================================================================


class OutageSnapshot(Base, TimestampMixin):
    """Most recent notified report for one category."""

    __tablename__ = "outage_snapshots"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    report: Mapped[str] = mapped_column(Text, nullable=False)
    fingerprint: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<OutageSnapshot(key='{self.key}', fingerprint='{self.fingerprint}')>"
