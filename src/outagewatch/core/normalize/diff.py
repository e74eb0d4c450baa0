"""
Fingerprinting and diff computation for change tracking.

Change detection itself is exact string equality of canonical reports; the
fingerprint and per-record diff exist for logs and the state table.
"""

from __future__ import annotations

import hashlib
from collections import Counter
from dataclasses import dataclass, field

from .canonical import split_report


def compute_fingerprint(report: str) -> str:
    """32-character hex fingerprint of a canonical report ("" for no report)."""
    if not report:
        return ""
    return hashlib.sha256(report.encode("utf-8")).hexdigest()[:32]


@dataclass
class ReportDiff:
    """Result of comparing a previous and a current canonical report."""

    previous: str
    current: str
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.previous != self.current

    @property
    def is_first_report(self) -> bool:
        return not self.previous and bool(self.current)

    @property
    def old_fingerprint(self) -> str:
        return compute_fingerprint(self.previous)

    @property
    def new_fingerprint(self) -> str:
        return compute_fingerprint(self.current)

    @property
    def summary(self) -> str:
        """Human-readable summary for logs."""
        if not self.has_changes:
            return "No changes"
        if self.is_first_report:
            return f"First report: {len(self.added)} outage(s)"

        parts = []
        if self.added:
            parts.append(f"{len(self.added)} added")
        if self.removed:
            parts.append(f"{len(self.removed)} removed")
        return ", ".join(parts) if parts else "Report changed"


def compute_diff(previous: str, current: str) -> ReportDiff:
    """Compare two canonical reports record by record."""
    old_blocks = Counter(split_report(previous))
    new_blocks = Counter(split_report(current))

    added = sorted((new_blocks - old_blocks).elements())
    removed = sorted((old_blocks - new_blocks).elements())

    return ReportDiff(
        previous=previous,
        current=current,
        added=added,
        removed=removed,
    )
