"""Normalization, canonical rendering and diffing of outage records."""

from .parsing import escape_html, normalize_whitespace
from .canonical import (
    OutageRecord,
    canonicalize,
    compose_message,
    render_record,
    render_time_range,
    sorted_addresses,
    split_report,
)
from .diff import ReportDiff, compute_diff, compute_fingerprint

__all__ = [
    # Parsing
    "escape_html",
    "normalize_whitespace",
    # Canonical
    "OutageRecord",
    "canonicalize",
    "compose_message",
    "render_record",
    "render_time_range",
    "sorted_addresses",
    "split_report",
    # Diff
    "ReportDiff",
    "compute_diff",
    "compute_fingerprint",
]
