"""
Canonical report rendering.

Turns extracted outage records into a deterministic string. The string is the
comparison key for change detection, so two extractions of the same logical
state must render byte-identically regardless of row order in the page or
whitespace differences in the markup.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .parsing import escape_html, normalize_whitespace


RECORD_SEPARATOR = "\n\n"
ADDRESS_BULLET = "- "


@dataclass(frozen=True)
class OutageRecord:
    """One announced outage.

    Has no identity beyond its rendered content. ``end`` is None when the
    resolution time is unknown (emergency outages only).
    """

    location: str
    start: str
    end: str | None = None
    status: str | None = None
    addresses: tuple[str, ...] = field(default_factory=tuple)


def render_time_range(start: str, end: str | None) -> str:
    start = escape_html(normalize_whitespace(start))
    if end is None:
        return f"(od {start}, czas usunięcia nieznany)"
    return f"(z {start} do {escape_html(normalize_whitespace(end))})"


def sorted_addresses(addresses: tuple[str, ...] | list[str]) -> list[str]:
    """Normalize and sort sub-addresses. Duplicates are kept."""
    cleaned = (normalize_whitespace(a) for a in addresses)
    return sorted(a for a in cleaned if a)


def render_record(record: OutageRecord) -> str:
    """Render one record as a header line plus one bullet line per address."""
    head = (
        f"<strong>{escape_html(normalize_whitespace(record.location))}</strong> "
        f"{render_time_range(record.start, record.end)}"
    )

    status = normalize_whitespace(record.status)
    if status:
        head += f" [{escape_html(status)}]"

    lines = [head]
    lines.extend(f"{ADDRESS_BULLET}{escape_html(a)}" for a in sorted_addresses(record.addresses))
    return "\n".join(lines)


def canonicalize(records: list[OutageRecord]) -> str:
    """Render records into a canonical report.

    Rendered records are sorted by codepoint order before joining, which makes
    the result independent of the order rows appeared in the source document.
    An empty list yields the empty string ("nothing to report").
    """
    if not records:
        return ""

    rendered = sorted(render_record(record) for record in records)
    return RECORD_SEPARATOR.join(rendered)


def split_report(report: str) -> list[str]:
    """Split a canonical report back into its rendered record blocks."""
    if not report:
        return []
    return report.split(RECORD_SEPARATOR)


def compose_message(header: str, report: str) -> str:
    """Notification text: category header followed by the report body."""
    return f"{header}{RECORD_SEPARATOR}{report}"
