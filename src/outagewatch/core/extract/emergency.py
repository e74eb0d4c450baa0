"""
Emergency-outage (failure) extraction.

The emergency page may already be filtered to one district, in which case it
has no district sections and its results table is read directly; a missing
table then simply means there are no current failures.
Row layout: location (+ address list) | from | expected end | type | status
"""

from __future__ import annotations

from lxml.html import HtmlElement

from outagewatch.core.normalize import OutageRecord
from .base import Extractor, addresses_in, cell_at, cell_text, first_text


STATUS_COLUMN = 4

# Raw status tokens shown with a friendlier label (matched case-insensitively)
STATUS_LABELS: dict[str, str] = {
    "w trakcie": "naprawa w toku",
}


def display_status(raw: str) -> str:
    return STATUS_LABELS.get(raw.casefold(), raw)


class EmergencyOutageExtractor(Extractor):
    """Extract current water-network failures for one district."""

    min_cells = 5
    district_prefiltered = True

    @property
    def name(self) -> str:
        return "emergency"

    def record_from_cells(self, cells: list[HtmlElement]) -> OutageRecord:
        end = cell_text(cells, 2)
        return OutageRecord(
            location=first_text(cell_at(cells, 0)),
            start=cell_text(cells, 1),
            end=end or None,
            status=display_status(cell_text(cells, STATUS_COLUMN)) or None,
            addresses=addresses_in(cells),
        )
