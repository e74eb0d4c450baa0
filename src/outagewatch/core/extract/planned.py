"""
Planned-outage extraction.

The planned page lists every district in its own ``.dzielnica`` section; only
the section whose header starts with the configured district is read.
Row layout: location (+ address list) | from | to | ...
"""

from __future__ import annotations

from lxml.html import HtmlElement

from outagewatch.core.normalize import OutageRecord
from .base import Extractor, addresses_in, cell_at, cell_text, first_text


class PlannedOutageExtractor(Extractor):
    """Extract planned water shutoffs for one district."""

    min_cells = 5

    @property
    def name(self) -> str:
        return "planned"

    def record_from_cells(self, cells: list[HtmlElement]) -> OutageRecord:
        return OutageRecord(
            location=first_text(cell_at(cells, 0)),
            start=cell_text(cells, 1),
            end=cell_text(cells, 2),
            addresses=addresses_in(cells),
        )
