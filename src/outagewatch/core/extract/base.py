"""
Extraction base classes and data structures.

An extractor turns a raw outage page into OutageRecords for the configured
district. Category-specific subclasses decide where the rows live, how many
cells a row needs, and how the status cell is read; the row-to-record helpers
here are shared.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from lxml import etree
from lxml import html as lxml_html
from lxml.cssselect import CSSSelector
from lxml.html import HtmlElement

from outagewatch.core.normalize import OutageRecord, canonicalize, normalize_whitespace


SECTION_SELECTOR = CSSSelector(".dzielnica")
SECTION_HEADER_SELECTOR = CSSSelector("h3.dzielnicaopen")
TABLE_SELECTOR = CSSSelector(".awarie")
ROW_SELECTOR = CSSSelector("tr:not(.headrow)")
CELL_SELECTOR = CSSSelector("td")
ADDRESS_LIST_SELECTOR = CSSSelector(".zbior")

UTF8_PARSER = lxml_html.HTMLParser(encoding="utf-8")


class DocumentParseError(Exception):
    """The source document could not be parsed as HTML at all."""


@dataclass
class ExtractionResult:
    """Records found for the district plus diagnostics."""

    records: list[OutageRecord] = field(default_factory=list)
    district_found: bool = False
    rows_seen: int = 0
    rows_skipped: int = 0
    warnings: list[str] = field(default_factory=list)
    extraction_method: str | None = None

    @property
    def empty(self) -> bool:
        return not self.records

    @property
    def record_count(self) -> int:
        return len(self.records)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


class Extractor(ABC):
    """Abstract base class for outage-page extraction strategies."""

    #: Rows with fewer cells are header/decoration rows and are skipped
    min_cells: int = 5

    #: Page only lists the target district, no district sections to filter
    district_prefiltered: bool = False

    def __init__(self, district: str) -> None:
        self.district = district

    @property
    @abstractmethod
    def name(self) -> str:
        """Extractor identifier."""

    @abstractmethod
    def record_from_cells(self, cells: list[HtmlElement]) -> OutageRecord:
        """Build a record from a row that passed the cell-count check."""

    def extract(self, html: str, url: str | None = None) -> ExtractionResult:
        """Extract district outage records from HTML content.

        Missing sections, tables or cells never raise; only a document that
        cannot be parsed at all does.

        Raises:
            DocumentParseError: If the document is not parseable markup
        """
        doc = parse_document(html)
        result = ExtractionResult(extraction_method=self.name)

        scopes = self.find_scopes(doc, result)
        for scope in scopes:
            for table in TABLE_SELECTOR(scope):
                for row in ROW_SELECTOR(table):
                    result.rows_seen += 1
                    cells = CELL_SELECTOR(row)
                    if not self.accepts_row(cells):
                        result.rows_skipped += 1
                        continue
                    result.records.append(self.record_from_cells(cells))

        return result

    def extract_report(self, html: str, url: str | None = None) -> str:
        """Extract and canonicalize in one step ("" when nothing applies)."""
        return canonicalize(self.extract(html, url).records)

    def accepts_row(self, cells: list[HtmlElement]) -> bool:
        return len(cells) >= self.min_cells

    def find_scopes(self, doc: HtmlElement, result: ExtractionResult) -> list[HtmlElement]:
        """Return the subtrees holding the district's outage tables."""
        sections = SECTION_SELECTOR(doc)

        if not sections and self.district_prefiltered:
            if TABLE_SELECTOR(doc):
                result.district_found = True
                return [doc]
            return []

        matching = [s for s in sections if self.matches_district(s)]
        result.district_found = bool(matching)
        if sections and not matching:
            result.add_warning(f"No section for district '{self.district}'")
        return matching

    def matches_district(self, section: HtmlElement) -> bool:
        for header in SECTION_HEADER_SELECTOR(section):
            if normalize_whitespace(header.text_content()).startswith(self.district):
                return True
        return False


# =============================================================================
# Row Helpers
# =============================================================================


def parse_document(html: str) -> HtmlElement:
    """Parse HTML, raising DocumentParseError when there is nothing to parse.

    The text is handed to lxml as UTF-8 bytes; lxml refuses a str that
    carries an XML encoding declaration, as XHTML pages do.
    """
    if html is None or not html.strip():
        raise DocumentParseError("Empty document")
    try:
        return lxml_html.fromstring(html.encode("utf-8"), parser=UTF8_PARSER)
    except (etree.ParserError, ValueError) as e:
        raise DocumentParseError(f"Failed to parse HTML: {e}") from e


def cell_at(cells: list[HtmlElement], index: int) -> HtmlElement | None:
    if 0 <= index < len(cells):
        return cells[index]
    return None


def cell_text(cells: list[HtmlElement], index: int) -> str:
    """Whitespace-normalized text of a cell, "" if the cell is missing."""
    cell = cell_at(cells, index)
    if cell is None:
        return ""
    return normalize_whitespace(cell.text_content())


def first_text(cell: HtmlElement | None) -> str:
    """Text of the first node in a cell, ignoring nested address lists.

    The location cell holds the label followed by a ``.zbior`` element; only
    the leading text (or the first child element's text) is the label.
    """
    if cell is None:
        return ""
    leading = normalize_whitespace(cell.text)
    if leading:
        return leading
    for child in cell:
        if not isinstance(child.tag, str) or "zbior" in child.classes:
            continue
        return normalize_whitespace(child.text_content())
    return ""


def split_on_breaks(element: HtmlElement) -> list[str]:
    """Split an element's text on its <br> markers, trimming and dropping blanks."""
    parts: list[str] = []
    current = [element.text or ""]

    for child in element:
        if isinstance(child.tag, str) and child.tag.lower() == "br":
            parts.append("".join(current))
            current = []
        elif isinstance(child.tag, str):
            current.append(child.text_content())
        current.append(child.tail or "")

    parts.append("".join(current))
    return [p for p in (normalize_whitespace(part) for part in parts) if p]


def addresses_in(cells: list[HtmlElement]) -> tuple[str, ...]:
    """Affected addresses from the row's ``.zbior`` list(s)."""
    addresses: list[str] = []
    for cell in cells:
        for address_list in ADDRESS_LIST_SELECTOR(cell):
            addresses.extend(split_on_breaks(address_list))
    return tuple(addresses)
