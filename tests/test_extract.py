"""Tests for the planned and emergency page extractors."""

import pytest

from conftest import (
    DISTRICT,
    district_section,
    emergency_row,
    page,
    planned_row,
    prefiltered_page,
)
from outagewatch.core.config.models import ExtractorKind
from outagewatch.core.extract import (
    DocumentParseError,
    EmergencyOutageExtractor,
    PlannedOutageExtractor,
    build_extractor,
    first_text,
    parse_document,
    split_on_breaks,
)


# --- Planned ---

def test_planned_reads_only_target_district(planned_html):
    result = PlannedOutageExtractor(DISTRICT).extract(planned_html)

    assert result.district_found
    locations = [r.location for r in result.records]
    assert locations == ["ul. Traktorzystów", "ul. Dzieci Warszawy"]
    assert "ul. Górczewska" not in locations


def test_planned_record_fields(planned_html):
    record = PlannedOutageExtractor(DISTRICT).extract(planned_html).records[0]

    assert record.start == "2026-10-20 08:00"
    assert record.end == "2026-10-20 16:00"
    assert record.status is None
    # Document order; sorting is the canonicalizer's job
    assert record.addresses == ("Traktorzystów 12", "Traktorzystów 10")


def test_planned_missing_district_is_empty_not_error():
    html = page(district_section("Warszawa WOLA", [
        planned_row("ul. Wolska", "2026-10-20 08:00", "2026-10-20 10:00", ["Wolska 1"]),
    ]))

    result = PlannedOutageExtractor(DISTRICT).extract(html)

    assert result.empty
    assert not result.district_found
    assert result.warnings


def test_planned_skips_short_rows_and_keeps_valid_ones():
    short_row = "<tr><td>Brak</td><td>x</td><td>y</td><td>z</td></tr>"
    html = page(district_section(DISTRICT, [
        planned_row("ul. Regulska", "2026-10-22 07:00", "2026-10-22 15:00", ["Regulska 4"]),
        short_row,
        planned_row("ul. Keniga", "2026-10-23 07:00", "2026-10-23 15:00", ["Keniga 2"]),
    ]))

    result = PlannedOutageExtractor(DISTRICT).extract(html)

    assert [r.location for r in result.records] == ["ul. Regulska", "ul. Keniga"]
    assert result.rows_skipped == 1


def test_planned_requires_more_than_four_cells():
    four_cells = planned_row("ul. Posag 7 Panien", "a", "b", [], extra_cells=1)
    five_cells = planned_row("ul. Sosnkowskiego", "a", "b", [], extra_cells=2)
    html = page(district_section(DISTRICT, [four_cells, five_cells]))

    records = PlannedOutageExtractor(DISTRICT).extract(html).records

    assert [r.location for r in records] == ["ul. Sosnkowskiego"]


def test_planned_header_rows_are_ignored():
    html = page(district_section(DISTRICT, []))

    result = PlannedOutageExtractor(DISTRICT).extract(html)

    assert result.empty
    assert result.rows_seen == 0


def test_planned_district_match_is_a_prefix_match():
    html = page(district_section("  Warszawa URSUS - 3 wyłączenia ", [
        planned_row("ul. Ryżowa", "a", "b", ["Ryżowa 1"]),
    ]))

    assert len(PlannedOutageExtractor(DISTRICT).extract(html).records) == 1


def test_planned_ignores_prefiltered_layout():
    html = prefiltered_page([planned_row("ul. Ryżowa", "a", "b", ["Ryżowa 1"])])

    assert PlannedOutageExtractor(DISTRICT).extract(html).empty


def test_missing_cells_fall_back_to_empty_strings():
    # Five cells, but the location cell holds only nested markup with no text
    html = page(district_section(DISTRICT, [
        "<tr><td><span></span></td><td></td><td></td><td></td><td></td></tr>",
    ]))

    record = PlannedOutageExtractor(DISTRICT).extract(html).records[0]

    assert record.location == ""
    assert record.start == ""
    assert record.end == ""
    assert record.addresses == ()


# --- Emergency ---

def test_emergency_prefiltered_table(emergency_html):
    result = EmergencyOutageExtractor(DISTRICT).extract(emergency_html)

    assert len(result.records) == 1
    record = result.records[0]
    assert record.location == "ul. Orłów Piastowskich"
    assert record.start == "2026-10-19 05:10"
    assert record.end is None
    assert record.status == "naprawa w toku"


def test_emergency_status_mapping_is_case_insensitive_and_selective():
    html = prefiltered_page([
        emergency_row("ul. A", "1", "2", "W TRAKCIE", []),
        emergency_row("ul. B", "1", "2", "usunięta", []),
    ])

    statuses = [r.status for r in EmergencyOutageExtractor(DISTRICT).extract(html).records]

    assert statuses == ["naprawa w toku", "usunięta"]


def test_emergency_without_results_table_is_empty():
    html = page("<p>Brak awarii w wybranej dzielnicy.</p>")

    result = EmergencyOutageExtractor(DISTRICT).extract(html)

    assert result.empty
    assert not result.district_found


def test_emergency_filters_district_when_sections_present():
    html = page(
        district_section("Warszawa WŁOCHY", [emergency_row("ul. Popularna", "1", "", "w trakcie", [])]),
        district_section(DISTRICT, [emergency_row("ul. Hennela", "1", "3", "zgłoszona", [])]),
    )

    records = EmergencyOutageExtractor(DISTRICT).extract(html).records

    assert [r.location for r in records] == ["ul. Hennela"]
    assert records[0].end == "3"


def test_emergency_requires_status_cell():
    four_cells = "<tr><td>ul. Plutonu</td><td>1</td><td>2</td><td>awaria</td></tr>"
    html = prefiltered_page([four_cells])

    result = EmergencyOutageExtractor(DISTRICT).extract(html)

    assert result.empty
    assert result.rows_skipped == 1


# --- Helpers ---

def test_split_on_breaks_trims_and_drops_blanks():
    element = parse_document('<div class="zbior"> Keniga 1 <br>  <br/>Keniga&nbsp;3<br><b>Keniga</b> 5 </div>')

    assert split_on_breaks(element) == ["Keniga 1", "Keniga 3", "Keniga 5"]


def test_first_text_skips_address_list():
    cell = parse_document('<div> <b>ul. Gierdziejewskiego</b><div class="zbior">1<br>2</div></div>')

    assert first_text(cell) == "ul. Gierdziejewskiego"


@pytest.mark.parametrize("html", ["", "   \n  "])
def test_unparseable_document_raises(html):
    with pytest.raises(DocumentParseError):
        PlannedOutageExtractor(DISTRICT).extract(html)


def test_xhtml_page_with_encoding_declaration(planned_html):
    xhtml = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
        '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">\n'
        + planned_html.replace("<html>", '<html xmlns="http://www.w3.org/1999/xhtml">', 1)
    )

    result = PlannedOutageExtractor(DISTRICT).extract(xhtml)

    assert [r.location for r in result.records] == ["ul. Traktorzystów", "ul. Dzieci Warszawy"]


def test_build_extractor_by_kind():
    assert isinstance(build_extractor(ExtractorKind.PLANNED, DISTRICT), PlannedOutageExtractor)
    assert isinstance(build_extractor("emergency", DISTRICT), EmergencyOutageExtractor)
    with pytest.raises(ValueError):
        build_extractor("scheduled", DISTRICT)


def test_extract_report_is_canonical(planned_html):
    report = PlannedOutageExtractor(DISTRICT).extract_report(planned_html)

    assert report.startswith("<strong>ul. Dzieci Warszawy</strong>")
    assert "- Traktorzystów 10\n- Traktorzystów 12" in report
