"""Shared fixtures: page builders and collaborator doubles."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from outagewatch.core.backends.base import Backend, FetchError, FetchResult, RequestSpec
from outagewatch.core.config.models import CategoryConfig, ExtractorKind
from outagewatch.core.notify.base import Notifier, NotifyError
from outagewatch.persistence.store import (
    MemoryStateStore,
    StoredReport,
    StoreReadError,
    StoreWriteError,
)

DISTRICT = "Warszawa URSUS"
PLANNED_URL = "https://www.mpwik.com.pl/view/planowane"
EMERGENCY_URL = "https://www.mpwik.com.pl/view/awarie"

HEADER_ROW = '<tr class="headrow"><td>Miejsce</td><td>Od</td><td>Do</td><td>Rodzaj</td><td>Uwagi</td></tr>'


# --- HTML builders ---

def planned_row(location: str, start: str, end: str, addresses: list[str], extra_cells: int = 2) -> str:
    zbior = f'<div class="zbior">{"<br>".join(addresses)}</div>' if addresses else ""
    tail = "".join("<td>-</td>" for _ in range(extra_cells))
    return f"<tr><td>{location}{zbior}</td><td>{start}</td><td>{end}</td>{tail}</tr>"


def emergency_row(location: str, start: str, end: str, status: str, addresses: list[str]) -> str:
    zbior = f'<div class="zbior">{"<br>".join(addresses)}</div>' if addresses else ""
    return (
        f"<tr><td>{location}{zbior}</td><td>{start}</td><td>{end}</td>"
        f"<td>awaria sieci</td><td>{status}</td></tr>"
    )


def district_section(name: str, rows: list[str]) -> str:
    return (
        f'<div class="dzielnica"><h3 class="dzielnicaopen">{name}</h3>'
        f'<table class="awarie"><tbody>{HEADER_ROW}{"".join(rows)}</tbody></table></div>'
    )


def page(*sections: str) -> str:
    return f"<html><head><title>MPWiK</title></head><body>{''.join(sections)}</body></html>"


def prefiltered_page(rows: list[str]) -> str:
    return page(f'<table class="awarie"><tbody>{HEADER_ROW}{"".join(rows)}</tbody></table>')


# --- Collaborator doubles ---

class FakeBackend(Backend):
    """Serves canned HTML per URL; a mapped exception is raised instead."""

    def __init__(self, pages: dict[str, str | Exception | int] | None = None) -> None:
        self.pages = dict(pages or {})
        self.requests: list[RequestSpec] = []

    @property
    def name(self) -> str:
        return "fake"

    async def fetch(self, request: RequestSpec) -> FetchResult:
        self.requests.append(request)
        body = self.pages.get(request.url)
        if body is None:
            raise FetchError("connection refused", url=request.url)
        if isinstance(body, Exception):
            raise body
        status = 200
        if isinstance(body, int):
            status, body = body, ""
        return FetchResult(
            url=request.url,
            final_url=request.url,
            status_code=status,
            html=body,
            headers={},
            elapsed_ms=1.0,
        )


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.messages: list[str] = []

    @property
    def name(self) -> str:
        return "recording"

    async def send(self, message: str) -> None:
        self.messages.append(message)
        if self.fail:
            raise NotifyError("telegram unavailable")


class BrokenReadStore(MemoryStateStore):
    def get_snapshot(self, key: str) -> StoredReport | None:
        raise StoreReadError("table unreachable", key=key)


class BrokenWriteStore(MemoryStateStore):
    def put(self, key: str, report: str, timestamp: datetime) -> None:
        raise StoreWriteError("throughput exceeded", key=key)


# --- Fixtures ---

@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 10, 19, 6, 30, tzinfo=timezone.utc)


@pytest.fixture
def planned_category() -> CategoryConfig:
    return CategoryConfig(
        key="LATEST_URSUS_OUTAGES",
        kind=ExtractorKind.PLANNED,
        url=PLANNED_URL,
        header="Wyłączenia planowane:",
    )


@pytest.fixture
def emergency_category() -> CategoryConfig:
    return CategoryConfig(
        key="LATEST_URSUS_EMERGENCIES",
        kind=ExtractorKind.EMERGENCY,
        url=EMERGENCY_URL,
        header="Awarie:",
    )


@pytest.fixture
def planned_html() -> str:
    return page(
        district_section("Warszawa BEMOWO", [
            planned_row("ul. Górczewska", "2026-10-20 08:00", "2026-10-20 14:00", ["Górczewska 1"]),
        ]),
        district_section("Warszawa URSUS (2)", [
            planned_row("ul. Traktorzystów", "2026-10-20 08:00", "2026-10-20 16:00",
                        ["Traktorzystów 12", "Traktorzystów 10"]),
            planned_row("ul. Dzieci Warszawy", "2026-10-21 09:00", "2026-10-21 12:00",
                        ["Dzieci Warszawy 5"]),
        ]),
    )


@pytest.fixture
def emergency_html() -> str:
    return prefiltered_page([
        emergency_row("ul. Orłów Piastowskich", "2026-10-19 05:10", "", "w trakcie",
                      ["Orłów Piastowskich 7", "Orłów Piastowskich 3"]),
    ])
