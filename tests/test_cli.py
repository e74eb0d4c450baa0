"""Tests for the check, state and validate commands."""

from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from conftest import PLANNED_URL, FakeBackend
from outagewatch.cli.commands import check as check_module
from outagewatch.cli.commands import state as state_module
from outagewatch.cli.main import app
from outagewatch.core.backends import HttpBackend
from outagewatch.core.config.models import AppConfig, DatabaseConfig, OutcomeStatus
from outagewatch.core.orchestrator import Outcome, RunSummary
from outagewatch.persistence.store import SqlStateStore

runner = CliRunner()


@pytest.fixture
def state_config(tmp_path):
    return AppConfig(database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'state.db'}"))


def test_check_exits_zero_when_a_category_fails():
    summary = RunSummary(run_id="abc123")
    summary.outcomes["LATEST_URSUS_OUTAGES"] = Outcome(
        key="LATEST_URSUS_OUTAGES", status=OutcomeStatus.FAILED, reason="timeout"
    )
    run = AsyncMock(return_value=summary)

    with patch.object(check_module, "load_config_or_exit", return_value=AppConfig()), \
            patch("outagewatch.core.orchestrator.run_outage_check", run):
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "FAILED" in result.output
    run.assert_awaited_once()
    assert run.await_args.kwargs["category_keys"] is None


def test_check_unknown_category_exits_one():
    with patch.object(check_module, "load_config_or_exit", return_value=AppConfig()):
        result = runner.invoke(app, ["check", "-k", "LATEST_MOKOTOW_OUTAGES"])

    assert result.exit_code == 1
    assert "Unknown category" in result.output


def test_state_show_lists_and_prints_reports(state_config, fixed_now):
    store = SqlStateStore.from_url(state_config.database.url)
    store.put("K1", "<strong>ul. Keniga</strong> (z 1 do 2) [naprawa w toku]", fixed_now)

    with patch.object(state_module, "load_config_or_exit", return_value=state_config):
        listing = runner.invoke(app, ["state", "show"])
        single = runner.invoke(app, ["state", "show", "-k", "K1"])
        missing = runner.invoke(app, ["state", "show", "-k", "K2"])

    assert listing.exit_code == 0
    assert "K1" in listing.output

    assert single.exit_code == 0
    assert "<strong>ul. Keniga</strong>" in single.output
    assert "[naprawa w toku]" in single.output

    assert missing.exit_code == 0
    assert "Nothing stored for K2" in missing.output


def test_state_show_unusable_database_exits_one(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    config = AppConfig(database=DatabaseConfig(url=f"sqlite:///{blocker / 'state.db'}"))

    with patch.object(state_module, "load_config_or_exit", return_value=config):
        result = runner.invoke(app, ["state", "show"])

    assert result.exit_code == 1
    assert "State database unavailable" in result.output


def test_state_preview_prints_current_report(planned_category, planned_html):
    config = AppConfig(categories=[planned_category])
    backend = FakeBackend({PLANNED_URL: planned_html})

    with patch.object(state_module, "load_config_or_exit", return_value=config), \
            patch.object(HttpBackend, "from_config", return_value=backend):
        result = runner.invoke(app, ["state", "preview", "-k", planned_category.key])

    assert result.exit_code == 0
    assert "Wyłączenia planowane:" in result.output
    assert "- Traktorzystów 10" in result.output
    assert "Górczewska" not in result.output
    assert [r.url for r in backend.requests] == [PLANNED_URL]


def test_state_preview_unknown_category_exits_one():
    with patch.object(state_module, "load_config_or_exit", return_value=AppConfig()):
        result = runner.invoke(app, ["state", "preview", "-k", "LATEST_MOKOTOW_OUTAGES"])

    assert result.exit_code == 1
    assert "Unknown category" in result.output


def test_validate_accepts_good_file(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("district: Warszawa URSUS\n", encoding="utf-8")

    result = runner.invoke(app, ["validate", "--config", str(path)])

    assert result.exit_code == 0
    assert "OK" in result.output


def test_validate_lists_problems(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text(
        'categories:\n  - {key: A, kind: weekly, url: "https://example.com", header: "A:"}\n',
        encoding="utf-8",
    )

    result = runner.invoke(app, ["validate", "--config", str(path)])

    assert result.exit_code == 1
    assert "categories.0.kind" in result.output
